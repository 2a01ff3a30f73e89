"""
Valkyrie backend: accounts, friends and guilds over a REST API.
"""

__version__ = "1.0.0"
