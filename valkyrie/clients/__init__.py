"""
HTTP clients for the Valkyrie API.
"""

from .account_client import AccountClient, ApiError, to_error_map

__all__ = ["AccountClient", "ApiError", "to_error_map"]
