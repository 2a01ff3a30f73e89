"""
Repository layer

Database queries. Repositories flush; services own the transaction and commit.
"""
