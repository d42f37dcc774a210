"""I/O schemas for API requests and responses.

These Pydantic models define the contract between the API and clients and are
kept separate from the SQLModel entities they are read from.
"""
