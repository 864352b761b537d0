"""Client for the hosted backend that feeds store refreshes."""

from .client import RemoteDataClient, RemoteDataError

__all__ = ["RemoteDataClient", "RemoteDataError"]
