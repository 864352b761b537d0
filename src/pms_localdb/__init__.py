"""
PMS local data – on-device suggestion cache for the parcel booking client.

Keeps customer contacts, parcel descriptions and remarks in a local SQLite
store, refreshes them from the hosted backend, and serves them to the intake
form as autocomplete suggestions.
"""

__version__ = "0.2.0"

__all__ = [
    "config",
    "logging",
    "paths",
]
