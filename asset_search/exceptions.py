"""
Custom exception hierarchy for the asset search engine.

Errors are raised by the layer that detects them and only caught at the
command line boundary.
"""


class AssetSearchError(Exception):
    """Base exception for all asset search errors."""
    pass


class QueryError(AssetSearchError):
    """Raised when a query cannot be tokenized or parsed."""
    pass


class DatabaseError(AssetSearchError):
    """Raised when record repository operations fail."""
    pass


class FileHashError(AssetSearchError):
    """Raised when file hashing fails."""
    pass
