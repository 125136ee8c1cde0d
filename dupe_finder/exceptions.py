"""
Custom exception hierarchy for the duplicate finder.

Configuration and walk errors are fatal to a run; file read errors are
fatal unless the scan was configured to skip unreadable files.
"""


class DupeFinderError(Exception):
    """Base exception for all duplicate finder errors."""
    pass


class ConfigurationError(DupeFinderError):
    """Raised when the scan configuration is invalid (e.g. unknown grouping mode)."""
    pass


class WalkError(DupeFinderError):
    """Raised when a scan root or a directory cannot be listed."""
    pass


class FileReadError(DupeFinderError):
    """Raised when a file cannot be opened or a read fails partway."""

    def __init__(self, path, message: str = ""):
        self.path = str(path)
        super().__init__(message or f"Failed to read {self.path}")


class ComparatorPreconditionError(DupeFinderError):
    """Raised when similarity fingerprints of mismatched width are compared."""
    pass
