class ChordbookError(Exception):
    """Base exception for chordbook."""


class FetchError(ChordbookError):
    """Raised when an HTTP request for a song fails."""

    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        super().__init__(f"HTTP {status_code} fetching {url}")


class SourceError(ChordbookError):
    """Raised when a local song source cannot be read."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot read {source}: {reason}")


class ChordLibraryError(ChordbookError):
    """Raised when a custom chord file cannot be loaded."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid chord library {path}: {reason}")


class ChordLookupError(ChordbookError):
    """Raised by a chord lookup backend that is unavailable."""

    def __init__(self, name: str, reason: str = "lookup unavailable"):
        self.name = name
        self.reason = reason
        super().__init__(f"Could not look up chord {name!r}: {reason}")


class ScrollTargetError(ChordbookError):
    """Raised when the auto-scroller is given no scroll container."""
