"""Exception types raised by the edge_timeline pipeline."""


class EdgeTimelineError(Exception):
    """Base class for all edge_timeline failures."""

    pass


class ImageDecodeError(EdgeTimelineError):
    """Raised when a source's bytes cannot be decoded into pixels."""

    def __init__(self, source_id: str, reason: str = "not a decodable image") -> None:
        super().__init__(f"{source_id}: {reason}")
        self.source_id = source_id
        self.reason = reason


class NothingToExportError(EdgeTimelineError):
    """Raised when a batch produced no results to write."""

    pass


class ExportError(EdgeTimelineError):
    """Raised when writing the spreadsheet fails."""

    pass


__all__ = [
    "EdgeTimelineError",
    "ImageDecodeError",
    "NothingToExportError",
    "ExportError",
]
