from __future__ import annotations

from typing import Optional


class DownloadError(RuntimeError):
    """Base class for every failure raised by the downloader."""


class InvalidReference(DownloadError):
    pass


class StructuralError(DownloadError):
    """Page or script content does not have the expected shape."""


class NotFound(StructuralError):
    pass


class DecodeError(DownloadError):
    pass


class NetworkError(DownloadError):
    pass


class FilesystemError(DownloadError):
    pass


class IncompleteTransfer(DownloadError):
    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        expected: Optional[int] = None,
        received: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.expected = expected
        self.received = received


class CorruptImage(IncompleteTransfer):
    pass


__all__ = [
    "CorruptImage",
    "DecodeError",
    "DownloadError",
    "FilesystemError",
    "IncompleteTransfer",
    "InvalidReference",
    "NetworkError",
    "NotFound",
    "StructuralError",
]
