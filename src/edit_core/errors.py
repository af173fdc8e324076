# error taxonomy shared by every edit operation

from __future__ import annotations


class EditError(RuntimeError):
    """Base class for failures reported to the calling layer.

    ``str(err)`` is the human-readable message shown by the UI, e.g.
    ``"Invalid parameters: Width and height must be positive integers"``.
    """

    kind = "Operation failed"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"{self.kind}: {detail}")


class InvalidParameters(EditError):
    kind = "Invalid parameters"


class InvalidImageData(EditError):
    kind = "Invalid image data"


class UnsupportedFormat(EditError):
    kind = "Unsupported image format"


class ImageError(EditError):
    """Codec failure surfaced from Pillow (truncated stream, encoder error)."""

    kind = "Image processing error"


class EditIOError(EditError):
    kind = "IO error"
