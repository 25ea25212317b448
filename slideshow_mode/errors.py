"""Error types raised by the slideshow compilation pipeline."""
from __future__ import annotations

INPUT_EMPTY_CODE = "slideshow.input.empty"
FRAME_LIMIT_CODE = "slideshow.input.too_many_frames"
FRAME_ORDER_CODE = "slideshow.input.frame_order"
FRAME_SIZE_CODE = "slideshow.input.frame_size"
ENCODER_UNAVAILABLE_CODE = "slideshow.encoder.unavailable"
ENCODING_FAILED_CODE = "slideshow.encoder.failed"
COMPILE_BUSY_CODE = "slideshow.compile.busy"


class SlideshowError(RuntimeError):
    """Runtime error with a stable error code."""

    code = "slideshow.error"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class InputEmpty(SlideshowError):
    """Raised when a compile is requested without any slides."""

    code = INPUT_EMPTY_CODE


class FrameLimitExceeded(SlideshowError):
    code = FRAME_LIMIT_CODE


class FrameOrderError(SlideshowError):
    code = FRAME_ORDER_CODE


class FrameSizeError(SlideshowError):
    """Raised when frames differ in size or cannot be encoded as 4:2:0."""

    code = FRAME_SIZE_CODE


class EncoderUnavailable(SlideshowError):
    """Raised when the ffmpeg sandbox cannot be loaded."""

    code = ENCODER_UNAVAILABLE_CODE


class EncodingFailed(SlideshowError):
    """Raised when ffmpeg exits non-zero or produces no output file."""

    code = ENCODING_FAILED_CODE

    def __init__(self, message: str, diagnostic: str = "") -> None:
        super().__init__(message)
        self.diagnostic = diagnostic


class CompileInProgress(SlideshowError):
    """Raised when a second compile is attempted while one is running."""

    code = COMPILE_BUSY_CODE
