from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from PIL import Image

VIDEO_MIME_TYPE = "video/mp4"
FRAME_NAME_PREFIX = "frame"
FRAME_NAME_DIGITS = 3
FRAME_NAME_SUFFIX = ".png"
MAX_FRAMES = 10 ** FRAME_NAME_DIGITS
DEFAULT_OUTPUT_NAME = "output.mp4"


def frame_file_name(ordinal: int) -> str:
    """Return the staged file name for a frame, e.g. ``frame007.png``."""
    if ordinal < 0 or ordinal >= MAX_FRAMES:
        raise ValueError(f"Frame ordinal out of range: {ordinal}")
    return f"{FRAME_NAME_PREFIX}{ordinal:0{FRAME_NAME_DIGITS}d}{FRAME_NAME_SUFFIX}"


def frame_input_pattern() -> str:
    """Return the ffmpeg image2 pattern matching :func:`frame_file_name`."""
    return f"{FRAME_NAME_PREFIX}%0{FRAME_NAME_DIGITS}d{FRAME_NAME_SUFFIX}"


@dataclass(frozen=True)
class Slide:
    ordinal: int
    text: str

    def __post_init__(self) -> None:
        if self.ordinal < 0:
            raise ValueError(f"Slide ordinal must be non-negative: {self.ordinal}")


@dataclass(frozen=True)
class Frame:
    """A rendered slide. The image must not be mutated after construction."""

    ordinal: int
    image: Image.Image

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size

    def tobytes(self) -> bytes:
        return self.image.tobytes()

    def to_png(self) -> bytes:
        buffer = io.BytesIO()
        self.image.save(buffer, format="PNG")
        return buffer.getvalue()


@dataclass(frozen=True)
class VideoArtifact:
    data: bytes
    mime_type: str = VIDEO_MIME_TYPE

    def __len__(self) -> int:
        return len(self.data)

    def save(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.data)
        return path


@dataclass(frozen=True)
class EncodeRequest:
    """Single ffmpeg invocation muxing staged frames into a container."""

    input_pattern: str
    frame_rate: int
    codec: str = "libx264"
    pixel_format: str = "yuv420p"
    output_name: str = DEFAULT_OUTPUT_NAME

    def __post_init__(self) -> None:
        if self.frame_rate <= 0:
            raise ValueError(f"frame_rate must be positive: {self.frame_rate}")
        if not self.output_name or "/" in self.output_name or "\\" in self.output_name:
            raise ValueError(f"output_name must be a plain file name: {self.output_name!r}")

    def to_ffmpeg_args(self) -> List[str]:
        return [
            "-framerate",
            str(self.frame_rate),
            "-i",
            self.input_pattern,
            "-c:v",
            self.codec,
            "-pix_fmt",
            self.pixel_format,
            "-an",
            self.output_name,
        ]
