from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Sequence

from logging_utils import get_logger

from .errors import EncodingFailed, FrameLimitExceeded, FrameOrderError, FrameSizeError, InputEmpty
from .models import (
    DEFAULT_OUTPUT_NAME,
    MAX_FRAMES,
    EncodeRequest,
    Frame,
    VideoArtifact,
    frame_file_name,
    frame_input_pattern,
)
from .sandbox import EncoderSandbox

logger = get_logger(__name__)


class VideoCompiler:
    """Mux an ordered list of frames into an MP4 through the encoder sandbox."""

    def __init__(
        self,
        sandbox: EncoderSandbox,
        *,
        codec: str = "libx264",
        pixel_format: str = "yuv420p",
        output_name: str = DEFAULT_OUTPUT_NAME,
    ) -> None:
        self.sandbox = sandbox
        self.codec = codec
        self.pixel_format = pixel_format
        self.output_name = output_name

    @classmethod
    def from_config(cls, config: Dict[str, Any], sandbox: EncoderSandbox) -> "VideoCompiler":
        video_cfg = config.get("video", {}) if isinstance(config, dict) else {}
        video_cfg = video_cfg or {}
        return cls(
            sandbox,
            codec=str(video_cfg.get("codec", "libx264")),
            pixel_format=str(video_cfg.get("pixel_format", "yuv420p")),
        )

    async def compile(self, frames: Sequence[Frame], frame_rate: int = 1) -> VideoArtifact:
        ordered = list(frames)
        self._validate(ordered, frame_rate)

        request = EncodeRequest(
            input_pattern=frame_input_pattern(),
            frame_rate=frame_rate,
            codec=self.codec,
            pixel_format=self.pixel_format,
            output_name=self.output_name,
        )

        with self.sandbox.exclusive():
            await self.sandbox.ensure_ready()
            self.sandbox.reset()
            try:
                await asyncio.to_thread(self._stage, ordered)
                logger.info(
                    "Encoding %d frames at %d fps (%s, %s)",
                    len(ordered),
                    frame_rate,
                    request.codec,
                    request.pixel_format,
                )
                await self.sandbox.run(request)
                data = self._read_output(request.output_name)
            finally:
                self.sandbox.reset()

        logger.info("Compiled video: %d bytes", len(data))
        return VideoArtifact(data=data)

    # ------------------------------------------------------------------

    @staticmethod
    def _validate(frames: List[Frame], frame_rate: int) -> None:
        if not frames:
            raise InputEmpty("No slides to compile")
        if frame_rate <= 0:
            raise ValueError(f"frame_rate must be positive: {frame_rate}")
        if len(frames) > MAX_FRAMES:
            raise FrameLimitExceeded(f"At most {MAX_FRAMES} frames are supported, got {len(frames)}")
        for expected, frame in enumerate(frames):
            if frame.ordinal != expected:
                raise FrameOrderError(
                    f"Frame ordinals must be contiguous from 0; position {expected} has {frame.ordinal}"
                )
        width, height = frames[0].size
        # 4:2:0 chroma subsampling needs even dimensions.
        if width % 2 or height % 2:
            raise FrameSizeError(f"Frame size must be even for yuv420p, got {width}x{height}")
        for frame in frames[1:]:
            if frame.size != (width, height):
                raise FrameSizeError(
                    f"Frame {frame.ordinal} is {frame.size[0]}x{frame.size[1]}, expected {width}x{height}"
                )

    def _stage(self, frames: List[Frame]) -> None:
        for frame in frames:
            name = frame_file_name(frame.ordinal)
            self.sandbox.write_file(name, frame.to_png())
            logger.debug("Staged %s", name)

    def _read_output(self, name: str) -> bytes:
        try:
            data = self.sandbox.read_file(name)
        except FileNotFoundError as exc:
            raise EncodingFailed(f"ffmpeg produced no {name}", diagnostic=str(exc)) from exc
        if not data:
            raise EncodingFailed(f"ffmpeg produced an empty {name}")
        return data
