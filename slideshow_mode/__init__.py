"""
Story slideshow video generation package.

Splits a generated story into sentence slides, renders each slide onto a
fixed cartoon canvas, and muxes the frames into a silent one-slide-per-second
MP4 through ffmpeg.
"""

from __future__ import annotations

__all__ = [
    "segment_story",
    "FrameRenderer",
    "EncoderSandbox",
    "VideoCompiler",
    "SessionState",
    "StorySlidesPipeline",
]

from .segmenter import segment_story
from .frame_renderer import FrameRenderer
from .sandbox import EncoderSandbox
from .compiler import VideoCompiler
from .session import SessionState
from .pipeline import StorySlidesPipeline
