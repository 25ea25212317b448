from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .models import Slide, VideoArtifact
from .segmenter import segment_story


@dataclass(frozen=True)
class SessionState:
    """State of one generation session, from extracted text to exported video."""

    extracted_text: str = ""
    story: str = ""
    slides: Tuple[Slide, ...] = ()
    current_slide: int = 0
    error: str = ""
    video: Optional[VideoArtifact] = None

    @classmethod
    def reset(cls) -> "SessionState":
        return cls()

    @property
    def slide_count(self) -> int:
        return len(self.slides)

    @property
    def current_text(self) -> str:
        if not self.slides:
            return ""
        return self.slides[self.current_slide].text

    def with_extracted_text(self, text: str) -> "SessionState":
        return replace(SessionState.reset(), extracted_text=text.strip())

    def with_story(self, story: str) -> "SessionState":
        cleaned = story.strip()
        return replace(
            self,
            story=cleaned,
            slides=segment_story(cleaned),
            current_slide=0,
            error="",
            video=None,
        )

    def with_video(self, video: VideoArtifact) -> "SessionState":
        return replace(self, video=video, error="")

    def with_error(self, message: str) -> "SessionState":
        return replace(self, error=message)

    def next_slide(self) -> "SessionState":
        if self.current_slide >= self.slide_count - 1:
            return self
        return replace(self, current_slide=self.current_slide + 1)

    def previous_slide(self) -> "SessionState":
        if self.current_slide <= 0:
            return self
        return replace(self, current_slide=self.current_slide - 1)
