from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from config_loader import AppConfig
from logging_utils import get_logger
from story_client import StoryClient

from .compiler import VideoCompiler
from .errors import InputEmpty
from .frame_renderer import FrameRenderer
from .models import Slide, VideoArtifact
from .sandbox import EncoderSandbox
from .session import SessionState

logger = get_logger(__name__)


@dataclass
class SlideshowResult:
    run_id: str
    output_dir: Path
    video_path: Path
    plan_path: Path
    slides: List[Slide]
    fps: int

    @property
    def total_duration(self) -> float:
        return len(self.slides) / self.fps


class StorySlidesPipeline:
    """High-level orchestration: text -> story -> slides -> frames -> MP4."""

    def __init__(
        self,
        config: AppConfig,
        *,
        sandbox: Optional[EncoderSandbox] = None,
        story_client: Optional[StoryClient] = None,
        renderer: Optional[FrameRenderer] = None,
    ) -> None:
        self.config = config
        video_cfg = config.section("video")
        render_cfg = config.section("render")
        self.fps = int(video_cfg.get("fps", 1) or 1)
        self.render_workers = int(render_cfg.get("workers", 1) or 1)
        self.sandbox = sandbox or EncoderSandbox.from_config(config.raw, work_root=config.temp_dir)
        self.compiler = VideoCompiler.from_config(config.raw, self.sandbox)
        self.renderer = renderer or FrameRenderer.from_config(config.raw)
        self._story_client = story_client

    @property
    def story_client(self) -> StoryClient:
        if self._story_client is None:
            self._story_client = StoryClient(self.config.raw)
        return self._story_client

    def prepare_session(self, text: str, *, generate: bool = True) -> SessionState:
        """Build the session state holding the story and its slides."""
        session = SessionState.reset().with_extracted_text(text)
        story = self.story_client.generate(session.extracted_text) if generate else session.extracted_text
        session = session.with_story(story)
        logger.info("Story segmented into %d slides", session.slide_count)
        return session

    async def export(self, session: SessionState) -> VideoArtifact:
        """Render and compile the session's slides into a video."""
        if not session.slides:
            raise InputEmpty("Generate a story first")
        frames = self.renderer.render_all(session.slides, workers=self.render_workers)
        return await self.compiler.compile(frames, frame_rate=self.fps)

    def run(self, text: str, *, generate: bool = True) -> SlideshowResult:
        run_id = datetime.now(timezone.utc).strftime("slideshow_%Y%m%d_%H%M%S")
        session = self.prepare_session(text, generate=generate)
        if not session.slides:
            raise InputEmpty("Story contains no slides")

        video = asyncio.run(self.export(session))
        session = session.with_video(video)

        run_dir = self.config.output_dir / run_id
        run_dir.mkdir(parents=True, exist_ok=True)
        video_path = video.save(run_dir / f"{run_id}.mp4")
        plan_path = run_dir / "plan.json"
        self._write_plan(plan_path, run_id, session.story, session.slides, video)

        logger.info("Slideshow video created: %s", video_path)
        return SlideshowResult(
            run_id=run_id,
            output_dir=run_dir,
            video_path=video_path,
            plan_path=plan_path,
            slides=list(session.slides),
            fps=self.fps,
        )

    def _write_plan(
        self,
        path: Path,
        run_id: str,
        story: str,
        slides: Sequence[Slide],
        video: VideoArtifact,
    ) -> None:
        seconds_per_slide = 1.0 / self.fps
        layout = self.renderer.layout
        payload = {
            "run_id": run_id,
            "fps": self.fps,
            "resolution": [layout.width, layout.height],
            "mime_type": video.mime_type,
            "video_bytes": len(video),
            "story": story,
            "slides": [
                {
                    "ordinal": slide.ordinal,
                    "text": slide.text,
                    "start": round(slide.ordinal * seconds_per_slide, 3),
                    "end": round((slide.ordinal + 1) * seconds_per_slide, 3),
                }
                for slide in slides
            ],
        }
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
