"""Deterministic slide frame rendering.

Each slide becomes a fixed-size RGB frame: a flat background, the cartoon
character (identical on every frame) and the slide caption, word wrapped and
centred below the character.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Protocol, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from logging_utils import get_logger

from .models import Frame, Slide
from .utils import load_font, parse_rgb

logger = get_logger(__name__)

Point = Tuple[float, float]


class TextMeasurer(Protocol):
    def measure(self, text: str) -> float:
        """Return the rendered width of ``text`` in pixels."""
        ...


class PillowTextMeasurer:
    """Measure text with the same Pillow font used for drawing."""

    def __init__(self, font: ImageFont.FreeTypeFont | ImageFont.ImageFont) -> None:
        self.font = font

    def measure(self, text: str) -> float:
        return float(self.font.getlength(text))


@dataclass(frozen=True)
class CanvasLayout:
    width: int = 640
    height: int = 480
    background: Tuple[int, int, int] = (255, 248, 220)
    text_color: Tuple[int, int, int] = (0, 0, 0)
    font_path: str | None = None
    font_size: int = 28
    wrap_width: int = 600
    line_height: int = 36
    text_top: int = 350

    @property
    def text_center_x(self) -> float:
        return self.width / 2

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "CanvasLayout":
        render_cfg = config.get("render") if isinstance(config, dict) else None
        if not isinstance(render_cfg, dict):
            return cls()
        defaults = cls()
        return cls(
            width=int(render_cfg.get("width", defaults.width)),
            height=int(render_cfg.get("height", defaults.height)),
            background=parse_rgb(render_cfg.get("background"), defaults.background),
            text_color=parse_rgb(render_cfg.get("text_color"), defaults.text_color),
            font_path=render_cfg.get("font_path") or None,
            font_size=int(render_cfg.get("font_size", defaults.font_size)),
            wrap_width=int(render_cfg.get("wrap_width", defaults.wrap_width)),
            line_height=int(render_cfg.get("line_height", defaults.line_height)),
            text_top=int(render_cfg.get("text_top", defaults.text_top)),
        )


@dataclass(frozen=True)
class CharacterStyle:
    face_color: Tuple[int, int, int] = (255, 204, 128)
    eye_color: Tuple[int, int, int] = (255, 255, 255)
    pupil_color: Tuple[int, int, int] = (0, 0, 0)
    mouth_color: Tuple[int, int, int] = (183, 28, 28)
    face_center: Point = (320, 150)
    face_radius: int = 100
    eye_centers: Tuple[Point, Point] = ((270, 130), (370, 130))
    eye_radius: int = 30
    pupil_radius: int = 10
    mouth_start: Point = (240, 200)
    mouth_control: Point = (320, 270)
    mouth_end: Point = (400, 200)
    mouth_width: int = 8
    mouth_steps: int = 32


def wrap_caption(text: str, measurer: TextMeasurer, max_width: float) -> List[str]:
    """Greedy word wrap.

    The candidate ``line + word + " "`` is measured before each word is added.
    When it is wider than ``max_width`` the current line is committed as-is,
    even when still empty, and the word opens the next line.
    """
    lines: List[str] = []
    line = ""
    for word in text.split():
        candidate = f"{line}{word} "
        if measurer.measure(candidate) > max_width:
            lines.append(line.rstrip())
            line = f"{word} "
        else:
            line = candidate
    lines.append(line.rstrip())
    return lines


def quadratic_curve(start: Point, control: Point, end: Point, steps: int) -> List[Point]:
    points: List[Point] = []
    for step in range(steps + 1):
        t = step / steps
        inv = 1.0 - t
        x = inv * inv * start[0] + 2 * inv * t * control[0] + t * t * end[0]
        y = inv * inv * start[1] + 2 * inv * t * control[1] + t * t * end[1]
        points.append((x, y))
    return points


def _circle_box(center: Point, radius: int) -> Tuple[float, float, float, float]:
    cx, cy = center
    return (cx - radius, cy - radius, cx + radius, cy + radius)


class FrameRenderer:
    """Render slides onto a fixed canvas."""

    def __init__(
        self,
        layout: CanvasLayout | None = None,
        *,
        character: CharacterStyle | None = None,
        font: ImageFont.FreeTypeFont | ImageFont.ImageFont | None = None,
        measurer: TextMeasurer | None = None,
    ) -> None:
        self.layout = layout or CanvasLayout()
        self.character = character or CharacterStyle()
        self.font = font or load_font(self.layout.font_path, self.layout.font_size)
        self.measurer = measurer or PillowTextMeasurer(self.font)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "FrameRenderer":
        return cls(CanvasLayout.from_config(config))

    def layout_lines(self, text: str) -> List[str]:
        return wrap_caption(text, self.measurer, self.layout.wrap_width)

    def render(self, slide: Slide) -> Frame:
        layout = self.layout
        image = Image.new("RGB", (layout.width, layout.height), layout.background)
        draw = ImageDraw.Draw(image)
        self._draw_character(draw)
        self._draw_caption(draw, self.layout_lines(slide.text))
        return Frame(ordinal=slide.ordinal, image=image)

    def render_all(self, slides: Sequence[Slide], workers: int = 1) -> List[Frame]:
        """Render slides in order, optionally across a thread pool."""
        if workers <= 1 or len(slides) <= 1:
            return [self.render(slide) for slide in slides]
        logger.debug("Rendering %d frames with %d workers", len(slides), workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(self.render, slides))

    # ------------------------------------------------------------------

    def _draw_character(self, draw: ImageDraw.ImageDraw) -> None:
        style = self.character
        draw.ellipse(_circle_box(style.face_center, style.face_radius), fill=style.face_color)
        for center in style.eye_centers:
            draw.ellipse(_circle_box(center, style.eye_radius), fill=style.eye_color)
        for center in style.eye_centers:
            draw.ellipse(_circle_box(center, style.pupil_radius), fill=style.pupil_color)
        mouth = quadratic_curve(style.mouth_start, style.mouth_control, style.mouth_end, style.mouth_steps)
        draw.line(mouth, fill=style.mouth_color, width=style.mouth_width, joint="curve")

    def _draw_caption(self, draw: ImageDraw.ImageDraw, lines: Sequence[str]) -> None:
        layout = self.layout
        baseline = layout.text_top
        for line in lines:
            if line:
                self._draw_line(draw, line, baseline)
            baseline += layout.line_height

    def _draw_line(self, draw: ImageDraw.ImageDraw, line: str, baseline: float) -> None:
        layout = self.layout
        if isinstance(self.font, ImageFont.FreeTypeFont):
            draw.text(
                (layout.text_center_x, baseline),
                line,
                font=self.font,
                fill=layout.text_color,
                anchor="ms",
            )
            return
        # Bitmap fonts have no anchor support; position from the top-left corner.
        width = self.font.getlength(line)
        ascent = self.font.getbbox(line)[3]
        draw.text(
            (layout.text_center_x - width / 2, baseline - ascent),
            line,
            font=self.font,
            fill=layout.text_color,
        )
