from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from slideshow_mode.frame_renderer import (  # noqa: E402
    CanvasLayout,
    FrameRenderer,
    quadratic_curve,
    wrap_caption,
)
from slideshow_mode.models import Slide  # noqa: E402
from slideshow_mode.utils import parse_rgb  # noqa: E402

BACKGROUND = (255, 248, 220)
CAPTION_BOX = (0, 300, 640, 480)


class CharWidthMeasurer:
    """Every character is 10px wide."""

    def measure(self, text: str) -> float:
        return 10.0 * len(text)


def test_wrap_keeps_short_text_on_one_line() -> None:
    assert wrap_caption("A cat sat.", CharWidthMeasurer(), 600) == ["A cat sat."]


def test_wrap_breaks_when_candidate_exceeds_width() -> None:
    # "abcdefghij " is 110px; five fit in 600px, the sixth overflows.
    text = " ".join(["abcdefghij"] * 8)
    lines = wrap_caption(text, CharWidthMeasurer(), 600)
    assert lines == [" ".join(["abcdefghij"] * 5), " ".join(["abcdefghij"] * 3)]


def test_wrap_commits_empty_line_before_overlong_first_word() -> None:
    word = "x" * 70
    assert wrap_caption(word, CharWidthMeasurer(), 600) == ["", word]


def test_wrap_of_empty_text_is_single_empty_line() -> None:
    assert wrap_caption("", CharWidthMeasurer(), 600) == [""]


def test_quadratic_curve_hits_endpoints() -> None:
    points = quadratic_curve((240, 200), (320, 270), (400, 200), steps=8)
    assert points[0] == (240, 200)
    assert points[-1] == (400, 200)
    assert len(points) == 9


def test_render_produces_fixed_size_frame_with_slide_ordinal() -> None:
    frame = FrameRenderer().render(Slide(ordinal=4, text="Hello world"))
    assert frame.ordinal == 4
    assert frame.size == (640, 480)
    assert frame.image.mode == "RGB"


def test_render_is_pixel_deterministic() -> None:
    slide = Slide(ordinal=0, text="The little robot learned to count to ten!")
    first = FrameRenderer().render(slide)
    second = FrameRenderer().render(slide)
    assert first.tobytes() == second.tobytes()


def test_empty_slide_draws_only_background_and_character() -> None:
    renderer = FrameRenderer()
    frame = renderer.render(Slide(ordinal=0, text=""))
    caption_area = frame.image.crop(CAPTION_BOX)
    assert caption_area.getcolors() == [(640 * 180, BACKGROUND)]
    # Face centre is drawn in the character colour.
    assert frame.image.getpixel((320, 220)) == (255, 204, 128)
    assert frame.image.getpixel((270, 130)) == (0, 0, 0)
    assert frame.image.getpixel((5, 5)) == BACKGROUND


def test_caption_is_drawn_below_character() -> None:
    frame = FrameRenderer().render(Slide(ordinal=0, text="Hello world"))
    colors = frame.image.crop(CAPTION_BOX).getcolors(maxcolors=640 * 180)
    assert colors is not None
    assert len(colors) > 1


def test_short_caption_is_single_line_and_long_caption_wraps() -> None:
    renderer = FrameRenderer()
    assert len(renderer.layout_lines("Hi there.")) == 1
    long_text = " ".join(["adventure"] * 40)
    assert renderer.measurer.measure(long_text) > 600
    assert len(renderer.layout_lines(long_text)) >= 2


def test_layout_from_config_overrides_defaults() -> None:
    layout = CanvasLayout.from_config(
        {"render": {"background": "#000000", "wrap_width": 300, "line_height": 40}}
    )
    assert layout.background == (0, 0, 0)
    assert layout.wrap_width == 300
    assert layout.line_height == 40
    assert layout.width == 640
    assert CanvasLayout.from_config({}) == CanvasLayout()


def test_config_colours_accept_hex_and_channel_lists() -> None:
    assert parse_rgb("#FFF8DC", (0, 0, 0)) == (255, 248, 220)
    assert parse_rgb("fa0", (0, 0, 0)) == (255, 170, 0)
    assert parse_rgb([183, 28, 28], (0, 0, 0)) == (183, 28, 28)
    assert parse_rgb("#12345", (1, 2, 3)) == (1, 2, 3)
    assert parse_rgb("#zzzzzz", (1, 2, 3)) == (1, 2, 3)
    assert parse_rgb([300, 0, 0], (1, 2, 3)) == (1, 2, 3)
    assert parse_rgb(None, (1, 2, 3)) == (1, 2, 3)

    layout = CanvasLayout.from_config({"render": {"text_color": [10, 20, 30], "background": None}})
    assert layout.text_color == (10, 20, 30)
    assert layout.background == BACKGROUND


def test_render_all_preserves_slide_order_with_workers() -> None:
    slides = [Slide(ordinal=idx, text="") for idx in range(5)]
    frames = FrameRenderer().render_all(slides, workers=3)
    assert [frame.ordinal for frame in frames] == [0, 1, 2, 3, 4]
