from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from slideshow_mode.models import Slide  # noqa: E402
from slideshow_mode.segmenter import segment_story  # noqa: E402


def _texts(story: str) -> list[str]:
    return [slide.text for slide in segment_story(story)]


def test_text_without_terminal_punctuation_is_one_slide() -> None:
    assert _texts("Hello world") == ["Hello world"]


def test_splits_after_each_sentence() -> None:
    assert _texts("A cat sat. It purred! Why?") == ["A cat sat.", "It purred!", "Why?"]


def test_consecutive_punctuation_is_one_boundary() -> None:
    assert _texts("Really?! Yes.") == ["Really?!", "Yes."]


def test_abbreviations_are_not_special_cased() -> None:
    assert _texts("Dr. Smith measured 3. 14 apples.") == ["Dr.", "Smith measured 3.", "14 apples."]


def test_punctuation_without_following_whitespace_does_not_split() -> None:
    assert _texts("Pi is 3.14 today.") == ["Pi is 3.14 today."]


def test_whitespace_runs_and_newlines_are_dropped() -> None:
    story = "  Once upon a time.\n\n  The end!   "
    assert _texts(story) == ["Once upon a time.", "The end!"]


def test_empty_and_blank_input_yield_no_slides() -> None:
    assert segment_story("") == ()
    assert segment_story("   \n\t ") == ()


def test_ordinals_are_contiguous_from_zero() -> None:
    slides = segment_story("One. Two. Three. Four.")
    assert [slide.ordinal for slide in slides] == [0, 1, 2, 3]
    assert slides[2] == Slide(ordinal=2, text="Three.")


def test_segmentation_is_deterministic() -> None:
    story = "The fox jumped! Did it land? Nobody knows... The end."
    assert segment_story(story) == segment_story(story)


def test_joined_slides_keep_every_non_whitespace_character() -> None:
    story = "Tom ran.  Sam   hid!\tWhere?\nHere. ok"
    joined = " ".join(_texts(story))
    assert "".join(joined.split()) == "".join(story.split())
