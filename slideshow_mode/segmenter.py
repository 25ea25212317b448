"""Split a generated story into slide-sized sentences."""
from __future__ import annotations

import re
from typing import Tuple

from .models import Slide

# Zero-width split after terminal punctuation; the whitespace run is dropped.
# Abbreviations such as "Dr. Smith" split like any other sentence end.
SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


def segment_story(story: str) -> Tuple[Slide, ...]:
    """Return the ordered slides for ``story``; empty input yields no slides."""
    pieces = (piece.strip() for piece in SENTENCE_BOUNDARY.split(story))
    texts = [piece for piece in pieces if piece]
    return tuple(Slide(ordinal=idx, text=text) for idx, text in enumerate(texts))
