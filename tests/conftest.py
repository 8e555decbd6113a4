"""Pytest configuration and synthetic time-table fixtures shared across the suite."""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest


SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from timetable_extractor.structures import BoundingBox, DetectionKind, TextDetection  # noqa: E402


WIDTH, HEIGHT = 400, 200
ROW_LINES = (10, 40, 70)
DIVIDERS = (100, 200, 300)

# Geometry of the primed (cropped) image produced from the table above.
PRIMED_W = DIVIDERS[-1] - 3
PRIMED_H = ROW_LINES[-1] - ROW_LINES[0]
ROW_Y = (15, 45)
DATE_X, ACTIVITY_X, IN_X, OUT_X = 24, 140, 220, 270


def draw_table(color=(0, 0, 0, 255), rows=ROW_LINES, dividers=DIVIDERS) -> np.ndarray:
    """White canvas with full-width row lines and dividers poking above the header line."""
    img = np.full((HEIGHT, WIDTH, 4), 255, dtype=np.uint8)
    for y in rows:
        img[y, :] = color
    top, bottom = rows[0] - 4, rows[-1]
    for x in dividers:
        img[top:bottom + 1, x] = color
    return img


def word(text: str, cx: float, cy: float, *, kind=DetectionKind.WORD, w: float = 8, h: float = 6,
         width: int = PRIMED_W, height: int = PRIMED_H) -> TextDetection:
    return TextDetection(
        text=text,
        kind=kind,
        bounding_box=BoundingBox(
            left=(cx - w / 2) / width,
            top=(cy - h / 2) / height,
            width=w / width,
            height=h / height,
        ),
    )


@pytest.fixture
def table_pixels() -> np.ndarray:
    return draw_table()
