# src/timetable_extractor/structures.py
from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Tuple

@dataclass(frozen=True)
class Row:
    num: int
    top: int
    bottom: int

    def moved(self, delta: int) -> "Row":
        return Row(num=self.num, top=self.top + delta, bottom=self.bottom + delta)

@dataclass(frozen=True)
class Col:
    num: int
    left: int
    right: int

    @property
    def width(self) -> int:
        return self.right - self.left

    def moved(self, delta: int) -> "Col":
        return Col(num=self.num, left=self.left + delta, right=self.right + delta)

    def split(self) -> Tuple["Col", "Col"]:
        """Split at the midpoint into two columns numbered ``num`` and ``num + 1``."""
        c1 = Col(num=self.num, left=self.left, right=self.right - self.width // 2)
        c2 = Col(num=self.num + 1, left=c1.right, right=self.right)
        return c1, c2

@dataclass(frozen=True)
class Skeleton:
    """Detected grid geometry of one table image.

    ``offset`` is the absolute ``(dx, dy)`` rebase applied to the coordinates
    found by the detector; ``(0, 0)`` means raw image coordinates.
    """
    width: int
    height: int
    rows: Tuple[Row, ...]
    cols: Tuple[Col, ...]
    offset: Tuple[int, int] = (0, 0)

    @property
    def origin(self) -> Tuple[int, int]:
        return -self.offset[0], -self.offset[1]

def shifted(skeleton: Skeleton, dx: int, dy: int) -> Skeleton:
    """Rebase the skeleton so that its offset becomes ``(dx, dy)``.

    The offset is absolute: shifting twice by the same amount moves nothing
    the second time.
    """
    ddx = dx - skeleton.offset[0]
    ddy = dy - skeleton.offset[1]
    if ddx == 0 and ddy == 0:
        return skeleton
    return replace(
        skeleton,
        rows=tuple(r.moved(ddy) for r in skeleton.rows),
        cols=tuple(c.moved(ddx) for c in skeleton.cols),
        offset=(dx, dy),
    )

class DetectionKind(str, Enum):
    WORD = "WORD"
    LINE = "LINE"

@dataclass(frozen=True)
class BoundingBox:
    """Box geometry as fractions of the image dimensions."""
    left: float
    top: float
    width: float
    height: float

@dataclass(frozen=True)
class TextDetection:
    text: str
    kind: DetectionKind
    bounding_box: BoundingBox

    def center(self, width: int, height: int) -> Tuple[int, int]:
        box = self.bounding_box
        w, h = float(width), float(height)
        xmid = box.left * w + box.width * w / 2
        ymid = box.top * h + box.height * h / 2
        return int(xmid), int(ymid)

@dataclass
class Entry:
    date: Optional[date] = None
    activity: str = ""
    in_time: Optional[datetime] = None
    out_time: Optional[datetime] = None

@dataclass
class Report:
    problems: List[str] = field(default_factory=list)
    fixes: List[str] = field(default_factory=list)

@dataclass(frozen=True)
class Primed:
    """Cleaned PNG bytes for OCR plus the skeleton in their coordinate space."""
    data: bytes
    skeleton: Skeleton
