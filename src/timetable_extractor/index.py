# src/timetable_extractor/index.py
from __future__ import annotations
from typing import Sequence

from .errors import CellLookupMiss
from .structures import Col, Row, Skeleton

def find_row(rows: Sequence[Row], y: int) -> int:
    for r in rows:
        if r.top <= y <= r.bottom:
            return r.num
    raise CellLookupMiss("row", y)

def find_col(cols: Sequence[Col], x: int) -> int:
    for c in cols:
        if c.left <= x <= c.right:
            return c.num
    raise CellLookupMiss("col", x)

class SkeletonIndex:
    """Maps pixel coordinates of the cropped image to logical rows and columns."""

    def __init__(self, skeleton: Skeleton) -> None:
        self.skeleton = skeleton

    def row_at(self, y: int) -> int:
        return find_row(self.skeleton.rows, y)

    def col_at(self, x: int) -> int:
        return find_col(self.skeleton.cols, x)
