# src/timetable_extractor/assign.py
from __future__ import annotations
import logging
from enum import IntEnum
from typing import Iterable, List

from .dates import format_date_key, parse_date, parse_time
from .errors import CellLookupMiss, TimeParseFailure
from .index import SkeletonIndex
from .structures import DetectionKind, Entry, Skeleton, TextDetection

log = logging.getLogger(__name__)

class Column(IntEnum):
    DATE = 0
    ACTIVITY = 1
    IN = 2
    OUT = 3

def _row_date_key(entry: Entry, text: str) -> str:
    if entry.date is None:
        raise TimeParseFailure("", text)
    return format_date_key(entry.date)

def assign_detections(detections: Iterable[TextDetection], skeleton: Skeleton) -> List[Entry]:
    """Bucket OCR word detections into the Date | Activity | In | Out cells.

    Words are visited left to right so that several words falling in the same
    activity cell concatenate in reading order. Detections whose centre is
    outside every cell are dropped; a date or time that does not parse
    aborts the whole scan.
    """
    entries = [Entry() for _ in skeleton.rows]
    index = SkeletonIndex(skeleton)

    words = [d for d in detections if d.kind == DetectionKind.WORD]
    words.sort(key=lambda d: d.bounding_box.left)

    for det in words:
        x, y = det.center(skeleton.width, skeleton.height)
        try:
            c = index.col_at(x)
            r = index.row_at(y)
        except CellLookupMiss as exc:
            log.debug("Se descarta %r: %s", det.text, exc)
            continue

        entry = entries[r]
        txt = det.text
        if c == Column.DATE:
            entry.date = parse_date(txt)
        elif c == Column.ACTIVITY:
            entry.activity += txt
        elif c == Column.IN:
            entry.in_time = parse_time(_row_date_key(entry, txt), txt)
        elif c == Column.OUT:
            entry.out_time = parse_time(_row_date_key(entry, txt), txt)

    log.info("Se reconstruyeron %d entradas a partir de %d palabras.", len(entries), len(words))
    return entries
