# src/timetable_extractor/exporters.py
from __future__ import annotations
from pathlib import Path
from typing import List
import csv

from .dates import PRETTY_TIME
from .structures import Entry

HEADER = ["Date", "Activity", "In", "Out"]

def entries_to_rows(entries: List[Entry]) -> List[List[str]]:
    rows = []
    for e in entries:
        rows.append([
            e.date.isoformat() if e.date else "",
            e.activity,
            e.in_time.strftime(PRETTY_TIME) if e.in_time else "",
            e.out_time.strftime(PRETTY_TIME) if e.out_time else "",
        ])
    return rows

def entries_to_csv(entries: List[Entry], csv_path: str) -> None:
    Path(csv_path).parent.mkdir(parents=True, exist_ok=True)
    with open(csv_path, "w", encoding="utf-8-sig", newline="") as f:
        w = csv.writer(f)
        w.writerow(HEADER)
        w.writerows(entries_to_rows(entries))
