# src/timetable_extractor/debug.py
from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Protocol, Sequence

from .parser import detections_to_dict
from .structures import TextDetection

log = logging.getLogger(__name__)

class DebugSink(Protocol):
    def persist(self, message_id: str, image_bytes: bytes, detections: Sequence[TextDetection]) -> None:
        ...

class DirectoryDebugSink:
    """Escribe ``<id>-debug-img.png`` y ``<id>-debug-ocr.json`` bajo ``root``."""

    def __init__(self, root: str) -> None:
        self.root = Path(root)

    def image_path(self, message_id: str) -> Path:
        return self.root / f"{message_id}-debug-img.png"

    def ocr_path(self, message_id: str) -> Path:
        return self.root / f"{message_id}-debug-ocr.json"

    def persist(self, message_id: str, image_bytes: bytes, detections: Sequence[TextDetection]) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            self.image_path(message_id).write_bytes(image_bytes)
            with open(self.ocr_path(message_id), "w", encoding="utf-8") as fh:
                json.dump(detections_to_dict(detections), fh, indent=2)
        except OSError as exc:
            log.error("No se pudo guardar la depuración de %s: %s", message_id, exc)
            return
        log.info("Depuración guardada en %s", self.root)
