from __future__ import annotations

import io
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import numpy as np
from PIL import Image

from .analytics import analytics_text, build_report
from .assign import assign_detections
from .cleaners import render
from .debug import DebugSink
from .errors import ScanFailed, TimeParseFailure, TimetableError, UnrecognizedDateFormat
from .grid_detector import GridConfig, detect_grid, reconcile_schema, to_rgba_array
from .ocr_utils import TextDetector
from .structures import Entry, Primed, Report, shifted

log = logging.getLogger(__name__)

NO_ANALYTICS = "no analytics available."


def load_pixels(source) -> np.ndarray:
    """Decodifica un PNG dado como ruta, bytes o archivo binario."""
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    elif isinstance(source, Path):
        source = str(source)
    with Image.open(source) as img:
        return to_rgba_array(img)


def prime(image, config: Optional[GridConfig] = None) -> Primed:
    """
    Detecta la rejilla, genera la imagen limpia y reubica el esqueleto sobre ella.

    El esqueleto devuelto ya trae las cuatro columnas lógicas.
    """
    config = config or GridConfig()
    pixels = to_rgba_array(image)

    raw = detect_grid(pixels, config)
    data = render(pixels, raw, config)

    rebased = shifted(raw, -raw.cols[0].left, -raw.rows[0].top)
    width = raw.cols[-1].right - raw.cols[0].left
    height = raw.rows[-1].bottom - raw.rows[0].top
    skeleton = reconcile_schema(replace(rebased, width=width, height=height))
    log.debug("Esqueleto: filas=%s columnas=%s", skeleton.rows, skeleton.cols)
    return Primed(data=data, skeleton=skeleton)


def read_entries(
    image,
    detector: TextDetector,
    *,
    message_id: str,
    debug_sink: Optional[DebugSink] = None,
    config: Optional[GridConfig] = None,
    primed: Optional[Primed] = None,
) -> List[Entry]:
    """
    Ejecuta el pipeline hasta las entradas reconstruidas.

    Si ya se tiene el resultado de :func:`prime` se pasa en ``primed`` y la
    imagen no se vuelve a procesar. Los fallos de la rejilla se propagan tal
    cual; los de fecha/hora vuelcan imagen limpia y OCR en ``debug_sink`` y
    se elevan como :class:`ScanFailed`.
    """
    if primed is None:
        primed = prime(image, config)
    detections = detector.detect(primed.data)
    log.info("[%s] OCR devolvió %d detecciones.", message_id, len(detections))

    try:
        return assign_detections(detections, primed.skeleton)
    except (UnrecognizedDateFormat, TimeParseFailure) as exc:
        if debug_sink is not None:
            debug_sink.persist(message_id, primed.data, detections)
        raise ScanFailed(message_id, exc) from exc


def analyze(
    image,
    detector: TextDetector,
    *,
    message_id: str,
    debug_sink: Optional[DebugSink] = None,
    config: Optional[GridConfig] = None,
) -> Report:
    entries = read_entries(image, detector, message_id=message_id, debug_sink=debug_sink, config=config)
    report = build_report(entries)
    log.info("[%s] %d problemas, %d correcciones.", message_id, len(report.problems), len(report.fixes))
    return report


def analytics_string(image, detector: TextDetector, *, message_id: str,
                     debug_sink: Optional[DebugSink] = None,
                     config: Optional[GridConfig] = None) -> str:
    """Como :func:`analyze`, pero siempre devuelve texto y se degrada ante fallos."""
    try:
        report = analyze(image, detector, message_id=message_id, debug_sink=debug_sink, config=config)
    except TimetableError as exc:
        log.error("No se pudieron obtener las analíticas: %s", exc)
        return NO_ANALYTICS
    return analytics_text(report)
