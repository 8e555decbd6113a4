# src/timetable_extractor/cleaners.py
from __future__ import annotations
import io
import logging
from typing import Optional

import numpy as np
from PIL import Image

from .grid_detector import RGBA, WHITE, GridConfig, to_rgba_array
from .structures import Skeleton

log = logging.getLogger(__name__)

def erase_dividers(pixels: np.ndarray, skeleton: Skeleton, background: RGBA = WHITE) -> np.ndarray:
    """Pinta con el color de fondo la línea superior de cada fila y la derecha de cada columna.

    Trabaja sobre una copia; los píxeles del llamador no se tocan.
    """
    out = np.array(pixels, dtype=np.uint8, copy=True)
    height, width = out.shape[:2]
    for row in skeleton.rows:
        if 0 <= row.top < height:
            out[row.top, :] = background
    for col in skeleton.cols:
        if 0 <= col.right < width:
            out[:, col.right] = background
    return out

def crop_to_grid(pixels: np.ndarray, skeleton: Skeleton) -> np.ndarray:
    """Recorta al rectángulo que abarcan la primera/última fila y columna."""
    top = skeleton.rows[0].top
    bottom = skeleton.rows[-1].bottom
    left = skeleton.cols[0].left
    right = skeleton.cols[-1].right
    return pixels[top:bottom, left:right]

def render(image, skeleton: Skeleton, config: Optional[GridConfig] = None) -> bytes:
    """Genera el PNG en escala de grises que se entrega al OCR."""
    config = config or GridConfig()
    pixels = to_rgba_array(image)
    cleaned = erase_dividers(pixels, skeleton, config.background)
    cropped = crop_to_grid(cleaned, skeleton)

    gray = Image.fromarray(np.ascontiguousarray(cropped)).convert("L")
    buf = io.BytesIO()
    gray.save(buf, format="PNG")
    log.debug("Imagen limpia generada: %dx%d px, %d bytes.", gray.width, gray.height, buf.tell())
    return buf.getvalue()
