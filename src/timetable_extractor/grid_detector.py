# src/timetable_extractor/grid_detector.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from PIL import Image

from .errors import ColOriginNotFound, GridNotFound, RowOriginNotFound
from .structures import Col, Row, Skeleton

log = logging.getLogger(__name__)

RGBA = Tuple[int, int, int, int]

WHITE: RGBA = (255, 255, 255, 255)
BLACK: RGBA = (0, 0, 0, 255)

@dataclass(frozen=True)
class GridConfig:
    """Parámetros del barrido de divisores. Los valores por defecto corresponden al formato fijo de la tabla."""
    background: RGBA = WHITE
    foreground: RGBA = BLACK
    tolerance: int = 0           # max per-channel distance for a colour match
    marker_arm: int = 5          # pixels checked on each arm of the divider stamp
    max_row_height: int = 50
    sample_inset: int = 5        # row scan runs along x = width - sample_inset
    col_scan_start: int = 3
    divider_count: int = 3

def to_rgba_array(image) -> np.ndarray:
    """Normaliza una imagen Pillow o un array numpy a un array uint8 ``H x W x 4``."""
    if isinstance(image, Image.Image):
        return np.asarray(image.convert("RGBA"), dtype=np.uint8)

    arr = np.asarray(image)
    if arr.ndim == 2:
        arr = np.stack([arr, arr, arr], axis=-1)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise ValueError(f"Unsupported pixel array shape: {arr.shape}")
    if arr.shape[2] == 3:
        alpha = np.full(arr.shape[:2] + (1,), 255, dtype=arr.dtype)
        arr = np.concatenate([arr, alpha], axis=-1)
    return arr.astype(np.uint8, copy=False)

def color_mask(pixels: np.ndarray, color: RGBA, tolerance: int = 0) -> np.ndarray:
    """Boolean mask of pixels within ``tolerance`` of ``color`` on every channel."""
    diff = np.abs(pixels.astype(np.int16) - np.asarray(color, dtype=np.int16))
    return diff.max(axis=-1) <= tolerance

def find_row_origin(background: np.ndarray) -> int:
    """First y on x=0 whose pixel is not background."""
    hits = np.flatnonzero(~background[:, 0])
    if len(hits) == 0:
        raise RowOriginNotFound()
    return int(hits[0])

def find_col_origin(foreground: np.ndarray, row0: int, start: int = 3) -> int:
    """First x >= ``start`` on ``row0`` whose pixel is foreground."""
    hits = np.flatnonzero(foreground[row0, start:])
    if len(hits) == 0:
        raise ColOriginNotFound(row0)
    return int(hits[0]) + start

def find_rows(foreground: np.ndarray, row0: int, config: GridConfig) -> List[Row]:
    height, width = foreground.shape
    xs = width - config.sample_inset
    if xs < 0 or xs >= width:
        return []
    sample = foreground[:, xs]

    rows: List[Row] = []
    top = row0
    for y in range(row0 + 1, height):
        if not sample[y]:
            if y - top > config.max_row_height:
                break
            continue
        rows.append(Row(num=len(rows), top=top, bottom=y))
        top = y
    return rows

def is_divider_marker(foreground: np.ndarray, x: int, y: int, arm: int = 5) -> bool:
    """True when (x, y) is the centre of an all-foreground plus of the given arm length.

    Pixels outside the image never count as foreground.
    """
    height, width = foreground.shape
    if x - (arm - 1) < 0 or x + (arm - 1) >= width:
        return False
    if y - (arm - 1) < 0 or y + (arm - 1) >= height:
        return False
    horizontal = foreground[y, x - arm + 1:x + arm]
    vertical = foreground[y - arm + 1:y + arm, x]
    return bool(horizontal.all() and vertical.all())

def find_cols(foreground: np.ndarray, row0: int, col0: int, config: GridConfig) -> List[Col]:
    width = foreground.shape[1]
    cols: List[Col] = []
    left = col0
    for x in range(col0 + 1, width):
        if not is_divider_marker(foreground, x, row0, config.marker_arm):
            continue
        cols.append(Col(num=len(cols), left=left, right=x))
        if len(cols) == config.divider_count:
            break
        left = x
    return cols

def detect_grid(image, config: Optional[GridConfig] = None) -> Skeleton:
    """Localiza el origen de la tabla y los límites de filas/columnas en los píxeles.

    El esqueleto devuelto está en coordenadas de la imagen y conserva las
    columnas crudas de los divisores; ver :func:`reconcile_schema`.
    """
    config = config or GridConfig()
    pixels = to_rgba_array(image)
    height, width = pixels.shape[:2]

    background = color_mask(pixels, config.background, config.tolerance)
    foreground = color_mask(pixels, config.foreground, config.tolerance)

    row0 = find_row_origin(background)
    col0 = find_col_origin(foreground, row0, config.col_scan_start)
    log.debug("Origen de la tabla en (x=%d, y=%d).", col0, row0)

    rows = find_rows(foreground, row0, config)
    cols = find_cols(foreground, row0, col0, config)
    if not rows:
        raise GridNotFound(f"no row boundaries below y={row0}")
    if not cols:
        raise GridNotFound(f"no column dividers right of x={col0}")

    log.info("Se detectaron %d filas y %d columnas.", len(rows), len(cols))
    return Skeleton(width=width, height=height, rows=tuple(rows), cols=tuple(cols))

def reconcile_schema(skeleton: Skeleton) -> Skeleton:
    """Map the raw divider columns onto the Date | Activity | In | Out schema.

    The first column's right bound is halved and the last column is split
    at its midpoint into In and Out.
    """
    cols = list(skeleton.cols)
    if not cols:
        return skeleton
    first = cols[0]
    cols[0] = Col(num=first.num, left=first.left, right=first.right // 2)
    cols[-1:] = cols[-1].split()
    return Skeleton(
        width=skeleton.width,
        height=skeleton.height,
        rows=skeleton.rows,
        cols=tuple(cols),
        offset=skeleton.offset,
    )
