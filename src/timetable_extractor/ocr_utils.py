from __future__ import annotations

import io
import logging
from typing import List, Protocol, Sequence

from .parser import parse_hocr
from .structures import TextDetection

log = logging.getLogger(__name__)


class TextDetector(Protocol):
    """Colaborador OCR: recibe los bytes de la imagen limpia y devuelve detecciones sin orden."""

    def detect(self, image_bytes: bytes) -> List[TextDetection]:
        ...


class StaticDetector:
    """Devuelve un conjunto fijo de detecciones, p. ej. cargadas de un volcado previo."""

    def __init__(self, detections: Sequence[TextDetection]) -> None:
        self.detections = list(detections)

    def detect(self, image_bytes: bytes) -> List[TextDetection]:
        return list(self.detections)


class TesseractDetector:
    """
    Ejecuta Tesseract vía pytesseract y lee su salida hOCR.

    La geometría de las cajas se expresa como fracción del tamaño de la imagen enviada.
    """

    def __init__(self, *, lang: str = "eng", psm: int = 6, oem: int = 3) -> None:
        self.lang = lang
        self.psm = psm
        self.oem = oem

    def detect(self, image_bytes: bytes) -> List[TextDetection]:
        try:
            from PIL import Image
        except ImportError as exc:
            raise RuntimeError("Pillow es requerido para ejecutar OCR.") from exc

        try:
            import pytesseract
        except ImportError as exc:
            raise RuntimeError("pytesseract es requerido para ejecutar OCR.") from exc

        image = Image.open(io.BytesIO(image_bytes))
        custom_config = f"--oem {self.oem} --psm {self.psm} -c tessedit_create_hocr=1"
        log.debug("Ejecutando Tesseract (%s) sobre imagen %dx%d", custom_config, image.width, image.height)
        hocr_bytes = pytesseract.image_to_pdf_or_hocr(
            image, extension="hocr", lang=self.lang, config=custom_config
        )
        detections = parse_hocr(hocr_bytes.decode("utf-8"), width=image.width, height=image.height)
        log.info("Tesseract devolvió %d detecciones.", len(detections))
        return detections
