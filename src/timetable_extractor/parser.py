# src/timetable_extractor/parser.py
from __future__ import annotations
import json
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup

from .structures import BoundingBox, DetectionKind, TextDetection

BBOX_RE = re.compile(r"bbox (\d+)\s+(\d+)\s+(\d+)\s+(\d+)")

def parse_bbox(title_attr: str) -> Optional[Tuple[int, int, int, int]]:
    if not title_attr:
        return None
    m = BBOX_RE.search(title_attr)
    if not m:
        return None
    x1, y1, x2, y2 = map(int, m.groups())
    return x1, y1, x2, y2

def _load_soup(text: str) -> BeautifulSoup:
    """
    Intenta XML (lxml-xml) y, si no hay nodos HOCR, fallback a HTML (lxml).
    """
    soup_xml = BeautifulSoup(text, "lxml-xml")
    if soup_xml.find(class_=lambda c: c and "ocr_page" in c):
        return soup_xml
    return BeautifulSoup(text, "lxml")

def _fractional(bb: Tuple[int, int, int, int], width: int, height: int) -> BoundingBox:
    x1, y1, x2, y2 = bb
    return BoundingBox(
        left=x1 / width,
        top=y1 / height,
        width=(x2 - x1) / width,
        height=(y2 - y1) / height,
    )

def parse_hocr(hocr: str, width: Optional[int] = None, height: Optional[int] = None) -> List[TextDetection]:
    """
    Convierte un documento hOCR de una página en detecciones con cajas fraccionarias.

    Las palabras (``ocrx_word``) pasan a detecciones WORD y las líneas (``ocr_line``)
    a LINE. El tamaño de página sale del bbox de ``ocr_page`` salvo que se
    indique explícitamente.
    """
    soup = _load_soup(hocr)
    page = soup.find(class_=lambda c: c and "ocr_page" in c)
    if page is None:
        return []

    if width is None or height is None:
        pb = parse_bbox(page.get("title", ""))
        if not pb:
            raise ValueError("hOCR page has no bbox and no image size was given.")
        width, height = pb[2] - pb[0], pb[3] - pb[1]

    detections: List[TextDetection] = []
    for kind, cls in ((DetectionKind.LINE, "ocr_line"), (DetectionKind.WORD, "ocrx_word")):
        for node in page.find_all(class_=lambda c, cls=cls: c and cls in c):
            bb = parse_bbox(node.get("title", ""))
            if not bb:
                continue
            text = " ".join((node.get_text() or "").split())
            if not text:
                continue
            detections.append(TextDetection(text=text, kind=kind, bounding_box=_fractional(bb, width, height)))
    return detections

def detections_from_dict(doc: Dict[str, Any]) -> List[TextDetection]:
    """Lee el formato ``{"TextDetections": [...]}`` de los volcados de depuración."""
    detections: List[TextDetection] = []
    for d in doc.get("TextDetections", []):
        box = (d.get("Geometry") or {}).get("BoundingBox") or {}
        kind = d.get("Type")
        if kind is None or "DetectedText" not in d:
            continue
        detections.append(TextDetection(
            text=d["DetectedText"],
            kind=DetectionKind(kind) if kind in DetectionKind.__members__ else kind,
            bounding_box=BoundingBox(
                left=float(box.get("Left", 0.0)),
                top=float(box.get("Top", 0.0)),
                width=float(box.get("Width", 0.0)),
                height=float(box.get("Height", 0.0)),
            ),
        ))
    return detections

def detections_to_dict(detections: Sequence[TextDetection]) -> Dict[str, Any]:
    out = []
    for d in detections:
        box = d.bounding_box
        out.append({
            "DetectedText": d.text,
            "Type": d.kind.value if isinstance(d.kind, DetectionKind) else str(d.kind),
            "Geometry": {"BoundingBox": {
                "Left": box.left, "Top": box.top, "Width": box.width, "Height": box.height,
            }},
        })
    return {"TextDetections": out}

def detections_from_json(path: str) -> List[TextDetection]:
    with open(path, "r", encoding="utf-8") as f:
        return detections_from_dict(json.load(f))

def detections_to_json(detections: Sequence[TextDetection], path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(detections_to_dict(detections), f, indent=2)
