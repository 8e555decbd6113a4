# src/timetable_extractor/dates.py
from __future__ import annotations
from datetime import date, datetime
import re

from .errors import TimeParseFailure, UnrecognizedDateFormat

DATE_FORMAT = "%d%m%Y"
DATE_KEY_RE = re.compile(r"[0-9]{8}")
TIME_LAYOUTS = (
    (re.compile(r"[0-9]{2}\.[0-9]{2}"), DATE_FORMAT + "%H.%M"),
    (re.compile(r"[0-9]{4}"), DATE_FORMAT + "%H%M"),
)

PRETTY_DATE = "%d/%m"
PRETTY_TIME = "%H:%M"

def parse_date(text: str) -> date:
    """Interpreta una fecha día-mes-año leída por OCR.

    Formas aceptadas, según la longitud:
      - 9:  un separador en el índice 4 (``0501-2023``)
      - 10: separadores en 2 y 5 (``05-01-2023``)
      - 11: un ``1/`` duplicado por un dígito partido; el primer ``1/`` pierde
        la barra y se reintenta la forma de 10 caracteres.
    Tras quitar separadores deben quedar exactamente 8 dígitos.
    """
    n = len(text)
    if n == 9:
        clean = text[:2] + text[2:4] + text[5:]
    elif n == 10:
        clean = text[:2] + text[3:5] + text[6:]
    elif n == 11:
        undup = text.replace("1/", "1", 1)
        if len(undup) == 10:
            return parse_date(undup)
        raise UnrecognizedDateFormat(text)
    else:
        raise UnrecognizedDateFormat(text)

    if not DATE_KEY_RE.fullmatch(clean):
        raise UnrecognizedDateFormat(text)
    try:
        return datetime.strptime(clean, DATE_FORMAT).date()
    except ValueError as exc:
        raise UnrecognizedDateFormat(text, reason="failed to parse date") from exc

def format_date_key(day: date) -> str:
    return day.strftime(DATE_FORMAT)

def parse_time(date_key: str, text: str) -> datetime:
    """Combina una clave ``DDMMYYYY`` con ``HH.MM`` o ``HHMM`` (dos dígitos por campo)."""
    if DATE_KEY_RE.fullmatch(date_key):
        for pattern, fmt in TIME_LAYOUTS:
            if not pattern.fullmatch(text):
                continue
            try:
                return datetime.strptime(date_key + text, fmt)
            except ValueError:
                continue
    raise TimeParseFailure(date_key, text)
