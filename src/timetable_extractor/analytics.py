# src/timetable_extractor/analytics.py
from __future__ import annotations
import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from .dates import PRETTY_DATE, PRETTY_TIME
from .errors import AmbiguousEntry
from .structures import Entry, Report

log = logging.getLogger(__name__)

ROUNDING = timedelta(minutes=15)
DEFAULT_IN = timedelta(hours=9)
DEFAULT_OUT = timedelta(hours=17)

UNCLOSED_DAY = "UnclosedDay"
MISSING_REPORT = "Vacation/Una"

def round_duration(d: timedelta, step: timedelta = ROUNDING) -> timedelta:
    """Round to the nearest multiple of ``step``; halfway values round up."""
    q, r = divmod(d, step)
    if r + r >= step:
        q += 1
    return step * q

def average(entries: Iterable[Entry],
            extractor: Callable[[Entry], Optional[datetime]],
            default: timedelta) -> timedelta:
    """Hora media del día de los valores extraídos, redondeada a 15 minutos."""
    total = timedelta()
    count = 0
    for e in entries:
        v = extractor(e)
        if v is None:
            continue
        total += timedelta(hours=v.hour, minutes=v.minute)
        count += 1

    if count == 0:
        return default
    return round_duration(total / count)

def average_in(entries: Iterable[Entry]) -> timedelta:
    return average(entries, lambda e: e.in_time, DEFAULT_IN)

def average_out(entries: Iterable[Entry]) -> timedelta:
    return average(entries, lambda e: e.out_time, DEFAULT_OUT)

def _pretty_date(entry: Entry) -> str:
    return entry.date.strftime(PRETTY_DATE) if entry.date else "??/??"

def fix_entry(entry: Entry, avg_in: timedelta, avg_out: timedelta) -> str:
    """Suggest the missing half of a partially recorded day."""
    if entry.in_time is None and entry.out_time is None:
        raise AmbiguousEntry("both times are empty")
    if entry.in_time is not None and entry.out_time is not None:
        raise AmbiguousEntry("both times are non-empty")
    if entry.date is None:
        raise AmbiguousEntry("entry has no date")

    midnight = datetime.combine(entry.date, datetime.min.time())
    if entry.in_time is not None:
        pin = entry.in_time.strftime(PRETTY_TIME)
        pout = (midnight + avg_out).strftime(PRETTY_TIME)
    else:
        pin = (midnight + avg_in).strftime(PRETTY_TIME)
        pout = entry.out_time.strftime(PRETTY_TIME)

    return f"{_pretty_date(entry)}: arrived at {pin}, left at {pout}"

def build_report(entries: List[Entry]) -> Report:
    avg_in = average_in(entries)
    avg_out = average_out(entries)
    log.debug("Promedios: entrada %s, salida %s.", avg_in, avg_out)

    report = Report()
    for e in entries:
        if not e.activity:
            continue
        pdate = _pretty_date(e)
        if e.activity == UNCLOSED_DAY:
            report.problems.append(f"{pdate}: Unclosed day")
            try:
                report.fixes.append(fix_entry(e, avg_in, avg_out))
            except AmbiguousEntry as exc:
                log.warning("No se pudo generar la corrección para %s: %s", pdate, exc)
        elif e.activity == MISSING_REPORT:
            report.problems.append(f"{pdate}: Missing report")
        else:
            report.problems.append(f"{pdate}: {e.activity}")
    return report

def analytics_text(report: Report) -> str:
    """Resumen en texto plano del reporte, listo para el cuerpo de una respuesta."""
    if not report.problems:
        return "things look ok."

    lines = ["Looks like there's a few non-standard days:"]
    lines += [f"  - {p}" for p in report.problems]
    if report.fixes:
        lines += ["", "Here's a quick reply for your partial days:", "", "-" * 15, "", "Hey,", ""]
        lines += report.fixes
        lines += ["", "Thanks", "", "-" * 15]
    return "\n".join(lines) + "\n"
