import io

import numpy as np
import pytest
from PIL import Image

from timetable_extractor.debug import DirectoryDebugSink
from timetable_extractor.errors import GridNotFound, ScanFailed
from timetable_extractor.main import (
    NO_ANALYTICS,
    analytics_string,
    analyze,
    load_pixels,
    read_entries,
)
from timetable_extractor.ocr_utils import StaticDetector
from timetable_extractor.parser import detections_from_json

from conftest import ACTIVITY_X, DATE_X, IN_X, OUT_X, ROW_Y, draw_table, word


class RecordingDetector(StaticDetector):
    def __init__(self, detections):
        super().__init__(detections)
        self.seen = []

    def detect(self, image_bytes):
        self.seen.append(image_bytes)
        return super().detect(image_bytes)


def _normal_row(y, day):
    return [word(day, DATE_X, y), word("09.00", IN_X, y), word("17.10", OUT_X, y)]


def test_unclosed_day_yields_one_problem_and_one_fix(table_pixels):
    r0, r1 = ROW_Y
    detector = RecordingDetector([
        word("05/01/2023", DATE_X, r0),
        word("UnclosedDay", ACTIVITY_X, r0),
        word("08.47", IN_X, r0),
        *_normal_row(r1, "06/01/2023"),
    ])

    report = analyze(table_pixels, detector, message_id="msg-1")

    assert report.problems == ["05/01: Unclosed day"]
    assert report.fixes == ["05/01: arrived at 08:47, left at 17:15"]
    # OCR receives the cleaned crop, not the original image.
    assert Image.open(io.BytesIO(detector.seen[0])).size == (297, 60)


def test_missing_report_yields_problem_without_fix(table_pixels):
    r0, r1 = ROW_Y
    detector = StaticDetector([
        word("05-01-2023", DATE_X, r0),
        word("Vacation/Una", ACTIVITY_X, r0),
        *_normal_row(r1, "06-01-2023"),
    ])

    report = analyze(table_pixels, detector, message_id="msg-2")

    assert report.problems == ["05/01: Missing report"]
    assert report.fixes == []


def test_scan_failure_dumps_debug_artifacts(table_pixels, tmp_path):
    sink = DirectoryDebugSink(str(tmp_path / "debug"))
    bad = word("5/1/23", DATE_X, ROW_Y[0])

    with pytest.raises(ScanFailed) as info:
        read_entries(table_pixels, StaticDetector([bad]), message_id="msg-3", debug_sink=sink)

    assert "msg-3" in str(info.value)
    assert sink.image_path("msg-3").read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"
    dumped = detections_from_json(str(sink.ocr_path("msg-3")))
    assert [d.text for d in dumped] == ["5/1/23"]


def test_grid_failures_propagate_without_ocr():
    detector = RecordingDetector([])
    blank = np.full((40, 40, 4), 255, dtype=np.uint8)

    with pytest.raises(GridNotFound):
        analyze(blank, detector, message_id="msg-4")
    assert detector.seen == []


def test_analytics_string_degrades_to_placeholder():
    blank = np.full((40, 40, 4), 255, dtype=np.uint8)
    assert analytics_string(blank, StaticDetector([]), message_id="msg-5") == NO_ANALYTICS


def test_analytics_string_reports_ok(table_pixels):
    detector = StaticDetector(_normal_row(ROW_Y[0], "05/01/2023"))
    assert analytics_string(table_pixels, detector, message_id="msg-6") == "things look ok."


def test_load_pixels_from_png_bytes_and_path(tmp_path):
    buf = io.BytesIO()
    Image.fromarray(draw_table()).save(buf, format="PNG")
    path = tmp_path / "table.png"
    path.write_bytes(buf.getvalue())

    from_bytes = load_pixels(buf.getvalue())
    from_path = load_pixels(path)

    assert from_bytes.shape == (200, 400, 4)
    assert np.array_equal(from_bytes, from_path)
    assert np.array_equal(from_bytes, draw_table())


def test_analytics_string_honours_grid_config():
    from timetable_extractor.grid_detector import GridConfig

    pixels = draw_table(color=(12, 12, 12, 255))
    detector = StaticDetector(_normal_row(ROW_Y[0], "05/01/2023"))

    assert analytics_string(pixels, detector, message_id="msg-7") == NO_ANALYTICS
    assert analytics_string(pixels, detector, message_id="msg-7",
                            config=GridConfig(tolerance=16)) == "things look ok."


def test_read_entries_reuses_primed_result(table_pixels):
    from timetable_extractor.main import prime

    primed = prime(table_pixels)
    detector = RecordingDetector([word("05/01/2023", DATE_X, ROW_Y[0])])
    blank = np.full((40, 40, 4), 255, dtype=np.uint8)

    # The image argument is not looked at when a primed result is supplied.
    entries = read_entries(blank, detector, message_id="msg-8", primed=primed)

    assert detector.seen == [primed.data]
    assert len(entries) == 2
