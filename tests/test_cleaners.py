import io

import numpy as np
from PIL import Image

from timetable_extractor.cleaners import crop_to_grid, erase_dividers, render
from timetable_extractor.grid_detector import detect_grid
from timetable_extractor.main import prime
from timetable_extractor.structures import Col, Row

from conftest import PRIMED_H, PRIMED_W, draw_table


def test_erase_dividers_works_on_a_copy(table_pixels):
    sk = detect_grid(table_pixels)
    before = table_pixels.copy()

    cleaned = erase_dividers(table_pixels, sk)

    assert np.array_equal(table_pixels, before)
    assert (cleaned[10] == 255).all()
    assert (cleaned[40] == 255).all()
    assert (cleaned[:, 100] == 255).all()
    # The bottom line of the last row is outside the crop and is left alone.
    assert (cleaned[70, 0] == [0, 0, 0, 255]).all()


def test_crop_to_grid_spans_first_and_last_boundaries(table_pixels):
    sk = detect_grid(table_pixels)
    assert crop_to_grid(table_pixels, sk).shape[:2] == (60, 297)


def test_render_emits_clean_grayscale_png(table_pixels):
    sk = detect_grid(table_pixels)

    img = Image.open(io.BytesIO(render(table_pixels, sk)))

    assert img.format == "PNG"
    assert img.mode == "L"
    assert img.size == (PRIMED_W, PRIMED_H)
    # Only grid lines were drawn, so nothing but background survives.
    assert np.asarray(img).min() == 255


def test_render_keeps_cell_content():
    pixels = draw_table()
    pixels[20:25, 30:40] = (0, 0, 0, 255)
    sk = detect_grid(pixels)

    arr = np.asarray(Image.open(io.BytesIO(render(pixels, sk))))

    assert arr[12, 30] == 0
    assert arr[0, 30] == 255


def test_prime_rebases_and_reconciles(table_pixels):
    primed = prime(table_pixels)
    sk = primed.skeleton

    assert (sk.width, sk.height) == (PRIMED_W, PRIMED_H)
    assert sk.offset == (-3, -10)
    assert sk.rows == (Row(0, 0, 30), Row(1, 30, 60))
    assert sk.cols == (Col(0, 0, 48), Col(1, 97, 197), Col(2, 197, 247), Col(3, 247, 297))
    assert Image.open(io.BytesIO(primed.data)).size == (sk.width, sk.height)
