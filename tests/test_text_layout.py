from PIL import Image, ImageDraw

from modules.geometry import BoundingBox, Position
from modules.text_layout import (
    company_font_size,
    position_company_text,
    wrap_lines,
    wrap_text_centered,
)
from utils.image_utils import load_font


class RecordingDraw:
    """Stands in for ImageDraw: 10px per character, records text calls."""

    def __init__(self):
        self.calls = []

    def textlength(self, text, font=None):
        return len(text) * 10

    def text(self, xy, text, **kwargs):
        self.calls.append((xy, text, kwargs))


def test_wrap_lines_greedy() -> None:
    assert wrap_lines("aa bb cc", 6, len) == ["aa bb", "cc"]
    assert wrap_lines("one", 100, len) == ["one"]


def test_wrap_lines_breaks_when_width_reaches_max() -> None:
    assert wrap_lines("aa bb", 5, len) == ["aa", "bb"]


def test_wrap_lines_keeps_long_word_on_its_own_line() -> None:
    assert wrap_lines("supercalifragilistic ok", 3, len) == ["supercalifragilistic", "ok"]


def test_wrap_lines_empty_text() -> None:
    assert wrap_lines("", 100, len) == []


def test_wrap_text_centered_positions_lines_around_y() -> None:
    draw = RecordingDraw()
    lines = wrap_text_centered(draw, "20% OFF today", 200, 100, 80, 20, font=None, fill="white")

    assert lines == ["20% OFF", "today"]
    ys = [xy[1] for xy, _, _ in draw.calls]
    xs = {xy[0] for xy, _, _ in draw.calls}
    assert ys == [90, 110]
    assert xs == {200}
    assert all(kwargs["anchor"] == "mm" for _, _, kwargs in draw.calls)


def test_wrap_text_centered_draws_on_real_image() -> None:
    image = Image.new("RGBA", (200, 200), (0, 0, 0, 255))
    draw = ImageDraw.Draw(image)
    lines = wrap_text_centered(draw, "Big Sale", 100, 100, 150, 26, load_font(24), (255, 255, 255, 255))

    assert lines
    assert image.getbbox() is not None
    assert max(image.crop((40, 70, 160, 130)).convert("L").getdata()) > 128


def test_company_font_size() -> None:
    assert company_font_size(None, 1000) == 30
    assert company_font_size(None, 200) == 16
    assert company_font_size(24, 1000) == 24
    assert company_font_size(10, 1000) == 16


CANVAS = (800, 600)
TEXT = (100, 30)
LOGO = BoundingBox(300, 300, 80, 40)


def _place(logo, mode, alignment=None):
    return position_company_text(logo, mode, alignment, CANVAS, TEXT, padding=20, spacing=10)


def test_company_text_defaults_to_bottom_left() -> None:
    assert _place(None, "below") == Position(20, 550)
    assert _place(LOGO, None) == Position(20, 550)


def test_company_text_above_and_below_follow_alignment() -> None:
    assert _place(LOGO, "below", "center") == Position(290, 350)
    assert _place(LOGO, "below", "left") == Position(300, 350)
    assert _place(LOGO, "above", "right") == Position(280, 260)


def test_company_text_left_and_right_center_vertically() -> None:
    assert _place(LOGO, "left", "center") == Position(190, 305)
    assert _place(LOGO, "right") == Position(390, 305)


def test_company_text_is_clamped_into_canvas() -> None:
    corner_logo = BoundingBox(10, 10, 80, 40)
    assert _place(corner_logo, "above") == Position(20, 20)

    right_logo = BoundingBox(700, 560, 80, 40)
    origin = _place(right_logo, "right")
    assert origin.x == CANVAS[0] - TEXT[0] - 20
    assert origin.y == CANVAS[1] - TEXT[1] - 20
