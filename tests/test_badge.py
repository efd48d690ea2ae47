import random

import pytest

from modules.badge import (
    BadgeGeometry,
    estimate_logo_box,
    estimate_obstacles,
    estimate_text_box,
    resolve_badge_color,
    select_promotion,
)
from modules.color import hex_to_hsl, string_to_deterministic_hex
from modules.geometry import BoundingBox
from modules.schemas import PromotionalComponent, TemplateSettings


def test_select_promotion_takes_first_match() -> None:
    components = [
        PromotionalComponent(id="1", name="Latte", category="Product"),
        PromotionalComponent(id="2", name="Weekend", category="promotion"),
        PromotionalComponent(id="3", name="50% off"),
    ]
    assert select_promotion(components).id == "2"
    assert select_promotion(components[:1]) is None
    assert select_promotion([]) is None
    assert select_promotion(None) is None


def _box(box: BoundingBox):
    return (box.x, box.y, box.w, box.h)


def _hue_delta(a: str, b: str) -> float:
    return (hex_to_hsl(a).h - hex_to_hsl(b).h) % 360


def test_explicit_hex_is_hue_shifted() -> None:
    for seed in range(50):
        color = resolve_badge_color(PromotionalComponent(color="#3366CC"), random.Random(seed))
        assert color != "#3366cc"
        assert 11 <= _hue_delta(color, "#3366cc") <= 32


def test_arbitrary_color_string_is_hashed_deterministically() -> None:
    component = PromotionalComponent(color="sunset orange")
    first = resolve_badge_color(component, random.Random(3))
    second = resolve_badge_color(component, random.Random(3))
    assert first == second

    base = string_to_deterministic_hex("sunset orange")
    if hex_to_hsl(base).s > 0.2:
        assert 11 <= _hue_delta(first, base) <= 32


def test_missing_color_draws_from_palette() -> None:
    colors = {resolve_badge_color(PromotionalComponent(), random.Random(seed)) for seed in range(30)}
    assert len(colors) > 1
    assert all(c.startswith("#") and len(c) == 7 for c in colors)


def test_badge_geometry() -> None:
    geometry = BadgeGeometry.for_canvas((1000, 500))
    assert geometry.inner == pytest.approx(90)
    assert geometry.diameter == pytest.approx(112.5)
    assert geometry.radius == pytest.approx(56.25)
    assert geometry.padding == pytest.approx(20)

    assert BadgeGeometry.for_canvas((300, 300)).padding == 12


def test_estimated_logo_box() -> None:
    template = TemplateSettings(logoPreview="logo.png", selectedPosition="top-right")
    assert _box(estimate_logo_box(template, (1000, 500))) == pytest.approx((920, 20, 60, 60))

    assert estimate_logo_box(TemplateSettings(logoPreview="logo.png"), (1000, 500)) is None


def test_estimated_text_box_uses_character_count() -> None:
    template = TemplateSettings(companyText="Acme", selectedPosition="bottom-right")
    assert _box(estimate_text_box(template, (1000, 500))) == pytest.approx((884, 456, 96, 28))

    long_text = TemplateSettings(companyText="A" * 100, selectedPosition="top-center", textSize=30)
    box = estimate_text_box(long_text, (1000, 500))
    assert _box(box) == pytest.approx((300, 54, 400, 34))


def test_estimate_obstacles() -> None:
    assert estimate_obstacles(None, (1000, 500)) == []
    assert estimate_obstacles(TemplateSettings(selectedColor="#fff"), (1000, 500)) == []

    both = TemplateSettings(logoPreview="logo.png", companyText="Acme", selectedPosition="top-left")
    assert len(estimate_obstacles(both, (1000, 500))) == 2
