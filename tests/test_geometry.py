import pytest

from leggitesto.domain.models import Rectangle, Region
from leggitesto.ocr.geometry import (
    OPTIMAL_GLYPH_HEIGHT,
    DpiScaling,
    GlyphHeightScaling,
    back_project_bounding_box,
    compute_resize_factor,
    relocate,
    scaling_policy,
)


@pytest.mark.parametrize("height", [1, 7.5, 15, 30, 60, 123])
def test_resize_factor_from_glyph_height(height):
    assert compute_resize_factor(scaling_policy(height)) == pytest.approx(30 / height)


def test_optimum_dpi_overrides_glyph_height():
    policy = scaling_policy(15, optimum_dpi=300, actual_dpi=100)
    assert policy == DpiScaling(target_dpi=300, actual_dpi=100)
    assert compute_resize_factor(policy) == pytest.approx(3.0)


def test_glyph_policy_without_dpi():
    assert scaling_policy(20) == GlyphHeightScaling(glyph_height=20)
    assert OPTIMAL_GLYPH_HEIGHT == 30


def test_back_project_unit_scale_adds_padding():
    box = Rectangle(x=10, y=20, w=30, h=40)
    assert back_project_bounding_box(box, 1.0, 1.0) == Rectangle(x=9, y=19, w=33, h=43)


def test_back_project_scenario_with_offset():
    box = Rectangle(x=10, y=5, w=40, h=15)
    projected = back_project_bounding_box(box, 2.0, 2.0, 100, 50)
    assert projected == Rectangle(x=119, y=59, w=83, h=33)


def test_back_project_width_grows_with_scale():
    box = Rectangle(x=0, y=0, w=41, h=10)
    single = back_project_bounding_box(box, 1.5, 1.0)
    double = back_project_bounding_box(box, 3.0, 1.0)
    # padding fisso di 3 px, il resto raddoppia a meno dell'arrotondamento
    assert abs((double.w - 3) - 2 * (single.w - 3)) <= 1


def test_back_project_truncates_fractions():
    box = Rectangle(x=3, y=3, w=3, h=3)
    assert back_project_bounding_box(box, 0.5, 0.5) == Rectangle(x=0, y=0, w=4, h=4)


def test_relocate_inverts_uniform_scale():
    base = Region(x=100, y=200, w=500, h=500, screen_id=1)
    reg = relocate(Rectangle(x=40, y=20, w=60, h=30), base, 2.0)
    assert reg == Region(x=120, y=210, w=31, h=16, screen_id=1)
