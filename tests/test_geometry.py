"""Tests for fit-mode geometry."""
from __future__ import annotations

import pytest

from snapframe.errors import InvalidGeometryError
from snapframe.imaging.geometry import (
    FitMode,
    ObjectTransform,
    Point,
    Rect,
    clamp_scale,
    fit_rect,
    match_aspect,
)

SOURCES = [(1000, 1000), (1920, 1080), (300, 900), (7, 3), (1, 1000)]
TARGETS = [(800, 400), (400, 800), (500, 500), (123, 77)]


@pytest.mark.parametrize("source", SOURCES)
@pytest.mark.parametrize("target", TARGETS)
def test_contain_fits_inside_and_touches_one_edge(source, target):
    rect = fit_rect(*source, *target, FitMode.CONTAIN)
    tw, th = target
    assert rect.width <= tw + 1e-9 and rect.height <= th + 1e-9
    assert rect.width == pytest.approx(tw) or rect.height == pytest.approx(th)


@pytest.mark.parametrize("source", SOURCES)
@pytest.mark.parametrize("target", TARGETS)
def test_cover_fills_and_touches_one_edge(source, target):
    rect = fit_rect(*source, *target, FitMode.COVER)
    tw, th = target
    assert rect.width >= tw - 1e-9 and rect.height >= th - 1e-9
    assert rect.width == pytest.approx(tw) or rect.height == pytest.approx(th)


@pytest.mark.parametrize("source", SOURCES)
def test_stretch_matches_target_exactly(source):
    rect = fit_rect(*source, 640, 480, FitMode.STRETCH)
    assert (rect.width, rect.height) == (640, 480)


@pytest.mark.parametrize("mode", list(FitMode))
def test_default_position_is_centred(mode):
    rect = fit_rect(1920, 1080, 800, 400, mode)
    assert rect.x == pytest.approx((800 - rect.width) / 2)
    assert rect.y == pytest.approx((400 - rect.height) / 2)


def test_square_source_on_wide_target():
    rect = fit_rect(1000, 1000, 800, 400, FitMode.CONTAIN)
    assert rect == Rect(200, 0, 400, 400)


def test_scale_and_explicit_position():
    transform = ObjectTransform(scale=0.5, position=Point(-10, 25))
    rect = fit_rect(1000, 1000, 800, 400, "contain", transform)
    assert rect == Rect(-10, 25, 200, 200)


def test_scaled_object_stays_centred():
    rect = fit_rect(100, 100, 100, 100, FitMode.CONTAIN, ObjectTransform(scale=2))
    assert rect == Rect(-50, -50, 200, 200)


def test_equal_aspect_needs_no_special_case():
    assert fit_rect(400, 200, 800, 400, FitMode.CONTAIN) == fit_rect(400, 200, 800, 400, FitMode.COVER)


def test_zero_height_source_is_rejected():
    with pytest.raises(InvalidGeometryError):
        fit_rect(100, 0, 800, 400)


@pytest.mark.parametrize("mode", list(FitMode))
@pytest.mark.parametrize("source", [(0, 100), (-5, 100), (100, 0)])
def test_degenerate_source_is_rejected_in_every_mode(source, mode):
    with pytest.raises(InvalidGeometryError):
        fit_rect(*source, 200, 100, mode)


@pytest.mark.parametrize("target", [(0, 400), (800, 0), (-1, 10)])
def test_degenerate_target_is_rejected(target):
    with pytest.raises(InvalidGeometryError):
        fit_rect(100, 100, *target)


def test_negative_scale_is_rejected():
    with pytest.raises(InvalidGeometryError):
        ObjectTransform(scale=-0.1)


def test_fit_mode_parse():
    assert FitMode.parse("COVER") is FitMode.COVER
    with pytest.raises(InvalidGeometryError):
        FitMode.parse("fill")


def test_rect_rounding_and_intersection():
    rect = Rect(10.4, 9.6, 20.5, 10.2)
    assert rect.to_box() == (10, 10, 30, 20)
    assert Rect(0, 0, 10, 10).intersection(Rect(5, 5, 10, 10)) == Rect(5, 5, 5, 5)
    assert Rect(0, 0, 10, 10).intersection(Rect(10, 0, 5, 5)) is None


def test_clamp_scale_and_match_aspect():
    assert clamp_scale(0.01) == 0.1
    assert clamp_scale(5) == 3.0
    assert clamp_scale(5, 0.5, 2.0) == 2.0
    assert match_aspect(16 / 9, width=1920) == (1920, 1080)
    assert match_aspect(0.5, height=400) == (200, 400)
    with pytest.raises(ValueError):
        match_aspect(1.0, width=10, height=10)
