import pytest

from halkit.display_types import (
    HSIC,
    ColorBackend,
    DisplayMode,
    DispMode,
    FloatRange,
    HSICRanges,
    Range,
    is_non_zero,
)


def _valid_ranges(**overrides):
    values = dict(
        hue=Range(-180, 180, 1),
        saturation=FloatRange(-50.0, 50.0, 1.0),
        intensity=FloatRange(-50.0, 50.0, 1.0),
        contrast=FloatRange(-50.0, 50.0, 1.0),
        saturation_threshold=FloatRange(0.0, 10.0, 1.0),
    )
    values.update(overrides)
    return HSICRanges(**values)


def test_zero_range_is_zero():
    assert is_non_zero(Range(0, 0)) is False
    assert is_non_zero(FloatRange(0.0, 0.0)) is False


@pytest.mark.parametrize(
    "r",
    [Range(0, 5), Range(-5, 0), FloatRange(-1.0, 0.0), FloatRange(0.0, 0.5)],
)
def test_one_non_zero_bound_is_non_zero(r):
    assert is_non_zero(r) is True


def test_valid_ranges():
    assert _valid_ranges().is_valid() is True


def test_saturation_threshold_does_not_affect_validity():
    assert _valid_ranges(saturation_threshold=FloatRange()).is_valid() is True


@pytest.mark.parametrize("name", ["saturation", "intensity", "contrast"])
def test_zero_float_component_makes_ranges_invalid(name):
    assert _valid_ranges(**{name: FloatRange()}).is_valid() is False


def test_zero_hue_makes_ranges_invalid():
    assert _valid_ranges(hue=Range()).is_valid() is False


def test_default_ranges_are_invalid():
    assert HSICRanges().is_valid() is False


def test_modes_default_to_invalid_id():
    assert DispMode().id == -1
    assert DisplayMode().id == -1


def test_hsic_equality():
    assert HSIC(1, 2.0, 3.0, 4.0, 5.0) == HSIC(1, 2.0, 3.0, 4.0, 5.0)
    assert HSIC(1, 2.0, 3.0, 4.0, 5.0) != HSIC()


def test_backend_interface_is_abstract():
    with pytest.raises(TypeError):
        ColorBackend()