import pytest

from html_to_pdf.layout import PageGeometry, apply_orientation, css_length_to_cm, resolve_geometry
from html_to_pdf.options import resolve_options


def test_a4_portrait():
    geometry = resolve_geometry(resolve_options({"page_size": "a4"}))
    assert (geometry.width, geometry.height) == ("210mm", "297mm")
    assert geometry.css_size() == "A4 portrait"
    assert not geometry.landscape


def test_letter_landscape_swaps_dimensions():
    geometry = resolve_geometry(resolve_options({"page_size": "letter", "orientation": "landscape"}))
    assert (geometry.width, geometry.height) == ("11in", "8.5in")
    assert geometry.css_size() == "letter landscape"
    assert geometry.landscape


def test_tabloid_uses_explicit_lengths():
    geometry = resolve_geometry(resolve_options({"page_size": "tabloid"}))
    assert geometry.css_size() == "11in 17in"


def test_custom_landscape_is_swapped():
    options = resolve_options({"page_size": "custom", "width": "100mm", "height": "150mm", "orientation": "landscape"})
    geometry = resolve_geometry(options)
    assert (geometry.width, geometry.height) == ("150mm", "100mm")
    assert geometry.css_size() == "150mm 100mm"


def test_custom_without_height_raises():
    with pytest.raises(ValueError):
        resolve_geometry(resolve_options({"page_size": "custom", "width": "100mm"}))


def test_unknown_preset_raises():
    with pytest.raises(ValueError):
        resolve_geometry(resolve_options({"page_size": "b5"}))


def test_orientation_swap_is_not_idempotent():
    base = PageGeometry(width="210mm", height="297mm")
    once = apply_orientation(base, "landscape")
    twice = apply_orientation(once, "landscape")
    assert (once.width, once.height) == ("297mm", "210mm")
    assert (twice.width, twice.height) == ("210mm", "297mm")


@pytest.mark.parametrize("value,expected", [
    ("10mm", 1.0),
    ("2cm", 2.0),
    ("1in", 2.54),
    ("15", 1.5),
])
def test_css_length_to_cm(value, expected):
    assert css_length_to_cm(value) == pytest.approx(expected)


def test_css_length_to_cm_rejects_garbage():
    with pytest.raises(ValueError):
        css_length_to_cm("wide")
