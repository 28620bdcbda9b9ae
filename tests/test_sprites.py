"""Pillow-drawn marker icons, portraits and tooltips."""

from __future__ import annotations

import pytest
from PIL import Image

from fauna_gui.sprites import (
    UNKNOWN_STATUS_COLOR,
    hex_to_rgba,
    portrait_icon,
    status_color,
    status_icon,
    tooltip_image,
)


def test_status_colors():
    assert status_color("critically_endangered") == "#d32f2f"
    assert status_color("least_concern") == "#388e3c"
    assert status_color("data_deficient") == UNKNOWN_STATUS_COLOR
    assert status_color(None) == UNKNOWN_STATUS_COLOR


def test_hex_to_rgba():
    assert hex_to_rgba("#fbc02d") == (251, 192, 45, 255)
    assert hex_to_rgba("000000", alpha=10) == (0, 0, 0, 10)
    with pytest.raises(ValueError):
        hex_to_rgba("#fff")


def test_status_icon_is_a_coloured_disc():
    icon = status_icon("f", "least_concern", size=128)
    assert icon.size == (128, 128)
    assert icon.mode == "RGBA"
    assert icon.getpixel((64, 109)) == hex_to_rgba("#388e3c")
    assert icon.getpixel((0, 0))[3] == 0


def test_threatened_icon_keeps_the_status_fill():
    icon = status_icon("t", "endangered", size=128)
    assert icon.getpixel((64, 109)) == hex_to_rgba("#f57c00")


def test_portrait_is_clipped_to_a_circle():
    photo = Image.new("RGB", (200, 100), (10, 20, 200))
    icon = portrait_icon(photo, "vulnerable", size=64)
    assert icon.size == (64, 64)
    assert icon.getpixel((0, 0))[3] == 0
    assert icon.getpixel((32, 32)) == (10, 20, 200, 255)


def test_tooltip_grows_with_its_text():
    short = tooltip_image("Fox")
    longer = tooltip_image("Snow Leopard (occurrence 2)", "Mongolia")
    assert short.mode == "RGBA"
    assert longer.size[0] > short.size[0]
    assert longer.size[1] > short.size[1]
