#!/usr/bin/env python3
"""
Page geometry resolution for print output.

MIT License - Copyright (c) 2025 HTML to PDF Converter
"""

import re
from dataclasses import dataclass, replace
from typing import Optional

from .options import CUSTOM_PAGE_SIZE, ConversionOptions


# Portrait width x height of each preset
PAGE_SIZE_TABLE = {
    "a3": ("297mm", "420mm"),
    "a4": ("210mm", "297mm"),
    "a5": ("148mm", "210mm"),
    "letter": ("8.5in", "11in"),
    "legal": ("8.5in", "14in"),
    "tabloid": ("11in", "17in"),
}

# tabloid has no CSS keyword
CSS_PAGE_KEYWORDS = {
    "a3": "A3",
    "a4": "A4",
    "a5": "A5",
    "letter": "letter",
    "legal": "legal",
}

_LENGTH_PATTERN = re.compile(r'^(-?\d+(?:\.\d+)?)\s*(cm|in|mm|pt|px)?$')


@dataclass(frozen=True)
class PageGeometry:
    width: str
    height: str
    orientation: str = "portrait"
    preset: Optional[str] = None

    @property
    def landscape(self) -> bool:
        return self.orientation == "landscape"

    def css_size(self) -> str:
        """Value for the @page `size` descriptor."""
        keyword = CSS_PAGE_KEYWORDS.get(self.preset or "")
        if keyword:
            return f"{keyword} {self.orientation}"
        # explicit lengths are already oriented
        return f"{self.width} {self.height}"


def apply_orientation(geometry: PageGeometry, orientation: str) -> PageGeometry:
    """Swap width and height for landscape.

    Each call swaps again, so this must be applied once per resolution.
    """
    if orientation == "landscape":
        return replace(geometry, width=geometry.height, height=geometry.width, orientation=orientation)
    return replace(geometry, orientation=orientation)


def resolve_geometry(options: ConversionOptions) -> PageGeometry:
    """Resolve the print surface from a preset or custom dimensions.

    Custom width/height pairs are read as portrait and swapped afterwards.
    """
    if options.page_size == CUSTOM_PAGE_SIZE:
        if not options.width or not options.height:
            raise ValueError("Custom page size requires both width and height")
        base = PageGeometry(width=options.width, height=options.height)
    else:
        try:
            width, height = PAGE_SIZE_TABLE[options.page_size]
        except KeyError:
            raise ValueError(f"Unknown page size: {options.page_size}") from None
        base = PageGeometry(width=width, height=height, preset=options.page_size)
    return apply_orientation(base, options.orientation)


def css_length_to_cm(value: str, default_unit: str = "mm") -> float:
    """Convert a CSS length string to centimeters."""
    match = _LENGTH_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid length: '{value}'")

    value_str, unit = match.groups()
    number = float(value_str)
    unit = unit or default_unit

    if unit == 'cm':
        return number
    elif unit == 'in':
        return number * 2.54
    elif unit == 'mm':
        return number / 10
    elif unit == 'pt':
        return number * 0.0352778
    else:  # 'px'
        return number * 0.0264583
