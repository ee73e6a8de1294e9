#!/usr/bin/env python3
"""
Approximate page counting.

The count is a best-effort estimate for display; it is not authoritative.

MIT License - Copyright (c) 2025 HTML to PDF Converter
"""

import math
import re
from typing import Optional

# A4 height at 96 dpi
NOMINAL_PAGE_HEIGHT_PX = 1123

# /Type /Page but not /Type /Pages
_PAGE_MARKER = re.compile(rb'/Type\s*/Page(?![s\w])')


class PageCounter:
    def __init__(self, nominal_page_height: float = NOMINAL_PAGE_HEIGHT_PX):
        self.nominal_page_height = nominal_page_height

    def count_markers(self, pdf_bytes: bytes) -> int:
        return len(_PAGE_MARKER.findall(pdf_bytes or b""))

    def estimate_from_height(self, content_height: Optional[float]) -> int:
        if not content_height or content_height <= 0:
            return 1
        return max(1, math.ceil(content_height / self.nominal_page_height))

    def count(self, pdf_bytes: bytes, content_height: Optional[float] = None) -> int:
        """Page markers in the output when present, else content height / nominal page height.

        Always at least 1.
        """
        markers = self.count_markers(pdf_bytes)
        if markers:
            return markers
        return self.estimate_from_height(content_height)
