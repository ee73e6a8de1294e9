#!/usr/bin/env python3
"""
Cooperative cancellation for in-flight conversions.

MIT License - Copyright (c) 2025 HTML to PDF Converter
"""

from typing import Optional

from .errors import ConversionError, ErrorCode


class CancellationToken:
    """Checked by the converter at every stage boundary."""

    def __init__(self):
        self._cancelled = False
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: Optional[str] = None) -> None:
        self._cancelled = True
        self.reason = reason

    def raise_if_cancelled(self, stage: str = "") -> None:
        if self._cancelled:
            where = f" during {stage}" if stage else ""
            message = f"Conversion cancelled{where}"
            if self.reason:
                message += f": {self.reason}"
            raise ConversionError(ErrorCode.CANCELLED, message)


def check_cancelled(token: Optional[CancellationToken], stage: str = "") -> None:
    if token is not None:
        token.raise_if_cancelled(stage)
