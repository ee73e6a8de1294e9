#!/usr/bin/env python3
"""
Error types for the HTML to PDF converter.

MIT License - Copyright (c) 2025 HTML to PDF Converter
"""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Closed set of failure sites reported in a ConversionResult."""

    BACKEND_UNAVAILABLE = "backend-capability-unavailable"
    SESSION_LAUNCH_FAILED = "session-launch-failed"
    DOCUMENT_LOAD_TIMEOUT = "document-load-timeout"
    PRINT_GENERATION_FAILED = "print-generation-failed"
    FILE_WRITE_FAILED = "file-write-failed"
    INVALID_PAGE_SIZE = "invalid-page-size"
    INVALID_MARGIN = "invalid-margin"
    COVER_GENERATION_FAILED = "cover-generation-failed"
    TOC_GENERATION_FAILED = "toc-generation-failed"
    DOCUMENT_MISSING = "document-missing"
    EMIT_FAILED = "emit-failed"
    CANCELLED = "cancelled"


class ConversionError(Exception):
    """A conversion failure with a structured code and optional cause."""

    def __init__(self, code: ErrorCode, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.cause = cause

    def __repr__(self) -> str:
        return f"ConversionError(code={self.code.value!r}, message={self.message!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConversionError):
            return NotImplemented
        return self.code == other.code and self.message == other.message

    def __hash__(self) -> int:
        return hash((self.code, self.message))
