"""
HTML to PDF converter package.
Converts emitted HTML documents to paginated PDF with optional cover and table of contents.

MIT License - Copyright (c) 2025 HTML to PDF Converter
"""

__version__ = "1.0.0"

from .backend import PlaywrightBackend, PrintSettings, RenderSession, RenderingBackend
from .cancellation import CancellationToken
from .config import Config, get_user_config_dir, parse_margin_shorthand
from .converter import (
    ConversionResult,
    ConversionStatus,
    HtmlToPdfConverter,
    ProgressEvent,
    ResultAssembler,
    create_converter,
)
from .dependencies import DependencyChecker, check_dependencies
from .emitter import DirectoryEmitter, DocumentEmitter, EmitResult, StaticEmitter
from .errors import ConversionError, ErrorCode
from .options import (
    ConversionOptions,
    CoverConfig,
    MarginConfig,
    TOCConfig,
    ValidationResult,
    resolve_options,
    validate_options,
)

__all__ = [
    "HtmlToPdfConverter",
    "create_converter",
    "ConversionResult",
    "ConversionStatus",
    "ProgressEvent",
    "ResultAssembler",
    "CancellationToken",
    "ConversionOptions",
    "CoverConfig",
    "MarginConfig",
    "TOCConfig",
    "ValidationResult",
    "resolve_options",
    "validate_options",
    "ConversionError",
    "ErrorCode",
    "RenderingBackend",
    "RenderSession",
    "PrintSettings",
    "PlaywrightBackend",
    "DocumentEmitter",
    "DirectoryEmitter",
    "StaticEmitter",
    "EmitResult",
    "Config",
    "get_user_config_dir",
    "parse_margin_shorthand",
    "DependencyChecker",
    "check_dependencies",
]
