#!/usr/bin/env python3
"""
Conversion options: data model, default overlay and validation.

MIT License - Copyright (c) 2025 HTML to PDF Converter
"""

import re
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .console import ConsoleLogger


PAGE_SIZES = ("a3", "a4", "a5", "letter", "legal", "tabloid")
CUSTOM_PAGE_SIZE = "custom"
ORIENTATIONS = ("portrait", "landscape")

# number followed by a unit; unitless values are rejected
CSS_LENGTH_PATTERN = re.compile(r'^\d+(\.\d+)?(mm|cm|in|px|pt)$')

MARGIN_SIDES = ("top", "right", "bottom", "left")


@dataclass(frozen=True)
class MarginConfig:
    top: Optional[str] = None
    right: Optional[str] = None
    bottom: Optional[str] = None
    left: Optional[str] = None

    def items(self):
        return [(side, getattr(self, side)) for side in MARGIN_SIDES]


@dataclass(frozen=True)
class CoverConfig:
    """Cover page settings. `template` may use {{title}}, {{subtitle}},
    {{author}}, {{date}} and {{version}} placeholders."""

    enabled: bool = True
    title: Optional[str] = None
    subtitle: Optional[str] = None
    author: Optional[str] = None
    show_author: bool = True
    show_date: bool = True
    show_version: bool = True
    template: Optional[str] = None


@dataclass(frozen=True)
class TOCConfig:
    enabled: bool = True
    title: str = "Table of Contents"
    max_depth: int = 3
    show_page_numbers: bool = True


@dataclass(frozen=True)
class ConversionOptions:
    """Effective configuration for one conversion."""

    page_size: str = "a4"
    width: Optional[str] = None
    height: Optional[str] = None
    orientation: str = "portrait"
    margin: MarginConfig = field(default_factory=lambda: MarginConfig("15mm", "15mm", "15mm", "15mm"))
    include_cover: bool = True
    include_toc: bool = False
    cover: CoverConfig = field(default_factory=CoverConfig)
    toc: TOCConfig = field(default_factory=TOCConfig)
    print_background: bool = True
    scale: float = 1.0
    wait_ms: int = 500
    load_timeout_ms: int = 30000
    output_path: Optional[str] = None
    on_progress: Optional[Callable[[Any], None]] = None
    display_header_footer: bool = False
    header_template: Optional[str] = None
    footer_template: Optional[str] = None
    generate_outline: bool = False
    theme_id: Optional[str] = None
    viewport_width: int = 1240
    viewport_height: int = 1754
    strict_asset_paths: bool = False

    @property
    def cover_enabled(self) -> bool:
        return self.include_cover and self.cover.enabled

    @property
    def toc_enabled(self) -> bool:
        return self.include_toc and self.toc.enabled


DEFAULT_OPTIONS = ConversionOptions()

_NESTED = {
    "margin": MarginConfig,
    "cover": CoverConfig,
    "toc": TOCConfig,
}


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _merge_nested(base: Any, override: Any) -> Any:
    """Merge a nested options block field by field over its default."""
    if override is None:
        return base
    if isinstance(override, type(base)):
        return override
    if not isinstance(override, Mapping):
        raise TypeError(f"Expected a mapping for {type(base).__name__}, got {type(override).__name__}")
    known = {f.name for f in fields(base)}
    updates = {key: value for key, value in override.items() if key in known and value is not None}
    return replace(base, **updates)


def resolve_options(
    overrides: Union[Mapping[str, Any], ConversionOptions, None] = None,
    defaults: ConversionOptions = DEFAULT_OPTIONS,
    logger: Optional[ConsoleLogger] = None,
) -> ConversionOptions:
    """Overlay caller options onto defaults.

    Nested `margin`, `cover` and `toc` blocks are merged per field rather than
    replaced, so `{"margin": {"top": "20mm"}}` keeps the default side margins.
    The caller's mapping is never modified.

    Args:
        overrides: Partial options mapping, a complete ConversionOptions, or None
        defaults: Options to overlay onto
        logger: Receives a warning for each unknown key

    Returns:
        A new, immutable ConversionOptions
    """
    if overrides is None:
        return defaults
    if isinstance(overrides, ConversionOptions):
        return overrides

    known = {f.name for f in fields(ConversionOptions)}
    updates: Dict[str, Any] = {}
    for key, value in overrides.items():
        if key not in known:
            if logger:
                logger.warning(f"Ignoring unknown option '{key}'")
            continue
        if key in _NESTED:
            updates[key] = _merge_nested(getattr(defaults, key), value)
        elif value is not None or key in ("output_path", "on_progress", "width", "height"):
            updates[key] = value

    if isinstance(updates.get("page_size"), str):
        updates["page_size"] = updates["page_size"].strip().lower()
    if isinstance(updates.get("orientation"), str):
        updates["orientation"] = updates["orientation"].strip().lower()

    return replace(defaults, **updates)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_length(value: Any) -> bool:
    return isinstance(value, str) and CSS_LENGTH_PATTERN.match(value) is not None


def validate_options(options: ConversionOptions) -> ValidationResult:
    """Check merged options. Every rule runs; errors accumulate.

    Values of the wrong type are reported as errors, never raised.
    """
    errors: List[str] = []
    warnings: List[str] = []

    valid_sizes = PAGE_SIZES + (CUSTOM_PAGE_SIZE,)
    if options.page_size not in valid_sizes:
        errors.append(f"Unsupported page size: {options.page_size!r}. Supported: {', '.join(valid_sizes)}")

    if options.page_size == CUSTOM_PAGE_SIZE:
        if not options.width or not options.height:
            errors.append("Custom page size requires both width and height")
        for name in ("width", "height"):
            value = getattr(options, name)
            if value and not _is_length(value):
                errors.append(f"Invalid custom page {name}: {value!r}. Examples: '100mm', '8.5in'")
    elif options.width or options.height:
        warnings.append("width/height are ignored unless page_size is 'custom'")

    if options.orientation not in ORIENTATIONS:
        errors.append(f"Unsupported orientation: {options.orientation!r}. Supported: {', '.join(ORIENTATIONS)}")

    if not _is_number(options.scale):
        errors.append(f"Scale must be a number (got {options.scale!r})")
    elif not (0 < options.scale <= 2):
        errors.append(f"Scale must be greater than 0 and at most 2 (got {options.scale})")

    for side, value in options.margin.items():
        if value not in (None, "") and not _is_length(value):
            errors.append(f"Invalid margin format ({side}): {value!r}. Examples: '15mm', '1in', '20px'")

    if not _is_number(options.wait_ms):
        errors.append(f"Wait duration must be a number of milliseconds (got {options.wait_ms!r})")
    elif options.wait_ms < 0:
        errors.append(f"Wait duration cannot be negative (got {options.wait_ms})")

    if not _is_number(options.load_timeout_ms) or options.load_timeout_ms <= 0:
        errors.append(f"Load timeout must be a positive number of milliseconds (got {options.load_timeout_ms!r})")

    for name in ("viewport_width", "viewport_height"):
        value = getattr(options, name)
        if not _is_integer(value) or value <= 0:
            errors.append(f"{name} must be a positive integer (got {value!r})")

    if not _is_integer(options.toc.max_depth):
        errors.append(f"TOC max_depth must be an integer (got {options.toc.max_depth!r})")

    if options.display_header_footer and not options.header_template and not options.footer_template:
        warnings.append("Header/footer display enabled without templates; the default templates will be used")

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def is_margin_error(message: str) -> bool:
    return message.startswith("Invalid margin format")
