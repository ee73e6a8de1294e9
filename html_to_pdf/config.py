#!/usr/bin/env python3
"""
Layered default options for the HTML to PDF converter.

Layers, highest first: explicit (CLI) values, HTML2PDF_* environment
variables, the user config file, built-in defaults.

MIT License - Copyright (c) 2025 HTML to PDF Converter
"""

import json
import os
import platform
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from .options import DEFAULT_OPTIONS, MARGIN_SIDES, ConversionOptions, resolve_options

CONFIG_FILE_NAME = "config.json"
ENV_PREFIX = "HTML2PDF_"


def get_user_config_dir() -> Path:
    """Per-user configuration directory for this tool."""
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif system == "Darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / "html-to-pdf"


def load_config_file(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """Option values from a JSON object file; missing or unreadable files give {}."""
    path = Path(config_file) if config_file else get_user_config_dir() / CONFIG_FILE_NAME
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def parse_margin_shorthand(value: str) -> Dict[str, str]:
    """Expand a CSS margin shorthand into four sides.

    Accepts 1 value (all sides), 2 values (vertical horizontal) or
    4 values (top right bottom left).

    Raises:
        ValueError: For any other number of values
    """
    parts = value.split()
    if len(parts) == 1:
        parts = parts * 4
    elif len(parts) == 2:
        parts = parts * 2
    elif len(parts) != 4:
        raise ValueError(f"Invalid margin format: '{value}'. Use 1, 2, or 4 values.")
    return dict(zip(MARGIN_SIDES, parts))


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# variable suffix -> (option name, parser)
ENV_VARIABLES: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    "PAGE_SIZE": ("page_size", str),
    "ORIENTATION": ("orientation", str),
    "MARGIN": ("margin", parse_margin_shorthand),
    "PRINT_BACKGROUND": ("print_background", _parse_bool),
    "INCLUDE_COVER": ("include_cover", _parse_bool),
    "INCLUDE_TOC": ("include_toc", _parse_bool),
    "SCALE": ("scale", float),
    "WAIT_MS": ("wait_ms", int),
    "LOAD_TIMEOUT_MS": ("load_timeout_ms", int),
    "VIEWPORT_WIDTH": ("viewport_width", int),
    "VIEWPORT_HEIGHT": ("viewport_height", int),
}


def get_config_from_env(environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Option values from HTML2PDF_* variables. Unparseable values are skipped."""
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}
    for suffix, (option, parse) in ENV_VARIABLES.items():
        raw = environ.get(ENV_PREFIX + suffix)
        if not raw:
            continue
        try:
            values[option] = parse(raw)
        except ValueError:
            continue
    return values


class Config:
    """Merged option layers and the source of each value."""

    def __init__(self, cli_args: Optional[Dict[str, Any]] = None, config_file: Optional[Path] = None):
        layers = (
            ("file", load_config_file(config_file)),
            ("env", get_config_from_env()),
            ("cli", {key: value for key, value in (cli_args or {}).items() if value is not None}),
        )
        self._config: Dict[str, Any] = {}
        self._sources: Dict[str, str] = {}
        for source, values in layers:
            for key, value in values.items():
                self._config[key] = value
                self._sources[key] = source

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def source_of(self, key: str) -> str:
        """Layer that supplied `key`: cli, env, file, or default."""
        return self._sources.get(key, "default")

    def get_option_defaults(self) -> ConversionOptions:
        """Default conversion options with every configured layer applied."""
        values = dict(self._config)
        if isinstance(values.get("margin"), str):
            values["margin"] = parse_margin_shorthand(values["margin"])
        return resolve_options(values, DEFAULT_OPTIONS)

    def update(self, updates: Dict[str, Any]) -> None:
        for key, value in updates.items():
            self._config[key] = value
            self._sources[key] = "cli"

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._config)
