#!/usr/bin/env python3
"""
Document emitters: produce the asset map the converter works on.

MIT License - Copyright (c) 2025 HTML to PDF Converter
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .errors import ConversionError, ErrorCode
from .metadata import ROOT_DOCUMENT


AssetMap = Dict[str, Union[str, bytes]]

TEXT_EXTENSIONS = {".html", ".htm", ".css", ".js", ".json", ".txt", ".xml"}


@dataclass
class EmitResult:
    success: bool
    files: AssetMap = field(default_factory=dict)
    error: Optional[ConversionError] = None


class DocumentEmitter(ABC):
    """
    Interface for document emitters.

    Implementations turn a source reference into a mapping of relative paths
    to text or binary content containing a root `index.html`.
    """

    @abstractmethod
    async def emit(self, source: Any, *, theme_id: Optional[str] = None) -> EmitResult:
        """
        Emit the asset map for `source`.

        Failures are reported in the returned EmitResult, not raised.
        """


class StaticEmitter(DocumentEmitter):
    """Emitter for callers that already hold an asset map."""

    async def emit(self, source: Mapping[str, Union[str, bytes]], *, theme_id: Optional[str] = None) -> EmitResult:
        if not isinstance(source, Mapping):
            return EmitResult(
                success=False,
                error=ConversionError(ErrorCode.EMIT_FAILED, f"Expected an asset mapping, got {type(source).__name__}"),
            )
        return EmitResult(success=True, files=dict(source))


class DirectoryEmitter(DocumentEmitter):
    """Reads an already emitted HTML directory from disk.

    Markup, style and script files are read as UTF-8 text; everything else is
    kept as bytes, as is any non-root text file that fails to decode. Paths use
    forward slashes relative to the directory.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def _read_directory(self, root: Path) -> AssetMap:
        files: AssetMap = {}
        for path in sorted(root.rglob("*")):
            if not path.is_file():
                continue
            relative = path.relative_to(root).as_posix()
            raw = path.read_bytes()
            if path.suffix.lower() not in TEXT_EXTENSIONS:
                files[relative] = raw
                continue
            try:
                files[relative] = raw.decode(self.encoding)
            except UnicodeDecodeError:
                if relative == ROOT_DOCUMENT:
                    raise
                files[relative] = raw
        return files

    async def emit(self, source: Union[str, Path], *, theme_id: Optional[str] = None) -> EmitResult:
        root = Path(source)
        if not root.is_dir():
            return EmitResult(
                success=False,
                error=ConversionError(ErrorCode.EMIT_FAILED, f"Source directory not found: {root}"),
            )
        try:
            files = await asyncio.to_thread(self._read_directory, root)
        except (OSError, UnicodeDecodeError) as e:
            return EmitResult(
                success=False,
                error=ConversionError(ErrorCode.EMIT_FAILED, f"Failed to read {root}: {e}", e),
            )
        return EmitResult(success=True, files=files)
