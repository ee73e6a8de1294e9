#!/usr/bin/env python3
"""
HTML to PDF converter: the conversion entry point.

Pipeline per task: resolve and validate options, emit the HTML assets,
extract metadata, inline resources, add cover / TOC / print style, render
through a backend session, count pages and assemble the result.

MIT License - Copyright (c) 2025 HTML to PDF Converter
"""

import asyncio
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Union

from . import __version__
from .augmenter import DocumentAugmenter
from .backend import PlaywrightBackend, RenderingBackend
from .cancellation import CancellationToken, check_cancelled
from .config import Config
from .console import ConsoleLogger
from .emitter import DirectoryEmitter, DocumentEmitter
from .errors import ConversionError, ErrorCode
from .inliner import ResourceInliner
from .layout import resolve_geometry
from .metadata import ROOT_DOCUMENT, extract_metadata
from .options import (
    DEFAULT_OPTIONS,
    ConversionOptions,
    ValidationResult,
    is_margin_error,
    resolve_options,
    validate_options,
)
from .pagination import PageCounter
from .renderer import RenderOrchestrator


class ConversionStatus(str, Enum):
    CONVERTING_HTML = "converting-html"
    GENERATING_COVER = "generating-cover"
    GENERATING_TOC = "generating-toc"
    GENERATING_PDF = "generating-pdf"
    COMPLETED = "completed"
    FAILED = "failed"


# augmentation block -> progress reported before it is built
AUGMENT_STAGES = {
    "cover": (ConversionStatus.GENERATING_COVER, 20, "Generating cover page"),
    "toc": (ConversionStatus.GENERATING_TOC, 30, "Generating table of contents"),
}


@dataclass(frozen=True)
class ProgressEvent:
    task_id: str
    status: ConversionStatus
    percent: int
    current_step: Optional[str] = None


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of one `convert` call. On success exactly one of
    `output_path` and `data` is set."""

    success: bool
    task_id: str
    output_path: Optional[str] = None
    data: Optional[bytes] = None
    page_count: Optional[int] = None
    file_size: Optional[int] = None
    error: Optional[ConversionError] = None
    duration_ms: float = 0.0
    warnings: List[str] = field(default_factory=list)


def _write_file(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


class ResultAssembler:
    """Tracks progress for one task and builds its final result."""

    def __init__(
        self,
        task_id: str,
        on_progress: Optional[Callable[[ProgressEvent], None]] = None,
        logger: Optional[ConsoleLogger] = None,
    ):
        self.task_id = task_id
        self.on_progress = on_progress
        self.logger = logger or ConsoleLogger()
        self.events: List[ProgressEvent] = []
        self._percent = 0
        self._started = time.monotonic()

    def _elapsed_ms(self) -> float:
        return (time.monotonic() - self._started) * 1000

    def report(self, status: ConversionStatus, percent: Optional[int] = None, step: Optional[str] = None) -> None:
        # percent never moves backwards within a task
        self._percent = max(self._percent, percent if percent is not None else self._percent)
        event = ProgressEvent(task_id=self.task_id, status=status, percent=self._percent, current_step=step)
        self.events.append(event)
        self.logger.debug(f"[{self.task_id[:8]}] {status.value} {self._percent}% {step or ''}".rstrip())
        if self.on_progress:
            try:
                self.on_progress(event)
            except Exception as e:
                self.logger.error(f"Progress callback failed: {e}")

    async def complete(
        self,
        pdf_bytes: bytes,
        page_count: int,
        output_path: Optional[str] = None,
        warnings: Optional[List[str]] = None,
    ) -> ConversionResult:
        """Write or return the bytes and emit the final `completed` event.

        Raises:
            ConversionError: FILE_WRITE_FAILED when the output file cannot be written
        """
        if output_path:
            self.report(ConversionStatus.GENERATING_PDF, 90, "Writing PDF to file")
            try:
                await asyncio.to_thread(_write_file, Path(output_path), pdf_bytes)
            except OSError as e:
                raise ConversionError(
                    ErrorCode.FILE_WRITE_FAILED,
                    f"Failed to write {output_path}: {e}",
                    e,
                ) from e
            self.report(ConversionStatus.COMPLETED, 100, "PDF saved to file")
        else:
            self.report(ConversionStatus.COMPLETED, 100, "Conversion complete")

        return ConversionResult(
            success=True,
            task_id=self.task_id,
            output_path=output_path or None,
            data=None if output_path else pdf_bytes,
            page_count=page_count,
            file_size=len(pdf_bytes),
            duration_ms=self._elapsed_ms(),
            warnings=list(warnings or []),
        )

    def failure(self, error: ConversionError, warnings: Optional[List[str]] = None) -> ConversionResult:
        self.report(ConversionStatus.FAILED, step=error.message)
        return ConversionResult(
            success=False,
            task_id=self.task_id,
            error=error,
            duration_ms=self._elapsed_ms(),
            warnings=list(warnings or []),
        )


def _validation_error(validation: ValidationResult) -> ConversionError:
    code = ErrorCode.INVALID_PAGE_SIZE
    if all(is_margin_error(message) for message in validation.errors):
        code = ErrorCode.INVALID_MARGIN
    return ConversionError(code, "; ".join(validation.errors))


class HtmlToPdfConverter:
    """Converts emitted HTML documents to PDF through a rendering backend.

    Usage:
        converter = create_converter()
        result = await converter.convert("build/card", {"page_size": "A4", "include_toc": True})
        if result.success:
            print(result.page_count)
    """

    id = "html-to-pdf"
    name = "HTML to PDF Converter"
    version = __version__
    source_types = ("html", "directory")
    target_type = "pdf"
    description = "Converts emitted HTML documents to paginated PDF with optional cover and table of contents"

    def __init__(
        self,
        emitter: DocumentEmitter,
        backend: RenderingBackend,
        defaults: ConversionOptions = DEFAULT_OPTIONS,
        logger: Optional[ConsoleLogger] = None,
    ):
        """Initialize the converter.

        The backend's availability is checked once here, not per call.
        """
        self.emitter = emitter
        self.backend = backend
        self.defaults = defaults
        self.logger = logger or ConsoleLogger()
        self.augmenter = DocumentAugmenter()
        self.orchestrator = RenderOrchestrator(backend, self.logger)
        self.page_counter = PageCounter()

        self.backend_available = backend.is_available()
        if not self.backend_available:
            self.logger.warning(f"Rendering backend '{backend.name}' is not available; conversions will fail")

    def get_default_options(self) -> ConversionOptions:
        return self.defaults

    def validate_options(self, options: Union[Mapping[str, Any], ConversionOptions, None] = None) -> ValidationResult:
        return validate_options(resolve_options(options, self.defaults, self.logger))

    async def convert(
        self,
        source: Any,
        options: Union[Mapping[str, Any], ConversionOptions, None] = None,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ConversionResult:
        """Convert `source` to PDF. Never raises; failures come back as a result.

        Args:
            source: Whatever the configured emitter accepts (a directory, an asset map, ...)
            options: Partial options mapping or a complete ConversionOptions
            cancel_token: Optional token checked at every stage boundary

        Returns:
            ConversionResult for this task
        """
        task_id = str(uuid.uuid4())

        try:
            effective = resolve_options(options, self.defaults, self.logger)
        except (TypeError, ValueError) as e:
            self.logger.error(f"Invalid options: {e}")
            return ResultAssembler(task_id, logger=self.logger).failure(
                ConversionError(ErrorCode.INVALID_PAGE_SIZE, f"Invalid options: {e}", e)
            )

        assembler = ResultAssembler(task_id, effective.on_progress, self.logger)

        try:
            validation = validate_options(effective)
        except Exception as e:
            self.logger.error(f"Option validation failed: {e}")
            return assembler.failure(ConversionError(ErrorCode.INVALID_PAGE_SIZE, f"Invalid options: {e}", e))
        for warning in validation.warnings:
            self.logger.warning(warning)
        if not validation.valid:
            error = _validation_error(validation)
            self.logger.error(f"Option validation failed: {error.message}")
            return assembler.failure(error, validation.warnings)

        if not self.backend_available:
            return assembler.failure(ConversionError(
                ErrorCode.BACKEND_UNAVAILABLE,
                f"Rendering backend '{self.backend.name}' is not available. "
                "Install it with: pip install playwright && playwright install chromium",
            ), validation.warnings)

        try:
            return await self._run(source, effective, assembler, cancel_token, validation.warnings)
        except ConversionError as e:
            self.logger.error(f"Conversion {task_id} failed [{e.code.value}]: {e.message}")
            return assembler.failure(e, validation.warnings)
        except Exception as e:
            self.logger.error(f"Conversion {task_id} failed: {e}")
            return assembler.failure(
                ConversionError(ErrorCode.PRINT_GENERATION_FAILED, f"PDF generation failed: {e}", e),
                validation.warnings,
            )

    async def _run(
        self,
        source: Any,
        options: ConversionOptions,
        assembler: ResultAssembler,
        cancel_token: Optional[CancellationToken],
        warnings: List[str],
    ) -> ConversionResult:
        assembler.report(ConversionStatus.CONVERTING_HTML, 0, "Emitting HTML document")
        check_cancelled(cancel_token, "HTML emission")
        emitted = await self.emitter.emit(source, theme_id=options.theme_id)
        if not emitted.success:
            raise emitted.error or ConversionError(ErrorCode.EMIT_FAILED, "HTML conversion failed")

        files = emitted.files
        root = files.get(ROOT_DOCUMENT)
        if not isinstance(root, str):
            raise ConversionError(ErrorCode.DOCUMENT_MISSING, f"Root document '{ROOT_DOCUMENT}' not found")

        metadata = extract_metadata(files)
        self.logger.debug(f"Document '{metadata.name}' ({len(files)} assets)")

        inliner = ResourceInliner(strict_paths=options.strict_asset_paths, logger=self.logger)
        document = inliner.inline(root, files)
        geometry = resolve_geometry(options)

        def augment_stage(block: str) -> None:
            status, percent, step = AUGMENT_STAGES[block]
            assembler.report(status, percent, step)
            check_cancelled(cancel_token, step.lower())

        document = self.augmenter.augment(
            document,
            metadata=metadata,
            geometry=geometry,
            margin=options.margin,
            cover=options.cover if options.cover_enabled else None,
            toc=options.toc if options.toc_enabled else None,
            on_stage=augment_stage,
        )

        assembler.report(ConversionStatus.GENERATING_PDF, 40, "Starting rendering backend")
        check_cancelled(cancel_token, "rendering")
        output = await self.orchestrator.render(
            document,
            geometry,
            options,
            cancel_token=cancel_token,
            on_stage=lambda step, percent: assembler.report(ConversionStatus.GENERATING_PDF, percent, step),
        )

        assembler.report(ConversionStatus.GENERATING_PDF, 80, "Counting pages")
        page_count = self.page_counter.count(output.pdf_bytes, output.content_height)
        check_cancelled(cancel_token, "output")

        result = await assembler.complete(output.pdf_bytes, page_count, options.output_path, warnings)
        self.logger.success(
            f"Converted '{metadata.name}' to PDF: {page_count} page(s), {result.file_size} bytes"
            + (f" -> {result.output_path}" if result.output_path else "")
        )
        return result


def create_converter(
    emitter: Optional[DocumentEmitter] = None,
    backend: Optional[RenderingBackend] = None,
    config: Optional[Config] = None,
    logger: Optional[ConsoleLogger] = None,
    debug: bool = False,
) -> HtmlToPdfConverter:
    """Build a converter with its collaborators.

    Defaults: DirectoryEmitter, PlaywrightBackend and option defaults from
    Config (CLI/env/file layers).
    """
    logger = logger or ConsoleLogger(debug=debug)
    config = config or Config()
    return HtmlToPdfConverter(
        emitter=emitter or DirectoryEmitter(),
        backend=backend or PlaywrightBackend(logger=logger),
        defaults=config.get_option_defaults(),
        logger=logger,
    )
