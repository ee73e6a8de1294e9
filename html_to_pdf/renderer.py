#!/usr/bin/env python3
"""
Render orchestration: drives one backend session from load to PDF bytes.

MIT License - Copyright (c) 2025 HTML to PDF Converter
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .augmenter import DEFAULT_MARGIN
from .backend import PrintSettings, RenderingBackend
from .cancellation import CancellationToken, check_cancelled
from .console import ConsoleLogger
from .errors import ConversionError, ErrorCode
from .layout import PageGeometry, css_length_to_cm
from .options import MARGIN_SIDES, ConversionOptions


DEFAULT_HEADER_TEMPLATE = '<div></div>'
DEFAULT_FOOTER_TEMPLATE = (
    '<div style="font-size: 10px; text-align: center; width: 100%; margin: 0 auto;">'
    '<span class="pageNumber"></span></div>'
)


@dataclass(frozen=True)
class RenderOutput:
    pdf_bytes: bytes
    content_height: Optional[float] = None


def build_print_settings(geometry: PageGeometry, options: ConversionOptions) -> PrintSettings:
    margin: Dict[str, str] = {
        side: getattr(options.margin, side) or DEFAULT_MARGIN for side in MARGIN_SIDES
    }
    header = footer = ""
    if options.display_header_footer:
        header = options.header_template or DEFAULT_HEADER_TEMPLATE
        footer = options.footer_template or DEFAULT_FOOTER_TEMPLATE
    return PrintSettings(
        width=geometry.width,
        height=geometry.height,
        landscape=geometry.landscape,
        print_background=options.print_background,
        scale=options.scale,
        margin=margin,
        display_header_footer=options.display_header_footer,
        header_template=header,
        footer_template=footer,
        outline=options.generate_outline,
    )


class RenderOrchestrator:
    """Acquire a session, load, settle, print, and always release the session."""

    def __init__(self, backend: RenderingBackend, logger: Optional[ConsoleLogger] = None):
        self.backend = backend
        self.logger = logger or ConsoleLogger()

    async def _load(self, session, document: str, timeout_ms: int) -> None:
        try:
            await asyncio.wait_for(session.load(document, timeout_ms), timeout=timeout_ms / 1000)
        except asyncio.TimeoutError as e:
            raise ConversionError(
                ErrorCode.DOCUMENT_LOAD_TIMEOUT,
                f"Document did not finish loading within {timeout_ms} ms",
                e,
            ) from e

    async def render(
        self,
        document: str,
        geometry: PageGeometry,
        options: ConversionOptions,
        cancel_token: Optional[CancellationToken] = None,
        on_stage: Optional[Callable[[str, int], None]] = None,
    ) -> RenderOutput:
        """Render the augmented document to PDF bytes.

        Args:
            document: Self-contained HTML document
            geometry: Resolved (already oriented) page geometry
            options: Effective conversion options
            cancel_token: Checked between steps
            on_stage: Called with (step label, percent) at each checkpoint

        Raises:
            ConversionError: SESSION_LAUNCH_FAILED, DOCUMENT_LOAD_TIMEOUT,
                PRINT_GENERATION_FAILED or CANCELLED
        """
        def stage(label: str, percent: int) -> None:
            if on_stage:
                on_stage(label, percent)

        async with self.backend.session(options.viewport_width, options.viewport_height) as session:
            try:
                check_cancelled(cancel_token, "document load")
                self.logger.debug(f"Loading document ({len(document)} characters)")
                await self._load(session, document, options.load_timeout_ms)
                stage("Document loaded, waiting for rendering to settle", 50)

                if options.wait_ms:
                    await asyncio.sleep(options.wait_ms / 1000)
                check_cancelled(cancel_token, "printing")

                content_height = await session.content_height()
                settings = build_print_settings(geometry, options)
                self.logger.debug(
                    f"Printing {css_length_to_cm(geometry.width):.1f}cm x "
                    f"{css_length_to_cm(geometry.height):.1f}cm ({geometry.orientation}), "
                    f"margins: {settings.margin}"
                )
                stage("Printing PDF", 60)
                pdf_bytes = await session.print_pdf(settings)
            except ConversionError:
                raise
            except Exception as e:
                raise ConversionError(
                    ErrorCode.PRINT_GENERATION_FAILED,
                    f"PDF generation failed: {e}",
                    e,
                ) from e

        return RenderOutput(pdf_bytes=bytes(pdf_bytes), content_height=content_height)
