#!/usr/bin/env python3
"""
Rendering backend interface and the Playwright (headless Chromium) backend.

MIT License - Copyright (c) 2025 HTML to PDF Converter
"""

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, Optional

from .console import ConsoleLogger
from .errors import ConversionError, ErrorCode


@dataclass(frozen=True)
class PrintSettings:
    """Everything the backend needs to print one document."""

    width: str
    height: str
    landscape: bool = False
    print_background: bool = True
    scale: float = 1.0
    margin: Dict[str, str] = field(default_factory=dict)
    display_header_footer: bool = False
    header_template: str = ""
    footer_template: str = ""
    outline: bool = False


class RenderSession(ABC):
    """A single loaded page owned by exactly one conversion."""

    @abstractmethod
    async def load(self, html: str, timeout_ms: int) -> None:
        """
        Load a complete HTML document and wait for network idle.

        Raises:
            ConversionError: DOCUMENT_LOAD_TIMEOUT when the wait exceeds timeout_ms
        """

    @abstractmethod
    async def content_height(self) -> float:
        """Total rendered content height in CSS pixels."""

    @abstractmethod
    async def print_pdf(self, settings: PrintSettings) -> bytes:
        """Print the loaded document and return the PDF bytes."""

    @abstractmethod
    async def close(self) -> None:
        """Release every resource held by the session."""


class RenderingBackend(ABC):
    """
    Interface for PDF rendering engines.

    Implementations hand out sessions; a session is acquired per conversion
    and always released through `session()`.
    """

    name = "backend"

    @abstractmethod
    def is_available(self) -> bool:
        """Report whether the engine can be used in this environment."""

    @abstractmethod
    async def open_session(self, viewport_width: int, viewport_height: int) -> RenderSession:
        """
        Start a new session.

        Raises:
            ConversionError: SESSION_LAUNCH_FAILED if the engine cannot start
        """

    @asynccontextmanager
    async def session(self, viewport_width: int, viewport_height: int) -> AsyncIterator[RenderSession]:
        session = await self.open_session(viewport_width, viewport_height)
        try:
            yield session
        finally:
            await session.close()


class PlaywrightSession(RenderSession):
    """Session backed by one Chromium browser process."""

    def __init__(self, playwright, browser, page, logger: ConsoleLogger):
        self._playwright = playwright
        self._browser = browser
        self._page = page
        self.logger = logger

    async def load(self, html: str, timeout_ms: int) -> None:
        from playwright.async_api import TimeoutError as PlaywrightTimeoutError

        try:
            await self._page.set_content(html, wait_until="networkidle", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise ConversionError(
                ErrorCode.DOCUMENT_LOAD_TIMEOUT,
                f"Document did not reach network idle within {timeout_ms} ms",
                e,
            ) from e
        await self._page.emulate_media(media="print")

    async def content_height(self) -> float:
        return float(await self._page.evaluate("document.documentElement.scrollHeight"))

    async def print_pdf(self, settings: PrintSettings) -> bytes:
        # Width and height arrive already oriented; passing landscape=True
        # here would make Chromium swap them a second time.
        return await self._page.pdf(
            width=settings.width,
            height=settings.height,
            margin=settings.margin,
            print_background=settings.print_background,
            scale=settings.scale,
            display_header_footer=settings.display_header_footer,
            header_template=settings.header_template,
            footer_template=settings.footer_template,
            prefer_css_page_size=True,
            outline=settings.outline,
        )

    async def close(self) -> None:
        """Close page, browser and driver, logging instead of raising."""
        page, browser, pw = self._page, self._browser, self._playwright
        self._page = self._browser = self._playwright = None

        try:
            if page and not page.is_closed():
                await page.close()
        except Exception as e:
            self.logger.warning(f"Failed to close page: {e}")
        try:
            if browser and browser.is_connected():
                await browser.close()
        except Exception as e:
            self.logger.warning(f"Failed to close browser: {e}")
        try:
            if pw:
                await pw.stop()
        except Exception as e:
            self.logger.warning(f"Failed to stop Playwright: {e}")

        self.logger.debug("Browser instance closed and cleaned up")


class PlaywrightBackend(RenderingBackend):
    """Headless Chromium via Playwright."""

    name = "playwright-chromium"

    LAUNCH_ARGS = [
        '--disable-dev-shm-usage',  # Use /tmp instead of /dev/shm (prevents OOM crashes)
        '--disable-gpu',             # No GPU in headless mode
        '--no-sandbox',              # Required in some environments
    ]

    def __init__(self, headless: bool = True, logger: Optional[ConsoleLogger] = None):
        self.headless = headless
        self.logger = logger or ConsoleLogger()

    def is_available(self) -> bool:
        from .dependencies import DependencyChecker

        return DependencyChecker().rendering_available()

    async def open_session(self, viewport_width: int, viewport_height: int) -> RenderSession:
        from playwright.async_api import async_playwright

        pw = None
        try:
            pw = await async_playwright().start()
            browser = await pw.chromium.launch(headless=self.headless, args=self.LAUNCH_ARGS)
            page = await browser.new_page(viewport={"width": viewport_width, "height": viewport_height})
        except Exception as e:
            if pw:
                try:
                    await pw.stop()
                except Exception as stop_error:
                    self.logger.warning(f"Failed to stop Playwright: {stop_error}")
            raise ConversionError(ErrorCode.SESSION_LAUNCH_FAILED, f"Failed to launch browser: {e}", e) from e

        self.logger.debug(f"Launched Chromium session ({viewport_width}x{viewport_height})")
        return PlaywrightSession(pw, browser, page, self.logger)
