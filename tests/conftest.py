import asyncio
from typing import List, Optional

import pytest

from html_to_pdf.backend import PrintSettings, RenderingBackend, RenderSession
from html_to_pdf.console import ConsoleLogger
from html_to_pdf.converter import HtmlToPdfConverter
from html_to_pdf.emitter import StaticEmitter
from html_to_pdf.errors import ConversionError, ErrorCode


FAKE_PDF = b"%PDF-1.7\n1 0 obj << /Type /Pages /Count 2 >>\n2 0 obj << /Type /Page >>\n3 0 obj << /Type /Page >>\n%%EOF"

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"


class FakeSession(RenderSession):
    def __init__(self, backend: "FakeBackend"):
        self.backend = backend
        self.loaded_html: Optional[str] = None
        self.closed = False

    async def load(self, html: str, timeout_ms: int) -> None:
        self.backend.calls.append("load")
        if self.backend.load_delay:
            await asyncio.sleep(self.backend.load_delay)
        if self.backend.fail_on == "load":
            raise RuntimeError("load exploded")
        self.loaded_html = html

    async def content_height(self) -> float:
        return self.backend.content_height

    async def print_pdf(self, settings: PrintSettings) -> bytes:
        self.backend.calls.append("print")
        self.backend.print_settings.append(settings)
        if self.backend.fail_on == "print":
            raise RuntimeError("print exploded")
        return self.backend.pdf_bytes

    async def close(self) -> None:
        self.backend.calls.append("close")
        self.closed = True


class FakeBackend(RenderingBackend):
    name = "fake"

    def __init__(self, available: bool = True, pdf_bytes: bytes = FAKE_PDF, fail_on: Optional[str] = None,
                 fail_launch: bool = False, load_delay: float = 0.0, content_height: float = 2000.0):
        self.available = available
        self.pdf_bytes = pdf_bytes
        self.fail_on = fail_on
        self.fail_launch = fail_launch
        self.load_delay = load_delay
        self.content_height = content_height
        self.sessions: List[FakeSession] = []
        self.calls: List[str] = []
        self.print_settings: List[PrintSettings] = []
        self.availability_checks = 0

    def is_available(self) -> bool:
        self.availability_checks += 1
        return self.available

    async def open_session(self, viewport_width: int, viewport_height: int) -> RenderSession:
        if self.fail_launch:
            raise ConversionError(ErrorCode.SESSION_LAUNCH_FAILED, "no browser")
        session = FakeSession(self)
        self.sessions.append(session)
        return session

    @property
    def last_html(self) -> Optional[str]:
        return self.sessions[-1].loaded_html if self.sessions else None


SIMPLE_DOCUMENT = """<!DOCTYPE html>
<html>
<head>
<title>Quarterly Report</title>
<link rel="stylesheet" href="./styles/theme.css">
</head>
<body>
<h1 id="intro">Introduction</h1>
<img src="images/logo.png" alt="logo">
<p>Hello</p>
</body>
</html>
"""


@pytest.fixture
def assets():
    return {
        "index.html": SIMPLE_DOCUMENT,
        "styles/theme.css": "body { color: #333; }",
        "images/logo.png": PNG_BYTES,
    }


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def quiet_logger():
    return ConsoleLogger(quiet=True)


@pytest.fixture
def converter(backend, quiet_logger):
    return HtmlToPdfConverter(StaticEmitter(), backend, logger=quiet_logger)
