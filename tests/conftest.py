"""
Pytest configuration for pdf-creator
"""

import io
import logging
import sys
import tempfile
import threading
from collections import Counter
from pathlib import Path

import pytest
from PIL import Image

from pdf_creator.document_builder import ComponentRenderer, FontManager, ReportLabSurface
from pdf_creator.document_options import DocumentOptions
from pdf_creator.exceptions import FetchError


@pytest.fixture(autouse=True)
def configure_logging():
    """Configure logging for tests: console only, warnings and errors."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter('%(name)s - %(levelname)s - %(message)s'))

    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)

    yield

    root_logger.handlers.clear()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


def make_png(width=20, height=10, color=(200, 30, 30)) -> bytes:
    """Encode a solid-colour PNG."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    """Factory for PNG payloads of a given pixel size."""
    return make_png


class FakeFetcher:
    """Image fetcher serving in-memory payloads and counting calls per URL."""

    def __init__(self, payloads=None):
        self.payloads = dict(payloads or {})
        self.calls = Counter()
        self._lock = threading.Lock()

    def __call__(self, url):
        with self._lock:
            self.calls[url] += 1
        if url not in self.payloads:
            raise FetchError(url, "404 Not Found")
        payload = self.payloads[url]
        # Two chunks, like a streamed response
        return [payload[: len(payload) // 2], payload[len(payload) // 2:]]


@pytest.fixture
def fake_fetcher(png_bytes):
    return FakeFetcher({
        "https://img.example.com/logo.png": png_bytes(200, 100),
        "https://img.example.com/photo.jpg": png_bytes(40, 80),
    })


@pytest.fixture
def font_dir(temp_dir):
    """Empty font directory: every variant falls back to Helvetica."""
    path = temp_dir / "fonts"
    path.mkdir()
    return str(path)


@pytest.fixture
def make_surface(font_dir):
    """Factory for surfaces with the built-in fonts."""
    def _make(**options):
        return ReportLabSurface(DocumentOptions(**options), FontManager(font_dir))
    return _make


@pytest.fixture
def surface(make_surface):
    return make_surface()


@pytest.fixture
def renderer(surface):
    return ComponentRenderer(surface)


