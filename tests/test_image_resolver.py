"""
Tests for image resolution: one fetch per URL, shared properties,
reference validation and artifact release.
"""

import os
import threading
import time
from unittest.mock import MagicMock

import pytest
import requests

from pdf_creator.components import Document, ImageNode, ImageRef, Table, TableCell, TableNode
from pdf_creator.exceptions import FetchError, InvalidReference
from pdf_creator.image_resolver import HttpImageFetcher, ImageResolver

LOGO = "https://img.example.com/logo.png"
PHOTO = "https://img.example.com/photo.jpg"


def image_node(url):
    return ImageNode(image=ImageRef(url=url))


def image_cell(url):
    return TableCell(content=ImageNode(image=ImageRef(url=url)))


def document_with_images():
    table = Table(
        widths=[100, 100],
        header=[[image_cell(LOGO), "title"]],
        body=[["x", image_cell(PHOTO)]],
        footer=[[image_cell(LOGO), "end"]],
    )
    return Document(content=[image_node(LOGO), TableNode(table=table), image_node(PHOTO), image_node(LOGO)])


class TestCollectUrls:
    def test_distinct_urls_in_document_order(self):
        assert ImageResolver.collect_urls(document_with_images()) == [LOGO, PHOTO]

    def test_document_without_images(self):
        assert ImageResolver.collect_urls(Document(content=[])) == []


class TestResolve:
    """Resolution of every image reference."""

    def test_each_url_fetched_once(self, fake_fetcher, temp_dir):
        document = document_with_images()

        with ImageResolver(temp_dir=str(temp_dir), fetcher=fake_fetcher) as resolver:
            resolver.resolve(document)

        assert fake_fetcher.calls == {LOGO: 1, PHOTO: 1}

    def test_references_share_properties_object(self, fake_fetcher, temp_dir):
        document = document_with_images()
        refs = list(document.iter_image_refs())

        with ImageResolver(temp_dir=str(temp_dir), fetcher=fake_fetcher) as resolver:
            images = resolver.resolve(document)

            logo_refs = [ref for ref in refs if ref.url == LOGO]
            assert len(logo_refs) == 4
            assert all(ref.properties is images[LOGO] for ref in logo_refs)
            assert resolver.get(LOGO) is images[LOGO]

    def test_properties_read_from_image(self, fake_fetcher, temp_dir):
        document = Document(content=[image_node(LOGO), image_node(PHOTO)])

        with ImageResolver(temp_dir=str(temp_dir), fetcher=fake_fetcher) as resolver:
            images = resolver.resolve(document)

            logo = images[LOGO]
            assert (logo.width, logo.height) == (200, 100)
            assert logo.type == "png"
            assert logo.orientation is None
            assert os.path.exists(logo.path)
            assert logo.path.endswith(".png")

            # Extension comes from the URL, the type from the bytes
            photo = images[PHOTO]
            assert photo.path.endswith(".jpg")
            assert (photo.width, photo.height) == (40, 80)

    def test_artifacts_deleted_on_release(self, fake_fetcher, temp_dir):
        resolver = ImageResolver(temp_dir=str(temp_dir), fetcher=fake_fetcher)
        images = resolver.resolve(Document(content=[image_node(LOGO)]))
        path = images[LOGO].path

        assert os.path.exists(path)
        resolver.release()
        assert not os.path.exists(path)
        assert resolver.get(LOGO) is None

        # Releasing twice is harmless
        resolver.release()

    def test_no_images_no_fetch(self, fake_fetcher, temp_dir):
        with ImageResolver(temp_dir=str(temp_dir), fetcher=fake_fetcher) as resolver:
            assert dict(resolver.resolve(Document(content=[]))) == {}
        assert not fake_fetcher.calls


class TestInvalidReferences:
    """URLs are validated before anything is fetched."""

    @pytest.mark.parametrize("url", ["", "   ", "https://img.example.com/logo", "https://img.example.com/file.txt"])
    def test_invalid_url_rejected(self, url, fake_fetcher, temp_dir):
        document = Document(content=[image_node(LOGO), image_node(url)])

        with ImageResolver(temp_dir=str(temp_dir), fetcher=fake_fetcher) as resolver:
            with pytest.raises(InvalidReference):
                resolver.resolve(document)

        assert not fake_fetcher.calls

    def test_query_string_ignored_for_extension(self, fake_fetcher, temp_dir, png_bytes):
        url = "https://img.example.com/a/logo.PNG?v=2"
        fake_fetcher.payloads[url] = png_bytes(10, 10)

        with ImageResolver(temp_dir=str(temp_dir), fetcher=fake_fetcher) as resolver:
            images = resolver.resolve(Document(content=[image_node(url)]))
            assert images[url].path.endswith(".png")


class TestFetchFailures:
    """Any failed fetch fails the resolution and leaves no files behind."""

    def test_missing_image_fails_and_releases(self, fake_fetcher, temp_dir):
        missing = "https://img.example.com/missing.png"
        document = Document(content=[image_node(LOGO), image_node(missing), image_node(PHOTO)])

        with pytest.raises(FetchError) as exc_info:
            with ImageResolver(temp_dir=str(temp_dir), fetcher=fake_fetcher) as resolver:
                resolver.resolve(document)

        assert exc_info.value.url == missing
        # The other downloads still ran before the error surfaced
        assert fake_fetcher.calls[LOGO] == 1
        assert fake_fetcher.calls[PHOTO] == 1
        assert os.listdir(temp_dir) == []

    def test_empty_download_fails(self, fake_fetcher, temp_dir):
        url = "https://img.example.com/empty.png"
        fake_fetcher.payloads[url] = b""

        with ImageResolver(temp_dir=str(temp_dir), fetcher=fake_fetcher) as resolver:
            with pytest.raises(FetchError, match="missing or empty"):
                resolver.resolve(Document(content=[image_node(url)]))

    def test_undecodable_image_fails(self, fake_fetcher, temp_dir):
        url = "https://img.example.com/broken.png"
        fake_fetcher.payloads[url] = b"this is not an image"

        with ImageResolver(temp_dir=str(temp_dir), fetcher=fake_fetcher) as resolver:
            with pytest.raises(FetchError, match="not a readable image"):
                resolver.resolve(Document(content=[image_node(url)]))

        assert os.listdir(temp_dir) == []


class RendezvousFetcher:
    """Fetcher whose calls only return once two of them are running at the same time."""

    def __init__(self, payloads, failing=(), delays=None):
        self.payloads = payloads
        self.failing = set(failing)
        self.delays = delays or {}
        self.barrier = threading.Barrier(2, timeout=5)
        self.finished = []
        self._lock = threading.Lock()

    def __call__(self, url):
        self.barrier.wait()
        time.sleep(self.delays.get(url, 0))
        with self._lock:
            self.finished.append(url)
        if url in self.failing:
            raise FetchError(url, "503 Service Unavailable")
        return [self.payloads[url]]


class TestParallelFetch:
    """Downloads run concurrently and resolve() waits for all of them."""

    def test_fetches_overlap_and_resolve_waits_for_all(self, temp_dir, png_bytes):
        fetcher = RendezvousFetcher(
            {LOGO: png_bytes(20, 10), PHOTO: png_bytes(10, 20)},
            delays={PHOTO: 0.2},
        )
        document = Document(content=[image_node(LOGO), image_node(PHOTO)])

        with ImageResolver(temp_dir=str(temp_dir), fetcher=fetcher, max_workers=2) as resolver:
            images = resolver.resolve(document)

            # Both calls passed the two-party barrier, so they were in flight together
            assert sorted(fetcher.finished) == sorted([LOGO, PHOTO])
            assert (images[PHOTO].width, images[PHOTO].height) == (10, 20)

    def test_failure_surfaces_after_slow_fetch_completes(self, temp_dir, png_bytes):
        fetcher = RendezvousFetcher(
            {LOGO: png_bytes(20, 10), PHOTO: png_bytes(10, 20)},
            failing=[LOGO],
            delays={PHOTO: 0.2},
        )
        document = Document(content=[image_node(LOGO), image_node(PHOTO)])

        with pytest.raises(FetchError) as exc_info:
            with ImageResolver(temp_dir=str(temp_dir), fetcher=fetcher, max_workers=2) as resolver:
                try:
                    resolver.resolve(document)
                finally:
                    finished_at_error = list(fetcher.finished)

        assert exc_info.value.url == LOGO
        assert finished_at_error == [LOGO, PHOTO]
        assert os.listdir(temp_dir) == []


class TestHttpImageFetcher:
    """Streaming downloads through a requests session."""

    def test_streams_non_empty_chunks(self):
        response = MagicMock()
        response.iter_content.return_value = [b"ab", b"", b"c"]
        session = MagicMock()
        session.get.return_value = response

        fetcher = HttpImageFetcher(timeout=5, session=session)

        assert list(fetcher(LOGO)) == [b"ab", b"c"]
        session.get.assert_called_once_with(LOGO, stream=True, timeout=5)
        response.raise_for_status.assert_called_once()

    def test_transport_error_becomes_fetch_error(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(FetchError, match="connection refused"):
            HttpImageFetcher(timeout=5, session=session)(LOGO)

    def test_http_error_becomes_fetch_error(self):
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError("404 Client Error")
        session = MagicMock()
        session.get.return_value = response

        with pytest.raises(FetchError, match="404"):
            HttpImageFetcher(timeout=5, session=session)(LOGO)

    def test_timeout_from_environment(self, monkeypatch):
        monkeypatch.setenv("PDF_CREATOR_FETCH_TIMEOUT", "7.5")

        assert HttpImageFetcher(session=MagicMock()).timeout == 7.5
