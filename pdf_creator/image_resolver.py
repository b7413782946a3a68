"""Image Resolver Module

Downloads every image referenced by a document before layout starts.

Each distinct URL is fetched once, concurrently, into a temporary file whose
pixel size, format and EXIF orientation are read with Pillow. The resulting
ImageProperties object is shared by every reference to that URL. Temporary
files are deleted by ``release()`` (or on leaving the ``with`` block).
"""
import os
import tempfile
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Optional

import requests
from PIL import Image, UnidentifiedImageError

from .components import Document, ImageProperties
from .config import (
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_MAX_WORKERS,
    ENV_FETCH_TIMEOUT,
    ENV_MAX_WORKERS,
    ENV_TEMP_DIR,
    FETCH_CHUNK_SIZE,
    TEMP_DIR_NAME,
)
from .exceptions import FetchError
from .logger import get_logger
from .utils import format_file_size, image_extension

logger = get_logger(__name__)

EXIF_ORIENTATION_TAG = 274

ImageFetcher = Callable[[str], Iterable[bytes]]


class HttpImageFetcher:
    """Streams image bytes over HTTP(S) with requests."""

    def __init__(self, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        """
        Args:
            timeout: Request timeout in seconds. If None, reads
                     PDF_CREATOR_FETCH_TIMEOUT, then DEFAULT_FETCH_TIMEOUT.
            session: Optional requests session (one is created otherwise)
        """
        if timeout is None:
            timeout = float(os.getenv(ENV_FETCH_TIMEOUT, DEFAULT_FETCH_TIMEOUT))
        self.timeout = timeout
        self.session = session or requests.Session()

    def __call__(self, url: str) -> Iterable[bytes]:
        try:
            response = self.session.get(url, stream=True, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(url, str(e))
        return self._iter_chunks(url, response)

    def _iter_chunks(self, url: str, response: requests.Response) -> Iterable[bytes]:
        try:
            with response:
                for chunk in response.iter_content(chunk_size=FETCH_CHUNK_SIZE):
                    if chunk:
                        yield chunk
        except requests.RequestException as e:
            raise FetchError(url, str(e))


class ImageResolver:
    """Resolves image URLs to local files with known dimensions.

    Attributes:
        temp_dir: Directory receiving the downloaded files
        fetcher: Callable url -> iterable of byte chunks
        max_workers: Upper bound of concurrent downloads
    """

    def __init__(
        self,
        temp_dir: Optional[str] = None,
        fetcher: Optional[ImageFetcher] = None,
        max_workers: Optional[int] = None,
        timeout: Optional[float] = None
    ):
        self.temp_dir = (
            temp_dir
            or os.getenv(ENV_TEMP_DIR)
            or os.path.join(tempfile.gettempdir(), TEMP_DIR_NAME)
        )
        self.fetcher = fetcher or HttpImageFetcher(timeout=timeout)
        self.max_workers = max_workers or int(os.getenv(ENV_MAX_WORKERS, DEFAULT_MAX_WORKERS))
        self._cache: Dict[str, ImageProperties] = {}
        self._artifacts: List[str] = []
        self._lock = threading.Lock()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False

    @property
    def images(self) -> Mapping[str, ImageProperties]:
        """Read-only view of the resolved images (url -> properties)."""
        return MappingProxyType(self._cache)

    @property
    def artifacts(self) -> List[str]:
        with self._lock:
            return list(self._artifacts)

    @staticmethod
    def collect_urls(document: Document) -> List[str]:
        """Distinct image URLs of the document, in document order."""
        return list(dict.fromkeys(ref.url for ref in document.iter_image_refs()))

    def resolve(self, document: Document) -> Mapping[str, ImageProperties]:
        """
        Fetch every image of the document and attach its properties.

        All URLs are validated before anything is downloaded. Downloads run in
        a thread pool; when any of them fails, the others still finish and
        the first failure in document order is raised.

        Args:
            document: Document whose image references should be resolved

        Returns:
            Read-only mapping url -> ImageProperties

        Raises:
            InvalidReference: If a URL is empty or lacks an image extension
            FetchError: If a download or its verification fails
        """
        refs = list(document.iter_image_refs())
        urls = list(dict.fromkeys(ref.url for ref in refs))
        extensions = {url: image_extension(url) for url in urls}

        pending = [url for url in urls if url not in self._cache]
        if pending:
            os.makedirs(self.temp_dir, exist_ok=True)
            workers = max(1, min(self.max_workers, len(pending)))
            logger.info(f"Fetching {len(pending)} image(s) with {workers} worker(s)")

            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {url: executor.submit(self._download_image, url, extensions[url]) for url in pending}
                wait(futures.values())

            for url in pending:
                error = futures[url].exception()
                if error is not None:
                    raise error

            for url in pending:
                self._cache[url] = futures[url].result()

        for ref in refs:
            ref.properties = self._cache[ref.url]

        return self.images

    def get(self, url: str) -> Optional[ImageProperties]:
        return self._cache.get(url)

    def release(self) -> None:
        """Delete every downloaded file. Safe to call more than once."""
        with self._lock:
            artifacts, self._artifacts = self._artifacts, []

        for path in artifacts:
            try:
                os.remove(path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(f"Could not delete temporary image {path}: {e}")

        if artifacts:
            logger.debug(f"Released {len(artifacts)} temporary image file(s)")
        self._cache.clear()

    def _download_image(self, url: str, extension: str) -> ImageProperties:
        """Download one image into a new temp file and read its metadata (worker thread)."""
        fd, path = tempfile.mkstemp(prefix="image-", suffix=f".{extension}", dir=self.temp_dir)
        with self._lock:
            self._artifacts.append(path)

        try:
            with os.fdopen(fd, "wb") as f:
                for chunk in self.fetcher(url):
                    f.write(chunk)
        except OSError as e:
            raise FetchError(url, f"could not write image file: {e}")

        if not os.path.exists(path) or os.path.getsize(path) == 0:
            raise FetchError(url, "downloaded file is missing or empty")

        try:
            with Image.open(path) as img:
                width, height = img.size
                image_type = img.format
                orientation = img.getexif().get(EXIF_ORIENTATION_TAG)
        except (UnidentifiedImageError, OSError) as e:
            raise FetchError(url, f"not a readable image: {e}")

        logger.debug(
            f"Fetched {url} ({format_file_size(os.path.getsize(path))}, {width}x{height})"
        )
        return ImageProperties(
            path=path,
            width=width,
            height=height,
            orientation=orientation,
            type=(image_type or extension).lower(),
        )
