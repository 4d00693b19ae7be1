"""Template image loading: the one suspension point of a render."""

import asyncio
import threading
from collections import OrderedDict
from io import BytesIO
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import requests
from loguru import logger as log
from PIL import Image, UnidentifiedImageError
from requests.exceptions import RequestException

from common import global_config
from src.services.meme.errors import ImageLoadError


class ImageSource:
    """Fetches template images over HTTP(S) or from disk, with a bytes LRU."""

    def __init__(
        self,
        timeout_seconds: Optional[float] = None,
        cache_size: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        config = global_config.compositor
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else config.image_timeout_seconds
        )
        self.cache_size = cache_size if cache_size is not None else config.image_cache_size
        self._http = session or requests.Session()
        self._http.headers.update({"User-Agent": config.user_agent})
        self._cache: OrderedDict[str, bytes] = OrderedDict()
        # Worker threads of cancelled renders keep running, so cache access is locked
        self._cache_lock = threading.Lock()

    def _read_bytes(self, url: str) -> bytes:
        parsed = urlparse(url)
        if parsed.scheme in ("http", "https"):
            try:
                response = self._http.get(url, timeout=self.timeout_seconds)
                response.raise_for_status()
            except RequestException as e:
                raise ImageLoadError(url, str(e)) from e
            return response.content

        path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(url)
        try:
            return path.read_bytes()
        except OSError as e:
            raise ImageLoadError(url, str(e)) from e

    def fetch_bytes(self, url: str) -> bytes:
        """Blocking fetch, served from the cache when possible."""
        with self._cache_lock:
            cached = self._cache.get(url)
            if cached is not None:
                self._cache.move_to_end(url)
                return cached

        data = self._read_bytes(url)
        if self.cache_size > 0:
            with self._cache_lock:
                self._cache[url] = data
                while len(self._cache) > self.cache_size:
                    self._cache.popitem(last=False)
        return data

    def decode(self, url: str, data: bytes) -> Image.Image:
        try:
            image = Image.open(BytesIO(data))
            image.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            with self._cache_lock:
                self._cache.pop(url, None)
            raise ImageLoadError(url, f"not a decodable image ({e})") from e
        return image

    def fetch_image(self, url: str) -> Image.Image:
        """Blocking fetch and decode."""
        return self.decode(url, self.fetch_bytes(url))

    async def load(self, url: str) -> Image.Image:
        """
        Load and decode an image without blocking the event loop.

        Raises:
            ImageLoadError: On network, file, decode failure or timeout
        """
        try:
            image = await asyncio.wait_for(
                asyncio.to_thread(self.fetch_image, url), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            raise ImageLoadError(
                url, f"timed out after {self.timeout_seconds} seconds"
            ) from e

        log.debug(f"Loaded template image {url} ({image.width}x{image.height})")
        return image

    def clear(self) -> None:
        with self._cache_lock:
            self._cache.clear()
