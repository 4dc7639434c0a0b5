from __future__ import annotations

import time
from typing import Optional

import requests
from bs4 import BeautifulSoup

from importscout import get_logger
from importscout.config import SearchSettings
from importscout.safety import safe_external_url, url_origin

LOGGER = get_logger()

PREVIEW_ACCEPT = "text/html,application/xhtml+xml"
CHUNK_SIZE = 16 * 1024

# Checked in order; the first non-empty value wins.
IMAGE_SELECTORS: tuple[tuple[str, str], ...] = (
    ('meta[property="og:image"]', "content"),
    ('meta[name="twitter:image"]', "content"),
    ('link[rel="image_src"]', "href"),
)


def extract_preview_image(html: str | bytes, page_url: str) -> Optional[str]:
    soup = BeautifulSoup(html, "lxml")
    image: Optional[str] = None
    for selector, attr in IMAGE_SELECTORS:
        el = soup.select_one(selector)
        value = el.get(attr) if el else None
        if isinstance(value, str) and value.strip():
            image = value.strip()
            break
    if not image:
        return None
    if image.startswith("/") and not image.startswith("//"):
        origin = url_origin(page_url)
        if origin is None:
            return None
        image = f"{origin}{image}"
    elif image.startswith("//"):
        scheme = page_url.split(":", 1)[0] if ":" in page_url else "https"
        image = f"{scheme}:{image}"
    return safe_external_url(image)


class PreviewImageFetcher:
    """Best-effort preview image lookup.

    ``fetch`` returns None for any network error, non-2xx status or page
    without an image tag; it does not raise.
    """

    def __init__(self, settings: SearchSettings) -> None:
        self.settings = settings
        self.headers = {
            "User-Agent": settings.user_agent,
            "Accept": PREVIEW_ACCEPT,
        }

    def fetch(self, url: str) -> Optional[str]:
        deadline = time.monotonic() + self.settings.preview_timeout_seconds
        try:
            response = requests.get(
                url,
                headers=self.headers,
                timeout=self.settings.preview_timeout_seconds,
                allow_redirects=True,
                stream=True,
            )
        except requests.RequestException as exc:
            LOGGER.debug("Preview fetch failed url=%s error=%s", url, exc)
            return None
        try:
            if not 200 <= response.status_code < 300:
                LOGGER.debug("Preview fetch status=%s url=%s", response.status_code, url)
                return None
            body = self._read_body(response, url, deadline)
        except requests.RequestException as exc:
            LOGGER.debug("Preview read failed url=%s error=%s", url, exc)
            return None
        finally:
            response.close()
        if body is None:
            return None
        try:
            return extract_preview_image(body, url)
        except (ValueError, UnicodeDecodeError) as exc:
            LOGGER.debug("Preview parse failed url=%s error=%s", url, exc)
            return None

    def _read_body(self, response: requests.Response, url: str, deadline: float) -> Optional[bytes]:
        # Wall-clock deadline and size cap cover the whole body.
        chunks: list[bytes] = []
        size = 0
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if time.monotonic() > deadline:
                LOGGER.debug("Preview fetch deadline passed url=%s", url)
                return None
            if not chunk:
                continue
            size += len(chunk)
            if size > self.settings.preview_max_bytes:
                LOGGER.debug("Preview body over %s bytes url=%s", self.settings.preview_max_bytes, url)
                return None
            chunks.append(chunk)
        return b"".join(chunks)
