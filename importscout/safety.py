from __future__ import annotations

from typing import Optional
from urllib.parse import urlparse


def safe_external_url(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    value = str(url).strip()
    if not value:
        return None
    parsed = urlparse(value)
    if parsed.scheme not in {"http", "https"}:
        return None
    if not parsed.netloc or not parsed.hostname:
        return None
    if parsed.username or parsed.password:
        return None
    return value


def source_domain(url: str) -> Optional[str]:
    """Lowercased host of ``url`` with a leading ``www.`` label removed."""
    safe = safe_external_url(url)
    if safe is None:
        return None
    host = (urlparse(safe).hostname or "").lower()
    if host.startswith("www."):
        host = host[len("www."):]
    return host or None


def url_origin(url: str) -> Optional[str]:
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"
