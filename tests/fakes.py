from __future__ import annotations

import time
from typing import Any, Iterator, Optional


class FakeResponse:
    def __init__(
        self,
        *,
        status_code: int = 200,
        payload: Any = None,
        text: str = "",
        url: str = "https://api.search.brave.com/res/v1/web/search",
        chunks: Optional[list[bytes]] = None,
        chunk_delay: float = 0.0,
    ) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.url = url
        self.chunks = chunks if chunks is not None else [text.encode("utf-8")]
        self.chunk_delay = chunk_delay
        self.chunks_read = 0
        self.closed = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def iter_content(self, chunk_size: int = 1) -> Iterator[bytes]:
        for chunk in self.chunks:
            if self.chunk_delay:
                time.sleep(self.chunk_delay)
            self.chunks_read += 1
            yield chunk

    def close(self) -> None:
        self.closed = True

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None) -> None:
        self.response = response or FakeResponse(payload={"web": {"results": []}})
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


def brave_payload(*results: dict[str, Any]) -> dict[str, Any]:
    return {"type": "search", "web": {"type": "search", "results": list(results)}}


def page_with_image(content: str) -> str:
    return f'<html><head><meta property="og:image" content="{content}"/></head><body></body></html>'
