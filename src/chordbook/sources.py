"""Load song content from a local file or an http(s) URL."""

import logging
from pathlib import Path

import httpx

from .exceptions import FetchError, SourceError

logger = logging.getLogger(__name__)


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def fetch_song(url: str, timeout: float = 15) -> str:
    """GET a raw ChordPro document.  Raises FetchError on HTTP-level failures."""
    try:
        resp = httpx.get(url, follow_redirects=True, timeout=timeout)
    except httpx.RequestError as exc:
        raise FetchError(url, 0) from exc
    if resp.status_code != 200:
        raise FetchError(url, resp.status_code)
    logger.debug("fetched %d bytes from %s", len(resp.text), url)
    return resp.text


def read_song(path: str | Path) -> str:
    p = Path(path)
    try:
        return p.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise SourceError(str(p), "no such file") from exc
    except UnicodeDecodeError as exc:
        raise SourceError(str(p), "not UTF-8 text") from exc
    except OSError as exc:
        raise SourceError(str(p), exc.strerror or str(exc)) from exc


def load_song(source: str, timeout: float = 15) -> str:
    """Song content from *source*, a path or an http(s) URL."""
    if is_url(source):
        return fetch_song(source, timeout=timeout)
    return read_song(source)
