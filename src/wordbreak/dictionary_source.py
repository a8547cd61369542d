"""Word list loading from a local file or a cached remote URL."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path

import requests

from src.util.fs_util import FSUtil

logger = logging.getLogger(__name__)

CACHE_WORDS_FILENAME = "words.txt"
CACHE_META_FILENAME = "words.meta.json"


class DictionaryFetchError(RuntimeError):
    """Raised when the word list cannot be obtained."""


@dataclass(frozen=True)
class CacheInfo:
    """Metadata about the cached remote word list."""

    url: str
    fetched_at: datetime

    def is_fresh(self, url: str, cache_days: int, now: datetime) -> bool:
        """Check whether the cache belongs to ``url`` and is young enough."""
        if self.url != url:
            return False
        return now - self.fetched_at <= timedelta(days=cache_days)


class DictionarySource:
    """Provides the newline-delimited word list text.

    A local file, when given, always takes precedence over the remote URL.
    Remote word lists are cached under ``cache_dir`` and re-fetched once they
    are older than ``cache_days`` or when a refresh is forced.
    """

    def __init__(
        self,
        *,
        url: str | None,
        local_path: Path | None,
        cache_dir: Path,
        cache_days: int,
        timeout_seconds: int = 30,
    ) -> None:
        self._url = url
        self._local_path = local_path
        self._cache_dir = cache_dir
        self._cache_days = cache_days
        self._timeout_seconds = timeout_seconds

    @property
    def cache_words_path(self) -> Path:
        return self._cache_dir / CACHE_WORDS_FILENAME

    @property
    def cache_meta_path(self) -> Path:
        return self._cache_dir / CACHE_META_FILENAME

    def load(self, *, refresh: bool = False, now: datetime | None = None) -> str:
        """Return the word list text.

        Args:
            refresh: Ignore the cache and fetch the remote list again.
            now: Current time, for freshness checks.

        Raises:
            DictionaryFetchError: If neither source yields a word list.
        """
        if self._local_path is not None:
            logger.info("[dict] using local file: %s", self._local_path)
            try:
                return FSUtil.read_text_file(self._local_path)
            except (OSError, ValueError, UnicodeDecodeError) as exc:
                raise DictionaryFetchError(f"Cannot read local dictionary {self._local_path}: {exc}") from exc

        if not self._url:
            raise DictionaryFetchError("No dictionary source configured: set a local path or a URL")

        now = now or datetime.now(UTC)
        cache_info = self.cache_info()
        if not refresh and cache_info is not None and cache_info.is_fresh(self._url, self._cache_days, now):
            try:
                text = FSUtil.read_text_file(self.cache_words_path)
            except (OSError, ValueError, UnicodeDecodeError) as exc:
                logger.warning("[dict] cached word list unreadable, fetching again: %s", exc)
            else:
                logger.info("[dict] using cached dictionary (fetched %s)", cache_info.fetched_at.isoformat())
                return text

        text = self._fetch()
        try:
            self._store(text, now)
        except OSError as exc:
            logger.warning("[dict] fetched word list could not be cached: %s", exc)
        else:
            logger.info("[dict] fetched and cached")
        return text

    def cache_info(self) -> CacheInfo | None:
        """Read cache metadata, or None if there is no usable cache."""
        if not self.cache_meta_path.is_file() or not self.cache_words_path.is_file():
            return None
        try:
            meta = json.loads(FSUtil.read_text_file(self.cache_meta_path))
            return CacheInfo(url=meta["url"], fetched_at=datetime.fromisoformat(meta["fetched_at"]))
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("[dict] ignoring unreadable cache metadata %s: %s", self.cache_meta_path, exc)
            return None

    def _fetch(self) -> str:
        if not self._url:
            raise DictionaryFetchError("No dictionary URL configured")
        logger.info("[dict] fetching from %s", self._url)
        try:
            response = requests.get(self._url, timeout=self._timeout_seconds)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise DictionaryFetchError(f"Fetch dict failed: {exc}") from exc
        response.encoding = "utf-8"
        return response.text

    def _store(self, text: str, now: datetime) -> None:
        FSUtil.write_text_file(self.cache_words_path, text, create_parents=True)
        meta = {"url": self._url, "fetched_at": now.isoformat()}
        FSUtil.write_text_file(self.cache_meta_path, json.dumps(meta, indent=2), create_parents=True)
