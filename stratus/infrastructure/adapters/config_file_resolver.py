"""
Config File Resolver

Architectural Intent:
- Implements FileContentPort for credential key files
- Resolves local paths (with ~ expansion), file:// URLs and http(s)://
  remote config references
- Uses stdlib urllib for the HTTP layer; reads run in the default executor

Design Decisions:
- Every failure is reported as ContentUnavailable carrying the original
  reference, so the parser can log which account's key was missing
"""

import asyncio
import logging
import os
import urllib.error
import urllib.request
from typing import Optional
from urllib.parse import urlparse

from stratus.domain.errors import ContentUnavailable

logger = logging.getLogger(__name__)

REMOTE_SCHEMES = ("http", "https")


class ConfigFileResolver:
    def __init__(self, timeout_seconds: float = 10.0) -> None:
        self.timeout_seconds = timeout_seconds

    def local_path(self, path: str) -> Optional[str]:
        parsed = urlparse(path)
        if parsed.scheme in REMOTE_SCHEMES:
            return None
        if parsed.scheme == "file":
            return os.path.expanduser(parsed.path)
        return os.path.expanduser(path)

    async def get_contents(self, path: str) -> str:
        if not path:
            raise ContentUnavailable(path, "empty reference")

        full_path = self.local_path(path)
        if full_path is None:
            reader = lambda: self._read_remote(path)
        else:
            reader = lambda: self._read_local(path, full_path)

        return await asyncio.get_running_loop().run_in_executor(None, reader)

    def _read_local(self, reference: str, full_path: str) -> str:
        try:
            with open(full_path, encoding="utf-8") as f:
                contents = f.read()
        except OSError as e:
            raise ContentUnavailable(reference, e.strerror or str(e)) from e
        logger.debug("Read %d bytes from %s", len(contents), full_path)
        return contents

    def _read_remote(self, url: str) -> str:
        try:
            with urllib.request.urlopen(url, timeout=self.timeout_seconds) as response:
                charset = response.headers.get_content_charset() or "utf-8"
                contents = response.read().decode(charset)
        except urllib.error.HTTPError as e:
            raise ContentUnavailable(url, f"HTTP {e.code}") from e
        except (urllib.error.URLError, OSError) as e:
            raise ContentUnavailable(url, str(getattr(e, "reason", e))) from e
        logger.debug("Fetched %d bytes from %s", len(contents), url)
        return contents
