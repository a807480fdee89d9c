"""
Clip resolvers - clip reference to bytes.

The engine only needs a callable `resolve(reference) -> bytes`. These
resolvers cover local files, inline data URLs and HTTP(S) downloads,
plus a dispatcher that picks one by scheme. Storage policy (buckets,
signing, permissions) stays with the caller.
"""

from __future__ import annotations

import base64
import binascii
import logging
import urllib.error
import urllib.parse
import urllib.request
from pathlib import Path
from typing import Mapping

from clip_concat.errors import ResolveError

logger = logging.getLogger(__name__)

_HTTP_SCHEMES = ("http://", "https://")


class FileResolver:
    """Reads clips from the local filesystem.

    Relative references are resolved against base_dir when one is set.
    """

    def __init__(self, base_dir: Path | str | None = None):
        self.base_dir = Path(base_dir) if base_dir is not None else None

    def path_for(self, reference: str) -> Path:
        if reference.startswith("file://"):
            reference = urllib.parse.unquote(urllib.parse.urlparse(reference).path)
        path = Path(reference)
        if self.base_dir is not None and not path.is_absolute():
            path = self.base_dir / path
        return path

    def resolve(self, reference: str) -> bytes:
        path = self.path_for(reference)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise ResolveError(f"File not found: {path}", reference=reference) from e
        except PermissionError as e:
            raise ResolveError(f"Permission denied: {path}", reference=reference) from e
        except OSError as e:
            raise ResolveError(f"Could not read {path}: {e}", reference=reference) from e

    __call__ = resolve


class DataUrlResolver:
    """Decodes inline `data:[<mime>][;base64],<payload>` references."""

    def resolve(self, reference: str) -> bytes:
        if not reference.startswith("data:"):
            raise ResolveError("Not a data URL", reference=reference)

        header, sep, payload = reference[5:].partition(",")
        if not sep:
            raise ResolveError("Malformed data URL: missing ','", reference=reference)

        if header.split(";")[-1].strip().lower() == "base64":
            try:
                return base64.b64decode(payload, validate=True)
            except (binascii.Error, ValueError) as e:
                raise ResolveError(f"Malformed base64 payload: {e}", reference=reference) from e

        return urllib.parse.unquote_to_bytes(payload)

    __call__ = resolve


class HttpResolver:
    """Downloads clips over HTTP(S).

    Bare storage paths are joined onto base_url (for example a public
    bucket URL) when one is configured.

    Example:
        resolver = HttpResolver(
            base_url="https://cdn.example.org/storage/v1/object/public/audio/",
            timeout=10,
        )
        data = resolver("project/42/take-1.webm")
    """

    def __init__(
        self,
        timeout: float = 30.0,
        base_url: str | None = None,
        headers: Mapping[str, str] | None = None,
    ):
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.timeout = timeout
        self.base_url = base_url
        self.headers = dict(headers or {})

    def url_for(self, reference: str) -> str:
        if reference.startswith(_HTTP_SCHEMES):
            return reference
        if self.base_url is None:
            raise ResolveError("Not an http(s) URL and no base_url configured", reference=reference)
        base = self.base_url if self.base_url.endswith("/") else self.base_url + "/"
        return urllib.parse.urljoin(base, urllib.parse.quote(reference.lstrip("/"), safe="/%?=&"))

    def resolve(self, reference: str) -> bytes:
        url = self.url_for(reference)
        request = urllib.request.Request(url, headers=self.headers, method="GET")
        logger.debug(f"Downloading {url}")
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                return response.read()
        except urllib.error.HTTPError as e:
            raise ResolveError(
                f"Failed to download audio ({e.code} {e.reason})",
                reference=reference,
                status=e.code,
            ) from e
        except urllib.error.URLError as e:
            raise ResolveError(f"Failed to download audio: {e.reason}", reference=reference) from e
        except TimeoutError as e:
            raise ResolveError(f"Download timed out after {self.timeout}s", reference=reference) from e

    __call__ = resolve


class SchemeResolver:
    """Dispatches each reference to a resolver by scheme.

    - `data:`            → DataUrlResolver
    - `http://`/`https://` → HttpResolver
    - anything else      → HttpResolver if base_url is set, else FileResolver
    """

    def __init__(
        self,
        base_dir: Path | str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
        headers: Mapping[str, str] | None = None,
    ):
        self.files = FileResolver(base_dir)
        self.data_urls = DataUrlResolver()
        self.http = HttpResolver(timeout=timeout, base_url=base_url, headers=headers)

    def resolver_for(self, reference: str):
        if reference.startswith("data:"):
            return self.data_urls
        if reference.startswith(_HTTP_SCHEMES) or self.http.base_url is not None:
            return self.http
        return self.files

    def resolve(self, reference: str) -> bytes:
        return self.resolver_for(reference).resolve(reference)

    __call__ = resolve


def default_resolver(**options) -> SchemeResolver:
    """Build a SchemeResolver (accepts base_dir, base_url, timeout, headers)."""
    return SchemeResolver(**options)
