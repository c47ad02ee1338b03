"""Path, MIME type and URL helpers."""
import mimetypes
import time
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Any, Optional, Union
from urllib.parse import urlsplit, urlunsplit


class PathPrefixer:
    """Applies and strips the key prefix scoping every request.

    Paths are normalised by dropping leading separators, so
    ``strip_prefix(prefix_path(p)) == p`` for every path that does not
    start with ``/``.
    """

    def __init__(self, prefix: str = "", separator: str = "/"):
        self.separator = separator
        prefix = prefix.rstrip("\\/")
        self.prefix = f"{prefix}{separator}" if prefix else ""

    def prefix_path(self, path: str) -> str:
        return self.prefix + path.lstrip("\\/")

    def strip_prefix(self, path: str) -> str:
        if self.prefix and path.startswith(self.prefix):
            return path[len(self.prefix):]
        return path

    def strip_directory_prefix(self, path: str) -> str:
        return self.strip_prefix(path).rstrip("\\/")

    def prefix_directory_path(self, path: str) -> str:
        prefixed = self.prefix_path(path)
        if prefixed == "" or prefixed.endswith(self.separator):
            return prefixed
        return prefixed.rstrip("\\/") + self.separator


class ExtensionMimeTypeDetector:
    """Guess MIME types from the file extension."""

    def detect_mime_type(self, path: str, contents: Any = None) -> Optional[str]:
        return self.detect_mime_type_from_path(path)

    def detect_mime_type_from_path(self, path: str) -> Optional[str]:
        content_type, _ = mimetypes.guess_type(path)
        return content_type


def concat_path_to_url(url: str, path: str) -> str:
    return url.rstrip("/") + "/" + path.lstrip("/")


def replace_base_url(url: str, base_url: str) -> str:
    """Replace scheme, host and port of ``url`` with those of ``base_url``."""
    target = urlsplit(url)
    base = urlsplit(base_url)
    return urlunsplit((base.scheme, base.netloc, target.path, target.query, target.fragment))


def expires_in_seconds(expiration: Union[datetime, int]) -> int:
    """Seconds from now until ``expiration`` (already-relative ints pass through)."""
    if isinstance(expiration, datetime):
        return int(expiration.timestamp() - time.time())
    return int(expiration)


def to_timestamp(value: Any) -> Optional[int]:
    """Convert SDK timestamps (datetime, epoch number or HTTP date string) to epoch seconds."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return int(value.timestamp())
    if isinstance(value, (int, float)):
        return int(value)
    try:
        return int(parsedate_to_datetime(str(value)).timestamp())
    except (TypeError, ValueError):
        return int(datetime.fromisoformat(str(value).replace("Z", "+00:00")).timestamp())
