"""Adapter protocol definitions."""
from datetime import datetime
from typing import Any, BinaryIO, Iterable, Iterator, Optional, Protocol, Union, runtime_checkable

from .config import ConfigLike
from .models import FileAttributes, StorageAttributes, Visibility


@runtime_checkable
class VisibilityConverter(Protocol):
    """Maps portable visibility to backend ACLs and back."""

    def visibility_to_acl(self, visibility: Union[Visibility, str, None]) -> Any:
        ...

    def acl_to_visibility(self, grants: Optional[Iterable[Any]]) -> Visibility:
        ...

    def default_for_directories(self) -> Visibility:
        ...

    def default_visibility(self) -> Visibility:
        ...


@runtime_checkable
class MimeTypeDetector(Protocol):
    """Detects a MIME type from a path and (optionally) its contents."""

    def detect_mime_type(self, path: str, contents: Any = None) -> Optional[str]:
        ...


@runtime_checkable
class FilesystemAdapter(Protocol):
    """Filesystem operations implemented on top of an object store."""

    def file_exists(self, path: str) -> bool:
        ...

    def directory_exists(self, path: str) -> bool:
        ...

    def write(self, path: str, contents: Union[bytes, str], config: ConfigLike = None) -> None:
        ...

    def write_stream(self, path: str, contents: BinaryIO, config: ConfigLike = None) -> None:
        ...

    def read(self, path: str) -> bytes:
        ...

    def read_stream(self, path: str) -> BinaryIO:
        ...

    def delete(self, path: str) -> None:
        ...

    def delete_directory(self, path: str) -> None:
        ...

    def create_directory(self, path: str, config: ConfigLike = None) -> None:
        ...

    def set_visibility(self, path: str, visibility: Union[Visibility, str]) -> None:
        ...

    def visibility(self, path: str) -> FileAttributes:
        ...

    def mime_type(self, path: str) -> FileAttributes:
        ...

    def last_modified(self, path: str) -> FileAttributes:
        ...

    def file_size(self, path: str) -> FileAttributes:
        ...

    def list_contents(self, path: str = "", deep: bool = False) -> Iterator[StorageAttributes]:
        ...

    def move(self, source: str, destination: str, config: ConfigLike = None) -> None:
        ...

    def copy(self, source: str, destination: str, config: ConfigLike = None) -> None:
        ...


@runtime_checkable
class UrlGenerator(Protocol):
    """URL capabilities offered next to the filesystem operations."""

    def public_url(self, path: str, config: ConfigLike = None) -> str:
        ...

    def temporary_url(self, path: str, expires_at: Union[datetime, int], config: ConfigLike = None) -> str:
        ...

    def checksum(self, path: str, config: ConfigLike = None) -> str:
        ...
