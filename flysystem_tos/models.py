"""Storage attribute models."""
from datetime import datetime
from enum import Enum
from typing import Literal, Optional, Union
from pydantic import BaseModel, Field


class Visibility(str, Enum):
    """Portable two-valued visibility."""
    PUBLIC = "public"
    PRIVATE = "private"


class FileAttributes(BaseModel):
    """File entry returned by metadata and listing calls."""
    type: Literal["file"] = "file"
    path: str
    file_size: Optional[int] = None
    visibility: Optional[Visibility] = None
    last_modified: Optional[int] = None  # epoch seconds
    mime_type: Optional[str] = None
    extra_metadata: dict[str, str] = Field(default_factory=dict)

    def is_file(self) -> bool:
        return True

    def is_dir(self) -> bool:
        return False


class DirectoryAttributes(BaseModel):
    """Directory entry; directories only exist as prefixes or marker objects."""
    type: Literal["dir"] = "dir"
    path: str
    visibility: Optional[Visibility] = None
    last_modified: Optional[int] = None
    extra_metadata: dict[str, str] = Field(default_factory=dict)

    def is_file(self) -> bool:
        return False

    def is_dir(self) -> bool:
        return True


StorageAttributes = Union[FileAttributes, DirectoryAttributes]


class ListedObjectRecord(BaseModel):
    """Raw object record collected while paginating a listing."""
    key: str
    dirname: str = ""  # directory argument of the listing call
    size: Optional[int] = None
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None
    storage_class: Optional[str] = None
    content_type: Optional[str] = None


class ListingResult(BaseModel):
    """Objects and common prefixes of one listing (a page or the whole run)."""
    objects: list[ListedObjectRecord] = Field(default_factory=list)
    prefixes: list[str] = Field(default_factory=list)

    def extend(self, other: "ListingResult") -> None:
        self.objects.extend(other.objects)
        self.prefixes.extend(other.prefixes)
