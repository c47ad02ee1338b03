"""Filesystem adapter for Volcengine TOS object storage."""
from .adapter import TosAdapter
from .base import FilesystemAdapter, MimeTypeDetector, UrlGenerator, VisibilityConverter
from .config import AdapterOptions, WriteConfig
from .exceptions import (
    ChecksumAlgoIsNotSupported,
    ConfigurationError,
    FilesystemOperationFailed,
    StorageError,
    UnableToCheckDirectoryExistence,
    UnableToCopyFile,
    UnableToCreateDirectory,
    UnableToDeleteDirectory,
    UnableToDeleteFile,
    UnableToGenerateTemporaryUrl,
    UnableToGetUrl,
    UnableToListContents,
    UnableToMoveFile,
    UnableToReadFile,
    UnableToRetrieveMetadata,
    UnableToSetVisibility,
    UnableToWriteFile,
)
from .factory import build_tos_adapter, build_tos_client, get_tos_adapter
from .models import (
    DirectoryAttributes,
    FileAttributes,
    ListedObjectRecord,
    ListingResult,
    StorageAttributes,
    Visibility,
)
from .utils import ExtensionMimeTypeDetector, PathPrefixer
from .visibility import PortableVisibilityConverter

__all__ = [
    # Adapter
    "TosAdapter",
    "build_tos_adapter",
    "build_tos_client",
    "get_tos_adapter",

    # Protocols
    "FilesystemAdapter",
    "UrlGenerator",
    "VisibilityConverter",
    "MimeTypeDetector",

    # Collaborators
    "PortableVisibilityConverter",
    "ExtensionMimeTypeDetector",
    "PathPrefixer",

    # Configuration
    "AdapterOptions",
    "WriteConfig",

    # Models
    "Visibility",
    "FileAttributes",
    "DirectoryAttributes",
    "StorageAttributes",
    "ListedObjectRecord",
    "ListingResult",

    # Exceptions
    "StorageError",
    "ConfigurationError",
    "FilesystemOperationFailed",
    "UnableToWriteFile",
    "UnableToReadFile",
    "UnableToCopyFile",
    "UnableToMoveFile",
    "UnableToDeleteFile",
    "UnableToDeleteDirectory",
    "UnableToCreateDirectory",
    "UnableToSetVisibility",
    "UnableToRetrieveMetadata",
    "UnableToCheckDirectoryExistence",
    "UnableToListContents",
    "UnableToGenerateTemporaryUrl",
    "UnableToGetUrl",
    "ChecksumAlgoIsNotSupported",
]
