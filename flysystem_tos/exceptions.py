"""Storage adapter exceptions."""
from typing import Optional


class StorageError(Exception):
    """Base storage exception."""
    pass


class ConfigurationError(StorageError):
    """Storage configuration error."""
    pass


class FilesystemOperationFailed(StorageError):
    """A filesystem operation failed for a specific location.

    The backend exception, when there is one, is chained as ``__cause__``.
    """

    operation: str = "unknown"

    def __init__(self, message: str, location: str = "", reason: str = ""):
        super().__init__(message)
        self.location = location
        self.reason = reason

    @classmethod
    def at_location(
        cls,
        location: str,
        reason: str = "",
        previous: Optional[BaseException] = None,
    ) -> "FilesystemOperationFailed":
        message = f"Unable to {cls.operation} at location: {location}."
        if reason:
            message = f"{message} {reason}"
        error = cls(message, location=location, reason=reason)
        error.__cause__ = previous
        return error


class UnableToWriteFile(FilesystemOperationFailed):
    operation = "write file"


class UnableToReadFile(FilesystemOperationFailed):
    operation = "read file"


class UnableToDeleteFile(FilesystemOperationFailed):
    operation = "delete file"


class UnableToDeleteDirectory(FilesystemOperationFailed):
    operation = "delete directory"


class UnableToCreateDirectory(FilesystemOperationFailed):
    operation = "create directory"


class UnableToSetVisibility(FilesystemOperationFailed):
    operation = "set visibility"


class UnableToCheckDirectoryExistence(FilesystemOperationFailed):
    operation = "check directory existence"


class UnableToListContents(FilesystemOperationFailed):
    operation = "list contents"


class UnableToGenerateTemporaryUrl(FilesystemOperationFailed):
    operation = "generate temporary url"


class _TransferFailed(FilesystemOperationFailed):
    """Failure moving data from one location to another."""

    source: str = ""
    destination: str = ""

    @classmethod
    def from_location_to(
        cls,
        source: str,
        destination: str,
        previous: Optional[BaseException] = None,
    ) -> "_TransferFailed":
        reason = str(previous) if previous is not None else ""
        message = f"Unable to {cls.operation} from {source} to {destination}"
        if reason:
            message = f"{message}: {reason}"
        error = cls(message, location=source, reason=reason)
        error.source = source
        error.destination = destination
        error.__cause__ = previous
        return error


class UnableToCopyFile(_TransferFailed):
    operation = "copy file"


class UnableToMoveFile(_TransferFailed):
    """Move failed; a completed copy is not rolled back."""

    operation = "move file"


class UnableToRetrieveMetadata(FilesystemOperationFailed):
    """Metadata could not be retrieved; ``metadata_type`` names which field."""

    operation = "retrieve metadata"

    VISIBILITY = "visibility"
    FILE_SIZE = "file_size"
    MIME_TYPE = "mime_type"
    LAST_MODIFIED = "last_modified"
    CHECKSUM = "checksum"

    metadata_type: str = ""

    @classmethod
    def create(
        cls,
        location: str,
        metadata_type: str,
        reason: str = "",
        previous: Optional[BaseException] = None,
    ) -> "UnableToRetrieveMetadata":
        message = f"Unable to retrieve the {metadata_type} for file at location: {location}."
        if reason:
            message = f"{message} {reason}"
        error = cls(message, location=location, reason=reason)
        error.metadata_type = metadata_type
        error.__cause__ = previous
        return error

    @classmethod
    def visibility(cls, location: str, reason: str = "", previous: Optional[BaseException] = None):
        return cls.create(location, cls.VISIBILITY, reason, previous)

    @classmethod
    def file_size(cls, location: str, reason: str = "", previous: Optional[BaseException] = None):
        return cls.create(location, cls.FILE_SIZE, reason, previous)

    @classmethod
    def mime_type(cls, location: str, reason: str = "", previous: Optional[BaseException] = None):
        return cls.create(location, cls.MIME_TYPE, reason, previous)

    @classmethod
    def last_modified(cls, location: str, reason: str = "", previous: Optional[BaseException] = None):
        return cls.create(location, cls.LAST_MODIFIED, reason, previous)

    @classmethod
    def checksum(cls, location: str, reason: str = "", previous: Optional[BaseException] = None):
        return cls.create(location, cls.CHECKSUM, reason, previous)


class ChecksumAlgoIsNotSupported(StorageError):
    """Requested checksum algorithm is not provided by the backend."""
    pass


class UnableToGetUrl(ConfigurationError):
    """URL cannot be built because a required option is missing."""

    @classmethod
    def missing_option(cls, option: str) -> "UnableToGetUrl":
        return cls(f"Unable to get url with option {option} missing.")
