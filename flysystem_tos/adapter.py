"""Volcengine TOS filesystem adapter."""
from datetime import datetime, timedelta, timezone
from typing import Any, BinaryIO, Iterator, Mapping, Optional, Union
from urllib.parse import urlsplit

from tos.enum import ACLType, HttpMethodType
from tos.exceptions import TosClientError, TosServerError
from tos.models2 import ObjectTobeDeleted

from core.logging_config import get_logger
from .base import MimeTypeDetector, VisibilityConverter
from .config import AdapterOptions, ConfigLike, WriteConfig, resolve_config, resolve_options
from .exceptions import (
    ChecksumAlgoIsNotSupported,
    FilesystemOperationFailed,
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
from .models import (
    DirectoryAttributes,
    FileAttributes,
    ListedObjectRecord,
    ListingResult,
    StorageAttributes,
    Visibility,
)
from .utils import (
    ExtensionMimeTypeDetector,
    PathPrefixer,
    concat_path_to_url,
    expires_in_seconds,
    replace_base_url,
    to_timestamp,
)
from .visibility import PortableVisibilityConverter

logger = get_logger(__name__)

DELIMITER = "/"
MAX_KEYS = 1000  # TOS limit for one listing page and one multi-delete batch
NATIVE_CHECKSUM_ALGO = "etag"

TOS_ERRORS = (TosClientError, TosServerError)


def _backend_message(e: BaseException) -> str:
    return getattr(e, "message", None) or str(e)


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


class TosAdapter:
    """Filesystem adapter backed by a ``tos.TosClientV2``."""

    def __init__(
        self,
        client: Any,  # tos.TosClientV2
        bucket: str,
        prefix: str = "",
        visibility: Optional[VisibilityConverter] = None,
        mime_type_detector: Optional[MimeTypeDetector] = None,
        options: Union[AdapterOptions, Mapping[str, Any], None] = None,
    ):
        """Initialize TOS adapter.

        Args:
            client: TOS SDK client instance
            bucket: Bucket every operation runs against
            prefix: Key prefix acting as the virtual root
            visibility: Visibility converter, portable public/private by default
            mime_type_detector: MIME detector, extension based by default
            options: URL options (url, temporary_url, endpoint, bucket_endpoint)
        """
        self.client = client
        self._bucket = bucket
        self.prefixer = PathPrefixer(prefix)
        self.visibility_converter = visibility or PortableVisibilityConverter()
        self.mime_type_detector = mime_type_detector or ExtensionMimeTypeDetector()
        self.options = resolve_options(options)

    @property
    def bucket(self) -> str:
        return self._bucket

    def set_bucket(self, bucket: str) -> None:
        self._bucket = bucket

    def get_client(self) -> Any:
        return self.client

    def kernel(self) -> Any:
        """Underlying SDK client, for calls the adapter does not cover."""
        return self.get_client()

    # Existence checks

    def file_exists(self, path: str) -> bool:
        """True iff a HEAD on the object succeeds; backend errors read as absent."""
        try:
            self.client.head_object(self.bucket, self.prefixer.prefix_path(path))
            return True
        except TOS_ERRORS as e:
            logger.debug("TOS head_object failed, treating file as missing", path=path, error=_backend_message(e))
            return False

    def directory_exists(self, path: str) -> bool:
        """True when the one-key probe returns an object or a common prefix.

        A directory holding only nested keys shows up as a common prefix
        alone, so it counts as existing too.
        """
        try:
            output = self.client.list_objects(
                self.bucket,
                prefix=self.prefixer.prefix_directory_path(path),
                delimiter=DELIMITER,
                max_keys=1,
            )
        except TOS_ERRORS as e:
            raise UnableToCheckDirectoryExistence.at_location(path, _backend_message(e), e) from e

        if output is None:
            raise UnableToCheckDirectoryExistence.at_location(path, "Empty listing response")
        return bool(output.contents) or bool(output.common_prefixes)

    # Writing

    def write(self, path: str, contents: Union[bytes, str], config: ConfigLike = None) -> None:
        """Write ``contents`` to ``path``, replacing any existing object."""
        if isinstance(contents, str):
            contents = contents.encode("utf-8")
        self._upload(path, contents, resolve_config(config), detect_from=contents)

    def write_stream(self, path: str, contents: BinaryIO, config: ConfigLike = None) -> None:
        """Write a readable stream; the MIME type is detected from the path only."""
        self._upload(path, contents, resolve_config(config), detect_from=None)

    def _upload(self, path: str, body: Any, config: WriteConfig, detect_from: Optional[bytes]) -> None:
        key = self.prefixer.prefix_path(path)
        kwargs: dict[str, Any] = {}

        try:
            if config.acl:
                kwargs["acl"] = ACLType(config.acl)
            elif config.visibility is not None:
                kwargs["acl"] = self.visibility_converter.visibility_to_acl(config.visibility)
        except ValueError as e:
            raise UnableToWriteFile.at_location(path, f"Unsupported ACL: {config.acl}", e) from e

        content_type = config.content_type or config.mimetype
        if content_type is None and detect_from != b"":
            content_type = self.mime_type_detector.detect_mime_type(path, detect_from)
        if content_type:
            kwargs["content_type"] = content_type

        if config.expires is not None:
            kwargs["expires"] = self._expires_at(config.expires)

        try:
            self.client.put_object(self.bucket, key, content=body, **kwargs)
        except TOS_ERRORS as e:
            raise UnableToWriteFile.at_location(path, _backend_message(e), e) from e

        logger.info("Wrote object to TOS", key=key, content_type=content_type, acl=_enum_value(kwargs.get("acl")))

    @staticmethod
    def _expires_at(expires: Union[datetime, int]) -> datetime:
        # Integers are seconds from now, like signed URL expirations
        if isinstance(expires, datetime):
            return expires
        return datetime.now(timezone.utc) + timedelta(seconds=int(expires))

    # Reading

    def read(self, path: str) -> bytes:
        content = self._get_content(path)
        try:
            return content.read()
        finally:
            close = getattr(content, "close", None)
            if close is not None:
                close()

    def read_stream(self, path: str) -> BinaryIO:
        """Return the unread response body; the caller owns and closes it."""
        return self._get_content(path)

    def _get_content(self, path: str) -> Any:
        try:
            output = self.client.get_object(self.bucket, self.prefixer.prefix_path(path))
        except TOS_ERRORS as e:
            raise UnableToReadFile.at_location(path, _backend_message(e), e) from e

        content = getattr(output, "content", None)
        if content is None:
            raise UnableToReadFile.at_location(path, "Empty response body")
        return content

    # Deleting

    def delete(self, path: str) -> None:
        key = self.prefixer.prefix_path(path)
        try:
            self.client.delete_object(self.bucket, key)
        except TOS_ERRORS as e:
            raise UnableToDeleteFile.at_location(path, _backend_message(e), e) from e
        logger.info("Deleted object from TOS", key=key)

    def delete_directory(self, path: str) -> None:
        """Delete every object under ``path`` in batches of at most 1000 keys.

        Batches already deleted stay deleted when a later batch fails.
        """
        try:
            keys = [
                record.key
                for page in self.iter_dir_objects(path, recursive=True)
                for record in page.objects
            ]
        except UnableToListContents as e:
            raise UnableToDeleteDirectory.at_location(path, e.reason, e) from e

        if not keys:
            return

        for start in range(0, len(keys), MAX_KEYS):
            batch = keys[start:start + MAX_KEYS]
            try:
                output = self.client.delete_multi_objects(
                    self.bucket,
                    [ObjectTobeDeleted(key=key) for key in batch],
                    quiet=True,
                )
            except TOS_ERRORS as e:
                raise UnableToDeleteDirectory.at_location(path, _backend_message(e), e) from e

            failed = getattr(output, "error", None) or []
            if failed:
                for item in failed:
                    logger.warning(
                        "TOS multi-delete left object behind",
                        key=getattr(item, "key", None),
                        code=getattr(item, "code", None),
                    )
                raise UnableToDeleteDirectory.at_location(
                    path, f"{len(failed)} object(s) could not be deleted"
                )

        logger.info("Deleted directory from TOS", path=path, objects=len(keys))

    # Directories

    def create_directory(self, path: str, config: ConfigLike = None) -> None:
        """Create a zero-byte ``path/`` marker using the directory visibility."""
        config = resolve_config(config)
        visibility = config.directory_visibility or self.visibility_converter.default_for_directories()
        marker_config = config.model_copy(update={"visibility": visibility})
        try:
            self.write(path.rstrip("/") + "/", b"", marker_config)
        except FilesystemOperationFailed as e:
            raise UnableToCreateDirectory.at_location(path, e.reason, e) from e

    # Visibility

    def set_visibility(self, path: str, visibility: Union[Visibility, str]) -> None:
        try:
            self.client.put_object_acl(
                self.bucket,
                self.prefixer.prefix_path(path),
                acl=self.visibility_converter.visibility_to_acl(visibility),
            )
        except TOS_ERRORS as e:
            raise UnableToSetVisibility.at_location(path, _backend_message(e), e) from e

    def visibility(self, path: str) -> FileAttributes:
        try:
            output = self.client.get_object_acl(self.bucket, self.prefixer.prefix_path(path))
        except TOS_ERRORS as e:
            raise UnableToRetrieveMetadata.visibility(path, _backend_message(e), e) from e

        if output is None:
            raise UnableToRetrieveMetadata.visibility(path, "Empty ACL response")

        visibility = self.visibility_converter.acl_to_visibility(getattr(output, "grants", None))
        return FileAttributes(path=path, visibility=visibility)

    # Metadata

    def get_metadata(self, path: str, metadata_type: str = "metadata") -> StorageAttributes:
        """HEAD the object and map every field TOS returns."""
        key = self.prefixer.prefix_path(path)
        try:
            output = self.client.head_object(self.bucket, key)
        except TOS_ERRORS as e:
            raise UnableToRetrieveMetadata.create(path, metadata_type, _backend_message(e), e) from e

        if output is None:
            raise UnableToRetrieveMetadata.create(path, metadata_type, "Empty HEAD response")

        record = ListedObjectRecord(
            key=key,
            size=getattr(output, "content_length", None),
            last_modified=getattr(output, "last_modified", None),
            etag=getattr(output, "etag", None),
            storage_class=_enum_value(getattr(output, "storage_class", None)),
            content_type=getattr(output, "content_type", None),
        )
        return self._map_object_metadata(record, path)

    def _file_metadata(self, path: str, metadata_type: str) -> FileAttributes:
        attributes = self.get_metadata(path, metadata_type)
        if not isinstance(attributes, FileAttributes):
            raise UnableToRetrieveMetadata.create(path, metadata_type, "Path is a directory")
        return attributes

    def mime_type(self, path: str) -> FileAttributes:
        attributes = self._file_metadata(path, UnableToRetrieveMetadata.MIME_TYPE)
        if attributes.mime_type is None:
            raise UnableToRetrieveMetadata.mime_type(path)
        return attributes

    def last_modified(self, path: str) -> FileAttributes:
        attributes = self._file_metadata(path, UnableToRetrieveMetadata.LAST_MODIFIED)
        if attributes.last_modified is None:
            raise UnableToRetrieveMetadata.last_modified(path)
        return attributes

    def file_size(self, path: str) -> FileAttributes:
        attributes = self._file_metadata(path, UnableToRetrieveMetadata.FILE_SIZE)
        if attributes.file_size is None:
            raise UnableToRetrieveMetadata.file_size(path)
        return attributes

    def checksum(self, path: str, config: ConfigLike = None) -> str:
        """ETag of the object, unquoted and lowercased."""
        algo = (resolve_config(config).checksum_algo or NATIVE_CHECKSUM_ALGO).lower()
        if algo != NATIVE_CHECKSUM_ALGO:
            raise ChecksumAlgoIsNotSupported(
                f"Checksum algorithm {algo!r} is not supported, only {NATIVE_CHECKSUM_ALGO!r} is available."
            )

        attributes = self._file_metadata(path, UnableToRetrieveMetadata.CHECKSUM)
        etag = attributes.extra_metadata.get("ETag")
        if not etag:
            raise UnableToRetrieveMetadata.checksum(path, "ETag is missing")
        return etag.strip('"').lower()

    def _map_object_metadata(self, record: ListedObjectRecord, path: Optional[str] = None) -> StorageAttributes:
        if path is None:
            path = self.prefixer.strip_prefix(record.key)

        if path.endswith("/"):
            return DirectoryAttributes(path=path.rstrip("/"))

        extra: dict[str, str] = {}
        if record.etag:
            extra["ETag"] = record.etag
        if record.storage_class:
            extra["StorageClass"] = str(record.storage_class)

        return FileAttributes(
            path=path,
            file_size=record.size,
            last_modified=to_timestamp(record.last_modified),
            mime_type=record.content_type,
            extra_metadata=extra,
        )

    # Listing

    def list_contents(self, path: str = "", deep: bool = False) -> Iterator[StorageAttributes]:
        """Lazily list entries under ``path``, one TOS page at a time."""
        directory = path.strip("/")
        for page in self.iter_dir_objects(directory, recursive=deep):
            for record in page.objects:
                # The directory's own marker object is not part of its contents
                if self.prefixer.strip_directory_prefix(record.key) == directory:
                    continue
                yield self._map_object_metadata(record)

            for prefix in page.prefixes:
                yield DirectoryAttributes(path=self.prefixer.strip_directory_prefix(prefix))

    def iter_dir_objects(self, dirname: str = "", recursive: bool = False) -> Iterator[ListingResult]:
        """Yield one ``ListingResult`` per TOS ``list_objects`` page."""
        prefix = self.prefixer.prefix_path(dirname).strip("/")
        prefix = f"{prefix}/" if prefix else ""
        delimiter = "" if recursive else DELIMITER
        marker = ""

        while True:
            try:
                output = self.client.list_objects(
                    self.bucket,
                    prefix=prefix,
                    delimiter=delimiter,
                    marker=marker,
                    max_keys=MAX_KEYS,
                )
            except TOS_ERRORS as e:
                raise UnableToListContents.at_location(dirname, _backend_message(e), e) from e

            if output is None:
                raise UnableToListContents.at_location(dirname, "Empty listing response")

            page = ListingResult(
                objects=[
                    ListedObjectRecord(
                        key=obj.key,
                        dirname=dirname,
                        size=getattr(obj, "size", None),
                        last_modified=getattr(obj, "last_modified", None),
                        etag=getattr(obj, "etag", None),
                        storage_class=_enum_value(getattr(obj, "storage_class", None)),
                    )
                    for obj in (output.contents or [])
                ],
                prefixes=[common.prefix for common in (output.common_prefixes or [])],
            )
            logger.debug(
                "Listed TOS page",
                prefix=prefix,
                marker=marker,
                objects=len(page.objects),
                prefixes=len(page.prefixes),
            )
            yield page

            marker = getattr(output, "next_marker", None) or ""
            if not marker and getattr(output, "is_truncated", False):
                # Resume after the greatest key or prefix seen on this page
                seen = [record.key for record in page.objects] + page.prefixes
                if not seen:
                    raise UnableToListContents.at_location(dirname, "Truncated listing page without a marker")
                marker = max(seen)
            if not marker:
                break

    def list_dir_objects(self, dirname: str = "", recursive: bool = False) -> ListingResult:
        """Collect every page of ``iter_dir_objects`` into a single result."""
        result = ListingResult()
        for page in self.iter_dir_objects(dirname, recursive):
            result.extend(page)
        return result

    # Copy / move

    def copy(self, source: str, destination: str, config: ConfigLike = None) -> None:
        """Copy ``source`` to ``destination``, carrying visibility across.

        Without an explicit visibility the source ACL is looked up. With
        ``retain_visibility`` disabled the converter's default visibility
        is used instead.
        """
        config = resolve_config(config)
        visibility = config.visibility
        if visibility is None:
            if config.retain_visibility:
                try:
                    visibility = self.visibility(source).visibility
                except FilesystemOperationFailed as e:
                    raise UnableToCopyFile.from_location_to(source, destination, e) from e
            else:
                visibility = self.visibility_converter.default_visibility()

        try:
            self.client.copy_object(
                self.bucket,
                self.prefixer.prefix_path(destination),
                self.bucket,
                self.prefixer.prefix_path(source),
                acl=self.visibility_converter.visibility_to_acl(visibility or Visibility.PRIVATE),
            )
        except TOS_ERRORS as e:
            raise UnableToCopyFile.from_location_to(source, destination, e) from e

        logger.info("Copied object in TOS", source=source, destination=destination)

    def move(self, source: str, destination: str, config: ConfigLike = None) -> None:
        """Copy then delete; a completed copy is left in place if the delete fails."""
        try:
            self.copy(source, destination, config)
            self.delete(source)
        except FilesystemOperationFailed as e:
            raise UnableToMoveFile.from_location_to(source, destination, e) from e

    # URLs

    def public_url(self, path: str, config: ConfigLike = None) -> str:
        key = self.prefixer.prefix_path(path)
        if self.options.url:
            return concat_path_to_url(self.options.url, key)
        return concat_path_to_url(self._normalize_host(), key)

    def get_url(self, path: str) -> str:
        return self.public_url(path)

    def _normalize_host(self) -> str:
        endpoint = self.options.endpoint
        if not endpoint:
            raise UnableToGetUrl.missing_option("endpoint")

        if not endpoint.startswith("http"):
            endpoint = f"https://{endpoint}"

        parsed = urlsplit(endpoint)
        domain = parsed.hostname or ""
        if not self.options.bucket_endpoint:
            domain = f"{self.bucket}.{domain}"

        return f"{parsed.scheme}://{domain}".rstrip("/") + "/"

    def sign_url(
        self,
        path: str,
        expiration: Union[datetime, int],
        options: Optional[Mapping[str, Any]] = None,
        method: str = "GET",
    ) -> str:
        """Presign ``method`` on ``path``; ``expiration`` is seconds or a datetime."""
        alternative_endpoint = None
        if self.options.bucket_endpoint:
            if not self.options.endpoint:
                raise UnableToGetUrl.missing_option("endpoint")
            alternative_endpoint = self.options.endpoint
        if self.options.temporary_url:
            alternative_endpoint = self.options.temporary_url
        bucket = "" if alternative_endpoint else self.bucket

        try:
            http_method = HttpMethodType(method.upper())
        except ValueError as e:
            raise UnableToGenerateTemporaryUrl.at_location(path, f"Unsupported method: {method}", e) from e

        try:
            output = self.client.pre_signed_url(
                http_method,
                bucket,
                self.prefixer.prefix_path(path),
                expires=expires_in_seconds(expiration),
                query=dict(options) if options else None,
                alternative_endpoint=alternative_endpoint,
            )
        except TOS_ERRORS as e:
            raise UnableToGenerateTemporaryUrl.at_location(path, _backend_message(e), e) from e

        return output.signed_url

    def temporary_url(self, path: str, expires_at: Union[datetime, int], config: ConfigLike = None) -> str:
        config = resolve_config(config)
        url = self.sign_url(path, expires_at, config.signing_options, config.method)
        if self.options.temporary_url:
            url = replace_base_url(url, self.options.temporary_url)
        return url
