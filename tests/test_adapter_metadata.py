import hashlib
import time
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from flysystem_tos import (
    ChecksumAlgoIsNotSupported,
    DirectoryAttributes,
    FileAttributes,
    UnableToRetrieveMetadata,
)


def test_file_size(adapter):
    attributes = adapter.file_size("fixture/read.txt")
    assert isinstance(attributes, FileAttributes)
    assert attributes.path == "fixture/read.txt"
    assert attributes.file_size == 9


def test_mime_type(adapter):
    assert adapter.mime_type("fixture/read.txt").mime_type == "text/plain"


def test_last_modified(adapter):
    assert adapter.last_modified("fixture/read.txt").last_modified > time.time() - 10


def test_get_metadata_maps_extra_metadata(adapter):
    attributes = adapter.get_metadata("fixture/read.txt")
    assert attributes.extra_metadata == {
        "ETag": '"' + hashlib.md5(b"read-test").hexdigest().upper() + '"',
        "StorageClass": "STANDARD",
    }


def test_get_metadata_on_directory_marker(adapter):
    adapter.create_directory("dir", {})
    assert isinstance(adapter.get_metadata("dir/"), DirectoryAttributes)
    with pytest.raises(UnableToRetrieveMetadata) as exc_info:
        adapter.file_size("dir/")
    assert exc_info.value.metadata_type == UnableToRetrieveMetadata.FILE_SIZE


def test_missing_size_fails_even_though_head_succeeded(adapter, client):
    client.head_overrides["no-size.txt"] = SimpleNamespace(
        content_length=None,
        content_type="text/plain",
        last_modified=datetime.now(timezone.utc),
        etag='"abc"',
        storage_class="STANDARD",
    )
    with pytest.raises(UnableToRetrieveMetadata) as exc_info:
        adapter.file_size("no-size.txt")
    assert exc_info.value.metadata_type == "file_size"
    assert exc_info.value.location == "no-size.txt"

    # the other fields are still available
    assert adapter.mime_type("no-size.txt").mime_type == "text/plain"


def test_missing_mime_type_fails(adapter, client):
    client.head_overrides["no-type"] = SimpleNamespace(
        content_length=3,
        content_type=None,
        last_modified=None,
        etag=None,
        storage_class=None,
    )
    with pytest.raises(UnableToRetrieveMetadata) as exc_info:
        adapter.mime_type("no-type")
    assert exc_info.value.metadata_type == "mime_type"

    with pytest.raises(UnableToRetrieveMetadata) as exc_info:
        adapter.last_modified("no-type")
    assert exc_info.value.metadata_type == "last_modified"

    with pytest.raises(UnableToRetrieveMetadata) as exc_info:
        adapter.checksum("no-type")
    assert exc_info.value.metadata_type == "checksum"


def test_metadata_of_missing_file_wraps_backend_error(adapter):
    with pytest.raises(UnableToRetrieveMetadata) as exc_info:
        adapter.file_size("missing.txt")
    assert exc_info.value.metadata_type == "file_size"
    assert exc_info.value.__cause__ is not None


def test_checksum_is_unquoted_lowercase_etag(adapter):
    assert adapter.checksum("fixture/read.txt") == hashlib.md5(b"read-test").hexdigest()
    assert adapter.checksum("fixture/read.txt", {"checksum_algo": "etag"}) == hashlib.md5(b"read-test").hexdigest()


@pytest.mark.parametrize("path", ["fixture/read.txt", "missing.txt"])
def test_checksum_with_other_algorithm_is_unsupported(adapter, client, path):
    head_calls = len(client.calls_to("head_object"))
    with pytest.raises(ChecksumAlgoIsNotSupported):
        adapter.checksum(path, {"checksum_algo": "md5"})
    assert len(client.calls_to("head_object")) == head_calls
