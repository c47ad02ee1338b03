"""Pytest bootstrap configuration.

Provides an in-memory stand-in for ``tos.TosClientV2`` so adapter tests run
without network access or credentials.
"""
import hashlib
import io
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Optional
from urllib.parse import quote, urlencode

# Keep log output machine readable and quiet during tests
os.environ.setdefault("DEBUG", "false")

import pytest
from tos.enum import ACLType, CannedType, PermissionType
from tos.exceptions import TosClientError

from flysystem_tos import TosAdapter


@dataclass
class StoredObject:
    data: bytes
    content_type: Optional[str] = None
    acl: Any = ACLType.ACL_Private
    expires: Optional[datetime] = None
    last_modified: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def etag(self) -> str:
        return '"' + hashlib.md5(self.data).hexdigest().upper() + '"'


class FakeTosClient:
    """Minimal TosClientV2 double with S3 style listing semantics."""

    def __init__(self, endpoint: str = "tos-cn-shanghai.volces.com"):
        self.endpoint = endpoint
        self.buckets: dict[str, dict[str, StoredObject]] = {}
        self.calls: list[tuple[str, dict]] = []
        self.head_overrides: dict[str, SimpleNamespace] = {}

    def _objects(self, bucket: str) -> dict[str, StoredObject]:
        return self.buckets.setdefault(bucket, {})

    def _record(self, name: str, **kwargs: Any) -> None:
        self.calls.append((name, kwargs))

    def calls_to(self, name: str) -> list[dict]:
        return [kwargs for called, kwargs in self.calls if called == name]

    def _get(self, bucket: str, key: str) -> StoredObject:
        try:
            return self._objects(bucket)[key]
        except KeyError:
            raise TosClientError(f"NoSuchKey: {key}")

    def put_object(self, bucket, key, content=None, content_type=None, expires=None, acl=None, **kwargs):
        self._record("put_object", bucket=bucket, key=key, content_type=content_type, expires=expires, acl=acl)
        if content is None:
            data = b""
        elif hasattr(content, "read"):
            data = content.read()
        elif isinstance(content, str):
            data = content.encode("utf-8")
        else:
            data = bytes(content)
        self._objects(bucket)[key] = StoredObject(
            data=data,
            content_type=content_type,
            acl=acl or ACLType.ACL_Private,
            expires=expires,
        )
        return SimpleNamespace(etag=self._objects(bucket)[key].etag)

    def get_object(self, bucket, key, **kwargs):
        self._record("get_object", bucket=bucket, key=key)
        stored = self._get(bucket, key)
        return SimpleNamespace(content=io.BytesIO(stored.data), content_length=len(stored.data))

    def head_object(self, bucket, key, **kwargs):
        self._record("head_object", bucket=bucket, key=key)
        if key in self.head_overrides:
            return self.head_overrides[key]
        stored = self._get(bucket, key)
        return SimpleNamespace(
            content_length=len(stored.data),
            content_type=stored.content_type,
            last_modified=stored.last_modified,
            etag=stored.etag,
            storage_class="STANDARD",
        )

    def delete_object(self, bucket, key, **kwargs):
        self._record("delete_object", bucket=bucket, key=key)
        self._objects(bucket).pop(key, None)

    def copy_object(self, bucket, key, src_bucket, src_key, acl=None, **kwargs):
        self._record("copy_object", bucket=bucket, key=key, src_bucket=src_bucket, src_key=src_key, acl=acl)
        source = self._get(src_bucket, src_key)
        self._objects(bucket)[key] = StoredObject(
            data=source.data,
            content_type=source.content_type,
            acl=acl or ACLType.ACL_Private,
        )

    def list_objects(self, bucket, prefix="", delimiter="", marker="", max_keys=1000, **kwargs):
        self._record("list_objects", bucket=bucket, prefix=prefix, delimiter=delimiter, marker=marker, max_keys=max_keys)
        contents, common_prefixes = [], []
        seen_prefixes = set()
        last = ""
        truncated = False

        for key in sorted(self._objects(bucket)):
            if not key.startswith(prefix) or (marker and key <= marker):
                continue
            # A common prefix used as marker covers every key below it
            if marker and delimiter and marker.endswith(delimiter) and key.startswith(marker):
                continue
            if len(contents) + len(common_prefixes) >= max_keys:
                truncated = True
                break

            rest = key[len(prefix):]
            index = rest.find(delimiter) if delimiter else -1
            if index >= 0:
                common = prefix + rest[:index + 1]
                if common not in seen_prefixes:
                    seen_prefixes.add(common)
                    common_prefixes.append(SimpleNamespace(prefix=common))
                last = common
                continue

            stored = self._objects(bucket)[key]
            contents.append(SimpleNamespace(
                key=key,
                size=len(stored.data),
                last_modified=stored.last_modified,
                etag=stored.etag,
                storage_class="STANDARD",
            ))
            last = key

        return SimpleNamespace(
            contents=contents,
            common_prefixes=common_prefixes,
            is_truncated=truncated,
            next_marker=last if truncated else "",
        )

    def delete_multi_objects(self, bucket, objects, quiet=False, **kwargs):
        keys = [obj.key for obj in objects]
        self._record("delete_multi_objects", bucket=bucket, keys=keys, quiet=quiet)
        for key in keys:
            self._objects(bucket).pop(key, None)
        return SimpleNamespace(deleted=[SimpleNamespace(key=key) for key in keys], error=[])

    def get_object_acl(self, bucket, key, **kwargs):
        self._record("get_object_acl", bucket=bucket, key=key)
        stored = self._get(bucket, key)
        grants = [
            SimpleNamespace(
                grantee=SimpleNamespace(id="owner", canned=None),
                permission="FULL_CONTROL",
            ),
        ]
        if stored.acl == ACLType.ACL_Public_Read:
            grants.append(SimpleNamespace(
                grantee=SimpleNamespace(id=None, canned=CannedType.Canned_All_Users),
                permission=PermissionType.Permission_Read,
            ))
        return SimpleNamespace(grants=grants)

    def put_object_acl(self, bucket, key, acl=None, **kwargs):
        self._record("put_object_acl", bucket=bucket, key=key, acl=acl)
        self._get(bucket, key).acl = acl

    def pre_signed_url(self, http_method, bucket, key, expires=3600, header=None, query=None, alternative_endpoint=None):
        self._record(
            "pre_signed_url",
            http_method=http_method,
            bucket=bucket,
            key=key,
            expires=expires,
            query=query,
            alternative_endpoint=alternative_endpoint,
        )
        if alternative_endpoint:
            host = alternative_endpoint.split("://", 1)[-1].rstrip("/")
        else:
            host = f"{bucket}.{self.endpoint}"
        params = {"X-Tos-Algorithm": "TOS4-HMAC-SHA256", "X-Tos-Expires": str(expires)}
        params.update(query or {})
        return SimpleNamespace(signed_url=f"https://{host}/{quote(key)}?{urlencode(params)}")


class FailingTosClient:
    """Every SDK call raises, the way an unreachable or unauthorized backend does."""

    def __init__(self):
        self.calls: list[str] = []

    def __getattr__(self, name: str):
        def _fail(*args, **kwargs):
            self.calls.append(name)
            raise TosClientError(f"{name} failed: connection refused")
        return _fail


@pytest.fixture
def client() -> FakeTosClient:
    return FakeTosClient()


@pytest.fixture
def adapter(client: FakeTosClient) -> TosAdapter:
    adapter = TosAdapter(client, "test", options={"endpoint": "tos-cn-shanghai.volces.com"})
    adapter.write("fixture/read.txt", "read-test", {"visibility": "private"})
    return adapter


@pytest.fixture
def failing_client() -> FailingTosClient:
    return FailingTosClient()


@pytest.fixture
def failing_adapter(failing_client: FailingTosClient) -> TosAdapter:
    return TosAdapter(failing_client, "test", options={"endpoint": "tos-cn-shanghai.volces.com"})
