"""Adapter configuration models."""
from datetime import datetime
from typing import Any, Mapping, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigurationError
from .models import Visibility


class AdapterOptions(BaseModel):
    """Construction-time options controlling URL generation."""
    url: Optional[str] = None  # Public/CDN base URL
    temporary_url: Optional[str] = None  # Base URL swapped into signed URLs
    endpoint: Optional[str] = None  # e.g. "tos-cn-beijing.volces.com"
    bucket_endpoint: bool = False  # endpoint already addresses the bucket

    model_config = ConfigDict(extra="forbid")


class WriteConfig(BaseModel):
    """Per-call options.

    Header style keys (``Content-Type``, ``Expires``, ``x-tos-acl``) are
    accepted as aliases so that option bags written against the HTTP API
    keep working. Unrecognised keys are ignored.
    """
    visibility: Optional[Visibility] = None
    directory_visibility: Optional[Visibility] = None
    mimetype: Optional[str] = None
    content_type: Optional[str] = Field(default=None, alias="Content-Type")
    expires: Optional[Union[datetime, int]] = Field(default=None, alias="Expires")
    acl: Optional[str] = Field(default=None, alias="x-tos-acl")
    retain_visibility: bool = True
    checksum_algo: Optional[str] = None
    signing_options: dict[str, Any] = Field(default_factory=dict, alias="gcp_signing_options")
    method: str = "GET"

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("visibility", "directory_visibility", mode="before")
    @classmethod
    def _normalize_visibility(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v


ConfigLike = Union[WriteConfig, Mapping[str, Any], None]


def resolve_config(config: ConfigLike = None) -> WriteConfig:
    """Validate a per-call option bag into a ``WriteConfig``.

    Raises:
        ConfigurationError: If a recognised option has an invalid value
    """
    if config is None:
        return WriteConfig()
    if isinstance(config, WriteConfig):
        return config
    try:
        return WriteConfig.model_validate(dict(config))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid options: {e}") from e


def resolve_options(options: Union[AdapterOptions, Mapping[str, Any], None] = None) -> AdapterOptions:
    if options is None:
        return AdapterOptions()
    if isinstance(options, AdapterOptions):
        return options
    try:
        return AdapterOptions.model_validate(dict(options))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid adapter options: {e}") from e
