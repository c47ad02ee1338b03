"""Build TOS adapters from settings."""
from functools import lru_cache
from typing import Any, Optional

from core.config import TosSettings, settings
from core.logging_config import get_logger
from .adapter import TosAdapter
from .config import AdapterOptions
from .exceptions import ConfigurationError
from .visibility import PortableVisibilityConverter

logger = get_logger(__name__)


def build_tos_client(config: TosSettings) -> Any:
    """Create a ``tos.TosClientV2`` from settings.

    Raises:
        ConfigurationError: If credentials or endpoint are missing
    """
    if not config.access_key_id or not config.secret_access_key:
        raise ConfigurationError("TOS access key ID and secret are required")

    if not config.endpoint:
        raise ConfigurationError("TOS endpoint is required")

    import tos

    endpoint = config.endpoint.replace("https://", "").replace("http://", "")
    return tos.TosClientV2(
        config.access_key_id,
        config.secret_access_key,
        endpoint,
        config.region,
    )


def build_tos_adapter(config: TosSettings, client: Optional[Any] = None) -> TosAdapter:
    """Build a TOS adapter.

    Args:
        config: TOS settings
        client: Pre-built SDK client; built from ``config`` when omitted

    Returns:
        Configured adapter instance
    """
    if not config.bucket:
        raise ConfigurationError("TOS bucket name is required")

    if client is None:
        client = build_tos_client(config)

    adapter = TosAdapter(
        client,
        config.bucket,
        prefix=config.prefix,
        visibility=PortableVisibilityConverter(
            default=config.default_visibility,
            default_for_directories=config.directory_visibility,
        ),
        options=AdapterOptions(
            url=config.url,
            temporary_url=config.temporary_url,
            endpoint=config.endpoint,
            bucket_endpoint=config.bucket_endpoint,
        ),
    )
    logger.info("Created TOS adapter", bucket=config.bucket, prefix=config.prefix, region=config.region)
    return adapter


@lru_cache
def get_tos_adapter() -> TosAdapter:
    """Process-wide adapter built from ``settings.tos``."""
    return build_tos_adapter(settings.tos)
