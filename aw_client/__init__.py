"""Client library for the ActivityWatch REST API.

Two clients expose the same operations:
- ``ApiClient``: asyncio, built on httpx
- ``BlockingClient``: synchronous, built on requests
"""

from aw_client.blocking import BlockingClient
from aw_client.client import ApiClient
from aw_client.config import Settings, load_settings
from aw_client.errors import (
    AWClientError,
    ConfigError,
    ConstructionError,
    DecodeError,
    HttpStatusError,
    MalformedCountError,
    NotFoundError,
    TransportError,
    UrlError,
)
from aw_client.models import Bucket, BucketMetadata, Event, Info

__all__ = [
    "ApiClient",
    "AWClientError",
    "BlockingClient",
    "Bucket",
    "BucketMetadata",
    "ConfigError",
    "ConstructionError",
    "DecodeError",
    "Event",
    "HttpStatusError",
    "Info",
    "MalformedCountError",
    "NotFoundError",
    "Settings",
    "TransportError",
    "UrlError",
    "load_settings",
]
