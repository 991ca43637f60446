"""Asynchronous client for the ActivityWatch REST API."""

from __future__ import annotations

import logging
import socket
from collections.abc import Iterable
from datetime import datetime
from typing import Any, Optional

import httpx

from aw_client import endpoints
from aw_client.config import Settings, load_settings
from aw_client.errors import TransportError
from aw_client.models import Bucket, BucketMetadata, Event, Info
from aw_client.utils.logging import request_scope

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 120.0
UNKNOWN_HOSTNAME = "unknown"


def get_hostname() -> str:
    """Return the local host name, or a placeholder when it cannot be resolved."""

    try:
        hostname = socket.gethostname()
    except OSError as exc:
        logger.warning("Could not resolve local hostname: %s", exc)
        return UNKNOWN_HOSTNAME
    return hostname or UNKNOWN_HOSTNAME


class ApiClient:
    """Non-blocking client; one instance may be shared by many tasks.

    All operations are single request/response round trips. Nothing is
    retried: transport faults raise :class:`TransportError`, unexpected
    statuses raise :class:`HttpStatusError` and undecodable bodies raise
    :class:`DecodeError`.
    """

    def __init__(
        self,
        host: str,
        port: int,
        name: str,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.baseurl = endpoints.build_base_url(host, port)
        self.name = name
        self.hostname = get_hostname()
        self.timeout_s = float(timeout_s)
        self._client = httpx.AsyncClient(
            base_url=self.baseurl,
            timeout=httpx.Timeout(self.timeout_s),
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        name: str,
        settings: Settings | None = None,
        **kwargs: Any,
    ) -> "ApiClient":
        cfg = settings or load_settings()
        return cls(cfg.server_host, cfg.port, name, timeout_s=cfg.timeout_s, **kwargs)

    def __repr__(self) -> str:
        return f"ApiClient(baseurl={self.baseurl!r})"

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        with request_scope(logger, method, path) as scope:
            try:
                response = await self._client.request(
                    method,
                    path,
                    params=params or None,
                    json=json,
                    headers=scope["headers"],
                )
            except httpx.HTTPError as exc:
                raise TransportError(f"{method} {path} failed: {exc}") from exc
            scope["status_code"] = response.status_code
        return response

    async def _read(self, path: str, *, params: dict[str, str] | None = None) -> httpx.Response:
        response = await self._request("GET", path, params=params)
        endpoints.ensure_success(response.status_code, "GET", str(response.url), response.text)
        return response

    async def _write(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> None:
        response = await self._request(method, path, params=params, json=json)
        endpoints.ensure_accepted(response.status_code, method, str(response.url), response.text)

    async def get_bucket(self, bucket_id: str) -> Bucket:
        response = await self._read(endpoints.bucket_path(bucket_id))
        return endpoints.parse_bucket(response.content)

    async def get_buckets(self) -> dict[str, Bucket]:
        response = await self._read(endpoints.BUCKETS_PATH)
        return endpoints.parse_buckets(response.content)

    async def create_bucket(self, bucket: Bucket) -> None:
        await self._write("POST", endpoints.bucket_path(bucket.id), json=bucket.to_json_dict())

    async def create_bucket_simple(self, bucket_id: str, bucket_type: str) -> None:
        bucket = Bucket(
            id=bucket_id,
            type=bucket_type,
            client=self.name,
            hostname=self.hostname,
            data={},
            metadata=BucketMetadata(),
        )
        await self.create_bucket(bucket)

    async def delete_bucket(self, bucket_id: str, force: bool = False) -> None:
        await self._write(
            "DELETE",
            endpoints.bucket_path(bucket_id),
            params=endpoints.delete_bucket_query(force),
        )

    async def get_events(
        self,
        bucket_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[Event]:
        response = await self._read(
            endpoints.events_path(bucket_id),
            params=endpoints.events_query(start, end, limit),
        )
        return endpoints.parse_events(response.content)

    async def insert_event(self, bucket_id: str, event: Event) -> None:
        await self.insert_events(bucket_id, [event])

    async def insert_events(self, bucket_id: str, events: Iterable[Event]) -> None:
        await self._write("POST", endpoints.events_path(bucket_id), json=endpoints.events_body(events))

    async def heartbeat(self, bucket_id: str, event: Event, pulsetime: float) -> None:
        """Send ``event`` as a heartbeat; merging with the last event happens server-side."""

        await self._write(
            "POST",
            endpoints.heartbeat_path(bucket_id),
            params=endpoints.heartbeat_query(pulsetime),
            json=event.to_json_dict(),
        )

    async def delete_event(self, bucket_id: str, event_id: int) -> None:
        await self._write("DELETE", endpoints.event_path(bucket_id, event_id))

    async def get_event_count(self, bucket_id: str) -> int:
        response = await self._read(endpoints.event_count_path(bucket_id))
        return endpoints.parse_event_count(response.text)

    async def get_info(self) -> Info:
        response = await self._read(endpoints.INFO_PATH)
        return endpoints.parse_info(response.content)
