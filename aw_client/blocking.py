"""Blocking client with the same operations as :class:`aw_client.client.ApiClient`."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any, Optional

import requests

from aw_client import endpoints
from aw_client.client import DEFAULT_TIMEOUT_S, get_hostname
from aw_client.config import Settings, load_settings
from aw_client.errors import TransportError
from aw_client.models import Bucket, BucketMetadata, Event, Info
from aw_client.utils.logging import request_scope

logger = logging.getLogger(__name__)


class BlockingClient:
    def __init__(
        self,
        host: str,
        port: int,
        name: str,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        session: requests.Session | None = None,
    ) -> None:
        self.baseurl = endpoints.build_base_url(host, port)
        self.name = name
        self.hostname = get_hostname()
        self.timeout_s = float(timeout_s)
        # A caller-supplied session stays open when this client closes.
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()

    @classmethod
    def from_settings(
        cls,
        name: str,
        settings: Settings | None = None,
        **kwargs: Any,
    ) -> "BlockingClient":
        cfg = settings or load_settings()
        return cls(cfg.server_host, cfg.port, name, timeout_s=cfg.timeout_s, **kwargs)

    def __repr__(self) -> str:
        return f"BlockingClient(baseurl={self.baseurl!r})"

    def __enter__(self) -> "BlockingClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> requests.Response:
        with request_scope(logger, method, path) as scope:
            try:
                r = self._session.request(
                    method,
                    self.baseurl + path,
                    params=params or None,
                    json=json,
                    headers=scope["headers"],
                    timeout=self.timeout_s,
                )
            except requests.RequestException as exc:
                raise TransportError(f"{method} {path} failed: {exc}") from exc
            scope["status_code"] = r.status_code
        return r

    def _read(self, path: str, *, params: dict[str, str] | None = None) -> requests.Response:
        r = self._request("GET", path, params=params)
        endpoints.ensure_success(r.status_code, "GET", r.url, r.text)
        return r

    def _write(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> None:
        r = self._request(method, path, params=params, json=json)
        endpoints.ensure_accepted(r.status_code, method, r.url, r.text)

    def get_bucket(self, bucket_id: str) -> Bucket:
        return endpoints.parse_bucket(self._read(endpoints.bucket_path(bucket_id)).content)

    def get_buckets(self) -> dict[str, Bucket]:
        return endpoints.parse_buckets(self._read(endpoints.BUCKETS_PATH).content)

    def create_bucket(self, bucket: Bucket) -> None:
        self._write("POST", endpoints.bucket_path(bucket.id), json=bucket.to_json_dict())

    def create_bucket_simple(self, bucket_id: str, bucket_type: str) -> None:
        self.create_bucket(
            Bucket(
                id=bucket_id,
                type=bucket_type,
                client=self.name,
                hostname=self.hostname,
                data={},
                metadata=BucketMetadata(),
            )
        )

    def delete_bucket(self, bucket_id: str, force: bool = False) -> None:
        self._write(
            "DELETE",
            endpoints.bucket_path(bucket_id),
            params=endpoints.delete_bucket_query(force),
        )

    def get_events(
        self,
        bucket_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[Event]:
        r = self._read(
            endpoints.events_path(bucket_id),
            params=endpoints.events_query(start, end, limit),
        )
        return endpoints.parse_events(r.content)

    def insert_event(self, bucket_id: str, event: Event) -> None:
        self.insert_events(bucket_id, [event])

    def insert_events(self, bucket_id: str, events: Iterable[Event]) -> None:
        self._write("POST", endpoints.events_path(bucket_id), json=endpoints.events_body(events))

    def heartbeat(self, bucket_id: str, event: Event, pulsetime: float) -> None:
        self._write(
            "POST",
            endpoints.heartbeat_path(bucket_id),
            params=endpoints.heartbeat_query(pulsetime),
            json=event.to_json_dict(),
        )

    def delete_event(self, bucket_id: str, event_id: int) -> None:
        self._write("DELETE", endpoints.event_path(bucket_id, event_id))

    def get_event_count(self, bucket_id: str) -> int:
        return endpoints.parse_event_count(self._read(endpoints.event_count_path(bucket_id)).text)

    def get_info(self) -> Info:
        return endpoints.parse_info(self._read(endpoints.INFO_PATH).content)
