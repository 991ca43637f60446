"""Request construction and response decoding shared by both clients.

Everything here is transport agnostic: paths, query parameters, JSON bodies,
status checks and decoding of raw response bodies into models. The async and
blocking clients only differ in how they move bytes.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime
from typing import Any, Optional, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from aw_client.errors import (
    DecodeError,
    HttpStatusError,
    MalformedCountError,
    NotFoundError,
    UrlError,
)
from aw_client.models import BUCKET_MAP, EVENT_LIST, Bucket, Event, Info, rfc3339

API_ROOT = "/api/0"
BUCKETS_PATH = f"{API_ROOT}/buckets/"
INFO_PATH = f"{API_ROOT}/info"

_COUNT_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)
_HOST_FORBIDDEN = set("/?#@ \t\r\n")

M = TypeVar("M", bound=BaseModel)


def build_base_url(host: str, port: int) -> str:
    """Return ``http://{host}:{port}`` or raise :class:`UrlError`."""

    if not isinstance(host, str) or not host or _HOST_FORBIDDEN.intersection(host):
        raise UrlError(f"invalid host: {host!r}")
    # Port 0 is a bind-time wildcard and cannot be connected to.
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        raise UrlError(f"invalid port: {port!r}")
    baseurl = f"http://{host}:{port}"
    try:
        parsed = httpx.URL(baseurl)
    except httpx.InvalidURL as exc:
        raise UrlError(f"invalid base url {baseurl!r}: {exc}") from exc
    if not parsed.host:
        raise UrlError(f"invalid base url {baseurl!r}: missing host")
    return baseurl


def bucket_path(bucket_id: str) -> str:
    return f"{API_ROOT}/buckets/{quote(bucket_id, safe='')}"


def events_path(bucket_id: str) -> str:
    return f"{bucket_path(bucket_id)}/events"


def event_path(bucket_id: str, event_id: int) -> str:
    return f"{events_path(bucket_id)}/{int(event_id)}"


def event_count_path(bucket_id: str) -> str:
    return f"{events_path(bucket_id)}/count"


def heartbeat_path(bucket_id: str) -> str:
    return f"{bucket_path(bucket_id)}/heartbeat"


def events_query(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> dict[str, str]:
    """Query parameters for an event listing; unset parameters are left out."""

    params: dict[str, str] = {}
    if start is not None:
        params["start"] = rfc3339(start)
    if end is not None:
        params["end"] = rfc3339(end)
    if limit is not None:
        params["limit"] = str(int(limit))
    return params


def heartbeat_query(pulsetime: float) -> dict[str, str]:
    return {"pulsetime": str(float(pulsetime))}


def delete_bucket_query(force: bool) -> dict[str, str]:
    return {"force": "1"} if force else {}


def events_body(events: Iterable[Event]) -> list[dict[str, Any]]:
    return [event.to_json_dict() for event in events]


def status_error(status_code: int, method: str, url: str, body: str) -> HttpStatusError:
    cls = NotFoundError if status_code == 404 else HttpStatusError
    return cls(status_code, method, url, body)


def ensure_success(status_code: int, method: str, url: str, body: str) -> None:
    """Reads accept 2xx only."""

    if not 200 <= status_code < 300:
        raise status_error(status_code, method, url, body)


def ensure_accepted(status_code: int, method: str, url: str, body: str) -> None:
    """Mutations accept anything below 400, e.g. 304 for an existing bucket."""

    if status_code >= 400:
        raise status_error(status_code, method, url, body)


def _validate(adapter: TypeAdapter[Any], content: bytes | str, what: str) -> Any:
    try:
        return adapter.validate_json(content)
    except ValidationError as exc:
        raise DecodeError(f"could not decode {what}: {exc}") from exc


def _validate_model(model: type[M], content: bytes | str) -> M:
    try:
        return model.model_validate_json(content)
    except ValidationError as exc:
        raise DecodeError(f"could not decode {model.__name__}: {exc}") from exc


def parse_bucket(content: bytes | str) -> Bucket:
    return _validate_model(Bucket, content)


def parse_buckets(content: bytes | str) -> dict[str, Bucket]:
    return _validate(BUCKET_MAP, content, "bucket map")


def parse_events(content: bytes | str) -> list[Event]:
    return _validate(EVENT_LIST, content, "event list")


def parse_info(content: bytes | str) -> Info:
    return _validate_model(Info, content)


def parse_event_count(text: str) -> int:
    stripped = text.strip()
    if not _COUNT_RE.fullmatch(stripped):
        raise MalformedCountError(text)
    return int(stripped)
