"""Wire models for buckets, events and server info."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Annotated, Any, ClassVar, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    TypeAdapter,
    field_validator,
)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` in UTC, treating naive datetimes as already UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def rfc3339(value: datetime) -> str:
    return as_utc(value).isoformat()


UtcDatetime = Annotated[
    datetime,
    AfterValidator(as_utc),
    PlainSerializer(rfc3339, return_type=str, when_used="json"),
]


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Optional fields left out of request bodies while unset.
    omit_when_none: ClassVar[tuple[str, ...]] = ()

    def to_json_dict(self) -> dict[str, Any]:
        """Render the JSON body sent to the server."""

        payload = self.model_dump(mode="json")
        for name in self.omit_when_none:
            if getattr(self, name) is None:
                payload.pop(name, None)
        return payload


class Event(_WireModel):
    id: Optional[int] = None
    timestamp: UtcDatetime
    duration: float = 0.0
    data: dict[str, Any] = Field(default_factory=dict)

    omit_when_none: ClassVar[tuple[str, ...]] = ("id",)

    @field_validator("duration", mode="before")
    @classmethod
    def _duration_seconds(cls, value: Any) -> Any:
        if isinstance(value, timedelta):
            return value.total_seconds()
        return value


class BucketMetadata(_WireModel):
    """Server-side bucket metadata; unknown keys such as a display name are kept."""

    model_config = ConfigDict(extra="allow")

    start: Optional[UtcDatetime] = None
    end: Optional[UtcDatetime] = None

    omit_when_none: ClassVar[tuple[str, ...]] = ("start", "end")


class Bucket(_WireModel):
    bid: Optional[int] = Field(default=None, exclude=True)
    id: str = Field(min_length=1)
    type: str
    client: str
    hostname: str
    created: Optional[UtcDatetime] = None
    data: dict[str, Any] = Field(default_factory=dict)
    metadata: BucketMetadata = Field(default_factory=BucketMetadata)
    events: Optional[list[Event]] = None
    last_updated: Optional[UtcDatetime] = None

    omit_when_none: ClassVar[tuple[str, ...]] = ("created", "events", "last_updated")

    def to_json_dict(self) -> dict[str, Any]:
        payload = super().to_json_dict()
        payload["metadata"] = self.metadata.to_json_dict()
        if self.events is not None:
            payload["events"] = [event.to_json_dict() for event in self.events]
        return payload


class Info(_WireModel):
    hostname: str = ""
    version: str = ""
    testing: bool = False
    device_id: Optional[str] = None


BUCKET_MAP = TypeAdapter(dict[str, Bucket])
EVENT_LIST = TypeAdapter(list[Event])
