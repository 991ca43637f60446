from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from aw_client.models import Bucket, BucketMetadata, Event, Info


def test_naive_timestamp_is_treated_as_utc():
    event = Event(timestamp=datetime(2024, 3, 1, 12, 0, 0, 123456))

    assert event.timestamp.tzinfo == timezone.utc
    assert event.to_json_dict()["timestamp"] == "2024-03-01T12:00:00.123456+00:00"


def test_offset_timestamp_is_normalized_to_utc():
    cest = timezone(timedelta(hours=2))
    event = Event(timestamp=datetime(2024, 3, 1, 14, 0, 0, 500, tzinfo=cest), duration=1.5)

    body = event.to_json_dict()
    assert body["timestamp"] == "2024-03-01T12:00:00.000500+00:00"
    assert body["duration"] == 1.5


def test_event_body_omits_unset_id():
    event = Event(timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc), data={"app": "editor", "title": None})

    body = event.to_json_dict()
    assert "id" not in body
    assert body["data"] == {"app": "editor", "title": None}

    with_id = event.model_copy(update={"id": 7})
    assert with_id.to_json_dict()["id"] == 7


def test_event_accepts_timedelta_duration():
    event = Event(timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc), duration=timedelta(minutes=2))

    assert event.duration == 120.0


def test_event_decoding_ignores_unknown_fields():
    event = Event.model_validate_json(
        '{"id": 3, "timestamp": "2024-01-01T00:00:00Z", "duration": 4, "data": {}, "extra": true}'
    )

    assert event.id == 3
    assert event.timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert event.duration == 4.0


def test_bucket_round_trip_keeps_user_fields():
    bucket = Bucket(
        id="aw-watcher-window_laptop",
        type="currentwindow",
        client="aw-watcher-window",
        hostname="laptop",
        data={"nested": {"a": [1, 2, 3]}},
        metadata=BucketMetadata(name="Window watcher"),
    )

    echoed = Bucket.model_validate(bucket.to_json_dict())

    assert echoed.id == bucket.id
    assert echoed.type == bucket.type
    assert echoed.client == bucket.client
    assert echoed.hostname == bucket.hostname
    assert echoed.data == bucket.data
    assert echoed.metadata == bucket.metadata
    assert echoed.metadata.model_extra == {"name": "Window watcher"}


def test_bucket_body_distinguishes_absent_and_empty_events():
    bucket = Bucket(id="b", type="t", client="c", hostname="h", bid=12)

    body = bucket.to_json_dict()
    assert "events" not in body
    assert "created" not in body
    assert "last_updated" not in body
    assert "bid" not in body
    assert body["metadata"] == {}
    assert body["data"] == {}

    empty = bucket.model_copy(update={"events": []})
    assert empty.to_json_dict()["events"] == []


def test_bucket_body_encodes_nested_events():
    ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
    bucket = Bucket(id="b", type="t", client="c", hostname="h", events=[Event(timestamp=ts)], created=ts)

    body = bucket.to_json_dict()
    assert body["created"] == "2024-01-01T00:00:00+00:00"
    assert body["events"] == [{"timestamp": "2024-01-01T00:00:00+00:00", "duration": 0.0, "data": {}}]


def test_info_ignores_unknown_fields():
    info = Info.model_validate({"hostname": "h", "version": "v0.13.1", "testing": False, "new_field": 1})

    assert info.version == "v0.13.1"
    assert info.device_id is None


@pytest.mark.parametrize("fields", [{}, {"id": ""}])
def test_bucket_requires_an_id(fields):
    with pytest.raises(ValidationError):
        Bucket(type="t", client="c", hostname="h", **fields)
