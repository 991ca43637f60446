"""Command line access to an ActivityWatch server."""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timezone
from typing import Any, Sequence

from aw_client.blocking import BlockingClient
from aw_client.config import Settings, load_settings
from aw_client.errors import AWClientError, ConfigError
from aw_client.models import Event
from aw_client.utils.logging import configure_logging

CLIENT_NAME = "aw-client-cli"


def _parse_dt(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an ISO 8601 timestamp: {value!r}") from exc


def _parse_data(value: str) -> dict[str, Any]:
    try:
        data = json.loads(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise argparse.ArgumentTypeError("event data must be a JSON object")
    return data


def build_parser() -> argparse.ArgumentParser:
    settings = load_settings()
    p = argparse.ArgumentParser(prog="aw-client")
    p.add_argument("--host", default=settings.server_host)
    p.add_argument("--port", type=int, default=settings.server_port)
    p.add_argument("--testing", action="store_true", default=settings.testing)
    p.add_argument("--timeout", type=float, default=settings.timeout_s)
    p.add_argument("--log-level", default=settings.log_level)
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("info", help="show server info")
    sub.add_parser("buckets", help="list buckets")

    events = sub.add_parser("events", help="list events in a bucket")
    events.add_argument("bucket")
    events.add_argument("--start", type=_parse_dt)
    events.add_argument("--end", type=_parse_dt)
    events.add_argument("--limit", type=int)

    count = sub.add_parser("count", help="count events in a bucket")
    count.add_argument("bucket")

    hb = sub.add_parser("heartbeat", help="send a heartbeat event")
    hb.add_argument("bucket")
    hb.add_argument("--data", type=_parse_data, required=True)
    hb.add_argument("--pulsetime", type=float, default=60.0)
    hb.add_argument("--duration", type=float, default=0.0)

    delete = sub.add_parser("delete-bucket", help="delete a bucket and its events")
    delete.add_argument("bucket")
    delete.add_argument("--force", action="store_true")
    return p


def settings_from_args(args: argparse.Namespace) -> Settings:
    return Settings(
        server_host=args.host,
        server_port=args.port,
        testing=args.testing,
        timeout_s=args.timeout,
        log_level=args.log_level.upper(),
    )


def run(client: BlockingClient, args: argparse.Namespace) -> Any:
    if args.command == "info":
        return client.get_info().model_dump(mode="json")
    if args.command == "buckets":
        return {bid: bucket.to_json_dict() for bid, bucket in client.get_buckets().items()}
    if args.command == "events":
        events = client.get_events(args.bucket, start=args.start, end=args.end, limit=args.limit)
        return [event.to_json_dict() for event in events]
    if args.command == "count":
        return client.get_event_count(args.bucket)
    if args.command == "heartbeat":
        event = Event(timestamp=datetime.now(timezone.utc), duration=args.duration, data=args.data)
        client.heartbeat(args.bucket, event, pulsetime=args.pulsetime)
        return event.to_json_dict()
    if args.command == "delete-bucket":
        client.delete_bucket(args.bucket, force=args.force)
        return {"deleted": args.bucket}
    raise ValueError(f"unknown command: {args.command}")


def main(argv: Sequence[str] | None = None) -> int:
    try:
        args = build_parser().parse_args(argv)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    cfg = settings_from_args(args)
    configure_logging(cfg.log_level)
    try:
        with BlockingClient.from_settings(CLIENT_NAME, cfg) as client:
            result = run(client, args)
    except AWClientError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
