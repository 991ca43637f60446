import json
import logging
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator


REQUEST_ID_CTX = ContextVar("request_id", default=None)
REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdFilter(logging.Filter):
    """Attach the request ID from the context var to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = REQUEST_ID_CTX.get()
        return True


class JsonFormatter(logging.Formatter):
    """Formatter that renders log records as structured JSON."""

    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - exercised via tests
        log_payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", None)
        if request_id:
            log_payload["request_id"] = request_id

        if record.exc_info:
            log_payload["exception"] = self.formatException(record.exc_info)

        standard_attrs = set(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}

        for key, value in record.__dict__.items():
            if key not in standard_attrs and key not in log_payload:
                log_payload[key] = value

        return json.dumps(log_payload, default=str)


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure root logging to emit structured JSON to stderr."""

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RequestIdFilter())

    logging.basicConfig(level=level, handlers=[handler], force=True)


@contextmanager
def request_scope(logger: logging.Logger, method: str, path: str) -> Iterator[Dict[str, Any]]:
    """Bind a fresh request id for one HTTP round trip and log its outcome.

    The yielded dict carries the ``headers`` to send; the caller stores the
    response ``status_code`` in it once the response arrives.
    """

    request_id = REQUEST_ID_CTX.get() or uuid.uuid4().hex
    token = REQUEST_ID_CTX.set(request_id)
    scope: Dict[str, Any] = {"headers": {REQUEST_ID_HEADER: request_id}, "status_code": None}
    start = time.monotonic()
    try:
        yield scope
    except Exception:
        duration_ms = int((time.monotonic() - start) * 1000)
        logger.warning(
            "request_failed",
            extra={"method": method, "path": path, "duration_ms": duration_ms},
            exc_info=True,
        )
        raise
    else:
        duration_ms = int((time.monotonic() - start) * 1000)
        logger.debug(
            "request_completed",
            extra={
                "method": method,
                "path": path,
                "status_code": scope["status_code"],
                "duration_ms": duration_ms,
            },
        )
    finally:
        REQUEST_ID_CTX.reset(token)
