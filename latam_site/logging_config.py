#  Latam Site - Logging Configuration
#
#  Single-line JSON (or text) records for the latam_site logger tree.
#  Request id and client identity ride in context variables set by the
#  request middleware; the access line adds method/path/status/duration
#  through `extra`.
#
#  Depends on: (none)
#  Used by:    run.py, app.py, middleware/*

import contextvars
import json
import logging
import sys
import time

request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)
client_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("client", default=None)

# Attributes copied from `extra` into the JSON record when present
ACCESS_FIELDS = ("method", "path", "status", "duration_ms", "client")


def set_request_id(rid: str | None):
    request_id_var.set(rid)


def set_client(client: str | None):
    client_var.set(client)


class JSONFormatter(logging.Formatter):
    converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S") + f".{int(record.msecs):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, var in (("request_id", request_id_var), ("client", client_var)):
            value = var.get(None)
            if value:
                entry[key] = value
        for key in ACCESS_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


_TEXT_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Attach one stdout handler to the latam_site logger.

    Calling it again is a no-op for handlers; only the level changes.
    uvicorn's own access log is quieted since requests are logged by
    RequestIDMiddleware with the request id attached.
    """
    root = logging.getLogger("latam_site")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        if fmt == "json":
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt="%H:%M:%S"))
        root.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
