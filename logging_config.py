"""Logging setup for the OAuth provider.

Log lines are tagged "[TAG] message" ([STARTUP], [AUTH], [CALLBACK], [TOKEN],
[STATE], [INFO]). Locally they go to stderr as plain text. When a Supabase
client is configured, each record is also turned into a structured entry,
with the request fields the middleware attaches, and shipped in batches from
a background thread.
"""

import logging
import re
import sys
import threading
from queue import Queue, Empty

_TAG_PATTERN = re.compile(r'\[([A-Z_]+)\]\s*(.*)', re.DOTALL)

# Attributes RequestLogMiddleware passes through `extra=`
REQUEST_FIELDS = ("method", "path", "status_code", "outcome", "duration_ms")


def split_tag(message: str) -> tuple:
    """Split "[TAG] message" into ("TAG", "message"); untagged gives (None, message)."""
    tag_match = _TAG_PATTERN.match(message)
    if tag_match:
        return tag_match.group(1), tag_match.group(2)
    return None, message


class PlainFormatter(logging.Formatter):
    """Plain text formatter for stderr output (local debugging)."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


class JSONFormatter(logging.Formatter):
    """Build a structured entry (a dict, ready for insertion) from a record."""

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> dict:
        tag, message = split_tag(record.getMessage())
        entry = {
            "service": self.service_name,
            "level": record.levelname,
            "tag": tag,
            "message": message,
            "logger": record.name,
        }
        request = {name: getattr(record, name) for name in REQUEST_FIELDS if hasattr(record, name)}
        if request:
            entry["request"] = request
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return entry


class SupabaseHandler(logging.Handler):
    """Ship structured entries to a Supabase table.

    `emit` only enqueues, so request handlers never wait on the database.
    A worker thread inserts a batch every `flush_interval` seconds, or sooner
    once `batch_size` entries are waiting.
    """

    def __init__(self, supabase_client, service_name: str, table: str = "logs",
                 batch_size: int = 20, flush_interval: float = 10.0):
        super().__init__()
        self.supabase = supabase_client
        self.table = table
        self.batch_size = batch_size
        self.flush_interval = flush_interval
        self.setFormatter(JSONFormatter(service_name))

        self._queue: Queue = Queue()
        self._wake = threading.Event()
        self._stopped = threading.Event()
        self._worker = threading.Thread(target=self._run, name="supabase-logs", daemon=True)
        self._worker.start()

    def emit(self, record: logging.LogRecord):
        try:
            self._queue.put(self.format(record))
        except Exception:
            self.handleError(record)
            return
        if self._queue.qsize() >= self.batch_size:
            self._wake.set()

    def _run(self):
        while not self._stopped.is_set():
            self._wake.wait(self.flush_interval)
            self._wake.clear()
            self._send_pending()

    def _send_pending(self):
        batch = []
        while True:
            try:
                batch.append(self._queue.get_nowait())
            except Empty:
                break
        if not batch:
            return
        try:
            self.supabase.table(self.table).insert(batch).execute()
        except Exception as e:
            # stderr only; logging from here would recurse
            print(f"[WARNING] Failed to send {len(batch)} log entries to Supabase: {e}", file=sys.stderr)

    def close(self):
        """Stop the worker and send whatever is still queued."""
        self._stopped.set()
        self._wake.set()
        self._worker.join(timeout=5)
        self._send_pending()
        super().close()


def setup_logging(service_name: str, level: str = "INFO", supabase_client=None) -> logging.Logger:
    """Configure the root logger: stderr always, Supabase when a client is given."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(PlainFormatter())
    root_logger.addHandler(stderr_handler)

    if supabase_client:
        root_logger.addHandler(SupabaseHandler(supabase_client, service_name))

    # Suppress noisy HTTP client logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"[STARTUP] Logging for {service_name} at {level}"
        f" (Supabase {'enabled' if supabase_client else 'disabled'})"
    )
    return root_logger
