"""
Ship JSON records to a Logz.io listener.

Records are buffered in memory and posted as newline-delimited JSON to the
bulk endpoint. The buffer never grows past ``in_memory_capacity`` bytes: it is
flushed before a record that would overflow it is queued.
"""

import logging

import requests

from errors import ConfigurationError, TransportError

logger = logging.getLogger(__name__)

MAX_BULK_SIZE_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_NETWORK_TIMEOUT = 10.0


class LogzioSender:
    def __init__(
        self,
        token: str,
        url: str,
        sending_type: str | None = None,
        in_memory_queue: bool = True,
        in_memory_capacity: int = MAX_BULK_SIZE_BYTES,
        debug: bool = False,
        network_timeout: float = DEFAULT_NETWORK_TIMEOUT,
        session: requests.Session | None = None,
    ):
        if not token:
            raise ConfigurationError("Logz.io token is required")
        if not url:
            raise ConfigurationError("Logz.io listener URL is required")
        if in_memory_capacity <= 0:
            raise ConfigurationError(f"in-memory capacity must be positive, got {in_memory_capacity}")

        self.token = token
        self.url = url.rstrip("/")
        self.sending_type = sending_type
        self.in_memory_queue = in_memory_queue
        self.in_memory_capacity = in_memory_capacity
        self.network_timeout = network_timeout
        self.session = session or requests.Session()

        self._queue: list[bytes] = []
        self._queue_size = 0
        self._stopped = False

        if debug:
            logger.setLevel(logging.DEBUG)

    @property
    def queue_size(self) -> int:
        """Bytes currently buffered, newline separators included."""
        return self._queue_size

    def send(self, data: bytes) -> None:
        if self._stopped:
            raise TransportError("cannot send after the Logz.io sender was stopped")

        if not self.in_memory_queue:
            self._post([data])
            return

        size = len(data) + 1
        if size > self.in_memory_capacity:
            # Too big to ever fit in the buffer; ship it alone.
            self.flush()
            self._post([data])
            return

        if self._queue_size + size > self.in_memory_capacity:
            self.flush()

        self._queue.append(data)
        self._queue_size += size

    def flush(self) -> None:
        if not self._queue:
            return

        batch = self._queue
        self._queue = []
        self._queue_size = 0
        self._post(batch)

    def close(self) -> None:
        """Drop anything still buffered and release the HTTP session without posting."""
        self._queue = []
        self._queue_size = 0
        if not self._stopped:
            self._stopped = True
            self.session.close()

    def stop(self) -> None:
        """Flush whatever is buffered and release the HTTP session."""
        if self._stopped:
            return
        try:
            self.flush()
        finally:
            self._stopped = True
            self.session.close()

    def _post(self, batch: list[bytes]) -> None:
        body = b"\n".join(batch) + b"\n"
        params = {"token": self.token}
        if self.sending_type:
            params["type"] = self.sending_type

        logger.debug(f"Posting {len(batch)} records ({len(body)} bytes) to {self.url}")
        try:
            response = self.session.post(
                f"{self.url}/",
                params=params,
                data=body,
                headers={"Content-Type": "application/json"},
                timeout=self.network_timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(f"error sending data to Logz.io: {e}") from e

        logger.debug(f"Logz.io accepted {len(batch)} records (status {response.status_code})")
