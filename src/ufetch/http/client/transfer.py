import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import aiohttp

from ufetch.http.stats import FetchStats, build_trace_config
from ufetch.settings import FETCH_SETTINGS
from ufetch.util.logging import get_logger

log = get_logger(__name__)

Body = bytes | aiohttp.FormData | None


class Transfer(ABC):
    """
    Transport handle: one in-flight or finished HTTP exchange.

    The exchange runs in its own task once `start()` is called. While it runs
    the upload/download fractions can be polled; once `is_done` the status,
    body and error fields are final. Whatever the subclass holds open
    (sessions, sockets) stays open until `release()` is awaited.
    """
    def __init__(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Any = None,
        upload_size: Optional[int] = None,
    ):
        self.method = method
        self.url = url
        self.request_headers = dict(headers or {})
        self.body = body

        self.status = 0
        self.reason: Optional[str] = None
        self.headers: Dict[str, str] = {}
        self.data = b""
        self.text = ""
        self.exception: Optional[BaseException] = None

        self.upload_size = upload_size
        self.download_size: Optional[int] = None
        self.bytes_sent = 0
        self.bytes_received = 0

        self._task: Optional[asyncio.Task] = None
        self._released = False

    def start(self) -> "Transfer":
        if self._task is not None:
            raise RuntimeError("transfer already started")
        self._task = asyncio.create_task(self._run(), name=f"ufetch-{self.method}-{self.url}")
        return self

    async def _run(self):
        try:
            await self._perform()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log.debug("transfer failed", extra={"method": self.method, "url": self.url},
                      exc_info=exc)
            self.exception = exc

    @abstractmethod
    async def _perform(self):
        """Carry out the exchange, filling status/headers/data/text."""

    async def _close(self):
        """Free whatever the exchange still holds. Called once by release()."""

    # ---- progress ------------------------------------------------------

    def record_sent(self, size: int):
        self.bytes_sent += size

    def record_received(self, size: int):
        self.bytes_received += size

    @property
    def upload_progress(self) -> float:
        if not self.upload_size:
            return 0.0
        return min(1.0, self.bytes_sent / self.upload_size)

    @property
    def download_progress(self) -> float:
        # compressed or chunked bodies may overshoot or lack a length
        if not self.download_size:
            return 0.0
        return min(1.0, self.bytes_received / self.download_size)

    # ---- outcome -------------------------------------------------------

    @property
    def is_done(self) -> bool:
        return self._task is not None and self._task.done()

    @property
    def succeeded(self) -> bool:
        return self.is_done and self.exception is None and 0 < self.status < 400

    @property
    def error(self) -> Optional[str]:
        if self.exception is not None:
            text = str(self.exception)
            name = type(self.exception).__name__
            return f"{name}: {text}" if text else name
        if self.status >= 400:
            return f"HTTP {self.status} {self.reason or ''}".rstrip()
        if self.status == 0:
            return "no response received"
        return None

    @property
    def released(self) -> bool:
        return self._released

    # ---- lifecycle -----------------------------------------------------

    async def wait(self, timeout: Optional[float] = None) -> bool:
        """Suspend until the exchange finishes or `timeout` elapses.
        Returns whether it finished."""
        if self._task is None:
            raise RuntimeError("transfer not started")
        await asyncio.wait({self._task}, timeout=timeout)
        return self._task.done()

    def cancel(self):
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def release(self):
        """Abort the exchange if still running and free its resources.
        Safe to call more than once. Copied fields (text, data, headers)
        stay readable afterwards."""
        if self._released:
            return
        self._released = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
            await asyncio.wait({self._task})
        await self._close()


class AiohttpTransfer(Transfer):
    def __init__(self, transport: "AiohttpTransport", method, url, headers=None,
                 body=None, upload_size=None, timeout: Optional[float] = None):
        super().__init__(method, url, headers, body, upload_size)
        self._transport = transport
        self._timeout = timeout
        self.session: aiohttp.ClientSession | None = None
        self.response: aiohttp.ClientResponse | None = None

    async def _perform(self):
        self.session = self._transport.build_session()
        async with self.session.request(
            self.method,
            self.url,
            headers=self.request_headers,
            data=self.body,
            timeout=aiohttp.ClientTimeout(total=self._timeout),
            trace_request_ctx=self,
        ) as resp:
            self.response = resp
            self.status = resp.status
            self.reason = resp.reason
            self.headers = dict(resp.headers)
            self.download_size = resp.content_length

            chunks = []
            async for chunk in resp.content.iter_chunked(self._transport.chunk_size):
                chunks.append(chunk)
                self.record_received(len(chunk))

            self.data = b"".join(chunks)
            self.text = decode_text(self.data, resp.charset)

    async def _close(self):
        # the response itself was released when its body was read
        if self.session is not None:
            await self.session.close()


def decode_text(data: bytes, charset: Optional[str]) -> str:
    if not data:
        return ""
    try:
        return data.decode(charset or "utf-8")
    except (LookupError, UnicodeDecodeError):
        log.debug("undecodable body", extra={"charset": charset})
        return ""


class AbstractTransport(ABC):
    @abstractmethod
    def start(
        self,
        method: str,
        url: str,
        *,
        headers: Dict[str, str],
        body: Body = None,
        timeout: Optional[float] = None,
    ) -> Transfer:
        """Begin an exchange in the background and return its handle."""


class AiohttpTransport(AbstractTransport):
    """
    Runs every exchange on a fresh aiohttp session; there is no pooling
    between calls. The session lives until the transfer is released.
    """
    def __init__(
        self,
        *,
        headers: dict | None = None,
        chunk_size: int | None = None,
        stats: FetchStats | None = None,
    ):
        self._headers = dict(FETCH_SETTINGS.headers) | (headers or {})
        self.chunk_size = chunk_size or FETCH_SETTINGS.chunk_size
        self.stats = stats or FetchStats()

    def build_session(self) -> aiohttp.ClientSession:
        # Built inside the transfer task: the session needs the running loop
        return aiohttp.ClientSession(
            headers=self._headers,
            trace_configs=[build_trace_config(self.stats)],
        )

    def start(self, method, url, *, headers, body=None, timeout=None) -> Transfer:
        upload_size = None
        if isinstance(body, aiohttp.FormData):
            # A FormData can only be rendered once
            body = body()
            upload_size = body.size
        elif body is not None:
            upload_size = len(body)

        transfer = AiohttpTransfer(
            self, method, url, headers=headers, body=body,
            upload_size=upload_size, timeout=timeout,
        )
        return transfer.start()
