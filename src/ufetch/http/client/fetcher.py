import asyncio
from typing import Any, Type, TypeVar

import aiohttp
from pydantic import TypeAdapter, ValidationError

from ufetch.errors import DecodeError, TransportError
from ufetch.http.client.options import Options
from ufetch.http.client.response import Response
from ufetch.http.client.transfer import AbstractTransport, AiohttpTransport, Transfer
from ufetch.http.stats import FetchStats
from ufetch.settings import FETCH_SETTINGS
from ufetch.util.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

# Methods sent without a request body, whatever the Options carry
BODYLESS_METHODS = frozenset({"GET", "DELETE"})


class Fetcher:
    """
    Issues single HTTP requests and reports their progress.

    Every call is one independent request/response cycle: nothing is shared
    between calls except the transport's stats, so calls may run
    concurrently.

    Args:
        transport: where exchanges are carried out (aiohttp by default)
        timeout: default total timeout in seconds for calls whose Options
            don't set one
        poll_interval: longest suspension between two progress reports
        headers: default headers sent with every request (aiohttp transport
            only; ignored when `transport` is given)
    """
    def __init__(
        self,
        transport: AbstractTransport | None = None,
        *,
        timeout: float | None = None,
        poll_interval: float | None = None,
        headers: dict | None = None,
    ):
        self.transport = transport or AiohttpTransport(headers=headers)
        self.timeout = timeout if timeout is not None else FETCH_SETTINGS.timeout
        self.poll_interval = (
            poll_interval if poll_interval is not None else FETCH_SETTINGS.poll_interval
        )

    @property
    def stats(self) -> FetchStats | None:
        return getattr(self.transport, "stats", None)

    # ------------------------------------------------------------------ #
    # Shortcuts
    # ------------------------------------------------------------------ #

    async def get(self, url: str, options: Options | None = None) -> Response:
        return await self.request("GET", url, options)

    async def delete(self, url: str, options: Options | None = None) -> Response:
        return await self.request("DELETE", url, options)

    async def post(self, url: str, json_body: str, options: Options | None = None) -> Response:
        return await self.request("POST", url, (options or Options()).with_json(json_body))

    async def put(self, url: str, json_body: str, options: Options | None = None) -> Response:
        return await self.request("PUT", url, (options or Options()).with_json(json_body))

    async def upload(
        self, url: str, form_data: aiohttp.FormData, options: Options | None = None
    ) -> Response:
        """POST a multipart (or urlencoded) form."""
        return await self.request("POST", url, (options or Options()).with_form(form_data))

    async def get_json(
        self, url: str, into: Type[T] = Any, options: Options | None = None
    ) -> T:
        return await self.request_json("GET", url, into, options)

    async def post_json(
        self, url: str, json_body: str, into: Type[T] = Any, options: Options | None = None
    ) -> T:
        options = (options or Options()).with_json(json_body)
        return await self.request_json("POST", url, into, options)

    # ------------------------------------------------------------------ #
    # Core
    # ------------------------------------------------------------------ #

    async def request_json(
        self, method: str, url: str, into: Type[T] = Any, options: Options | None = None
    ) -> T:
        """
        Run `request` and validate the body text as JSON of shape `into`
        (anything pydantic's TypeAdapter accepts: models, dataclasses,
        TypedDicts, builtins).

        Raises:
            TransportError: as `request`.
            DecodeError: the body is not valid JSON for `into`.
        """
        res = await self.request(method, url, options)
        try:
            return TypeAdapter(into).validate_json(res.text)
        except ValidationError as exc:
            raise DecodeError(url, res.text, f"{exc.error_count()} validation error(s)") from exc
        finally:
            await res.release()

    async def request(self, method: str, url: str, options: Options | None = None) -> Response:
        """
        Send one request and wait for it to finish.

        Raises:
            TransportError: the exchange failed and `options.throw_on_error`
                is set. The transfer is released before raising.
            asyncio.CancelledError: the call was cancelled; the transfer is
                aborted and released. Anything raised by a progress callback
                propagates the same way.

        With `throw_on_error` unset failures come back as a Response with
        `is_error` set. On every returned Response the caller owns the
        transfer handle and must release it.
        """
        options = options or Options()
        method = method.upper()
        ctx = {"method": method, "url": url}

        headers, body = self._prepare(method, options, ctx)
        timeout = options.timeout if options.timeout is not None else self.timeout

        log.debug("request start", extra=ctx)
        transfer = self.transport.start(
            method, url, headers=headers, body=body, timeout=timeout
        )

        try:
            await self._drive(transfer, options)
        except BaseException as exc:
            # The caller never sees this handle, so it is freed here
            if isinstance(exc, asyncio.CancelledError):
                log.debug("request cancelled", extra=ctx)
            else:
                log.debug("request aborted", extra=ctx, exc_info=exc)
            transfer.cancel()
            await transfer.release()
            raise

        # Copy everything out before the handle can be released
        response = Response.from_transfer(transfer)

        if response.is_error:
            log.warning(
                "request failed",
                extra={**ctx, "status": response.status_code, "error": response.error},
            )
            if options.throw_on_error:
                await transfer.release()
                raise TransportError(response.status_code, response.error, url)
        else:
            log.debug("request done", extra={**ctx, "status": response.status_code})

        return response

    def _prepare(self, method: str, options: Options, ctx: dict):
        headers: dict[str, str] = {}
        body = None
        kind = options.body_kind

        if method in BODYLESS_METHODS:
            if kind is not None:
                log.debug("body ignored for bodyless method", extra={**ctx, "body": kind})
        else:
            if options.has_ambiguous_body:
                log.debug("several bodies set, sending one", extra={**ctx, "body": kind})

            if kind == "form":
                body = options.form_data
            elif kind == "json":
                body = options.json_body.encode("utf-8")
                headers["Content-Type"] = "application/json"
            elif kind == "raw":
                body = options.body_raw

        # Caller headers are applied last and win over implied ones
        for name, value in options.headers.items():
            _set_header(headers, name, value)

        return headers, body

    async def _drive(self, transfer: Transfer, options: Options):
        on_down = options.on_download_progress
        on_up = options.on_upload_progress

        # Always report a start, even for exchanges finished within one tick
        _notify(on_down, 0.0)
        _notify(on_up, 0.0)

        while not transfer.is_done:
            _notify(on_down, transfer.download_progress)
            _notify(on_up, transfer.upload_progress)
            await transfer.wait(self.poll_interval)

        # Always report completion, whatever the transport last reported
        _notify(on_down, 1.0)
        _notify(on_up, 1.0)


def _notify(callback, fraction: float):
    if callback is not None:
        callback(fraction)


def _set_header(headers: dict[str, str], name: str, value: str):
    # header names are case-insensitive; keep a single entry per name
    for existing in [k for k in headers if k.lower() == name.lower()]:
        del headers[existing]
    headers[name] = value

