class FetchError(Exception):
    """Base class for every error raised by ufetch."""


class TransportError(FetchError):
    """
    The HTTP exchange did not complete as a clean success: connection or DNS
    failure, a protocol error, or an HTTP status the transport classifies as
    an error (>= 400).

    Only raised when `Options.throw_on_error` is set; otherwise the same
    condition is reported through `Response.is_error` / `Response.error`.
    """
    def __init__(self, status_code: int, message: str | None, url: str):
        self.status_code = status_code
        self.message = message or ""
        self.url = url
        super().__init__(f"Fetch error [{status_code}]: {self.message}\nURL: {url}")


class DecodeError(FetchError, ValueError):
    """The body of an otherwise successful response did not decode into the
    requested shape. The underlying validation error is chained as __cause__."""
    def __init__(self, url: str, text: str, detail: str = ""):
        self.url = url
        self.text = text
        msg = f"could not decode response from {url}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)
