import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ufetch.http.client.transfer import Transfer


@dataclass(frozen=True)
class Response:
    """
    Outcome of one request, built once after the transfer has finished.

    `text`, `raw_data` and `headers` are copies taken from the transfer before
    anything is released, so they stay valid after `release()`.

    The transfer handle is NOT released for you. Either await `release()`
    when done or scope the response:

        async with await ufetch.get(url) as res:
            ...
    """
    text: str
    raw_data: bytes
    status_code: int
    is_error: bool
    error: Optional[str]
    url: str
    handle: Transfer = field(repr=False, compare=False)
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_transfer(cls, transfer: Transfer) -> "Response":
        is_error = not transfer.succeeded
        return cls(
            text=transfer.text or "",
            raw_data=bytes(transfer.data or b""),
            status_code=transfer.status,
            is_error=is_error,
            error=transfer.error if is_error else None,
            url=transfer.url,
            handle=transfer,
            headers=dict(transfer.headers),
        )

    def json(self) -> Any:
        return json.loads(self.text)

    async def release(self):
        await self.handle.release()

    async def __aenter__(self) -> "Response":
        return self

    async def __aexit__(self, *_):
        await self.release()
