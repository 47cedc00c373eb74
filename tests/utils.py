import asyncio

from ufetch.http.client.transfer import AbstractTransport, Transfer


class FakeTransfer(Transfer):
    """
    Drop-in replacement for `AiohttpTransfer`.

    Walks through `steps` of (upload_fraction, download_fraction), yielding to
    the loop between each, then settles on the scripted outcome without any
    network I/O.
    """
    def __init__(self, method, url, headers=None, body=None, *,
                 status=200, data=b"", reason="OK", exception=None,
                 steps=(), hang=False):
        super().__init__(method, url, headers, body, upload_size=100)
        self._status = status
        self._data = data
        self._reason = reason
        self._exception = exception
        self._steps = list(steps)
        self._hang = hang
        self.closed = 0

    async def _perform(self):
        self.download_size = 100
        for up, down in self._steps:
            self.bytes_sent = int(up * 100)
            self.bytes_received = int(down * 100)
            await asyncio.sleep(0)

        if self._hang:
            await asyncio.Event().wait()

        if self._exception is not None:
            raise self._exception

        self.status = self._status
        self.reason = self._reason
        self.headers = {"Content-Type": "application/json"}
        self.data = self._data
        self.text = self._data.decode("utf-8")

    async def _close(self):
        self.closed += 1


class FakeTransport(AbstractTransport):
    """
    Each .start() pops the next scripted outcome (kwargs for FakeTransfer)
    and records what it was asked to send.
    """
    def __init__(self, *outcomes):
        self._outcomes = list(outcomes)
        self.calls = []
        self.transfers: list[FakeTransfer] = []

    def start(self, method, url, *, headers, body=None, timeout=None):
        if not self._outcomes:
            raise RuntimeError("No more fake outcomes")
        self.calls.append(
            {"method": method, "url": url, "headers": headers, "body": body, "timeout": timeout}
        )
        transfer = FakeTransfer(method, url, headers, body, **self._outcomes.pop(0))
        self.transfers.append(transfer)
        return transfer.start()


class ProgressRecorder:
    def __init__(self):
        self.values: list[float] = []

    def __call__(self, fraction: float):
        self.values.append(fraction)
