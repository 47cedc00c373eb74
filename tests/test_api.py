import aiohttp
import pytest

import ufetch
from tests.utils import FakeTransport
from ufetch import api
from ufetch.http.client.fetcher import Fetcher


@pytest.fixture
def transport(monkeypatch):
    transport = FakeTransport(*[{"data": b'{"id":1}'}] * 4)
    monkeypatch.setattr(api, "Fetcher", lambda: Fetcher(transport, poll_interval=0))
    return transport


@pytest.mark.asyncio
async def test_shortcuts_methods(transport):
    form = aiohttp.FormData()
    form.add_field("a", "b")

    await ufetch.get("http://example.com")
    await ufetch.delete("http://example.com")
    await ufetch.put("http://example.com", "{}")
    await ufetch.upload("http://example.com", form)

    assert [c["method"] for c in transport.calls] == ["GET", "DELETE", "PUT", "POST"]
    assert transport.calls[2]["body"] == b"{}"
    assert transport.calls[3]["body"] is form


@pytest.mark.asyncio
async def test_typed_shortcuts(transport):
    assert await ufetch.get_json("http://example.com") == {"id": 1}
    assert await ufetch.post_json("http://example.com", "{}", dict) == {"id": 1}
    assert await ufetch.request_json("PUT", "http://example.com") == {"id": 1}

    res = await ufetch.request("PATCH", "http://example.com", ufetch.Options())
    async with res:
        assert res.status_code == 200


def test_errors_are_distinct():
    assert issubclass(ufetch.TransportError, ufetch.FetchError)
    assert issubclass(ufetch.DecodeError, ufetch.FetchError)
    assert issubclass(ufetch.DecodeError, ValueError)
    assert not issubclass(ufetch.DecodeError, ufetch.TransportError)


def test_transport_error_message():
    err = ufetch.TransportError(404, "HTTP 404 Not Found", "http://example.com/x")

    assert str(err) == "Fetch error [404]: HTTP 404 Not Found\nURL: http://example.com/x"
