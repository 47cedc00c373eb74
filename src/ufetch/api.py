"""
Module level shortcuts. Each call builds its own `Fetcher` with the
defaults from `ufetch.settings`, so calls share no state.

    res = await ufetch.get("https://example.test/ok")
    async with res:
        print(res.status_code, res.text)

    user = await ufetch.get_json("https://example.test/users/1", into=User)
"""
from typing import Any, Type, TypeVar

import aiohttp

from ufetch.http.client.fetcher import Fetcher
from ufetch.http.client.options import Options
from ufetch.http.client.response import Response

T = TypeVar("T")


async def request(method: str, url: str, options: Options | None = None) -> Response:
    return await Fetcher().request(method, url, options)


async def get(url: str, options: Options | None = None) -> Response:
    return await Fetcher().get(url, options)


async def delete(url: str, options: Options | None = None) -> Response:
    return await Fetcher().delete(url, options)


async def post(url: str, json_body: str, options: Options | None = None) -> Response:
    return await Fetcher().post(url, json_body, options)


async def put(url: str, json_body: str, options: Options | None = None) -> Response:
    return await Fetcher().put(url, json_body, options)


async def upload(url: str, form_data: aiohttp.FormData, options: Options | None = None) -> Response:
    return await Fetcher().upload(url, form_data, options)


async def request_json(
    method: str, url: str, into: Type[T] = Any, options: Options | None = None
) -> T:
    return await Fetcher().request_json(method, url, into, options)


async def get_json(url: str, into: Type[T] = Any, options: Options | None = None) -> T:
    return await Fetcher().get_json(url, into, options)


async def post_json(
    url: str, json_body: str, into: Type[T] = Any, options: Options | None = None
) -> T:
    return await Fetcher().post_json(url, json_body, into, options)
