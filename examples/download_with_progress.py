"""
Download a file while printing progress, then decode a JSON endpoint.

    python examples/download_with_progress.py https://example.test/big.bin
"""
import asyncio
import sys

from pydantic import BaseModel

import ufetch
from ufetch import Options, TransportError


class Slideshow(BaseModel):
    title: str
    author: str


def bar(label):
    def report(fraction: float):
        filled = int(fraction * 30)
        print(f"\r{label} [{'#' * filled}{'.' * (30 - filled)}] {fraction:6.1%}", end="",
              flush=True)
        if fraction >= 1.0:
            print()
    return report


async def main(url: str):
    ufetch.configure_logging("DEBUG")

    options = Options(on_download_progress=bar("download"), throw_on_error=False)
    async with await ufetch.get(url, options) as res:
        if res.is_error:
            print(f"failed: {res.error}")
        else:
            print(f"{res.status_code}: {len(res.raw_data)} bytes")

    try:
        show = await ufetch.get_json("https://httpbin.org/json", into=dict)
        print(Slideshow(**show["slideshow"]))
    except TransportError as exc:
        print(exc)


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "https://httpbin.org/bytes/102400"))
