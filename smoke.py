"""
Quick smoke test against live sites — run with: python smoke.py [url ...]
Prints the extracted metadata, or the typed error, for each URL.
"""

import asyncio
import json
import sys

from metalens.core import lens

URLS = [
    "example.com",
    "https://www.python.org/",
    "htps://github.com/rudrodip/metalens",
    "https://httpbin.org/status/404",
    "https://httpbin.org/json",          # not text/html
    "ftp://example.com",
]


def print_result(result):
    if result.ok:
        print(json.dumps(result.metadata.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(f"{result.error.error_type}: {result.error.message}")
    print("-" * 80)


async def main(urls):
    for url in urls:
        print(f"\n>>> {url}\n")
        print_result(await lens(url))


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1:] or URLS))
