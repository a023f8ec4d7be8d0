from __future__ import annotations

import asyncio
import sys

from auth.refresh import RefreshError
from tokenpipe.app import create_client
from tokenpipe.constants import APP_VERSION, LOGGER
from tokenpipe.dispatcher import RequestConfig, RequestDispatcher
from tokenpipe.http import RequestFailure

USAGE = "usage: tokenpipe METHOD PATH"


async def run(method: str, path: str) -> int:
    async with create_client() as client:
        dispatcher = RequestDispatcher(client.send)
        try:
            response = await dispatcher.handle(RequestConfig(url=path, method=method, next=True))
        except RefreshError as error:
            LOGGER.error("Could not re-authenticate: %s", error)
            return 1
        except RequestFailure as error:
            LOGGER.error("%s", error)
            return 1

    if response is None:
        return 1
    print(response.text)
    return 0


def main(argv: list[str] | None = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    if len(args) == 1 and args[0] == "--version":
        print(APP_VERSION)
        return
    if len(args) != 2:
        print(USAGE, file=sys.stderr)
        raise SystemExit(2)

    method, path = args
    raise SystemExit(asyncio.run(run(method, path)))


if __name__ == "__main__":
    main()
