from __future__ import annotations

import asyncio

import uvicorn

from methodmate.settings import settings


async def _main(host: str, port: int) -> None:
    from .app import app, get_fulltext_source, get_oracle, get_search_client

    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=(settings.log_level or "info").lower(),
    )
    server = uvicorn.Server(config)

    try:
        await server.serve()
    finally:
        await get_oracle().aclose()
        await get_fulltext_source().aclose()
        await get_search_client().aclose()


def main(host: str = "127.0.0.1", port: int = 3002) -> None:
    asyncio.run(_main(host, port))


if __name__ == "__main__":
    main()
