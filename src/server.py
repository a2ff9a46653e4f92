"""Protean Engine runner for the storefront domain.

In production the domain runs with asynchronous event processing. The Engine
then delivers ``OrderPlaced`` and the catalogue events to the stock, cart and
history handlers, outside the request that committed the order.

Usage:
    python src/server.py
"""

import asyncio

from protean.server.engine import Engine


async def run():
    from storefront.domain import storefront

    storefront.init()
    await Engine(storefront).run()


def main():
    asyncio.run(run())


if __name__ == "__main__":
    main()
