from __future__ import annotations

import asyncio
import logging
import random

from streamline import AsyncOptional, AsyncStream, Stream, comparing_by


async def fetch_price(symbol: str) -> tuple[str, float]:
    # stands in for a slow remote call
    await asyncio.sleep(random.uniform(0.05, 0.2))
    return symbol, round(random.uniform(10, 500), 2)


async def run_pipeline() -> None:
    symbols = ["AAPL", "MSFT", "GOOG", "AMZN", "NVDA", "META", "TSLA", "ORCL"]

    # unbuffered: one fetch at a time
    prices = await AsyncStream.of(*symbols).map(fetch_price).to_list()
    print("sequential:", prices)

    # buffered: up to four fetches overlap, results arrive as they finish
    ranked = await (
        AsyncStream.of(*symbols)
        .map(fetch_price)
        .buffer(4)
        .sorted(comparing_by(lambda pair: -pair[1]))
        .limit(3)
        .to_list()
    )
    print("top three:", ranked)

    # stops the upstream as soon as one value is found
    expensive = await AsyncStream.of(*symbols).map(fetch_price).buffer(4).find_first(lambda pair: pair[1] > 250).get()
    print("first over 250:", expensive)

    batches = await Stream.range(0, 7).to_async().batch(3).to_list()
    print("batches:", batches)

    async def countdown(last: int) -> AsyncOptional[int]:
        return AsyncOptional.of(last - 1 if last > 0 else None)

    async for value in AsyncStream.iterate(3, countdown):
        print("countdown:", value)


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(name)s %(message)s")
    asyncio.run(run_pipeline())
