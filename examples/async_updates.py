#!/usr/bin/env python3
"""
TDLib async updates example using the AnyIO client.

The read loop (producer) pushes updates into a memory object stream and a
consumer task prints them, so slow handling never blocks the native receive.
"""

import argparse
import logging
from functools import partial

import anyio

from tdjson import AsyncTdJsonClient

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


async def consume(receive_stream):
    async with receive_stream:
        async for update in receive_stream:
            print(f"📨 {update.get('@type')}: {update}")


async def main(args):
    send_stream, receive_stream = anyio.create_memory_object_stream(max_buffer_size=1000)

    async with AsyncTdJsonClient(args.library, log_level=args.log_level) as client:
        client.set_update_callback(send_stream.send_nowait)
        await client.send({"@type": "getOption", "name": "version"})

        async with anyio.create_task_group() as tg:
            tg.start_soon(partial(client.read_loop, timeout=args.timeout))
            tg.start_soon(consume, receive_stream)

            await anyio.sleep(args.duration)
            client.running = False
            await send_stream.aclose()

        print(f"Stats: {client.get_stats()}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="TDLib async updates")
    parser.add_argument("--library", help="Path to libtdjson (auto-detect if not specified)")
    parser.add_argument("--log-level", type=int, default=1, help="Native log verbosity level")
    parser.add_argument("--duration", type=float, default=10.0, help="Run duration (seconds)")
    parser.add_argument("--timeout", type=float, default=1.0, help="Receive timeout (seconds)")

    try:
        anyio.run(main, parser.parse_args())
    except KeyboardInterrupt:
        print("\n⏹️ Stopped by user")
