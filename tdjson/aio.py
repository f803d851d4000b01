"""
Async TDLib JSON Client using AnyIO

Runs the blocking native calls in worker threads so an event loop stays
responsive while receive() waits on the native library.

Features:
- start()/stop() and async context manager support
- One native call in flight per handle (CapacityLimiter of 1)
- read_loop() delivering updates to a callback
"""

import logging
from functools import partial
from typing import Any, Callable, Optional

import anyio
from anyio import to_thread

from .client import TdJsonClient
from .errors import ClientClosedError, DecodingError
from .library import TdJsonLibrary

logger = logging.getLogger(__name__)


class AsyncTdJsonClient:
    """
    TDLib JSON client manager using AnyIO.

    Usage:
        async with AsyncTdJsonClient(log_level=1) as client:
            await client.send({"@type": "getOption", "name": "version"})
            update = await client.receive(1.0)
    """

    def __init__(self, library_path: Optional[str] = None, log_level: int = 0,
                 library: Optional[TdJsonLibrary] = None,
                 on_update: Optional[Callable[[Any], None]] = None):
        """
        Args:
            library_path: Path to the tdjson library (resolved per platform if None)
            log_level: Native log verbosity level
            library: Already loaded library to use instead of library_path
            on_update: Callback for updates received by read_loop()
        """
        self.library_path = library_path
        self.log_level = log_level
        self.library = library
        self.on_update = on_update or (lambda update: None)

        self.client: Optional[TdJsonClient] = None
        self.running = False
        self._limiter: Optional[anyio.CapacityLimiter] = None

    async def start(self):
        """Load the library and create the native client."""
        if self.client is not None:
            return
        self._limiter = anyio.CapacityLimiter(1)
        self.client = await to_thread.run_sync(
            partial(TdJsonClient, self.library_path, self.log_level, library=self.library),
            limiter=self._limiter,
        )
        self.running = True
        logger.info("AsyncTdJsonClient started")

    async def stop(self):
        """Stop the read loop and destroy the native client."""
        self.running = False
        client, self.client = self.client, None
        if client is not None:
            # Waits for an in-flight receive to return before destroying
            await to_thread.run_sync(client.close, limiter=self._limiter)
        logger.info("AsyncTdJsonClient stopped")

    def set_update_callback(self, callback: Callable[[Any], None]):
        """Set callback for updates received by read_loop()."""
        self.on_update = callback

    async def _call(self, method: str, *args) -> Any:
        client = self.client
        if client is None:
            raise ClientClosedError("AsyncTdJsonClient is not started")
        return await to_thread.run_sync(getattr(client, method), *args, limiter=self._limiter)

    async def send(self, request: Any) -> None:
        await self._call("send", request)

    async def receive(self, timeout: float) -> Optional[Any]:
        return await self._call("receive", timeout)

    async def execute(self, request: Any) -> Optional[Any]:
        return await self._call("execute", request)

    async def read_loop(self, timeout: float = 1.0):
        """
        Poll for updates until stopped.

        Args:
            timeout: Seconds each native receive call may block
        """
        logger.debug("Read loop started")
        try:
            while self.running and self.client is not None:
                try:
                    update = await self.receive(timeout)
                except DecodingError as e:
                    logger.warning(f"Skipping undecodable update: {e}")
                    continue
                if update is None:
                    continue
                try:
                    self.on_update(update)
                except Exception as e:
                    logger.warning(f"Update callback error: {e}")
        except ClientClosedError:
            # stop() raced the loop condition
            pass
        finally:
            logger.debug("Read loop stopped")

    def get_stats(self):
        if self.client:
            return self.client.get_stats()
        return {}

    async def __aenter__(self) -> "AsyncTdJsonClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
