"""
Duplex channel to the suggestion backend.

The client talks to a ``Channel`` and receives callbacks through a
``ChannelListener``.  ``WebSocketChannel`` is the aiohttp implementation:
one asyncio task connects, pumps inbound frames to the listener and
reports the close code when the socket goes away.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Protocol, Union

import aiohttp

from sarthi.remote.protocol import ABNORMAL_CLOSURE, NORMAL_CLOSURE

logger = logging.getLogger(__name__)


class ChannelClosedError(ConnectionError):
    """Raised when sending on a channel that is not open."""


class Channel(Protocol):
    def send(self, text: str) -> None: ...

    def close(self, code: int = NORMAL_CLOSURE, reason: str = "") -> None: ...


class ChannelListener(Protocol):
    def on_open(self, channel: Channel) -> None: ...

    def on_message(self, channel: Channel, data: Union[str, bytes]) -> None: ...

    def on_close(self, channel: Channel, code: int) -> None: ...

    def on_error(self, channel: Channel, exc: BaseException) -> None: ...


ChannelFactory = Callable[[str, ChannelListener], Channel]


class WebSocketChannel:
    """Websocket channel driven by a background task on the current loop."""

    def __init__(
        self,
        url: str,
        listener: ChannelListener,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self._url = url
        self._listener = listener
        self._loop = loop or asyncio.get_running_loop()
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._closing = False
        self._pending: set[asyncio.Task] = set()
        self._task = self._loop.create_task(self._run())

    @property
    def is_open(self) -> bool:
        return self._ws is not None and not self._ws.closed and not self._closing

    async def _run(self) -> None:
        session = aiohttp.ClientSession()
        try:
            try:
                self._ws = await session.ws_connect(self._url)
            except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as exc:
                logger.debug("Could not open %s: %s", self._url, exc)
                self._listener.on_error(self, exc)
                self._listener.on_close(self, ABNORMAL_CLOSURE)
                return

            self._listener.on_open(self)
            async for msg in self._ws:
                if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                    self._listener.on_message(self, msg.data)
                elif msg.type is aiohttp.WSMsgType.ERROR:
                    exc = self._ws.exception() or ConnectionError("websocket error")
                    self._listener.on_error(self, exc)

            if self._pending:
                # A close we started finishes its handshake before the code is known
                await asyncio.gather(*self._pending, return_exceptions=True)
            code = self._ws.close_code
            self._listener.on_close(self, code if code is not None else ABNORMAL_CLOSURE)
        finally:
            await session.close()

    def send(self, text: str) -> None:
        if not self.is_open:
            raise ChannelClosedError(f"channel to {self._url} is not open")
        self._spawn(self._send(text))

    async def _send(self, text: str) -> None:
        try:
            await self._ws.send_str(text)
        except (ConnectionError, aiohttp.ClientError, RuntimeError) as exc:
            logger.warning("Send to %s failed: %s", self._url, exc)

    def close(self, code: int = NORMAL_CLOSURE, reason: str = "") -> None:
        if self._closing:
            return
        self._closing = True
        if self._ws is None:
            self._task.cancel()
            return
        self._spawn(self._ws.close(code=code, message=reason.encode("utf-8")))

    def _spawn(self, coro) -> None:
        task = self._loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)


def open_websocket(url: str, listener: ChannelListener) -> WebSocketChannel:
    """Default ChannelFactory."""
    return WebSocketChannel(url, listener)
