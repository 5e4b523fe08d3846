"""
Remote suggestion client.

Keeps a persistent channel to the suggestion backend, reconnects with
linear backoff, and caches the most recent suggestion batch.  Queries are
fire-and-forget: results show up later through ``suggestions``, and there
is no correlation between a query and the batch that answers it.

Transport failures never propagate to callers.  They surface only
through the connection-status observer and, once the reconnect budget is
spent, as a permanent fall back to local suggestions.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Union

from sarthi.config.settings import RemoteSettings, get_settings
from sarthi.remote.channel import (
    Channel,
    ChannelClosedError,
    ChannelFactory,
    open_websocket,
)
from sarthi.remote.protocol import (
    ABNORMAL_CLOSURE,
    NORMAL_CLOSURE,
    MalformedPayloadError,
    MessageKind,
    SuggestionEntry,
    encode_ping,
    encode_search,
    parse_inbound,
)
from sarthi.remote.state import (
    Action,
    ActionType,
    ConnectionPhase,
    ConnectionState,
    Event,
    EventType,
    transition,
)
from sarthi.remote.timers import AsyncioScheduler, TimerHandle, TimerScheduler

logger = logging.getLogger(__name__)

StatusObserver = Callable[[bool], None]


class RemoteSuggestionClient:
    """Resilient client for the remote suggestion service."""

    def __init__(
        self,
        settings: Optional[RemoteSettings] = None,
        channel_factory: Optional[ChannelFactory] = None,
        scheduler: Optional[TimerScheduler] = None,
        on_status: Optional[StatusObserver] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings or get_settings().remote
        self._channel_factory = channel_factory or open_websocket
        self._scheduler = scheduler or AsyncioScheduler()
        self._on_status = on_status
        self._clock = clock

        self._state = ConnectionState()
        self._channel: Optional[Channel] = None
        self._timeout_handle: Optional[TimerHandle] = None
        self._reconnect_handle: Optional[TimerHandle] = None
        self._suggestions: tuple[SuggestionEntry, ...] = ()

    # ----- public surface -----

    @property
    def phase(self) -> ConnectionPhase:
        return self._state.phase

    @property
    def reconnect_attempts(self) -> int:
        return self._state.reconnect_attempts

    @property
    def connected(self) -> bool:
        return self._state.is_open

    @property
    def suggestions(self) -> tuple[SuggestionEntry, ...]:
        """The batch from the most recent backend message."""
        return self._suggestions

    def status(self) -> dict:
        return {
            "phase": self._state.phase.value,
            "connected": self.connected,
            "reconnect_attempts": self._state.reconnect_attempts,
            "cached_suggestions": len(self._suggestions),
        }

    def connect(self) -> None:
        """Open (or re-open) the channel to the backend."""
        if not self._settings.enabled:
            logger.info("Remote suggestions disabled; staying offline")
            return
        logger.info("Connecting to backend: %s", self._settings.endpoint)
        self._dispatch(Event(EventType.CONNECT))

    def query(self, word: str, language: str) -> bool:
        """Send a search request. Returns False if it could not be sent."""
        if not self._state.is_open or self._channel is None:
            return False
        timestamp = int(self._clock() * 1000)
        try:
            self._channel.send(encode_search(word, language, timestamp))
        except (ChannelClosedError, ConnectionError, RuntimeError) as exc:
            logger.error("Failed to send query: %s", exc)
            return False
        return True

    def destroy(self) -> None:
        """Cancel timers and close the channel cleanly. Safe to call twice."""
        if self._state.phase is ConnectionPhase.DESTROYED:
            return
        self._dispatch(Event(EventType.DESTROY))
        logger.info("Remote client cleaned up")

    # ----- channel callbacks -----

    def on_open(self, channel: Channel) -> None:
        if channel is not self._channel:
            return
        self._dispatch(Event(EventType.OPENED))

    def on_close(self, channel: Channel, code: int) -> None:
        if channel is not self._channel:
            return
        logger.warning("Connection closed (code: %s)", code)
        self._channel = None
        self._dispatch(Event(EventType.CLOSED, code=code))

    def on_error(self, channel: Channel, exc: BaseException) -> None:
        if channel is not self._channel:
            return
        logger.error("Websocket error occurred: %s", exc)
        self._dispatch(Event(EventType.ERROR))

    def on_message(self, channel: Channel, data: Union[str, bytes]) -> None:
        if channel is not self._channel:
            return
        try:
            message = parse_inbound(data)
        except MalformedPayloadError as exc:
            logger.error("Failed to parse backend response: %s", exc)
            self._suggestions = ()
            return

        if message.kind is MessageKind.PONG:
            logger.debug("Heartbeat received")
            return
        if message.kind is MessageKind.ERROR:
            logger.error("Backend error: %s", message.error)
            return

        self._suggestions = message.suggestions
        if self._suggestions:
            logger.debug("Got %d suggestions from backend", len(self._suggestions))

    # ----- timer callbacks -----

    def _on_timeout(self) -> None:
        self._timeout_handle = None
        if self._state.phase is ConnectionPhase.CONNECTING:
            logger.error("Connection timeout - server not responding")
        self._dispatch(Event(EventType.TIMEOUT))

    def _on_retry(self) -> None:
        self._reconnect_handle = None
        self._dispatch(Event(EventType.RETRY))

    # ----- state machine plumbing -----

    def _dispatch(self, event: Event) -> None:
        self._state, actions = transition(self._state, event, self._settings)
        for action in actions:
            self._perform(action)

    def _perform(self, action: Action) -> None:
        kind = action.type
        if kind is ActionType.OPEN_CHANNEL:
            self._open_channel()
        elif kind is ActionType.CLOSE_CHANNEL:
            self._close_channel(action.code)
        elif kind is ActionType.ARM_TIMEOUT:
            self._timeout_handle = self._scheduler.call_later(action.delay, self._on_timeout)
        elif kind is ActionType.CANCEL_TIMEOUT:
            if self._timeout_handle is not None:
                self._timeout_handle.cancel()
                self._timeout_handle = None
        elif kind is ActionType.SCHEDULE_RECONNECT:
            logger.info(
                "Reconnecting in %.1fs (attempt %d/%d)",
                action.delay,
                self._state.reconnect_attempts,
                self._settings.max_reconnect_attempts,
            )
            self._reconnect_handle = self._scheduler.call_later(action.delay, self._on_retry)
        elif kind is ActionType.CANCEL_RECONNECT:
            if self._reconnect_handle is not None:
                self._reconnect_handle.cancel()
                self._reconnect_handle = None
        elif kind is ActionType.SEND_PING:
            self._send_ping()
        elif kind is ActionType.NOTIFY_STATUS:
            self._notify(bool(action.up))
        elif kind is ActionType.GIVE_UP:
            logger.error("Gave up after %d attempts", self._settings.max_reconnect_attempts)
            logger.warning("Working with local suggestions only")

    def _open_channel(self) -> None:
        try:
            self._channel = self._channel_factory(self._settings.endpoint, self)
        except (OSError, RuntimeError, ValueError) as exc:
            logger.error("Failed to create connection: %s", exc)
            self._channel = None
            self._dispatch(Event(EventType.CLOSED, code=ABNORMAL_CLOSURE))

    def _close_channel(self, code: Optional[int]) -> None:
        channel, self._channel = self._channel, None
        if channel is None:
            return
        reason = "Client cleanup" if code == NORMAL_CLOSURE else ""
        try:
            channel.close(NORMAL_CLOSURE, reason)
        except Exception as exc:  # close is best-effort
            logger.warning("Error closing old connection: %s", exc)

    def _send_ping(self) -> None:
        if self._channel is None:
            return
        try:
            self._channel.send(encode_ping())
        except (ChannelClosedError, ConnectionError, RuntimeError) as exc:
            logger.warning("Ping failed: %s", exc)

    def _notify(self, up: bool) -> None:
        if self._on_status is None:
            return
        try:
            self._on_status(up)
        except Exception:
            logger.exception("Connection-status observer failed")
