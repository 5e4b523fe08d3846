"""
Shared test fixtures for the Sarthi test suite.

Provides a manually advanced timer scheduler (so reconnect and
re-tokenization timers run without wall-clock waits) and an in-memory
channel factory standing in for the websocket transport.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Optional

import pytest

from sarthi.config.settings import CompletionSettings, RemoteSettings, Settings
from sarthi.remote.client import RemoteSuggestionClient
from sarthi.remote.protocol import NORMAL_CLOSURE


class ManualHandle:
    def __init__(self, when: float, delay: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock: callbacks run only when ``advance`` passes their deadline."""

    def __init__(self) -> None:
        self.now = 0.0
        self.handles: list[ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self.now + delay, delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def delays(self) -> list[float]:
        return [h.delay for h in self.handles]

    @property
    def pending(self) -> list[ManualHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self.pending if h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.now = handle.when
            handle.fired = True
            handle.callback()
        self.now = target


class FakeChannel:
    """Channel whose events are triggered by the test."""

    def __init__(self, url: str, listener) -> None:
        self.url = url
        self.listener = listener
        self.sent: list[str] = []
        self.closed: Optional[tuple[int, str]] = None

    def send(self, text: str) -> None:
        self.sent.append(text)

    def close(self, code: int = NORMAL_CLOSURE, reason: str = "") -> None:
        self.closed = (code, reason)

    @property
    def sent_json(self) -> list[dict]:
        return [json.loads(s) for s in self.sent]

    # ----- events -----

    def open(self) -> None:
        self.listener.on_open(self)

    def receive(self, payload) -> None:
        data = payload if isinstance(payload, str) else json.dumps(payload)
        self.listener.on_message(self, data)

    def drop(self, code: int) -> None:
        self.listener.on_close(self, code)

    def fail(self, exc: Optional[BaseException] = None) -> None:
        self.listener.on_error(self, exc or ConnectionError("boom"))


class FakeChannelFactory:
    def __init__(self) -> None:
        self.channels: list[FakeChannel] = []

    def __call__(self, url: str, listener) -> FakeChannel:
        channel = FakeChannel(url, listener)
        self.channels.append(channel)
        return channel

    @property
    def last(self) -> FakeChannel:
        return self.channels[-1]


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def channels() -> FakeChannelFactory:
    return FakeChannelFactory()


@pytest.fixture
def remote_settings() -> RemoteSettings:
    return RemoteSettings(
        endpoint="ws://backend.test/ws",
        reconnect_delay=5.0,
        connection_timeout=45.0,
        max_reconnect_attempts=3,
    )


@pytest.fixture
def statuses() -> list[bool]:
    """Connection-status signals recorded by the observer."""
    return []


@pytest.fixture
def client(remote_settings, channels, scheduler, statuses) -> RemoteSuggestionClient:
    return RemoteSuggestionClient(
        settings=remote_settings,
        channel_factory=channels,
        scheduler=scheduler,
        on_status=statuses.append,
        clock=lambda: 1_700_000_000.0,
    )


@pytest.fixture
def settings(tmp_path: Path, remote_settings: RemoteSettings) -> Settings:
    return Settings(
        project_root=tmp_path,
        remote=remote_settings,
        completion=CompletionSettings(parse_interval=2.0),
    )
