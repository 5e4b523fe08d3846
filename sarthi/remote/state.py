"""
Connection lifecycle of the remote suggestion client.

The lifecycle is a pure function: given the current ConnectionState and an
event it returns the next state plus the side effects the client has to
perform, in order.  Nothing here touches sockets or clocks.

    disconnected --connect--> connecting --opened--> open
    connecting/open --closed(!=1000)/timeout--> reconnecting --retry--> connecting
    reconnecting budget exhausted --> closed_permanently
    any --destroy--> destroyed
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from sarthi.config.settings import RemoteSettings
from sarthi.remote.protocol import NORMAL_CLOSURE


class ConnectionPhase(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"
    RECONNECTING = "reconnecting"
    CLOSED_PERMANENTLY = "closed_permanently"
    DESTROYED = "destroyed"


TERMINAL_PHASES = frozenset({ConnectionPhase.CLOSED_PERMANENTLY, ConnectionPhase.DESTROYED})


class EventType(str, Enum):
    CONNECT = "connect"
    OPENED = "opened"
    CLOSED = "closed"
    ERROR = "error"
    TIMEOUT = "timeout"
    RETRY = "retry"
    DESTROY = "destroy"


@dataclass(frozen=True)
class Event:
    type: EventType
    code: Optional[int] = None


class ActionType(str, Enum):
    CLOSE_CHANNEL = "close_channel"
    OPEN_CHANNEL = "open_channel"
    ARM_TIMEOUT = "arm_timeout"
    CANCEL_TIMEOUT = "cancel_timeout"
    SCHEDULE_RECONNECT = "schedule_reconnect"
    CANCEL_RECONNECT = "cancel_reconnect"
    SEND_PING = "send_ping"
    NOTIFY_STATUS = "notify_status"
    GIVE_UP = "give_up"


@dataclass(frozen=True)
class Action:
    type: ActionType
    delay: Optional[float] = None
    code: Optional[int] = None
    up: Optional[bool] = None


@dataclass(frozen=True)
class ConnectionState:
    phase: ConnectionPhase = ConnectionPhase.DISCONNECTED
    reconnect_attempts: int = 0

    @property
    def is_open(self) -> bool:
        return self.phase is ConnectionPhase.OPEN


def reconnect_delay(settings: RemoteSettings, attempt: int) -> float:
    """Linear backoff: the n-th retry waits n base delays."""
    return settings.reconnect_delay * attempt


def _schedule_reconnect(
    state: ConnectionState,
    settings: RemoteSettings,
) -> tuple[ConnectionState, list[Action]]:
    actions = [Action(ActionType.CANCEL_RECONNECT)]
    if state.reconnect_attempts >= settings.max_reconnect_attempts:
        actions.append(Action(ActionType.GIVE_UP))
        return replace(state, phase=ConnectionPhase.CLOSED_PERMANENTLY), actions

    attempts = state.reconnect_attempts + 1
    actions.append(Action(ActionType.SCHEDULE_RECONNECT, delay=reconnect_delay(settings, attempts)))
    return ConnectionState(ConnectionPhase.RECONNECTING, attempts), actions


def transition(
    state: ConnectionState,
    event: Event,
    settings: RemoteSettings,
) -> tuple[ConnectionState, list[Action]]:
    """Return the next state and the ordered actions caused by *event*."""
    phase = state.phase

    if phase is ConnectionPhase.DESTROYED:
        return state, []

    if event.type is EventType.DESTROY:
        return replace(state, phase=ConnectionPhase.DESTROYED), [
            Action(ActionType.CANCEL_TIMEOUT),
            Action(ActionType.CANCEL_RECONNECT),
            Action(ActionType.CLOSE_CHANNEL, code=NORMAL_CLOSURE),
        ]

    if phase in TERMINAL_PHASES:
        return state, []

    if event.type is EventType.CONNECT or (
        event.type is EventType.RETRY and phase is ConnectionPhase.RECONNECTING
    ):
        return replace(state, phase=ConnectionPhase.CONNECTING), [
            Action(ActionType.CANCEL_RECONNECT),
            Action(ActionType.CLOSE_CHANNEL),
            Action(ActionType.CANCEL_TIMEOUT),
            Action(ActionType.ARM_TIMEOUT, delay=settings.connection_timeout),
            Action(ActionType.OPEN_CHANNEL),
        ]

    if event.type is EventType.OPENED and phase is ConnectionPhase.CONNECTING:
        return ConnectionState(ConnectionPhase.OPEN, 0), [
            Action(ActionType.CANCEL_TIMEOUT),
            Action(ActionType.SEND_PING),
            Action(ActionType.NOTIFY_STATUS, up=True),
        ]

    if event.type is EventType.TIMEOUT and phase is ConnectionPhase.CONNECTING:
        # The abandoned channel is detached, so its own close event never arrives
        next_state, retry = _schedule_reconnect(
            replace(state, phase=ConnectionPhase.DISCONNECTED), settings,
        )
        return next_state, [
            Action(ActionType.CLOSE_CHANNEL),
            Action(ActionType.NOTIFY_STATUS, up=False),
            *retry,
        ]

    if event.type is EventType.ERROR and phase in (ConnectionPhase.CONNECTING, ConnectionPhase.OPEN):
        # Reconnecting is left to the close event that follows
        return replace(state, phase=ConnectionPhase.DISCONNECTED), [
            Action(ActionType.CANCEL_TIMEOUT),
            Action(ActionType.NOTIFY_STATUS, up=False),
        ]

    if event.type is EventType.CLOSED and phase in (
        ConnectionPhase.CONNECTING,
        ConnectionPhase.OPEN,
        ConnectionPhase.DISCONNECTED,
    ):
        disconnected = replace(state, phase=ConnectionPhase.DISCONNECTED)
        actions = [
            Action(ActionType.CANCEL_TIMEOUT),
            Action(ActionType.NOTIFY_STATUS, up=False),
        ]
        if event.code == NORMAL_CLOSURE:
            return disconnected, actions
        next_state, retry = _schedule_reconnect(disconnected, settings)
        return next_state, actions + retry

    return state, []
