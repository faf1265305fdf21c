"""Uplink commands, command parsing, link quality tracking and mode listings."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from enum import IntFlag
from typing import Deque, Iterable, List, Optional, Tuple, Union

from .flight_logic import FlightMode
from .propulsion import ValveCommand, ValveId

#: How long a received frame counts towards the link statistics [ms].
LINK_QUALITY_WINDOW_MS = 5000
#: Most frames the link statistics keep track of at once.
LINK_QUALITY_CAPACITY = 64
#: How far back the reordering looks for a slightly newer sequence number.
_REORDER_LOOKBACK = 5


@dataclass(frozen=True)
class SetFlightMode:
    """Operator request to switch the vehicle to ``mode``."""

    mode: FlightMode


@dataclass(frozen=True)
class RequestAvailableModes:
    """Request for AVAILABLE_MODES; index 0 asks for every mode."""

    index: int


@dataclass(frozen=True)
class RequestCanForwarding:
    """Request to forward CAN bus traffic over the link."""


@dataclass(frozen=True)
class CommandValve:
    """Operator request to drive one valve."""

    valve: ValveId
    command: ValveCommand


UplinkCommand = Union[SetFlightMode, RequestAvailableModes, RequestCanForwarding, CommandValve]


def parse_valve_command(position: float, duration: float) -> Optional[ValveCommand]:
    """Turn the raw valve command parameters into a valve command.

    ``position`` is the target opening (clamped to 0..1), ``duration`` the
    pulse length in seconds; a non-positive or non-finite duration means no
    pulse. Returns None for combinations that make no valid command.
    """
    target = min(max(position, 0.0), 1.0) if math.isfinite(position) else None
    pulse = duration if math.isfinite(duration) and duration > 0.0 else None

    if target is None:
        return None
    if pulse is not None:
        return ValveCommand.pulse_open(pulse) if target > 0.99 else None
    if target > 0.99:
        return ValveCommand.open()
    if target < 0.01:
        return ValveCommand.close()
    return ValveCommand.partial(target)


def sort_sequences(sequences: Iterable[int]) -> List[int]:
    """Undo small reorderings of 8-bit sequence numbers.

    Each number is placed before any of the last few numbers that are
    suspiciously slightly newer than it, so that a shuffled pair does not
    look like a wrap-around of 255 lost frames.
    """
    ordered: List[int] = []
    for seq in sequences:
        seq &= 0xFF
        position = len(ordered)
        lookback = min(len(ordered), _REORDER_LOOKBACK)
        start = len(ordered) - lookback
        for offset, other in enumerate(ordered[start:]):
            diff = seq - other
            if -50 < diff < 0 or diff > 205:
                position = start + offset
                break
        ordered.insert(position, seq)
    return ordered


def count_lost(sequences: Iterable[int]) -> int:
    """Number of frames missing between consecutive 8-bit sequence numbers."""
    total = 0
    last: Optional[int] = None
    for seq in sequences:
        seq &= 0xFF
        if last is not None and last != seq:
            total += ((seq - last) & 0xFF) - 1
        last = seq
    return total


@dataclass
class LinkQuality:
    """Link statistics over the recent window."""

    tx_rate: int = 0
    rx_rate: int = 0
    messages_received: int = 0
    messages_lost: int = 0


class LinkQualityTracker:
    """Keeps the recently received frames and derives link statistics.

    Times are milliseconds on a monotonic clock.
    """

    def __init__(self) -> None:
        self._received: Deque[Tuple[float, int, int]] = deque()

    def record(self, time: float, sequence: int, length: int) -> LinkQuality:
        """Note a received frame and return the updated statistics."""
        while self._received and time - self._received[0][0] > LINK_QUALITY_WINDOW_MS:
            self._received.popleft()

        if len(self._received) < LINK_QUALITY_CAPACITY:
            self._received.append((time, sequence & 0xFF, length))

        ordered = sort_sequences(seq for _, seq, _ in self._received)
        return LinkQuality(
            tx_rate=0,
            rx_rate=sum(size for _, _, size in self._received),
            messages_received=len(self._received),
            messages_lost=count_lost(ordered),
        )


class ModeProperty(IntFlag):
    """Properties announced for each flight mode."""

    ADVANCED = 1
    NOT_USER_SELECTABLE = 2
    AUTO_MODE = 4


_HIDDEN_IN_SOLID = frozenset(
    {
        FlightMode.FILLING,
        FlightMode.VENTING,
        FlightMode.PRESSURIZING,
        FlightMode.HOLD,
        FlightMode.IGNITION,
    }
)
_BASIC_MODES = frozenset({FlightMode.IDLE, FlightMode.HARDWARE_ARMED, FlightMode.LANDED})
_AUTO_MODES = frozenset(
    {
        FlightMode.BURN,
        FlightMode.COAST,
        FlightMode.RECOVERY_DROGUE,
        FlightMode.RECOVERY_MAIN,
    }
)


def mode_properties(mode: FlightMode, hybrid: bool) -> ModeProperty:
    """Properties of ``mode`` on a hybrid or a solid-motor vehicle."""
    props = ModeProperty(0)
    hidden = mode is FlightMode.ARMED if hybrid else mode in _HIDDEN_IN_SOLID
    if hidden:
        props |= ModeProperty.NOT_USER_SELECTABLE
    if mode not in _BASIC_MODES:
        props |= ModeProperty.ADVANCED
    if mode in _AUTO_MODES:
        props |= ModeProperty.AUTO_MODE
    return props


@dataclass(frozen=True)
class AvailableMode:
    """One AVAILABLE_MODES entry."""

    number_modes: int
    mode_index: int
    custom_mode: int
    properties: ModeProperty
    mode_name: str
    standard_mode: int = 0


def _describe(index: int, mode: FlightMode, hybrid: bool) -> AvailableMode:
    return AvailableMode(
        number_modes=len(FlightMode),
        mode_index=index,
        custom_mode=int(mode),
        properties=mode_properties(mode, hybrid),
        mode_name=mode.name,
    )


def available_modes(index: int, hybrid: bool) -> List[AvailableMode]:
    """Entries answering a request for mode ``index`` (1-based; 0 for all).

    An index past the last mode yields no entries.
    """
    if index < 0:
        raise ValueError("mode index must not be negative")
    modes = list(FlightMode)
    if index == 0:
        return [_describe(i, mode, hybrid) for i, mode in enumerate(modes, start=1)]
    if index - 1 < len(modes):
        return [_describe(index, modes[index - 1], hybrid)]
    return []