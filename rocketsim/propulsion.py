"""Propulsion system interface: tanks, valves and the igniter."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional


class TankId(IntEnum):
    """Pressure vessels of the propulsion system."""

    PRESSURANT = 0
    OXIDIZER = 1
    COMBUSTION_CHAMBER = 2


class ValveId(IntEnum):
    """Commandable valves of the propulsion system."""

    PRESSURANT_VENT = 0
    PRESSURIZATION = 1
    OXIDIZER_VENT = 2
    OXIDIZER_FILL = 3
    MAIN = 4


ALL_TANKS = (TankId.PRESSURANT, TankId.OXIDIZER, TankId.COMBUSTION_CHAMBER)

ALL_VALVES = (
    ValveId.PRESSURANT_VENT,
    ValveId.PRESSURIZATION,
    ValveId.OXIDIZER_VENT,
    ValveId.OXIDIZER_FILL,
    ValveId.MAIN,
)


class PropulsionType(Enum):
    SOLID = "solid"
    HYBRID = "hybrid"


_VALVE_KINDS = frozenset({"open", "close", "partial", "pulse_open"})


@dataclass(frozen=True)
class ValveCommand:
    """A target for a valve: open, closed, partially open, or open for a while.

    ``value`` is the position (0..1) for partial commands and the pulse
    length in seconds for pulse commands.
    """

    kind: str
    value: float = 0.0

    def __post_init__(self) -> None:
        if self.kind not in _VALVE_KINDS:
            raise ValueError(f"unknown valve command kind: {self.kind!r}")
        if self.kind == "pulse_open" and self.value < 0.0:
            raise ValueError("pulse duration must not be negative")

    @staticmethod
    def open() -> "ValveCommand":
        return ValveCommand("open")

    @staticmethod
    def close() -> "ValveCommand":
        return ValveCommand("close")

    @staticmethod
    def partial(position: float) -> "ValveCommand":
        return ValveCommand("partial", float(position))

    @staticmethod
    def pulse_open(duration: float) -> "ValveCommand":
        return ValveCommand("pulse_open", float(duration))

    def target(self, elapsed: float) -> float:
        """Target valve position, given seconds since the command was issued."""
        if self.kind == "open":
            return 1.0
        if self.kind == "close":
            return 0.0
        if self.kind == "partial":
            return self.value
        return 1.0 if self.value > elapsed else 0.0


@dataclass(frozen=True)
class TankReading:
    pressure1: Optional[float] = None
    pressure2: Optional[float] = None
    temperature1: Optional[float] = None
    temperature2: Optional[float] = None
    level: Optional[float] = None


@dataclass(frozen=True)
class ValveReading:
    commanded_state: Optional[float] = None
    measured_state: Optional[float] = None


class PropulsionError(Exception):
    """A propulsion command could not be carried out."""

    class Reason(Enum):
        NOT_PERMITTED_IN_MODE = "not permitted in mode"
        INHIBITED = "inhibited"
        TRANSPORT_FAILED = "transport failed"

    def __init__(self, reason: "PropulsionError.Reason") -> None:
        super().__init__(reason.value)
        self.reason = reason


class Propulsion(ABC):
    """Interface to a propulsion system."""

    PROPULSION_TYPE = PropulsionType.SOLID

    @abstractmethod
    def tank_state(self, tank: TankId) -> Optional[TankReading]:
        """Current reading of a tank, or None if it is not available."""

    @abstractmethod
    def valve_state(self, valve: ValveId) -> Optional[ValveReading]:
        """Current reading of a valve, or None if it is not available."""

    @abstractmethod
    def command_valve(self, valve: ValveId, command: ValveCommand) -> None:
        """Drive a valve; raises PropulsionError on failure."""

    @abstractmethod
    def fire_igniter(self) -> None:
        """Fire the igniter; raises PropulsionError on failure."""


class NoPropulsion(Propulsion):
    """A vehicle without controllable propulsion; every command is inhibited."""

    def tank_state(self, tank: TankId) -> Optional[TankReading]:
        return None

    def valve_state(self, valve: ValveId) -> Optional[ValveReading]:
        return None

    def command_valve(self, valve: ValveId, command: ValveCommand) -> None:
        raise PropulsionError(PropulsionError.Reason.INHIBITED)

    def fire_igniter(self) -> None:
        raise PropulsionError(PropulsionError.Reason.INHIBITED)