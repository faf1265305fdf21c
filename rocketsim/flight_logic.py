"""Automatic flight mode transitions driven by state estimator data.

Every transition condition must hold for a debounce period, so that sensor
noise or short glitches do not cause spurious mode changes.
"""

from __future__ import annotations

import math
from enum import IntEnum
from typing import Optional, Protocol, Sequence

from .settings import RecoverySettings

GRAVITY = 9.80665

_U32_MASK = 0xFFFF_FFFF


class FlightMode(IntEnum):
    """Vehicle flight modes, ordered by how far the flight has progressed."""

    IDLE = 0
    HARDWARE_ARMED = 1
    FILLING = 2
    PRESSURIZING = 3
    HOLD = 4
    VENTING = 5
    ARMED = 6
    IGNITION = 7
    BURN = 8
    COAST = 9
    RECOVERY_DROGUE = 10
    RECOVERY_MAIN = 11
    LANDED = 12


class _Estimator(Protocol):
    def acceleration_vehicle(self) -> Optional[Sequence[float]]: ...

    def vertical_speed(self) -> float: ...

    def altitude_agl(self) -> float: ...


def _elapsed(now: int, since: int) -> int:
    return (now - since) & _U32_MASK


def _accel_z(estimator: _Estimator) -> float:
    acc = estimator.acceleration_vehicle()
    return 0.0 if acc is None else float(acc[2])


class FlightLogic:
    """Decides when the vehicle should move on to its next flight mode.

    Times are milliseconds on a wrapping 32-bit clock.
    """

    def __init__(self) -> None:
        self._condition_true_since: Optional[int] = None
        self._mode_time = 0
        self._takeoff_time = 0

    def update(
        self,
        time: int,
        mode: FlightMode,
        estimator: _Estimator,
        settings: RecoverySettings,
    ) -> Optional[FlightMode]:
        """Return the mode to switch to, or None to stay in ``mode``."""
        time &= _U32_MASK
        t_in_mode = _elapsed(time, self._mode_time)
        t_since_takeoff = _elapsed(time, self._takeoff_time)

        if mode in (FlightMode.ARMED, FlightMode.IGNITION):
            # Takeoff: sustained acceleration above ~3 G along the body axis.
            high_accel = _accel_z(estimator) > 3.0 * GRAVITY
            return FlightMode.BURN if self._true_since(time, high_accel, 50) else None

        if mode is FlightMode.BURN:
            burnout = self._true_since(time, _accel_z(estimator) < 0.0, 50)
            timed_out = t_since_takeoff > 15_000
            return FlightMode.COAST if burnout or timed_out else None

        if mode is FlightMode.COAST:
            falling = self._true_since(time, estimator.vertical_speed() < 0.0, 500)
            min_exceeded = t_since_takeoff > settings.min_time_to_drogue
            max_exceeded = t_since_takeoff > 30_000
            if (min_exceeded and falling) or max_exceeded:
                return FlightMode.RECOVERY_DROGUE
            return None

        if mode is FlightMode.RECOVERY_DROGUE:
            below = self._true_since(
                time, estimator.altitude_agl() < settings.main_deploy_altitude, 100
            )
            if t_in_mode > settings.min_time_to_main and below:
                return FlightMode.RECOVERY_MAIN
            return None

        if mode is FlightMode.RECOVERY_MAIN:
            acc = estimator.acceleration_vehicle()
            if acc is None:
                gravity_present = True
            else:
                magnitude = math.sqrt(sum(float(c) * float(c) for c in acc))
                gravity_present = GRAVITY * 0.9 <= magnitude < GRAVITY * 1.1
            landed = self._true_since(
                time,
                gravity_present and abs(estimator.vertical_speed()) < 1.0,
                1000,
            )
            return FlightMode.LANDED if t_in_mode > 3000 and landed else None

        return None

    def set_mode(self, time: int, new_mode: FlightMode) -> None:
        """Record an actual mode change, resetting the mode timers."""
        time &= _U32_MASK
        self._mode_time = time
        self._condition_true_since = None
        if new_mode is FlightMode.BURN:
            self._takeoff_time = time

    def _true_since(self, time: int, cond: bool, duration: int) -> bool:
        """Whether ``cond`` has held continuously for more than ``duration`` ms."""
        if not cond:
            self._condition_true_since = None
            return False
        if self._condition_true_since is None:
            self._condition_true_since = time
        return _elapsed(time, self._condition_true_since) > duration