"""Single-phase ideal gas tank, such as the nitrogen pressurant tank."""

from __future__ import annotations

from .fluid import (
    AMBIENT_TEMP,
    WALL_COOLING_TIME_CONSTANT,
    moles_to_pressure,
    pressure_to_moles,
)


class Tank:
    """A rigid tank of ideal gas.

    ``moles`` is the gas content, ``temp`` the bulk gas temperature [K].
    """

    def __init__(self, volume: float, initial_pressure: float, initial_temp: float) -> None:
        self._volume = volume
        self.moles = pressure_to_moles(initial_pressure, volume, initial_temp)
        self.temp = initial_temp

    @property
    def volume(self) -> float:
        """Tank volume [L]."""
        return self._volume

    def pressure(self) -> float:
        """Tank pressure [bar]."""
        return moles_to_pressure(self.moles, self._volume, self.temp)

    def add_gas(self, moles: float, incoming_temp: float) -> None:
        """Add gas arriving at ``incoming_temp`` [K], mixing temperatures."""
        moles_before = self.moles
        self.moles += moles
        if self.moles > 0.0:
            self.temp = (moles_before * self.temp + moles * incoming_temp) / self.moles

    def remove_gas(self, moles: float) -> None:
        """Remove gas, cooling the rest by isentropic expansion (gamma = 7/5)."""
        moles_before = self.moles
        self.moles -= min(moles, self.moles)
        if moles_before > 0.0 and self.moles > 0.0:
            self.temp *= (self.moles / moles_before) ** 0.4

    def tick(self, dt: float) -> None:
        """Exchange heat with the ambient air for ``dt`` seconds."""
        blend = min(dt / WALL_COOLING_TIME_CONSTANT, 1.0)
        self.temp += (AMBIENT_TEMP - self.temp) * blend
        self.moles = max(self.moles, 0.0)
        self.temp = min(max(self.temp, 200.0), 320.0)