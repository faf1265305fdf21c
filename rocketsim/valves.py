"""Valve actuation with a finite travel time."""

from __future__ import annotations

from .propulsion import ValveCommand


class Valve:
    """A valve that moves toward its commanded position at a limited rate.

    ``max_conductance`` is in mol/(s*bar) for gases or L/(s*bar) for liquids,
    ``travel_time`` the seconds needed to go from closed to fully open.
    """

    def __init__(self, max_conductance: float, travel_time: float) -> None:
        if travel_time <= 0.0:
            raise ValueError("travel time must be positive")
        self.max_conductance = max_conductance
        self.travel_time = travel_time
        self._commanded = ValveCommand.close()
        self._commanded_time = 0.0
        self._state = 0.0

    @property
    def state(self) -> float:
        """Current opening, 0 for closed to 1 for fully open."""
        return self._state

    @property
    def conductance(self) -> float:
        """Effective conductance at the current opening."""
        return self._state * self.max_conductance

    @property
    def commanded(self) -> ValveCommand:
        """The command the valve is currently following."""
        return self._commanded

    def command(self, cmd: ValveCommand) -> None:
        """Follow a new command from now on."""
        self._commanded = cmd
        self._commanded_time = 0.0

    def tick(self, dt: float) -> None:
        """Move toward the target for ``dt`` seconds."""
        target = self._commanded.target(self._commanded_time)
        max_step = dt / self.travel_time
        error = target - self._state
        self._state += min(max(error, -max_step), max_step)
        self._commanded_time += dt