"""The complete vehicle simulation: flight physics, battery and propulsion."""

from __future__ import annotations

import threading
from typing import Optional

from .battery import Battery
from .flight_logic import FlightMode
from .hybrid import HybridSimulation
from .physics import DT, FlightPhysics, RecoveryFlags


class Simulation:
    """Everything the simulated flight computer senses and acts on.

    With ``hybrid`` set (the default) the vehicle carries a hybrid motor whose
    chamber pressure drives the thrust; otherwise it flies a solid motor and
    ``hybrid`` is None. ``lock`` is there for sharing the simulation between
    the sensor source, the propulsion interface and the main loop.
    """

    def __init__(self, flags: Optional[RecoveryFlags] = None, hybrid: bool = True) -> None:
        self.flags = flags if flags is not None else RecoveryFlags()
        self.physics = FlightPhysics(self.flags, hybrid=hybrid)
        self.battery = Battery()
        self.hybrid: Optional[HybridSimulation] = HybridSimulation() if hybrid else None
        self.lock = threading.RLock()

    @property
    def is_hybrid(self) -> bool:
        """Whether the simulated vehicle has a hybrid motor."""
        return self.hybrid is not None

    def set_flight_mode(self, mode: FlightMode) -> None:
        """Follow the vehicle's flight mode; entering Idle resets the hardware."""
        previous = self.physics.mode
        self.physics.set_flight_mode(mode)
        if self.hybrid is not None:
            self.hybrid.set_flight_mode(mode)

        if mode == FlightMode.IDLE and previous != FlightMode.IDLE:
            self.battery = Battery()
            if self.hybrid is not None:
                self.hybrid = HybridSimulation()

    def tick(self) -> None:
        """Advance every part of the simulation by one step."""
        self.physics.tick()
        self.battery.tick(DT, self.physics.mode)

        if self.hybrid is not None:
            self.hybrid.tick(DT)
            self.physics.set_chamber_pressure(self.hybrid.chamber_pressure)