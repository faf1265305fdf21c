"""Simple simulation of a 3S1P lithium-ion battery pack."""

from __future__ import annotations

from .flight_logic import FlightMode

CELLS_SERIES = 3
CAPACITY_AH = 3.0
CELL_IR_OHM = 0.04

#: Open-circuit cell voltage [V] against state of charge.
OCV_CURVE = (
    (0.00, 3.20),
    (0.05, 3.40),
    (0.20, 3.60),
    (0.50, 3.75),
    (0.80, 3.95),
    (1.00, 4.20),
)

#: Current draw [A] per flight mode; negative means charging.
_MODE_CURRENT = {
    FlightMode.IDLE: -0.2,
    FlightMode.FILLING: 0.3,
    FlightMode.PRESSURIZING: 0.3,
    FlightMode.HOLD: 0.3,
    FlightMode.VENTING: 0.3,
    FlightMode.HARDWARE_ARMED: 0.3,
    FlightMode.ARMED: 0.3,
    FlightMode.IGNITION: 4.8,
    FlightMode.BURN: 2.4,
    FlightMode.COAST: 2.4,
    FlightMode.RECOVERY_DROGUE: 2.4,
    FlightMode.RECOVERY_MAIN: 2.4,
    FlightMode.LANDED: 0.6,
}


def cell_ocv(soc: float) -> float:
    """Open-circuit voltage [V] of one cell at state of charge ``soc``."""
    soc = min(max(soc, 0.0), 1.0)
    for (s0, v0), (s1, v1) in zip(OCV_CURVE, OCV_CURVE[1:]):
        if soc <= s1:
            t = (soc - s0) / (s1 - s0)
            return v0 + t * (v1 - v0)
    return OCV_CURVE[-1][1]


class Battery:
    """Battery pack state.

    ``soc`` is the state of charge (0..1), ``current`` the pack current [A]
    (positive when discharging) and ``voltage`` the terminal voltage [V].
    """

    def __init__(self) -> None:
        self.soc = 0.90
        self.current = 0.0
        self.voltage = cell_ocv(self.soc) * CELLS_SERIES

    def tick(self, dt: float, mode: FlightMode) -> None:
        """Draw the current of ``mode`` for ``dt`` seconds."""
        self.current = _MODE_CURRENT[FlightMode(mode)]

        drawn_ah = self.current * dt / 3600.0
        self.soc = min(max(self.soc - drawn_ah / CAPACITY_AH, 0.0), 1.0)

        pack_ocv = cell_ocv(self.soc) * CELLS_SERIES
        pack_ir = CELL_IR_OHM * CELLS_SERIES
        self.voltage = max(pack_ocv - self.current * pack_ir, 0.0)