"""Hybrid rocket propulsion simulation: pressurant, oxidizer, valves and chamber."""

from __future__ import annotations

import threading
from typing import Any, Dict, Optional

from .flight_logic import FlightMode
from .fluid import (
    AMBIENT_PRESSURE,
    AMBIENT_TEMP,
    n2o_liquid_density,
    n2o_saturation_pressure,
)
from .propulsion import (
    Propulsion,
    PropulsionType,
    TankId,
    TankReading,
    ValveCommand,
    ValveId,
    ValveReading,
)
from .tank import Tank
from .two_phase import TwoPhaseTank
from .valves import Valve

#: Conductance of the ground supply pressurant fill [mol/(s*bar)].
CONDUCTANCE_PRESSURANT_FILL = 0.07
#: Pressure of the ground high-pressure pressurant supply [bar].
GSE_SUPPLY_PRESSURE = 280.0
#: Regulator setpoint of the pressurization line [bar].
REGULATOR_SETPOINT = 55.0
#: Fuel regression rate during burn [kg/s].
FUEL_BURN_RATE = 0.2
#: Chamber pressure produced per unit of total mass flow [bar/(kg/s)].
CHAMBER_PRESSURE_PER_MASS_FLOW = 16.0
#: Time constant of the chamber pressure response [s].
CHAMBER_PRESSURE_TIME_CONSTANT = 0.05


class HybridSimulation:
    """State of a nitrous/solid-fuel hybrid motor and its plumbing.

    ``pressurant`` is the nitrogen tank, ``oxidizer`` the N2O tank.
    ``supply_n2o_mass`` is the liquid left in the external supply cylinder
    [kg], ``chamber_pressure`` is in bar and ``fuel_mass`` in kg.
    """

    def __init__(self) -> None:
        self.pressurant = Tank(2.0, AMBIENT_PRESSURE, AMBIENT_TEMP)
        self.oxidizer = TwoPhaseTank(7.81, 0.01, AMBIENT_PRESSURE, AMBIENT_TEMP)
        self._valves: Dict[ValveId, Valve] = {
            ValveId.PRESSURANT_VENT: Valve(0.07, 0.2),
            ValveId.PRESSURIZATION: Valve(0.1, 0.5),
            ValveId.OXIDIZER_FILL: Valve(0.05, 0.2),
            ValveId.OXIDIZER_VENT: Valve(0.03, 0.2),
            ValveId.MAIN: Valve(0.027, 0.5),
        }
        self.supply_n2o_mass = 30.0
        self.chamber_pressure = 0.0
        self.fuel_mass = 1.5
        self._igniter_fired = False
        self._flight_mode = FlightMode.IDLE

    @property
    def igniter_fired(self) -> bool:
        """Whether the igniter has been fired."""
        return self._igniter_fired

    @property
    def flight_mode(self) -> FlightMode:
        """The vehicle's current flight mode, as last reported."""
        return self._flight_mode

    def set_flight_mode(self, mode: FlightMode) -> None:
        self._flight_mode = mode

    def tick(self, dt: float) -> None:
        """Advance the propulsion system by ``dt`` seconds."""
        for valve in self._valves.values():
            valve.tick(dt)

        press_vent = self._valves[ValveId.PRESSURANT_VENT]
        press = self._valves[ValveId.PRESSURIZATION]
        ox_fill = self._valves[ValveId.OXIDIZER_FILL]
        ox_vent = self._valves[ValveId.OXIDIZER_VENT]
        main = self._valves[ValveId.MAIN]

        pressurant_pressure = self.pressurant.pressure()
        ullage_pressure = self.oxidizer.ullage_pressure()

        # In Idle someone is filling the pressurant tank by hand.
        if self._flight_mode == FlightMode.IDLE:
            diff = max(GSE_SUPPLY_PRESSURE - pressurant_pressure, 0.0)
            self.pressurant.add_gas(CONDUCTANCE_PRESSURANT_FILL * diff * dt, AMBIENT_TEMP)

        vent_diff = max(pressurant_pressure - AMBIENT_PRESSURE, 0.0)
        self.pressurant.remove_gas(press_vent.conductance * vent_diff * dt)

        regulated = min(pressurant_pressure, REGULATOR_SETPOINT)
        press_diff = max(regulated - ullage_pressure, 0.0)
        moles = min(press.conductance * press_diff * dt, self.pressurant.moles)
        self.oxidizer.add_pressurant(moles, self.pressurant.temp)
        self.pressurant.remove_gas(moles)

        ox_vent_diff = max(ullage_pressure - AMBIENT_PRESSURE, 0.0)
        self.oxidizer.vent_ullage(ox_vent.conductance * ox_vent_diff * dt)

        # Oxidizer fill from the external supply cylinder.
        ullage_volume = max(
            self.oxidizer.volume - self.oxidizer.liquid_volume(), self.oxidizer.min_ullage
        )
        fill_diff = max(n2o_saturation_pressure(AMBIENT_TEMP) - ullage_pressure, 0.0)
        inflow_density = n2o_liquid_density(AMBIENT_TEMP)
        ullage_fraction = min(max(ullage_volume / self.oxidizer.volume, 0.0), 1.0)
        volume_request = ox_fill.conductance * fill_diff * ullage_fraction * dt
        fill_mass = min(volume_request * inflow_density, self.supply_n2o_mass)
        self.oxidizer.add_liquid(fill_mass, AMBIENT_TEMP)
        self.supply_n2o_mass -= fill_mass

        # Liquid drains through the main valve against chamber back-pressure.
        downstream = max(self.chamber_pressure, AMBIENT_PRESSURE)
        main_diff = max(ullage_pressure - downstream, 0.0)
        delta_volume = main.conductance * main_diff * dt
        liquid_density = n2o_liquid_density(self.oxidizer.liquid_temp)
        ox_mass_flow = self.oxidizer.drain_liquid(delta_volume * liquid_density) / dt

        combustion = (
            main.state > 0.2
            and self._igniter_fired
            and self.oxidizer.liquid_mass > 0.0
            and self.fuel_mass > 0.0
        )
        c = 1.0 if combustion else 0.0

        fuel_mass_flow = c * FUEL_BURN_RATE
        self.fuel_mass = max(self.fuel_mass - fuel_mass_flow * dt, 0.0)

        target = c * CHAMBER_PRESSURE_PER_MASS_FLOW * (ox_mass_flow + fuel_mass_flow)
        alpha = min(dt / CHAMBER_PRESSURE_TIME_CONSTANT, 1.0)
        self.chamber_pressure += (target - self.chamber_pressure) * alpha

        self.supply_n2o_mass = max(self.supply_n2o_mass, 0.0)
        self.fuel_mass = max(self.fuel_mass, 0.0)

        self.pressurant.tick(dt)
        self.oxidizer.tick(dt)

    def liquid_volume(self) -> float:
        """Liquid N2O volume [L]."""
        return self.oxidizer.liquid_volume()

    def tank_pressure(self, tank: TankId) -> float:
        """Pressure [bar] of ``tank``."""
        if tank == TankId.PRESSURANT:
            return self.pressurant.pressure()
        if tank == TankId.OXIDIZER:
            return self.oxidizer.ullage_pressure()
        return self.chamber_pressure

    def tank_level(self, tank: TankId) -> float:
        """Fill level (0..1) of ``tank``; only the oxidizer tank has one."""
        if tank == TankId.OXIDIZER:
            return self.oxidizer.fill_level()
        return 0.0

    def tank_temperature(self, tank: TankId) -> Optional[float]:
        """Temperature [C] of ``tank``, or None for the combustion chamber."""
        if tank == TankId.PRESSURANT:
            return self.pressurant.temp - 273.15
        if tank == TankId.OXIDIZER:
            return self.oxidizer.temperature() - 273.15
        return None

    def set_supply_n2o_mass(self, mass: float) -> None:
        """Override the supply cylinder content [kg]; negative means empty."""
        self.supply_n2o_mass = max(mass, 0.0)

    def command_valve(self, valve: ValveId, cmd: ValveCommand) -> None:
        self._valves[ValveId(valve)].command(cmd)

    def valve_state(self, valve: ValveId) -> float:
        """Opening of ``valve``, 0 for closed to 1 for fully open."""
        return self._valves[ValveId(valve)].state

    def fire_igniter(self) -> None:
        self._igniter_fired = True


class SitlPropulsion(Propulsion):
    """Propulsion interface backed by a simulation's ``hybrid`` member.

    ``sim`` is any object with a ``hybrid`` attribute; it is looked up on every
    call, so a replaced simulation is followed. ``lock`` guards access when
    the simulation is shared between threads.
    """

    PROPULSION_TYPE = PropulsionType.HYBRID

    def __init__(self, sim: Any, lock: Optional[Any] = None) -> None:
        self._sim = sim
        self._lock = lock if lock is not None else threading.Lock()

    def tank_state(self, tank: TankId) -> Optional[TankReading]:
        with self._lock:
            hybrid: HybridSimulation = self._sim.hybrid
            return TankReading(
                pressure1=hybrid.tank_pressure(tank),
                temperature1=hybrid.tank_temperature(tank),
                level=hybrid.tank_level(tank) if tank == TankId.OXIDIZER else None,
            )

    def valve_state(self, valve: ValveId) -> Optional[ValveReading]:
        with self._lock:
            state = self._sim.hybrid.valve_state(valve)
            return ValveReading(commanded_state=state, measured_state=state)

    def command_valve(self, valve: ValveId, command: ValveCommand) -> None:
        with self._lock:
            self._sim.hybrid.command_valve(valve, command)

    def fire_igniter(self) -> None:
        with self._lock:
            self._sim.hybrid.fire_igniter()