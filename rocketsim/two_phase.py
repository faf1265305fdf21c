"""Two-phase tank: liquid N2O with an ullage of N2 and N2O vapour."""

from __future__ import annotations

import math

from . import fluid
from .fluid import (
    AMBIENT_TEMP,
    INTRA_TANK_TIME_CONSTANT,
    N2_HEAT_CAPACITY,
    N2_MOLAR_MASS,
    N2O_LATENT_HEAT,
    N2O_LIQUID_HEAT_CAPACITY,
    N2O_MOLAR_MASS,
    N2O_VAPOR_HEAT_CAPACITY,
    WALL_COOLING_TIME_CONSTANT,
)

#: Fastest the liquid temperature may change through phase change [K/s].
MAX_TEMP_RATE = 10.0


def _clamp_temp(temp: float) -> float:
    return min(max(temp, 200.0), 320.0)


class TwoPhaseTank:
    """An oxidizer tank holding liquid N2O below a mixed gas ullage.

    Masses in kg, amounts in mol, volumes in litres, temperatures in kelvin.
    The tank starts without liquid, its ullage filled with N2 at the given
    pressure.
    """

    def __init__(
        self,
        volume: float,
        min_ullage: float,
        initial_pressure: float,
        initial_temp: float,
    ) -> None:
        self.liquid_mass = 0.0
        self.ullage_pressurant_moles = fluid.pressure_to_moles(
            initial_pressure, volume, initial_temp
        )
        self.ullage_n2o_vapor_moles = 0.0
        self.liquid_temp = initial_temp
        self.ullage_temp = initial_temp
        self.volume = volume
        #: Floor on the ullage volume used in pressure calculations [L].
        self.min_ullage = min_ullage

    def liquid_volume(self) -> float:
        """Liquid volume [L]."""
        if self.liquid_mass <= 0.0:
            return 0.0
        return self.liquid_mass / fluid.n2o_liquid_density(self.liquid_temp)

    def _ullage_volume(self) -> float:
        return max(self.volume - self.liquid_volume(), self.min_ullage)

    def ullage_pressure(self) -> float:
        """Ullage pressure [bar]."""
        total = self.ullage_pressurant_moles + self.ullage_n2o_vapor_moles
        return fluid.moles_to_pressure(total, self._ullage_volume(), self.ullage_temp)

    def fill_level(self) -> float:
        """Liquid volume as a fraction of the tank volume."""
        return min(max(self.liquid_volume() / self.volume, 0.0), 1.0)

    def temperature(self) -> float:
        """Tank temperature [K]: the liquid's if any, else the ullage's."""
        return self.liquid_temp if self.liquid_mass > 0.0 else self.ullage_temp

    def add_pressurant(self, moles: float, incoming_temp: float) -> None:
        """Add N2 to the ullage at ``incoming_temp`` [K]."""
        capacity_before = self._ullage_heat_capacity()
        incoming = moles * N2_MOLAR_MASS * N2_HEAT_CAPACITY
        capacity_after = capacity_before + incoming
        if capacity_after > 0.0:
            self.ullage_temp = (
                capacity_before * self.ullage_temp + incoming * incoming_temp
            ) / capacity_after
        self.ullage_pressurant_moles += moles

    def vent_ullage(self, total_moles: float) -> None:
        """Vent up to ``total_moles`` of ullage gas to the atmosphere."""
        total = self.ullage_pressurant_moles + self.ullage_n2o_vapor_moles
        delta = min(total_moles, total)
        if total <= 0.0:
            return
        n2_fraction = self.ullage_pressurant_moles / total
        self.ullage_pressurant_moles -= delta * n2_fraction
        self.ullage_n2o_vapor_moles -= delta * (1.0 - n2_fraction)

        remaining = total - delta
        if remaining > 0.0:
            # Effective gamma of about 1.3 for the N2/N2O mixture.
            self.ullage_temp *= (remaining / total) ** 0.3

    def add_liquid(self, mass: float, incoming_temp: float) -> None:
        """Add liquid N2O [kg] at ``incoming_temp`` [K]."""
        mass_after = self.liquid_mass + mass
        if mass_after > 0.0:
            self.liquid_temp = (
                self.liquid_mass * self.liquid_temp + mass * incoming_temp
            ) / mass_after
        self.liquid_mass = mass_after

    def drain_liquid(self, mass: float) -> float:
        """Drain up to ``mass`` kg of liquid; return the mass actually drained."""
        drained = min(mass, self.liquid_mass)
        self.liquid_mass -= drained
        return drained

    def tick(self, dt: float) -> None:
        """Advance phase equilibrium and heat exchange by ``dt`` seconds."""
        liquid_volume = self.liquid_volume()
        ullage_volume = max(self.volume - liquid_volume, self.min_ullage)

        saturation = fluid.n2o_saturation_pressure(self.liquid_temp)
        moles_at_saturation = fluid.pressure_to_moles(
            saturation, ullage_volume, self.ullage_temp
        )

        if self.liquid_mass > 0.0 and self.ullage_n2o_vapor_moles < moles_at_saturation:
            self._evaporate(dt, moles_at_saturation)
        elif self.ullage_n2o_vapor_moles > moles_at_saturation:
            self._condense(dt, moles_at_saturation, liquid_volume)

        liquid_capacity = self._liquid_heat_capacity()
        ullage_capacity = self._ullage_heat_capacity()
        if liquid_capacity > 0.0 and ullage_capacity > 0.0:
            coupling = min(liquid_capacity, ullage_capacity) / INTRA_TANK_TIME_CONSTANT
            heat_flow = coupling * (self.ullage_temp - self.liquid_temp) * dt
            self.liquid_temp += heat_flow / liquid_capacity
            self.ullage_temp -= heat_flow / ullage_capacity

        alpha = min(dt / WALL_COOLING_TIME_CONSTANT, 1.0)
        self.liquid_temp += (AMBIENT_TEMP - self.liquid_temp) * alpha
        self.ullage_temp += (AMBIENT_TEMP - self.ullage_temp) * alpha

        self.liquid_mass = max(self.liquid_mass, 0.0)
        self.ullage_pressurant_moles = max(self.ullage_pressurant_moles, 0.0)
        self.ullage_n2o_vapor_moles = max(self.ullage_n2o_vapor_moles, 0.0)
        self.liquid_temp = _clamp_temp(self.liquid_temp)
        self.ullage_temp = _clamp_temp(self.ullage_temp)

    def _evaporate(self, dt: float, moles_at_saturation: float) -> None:
        liquid_capacity_before = self._liquid_heat_capacity()
        ullage_capacity_before = self._ullage_heat_capacity()

        if liquid_capacity_before > 0.0:
            mass_cap = MAX_TEMP_RATE * dt * liquid_capacity_before / N2O_LATENT_HEAT
        else:
            mass_cap = math.inf

        mass_needed = (moles_at_saturation - self.ullage_n2o_vapor_moles) * N2O_MOLAR_MASS
        delta_mass = min(mass_needed, self.liquid_mass, mass_cap)
        delta_moles = delta_mass / N2O_MOLAR_MASS
        liquid_temp_before = self.liquid_temp

        self.liquid_mass -= delta_mass
        self.ullage_n2o_vapor_moles += delta_moles

        if liquid_capacity_before > 0.0:
            self.liquid_temp -= N2O_LATENT_HEAT * delta_mass / liquid_capacity_before

        if ullage_capacity_before > 0.0:
            incoming = delta_mass * N2O_VAPOR_HEAT_CAPACITY
            capacity_after = ullage_capacity_before + incoming
            self.ullage_temp = (
                ullage_capacity_before * self.ullage_temp + incoming * liquid_temp_before
            ) / capacity_after

    def _condense(self, dt: float, moles_at_saturation: float, liquid_volume: float) -> None:
        liquid_capacity_before = self._liquid_heat_capacity()

        mass_cap = MAX_TEMP_RATE * dt * liquid_capacity_before / N2O_LATENT_HEAT
        mass_needed = (self.ullage_n2o_vapor_moles - moles_at_saturation) * N2O_MOLAR_MASS
        headroom = max(self.volume - liquid_volume, 0.0) * fluid.n2o_liquid_density(
            self.liquid_temp
        )
        delta_mass = min(mass_needed, headroom, mass_cap)
        delta_moles = delta_mass / N2O_MOLAR_MASS
        ullage_temp_before = self.ullage_temp

        self.liquid_mass += delta_mass
        self.ullage_n2o_vapor_moles -= delta_moles

        if liquid_capacity_before > 0.0:
            incoming = delta_mass * N2O_LIQUID_HEAT_CAPACITY
            capacity_after = liquid_capacity_before + incoming
            self.liquid_temp = (
                liquid_capacity_before * self.liquid_temp + incoming * ullage_temp_before
            ) / capacity_after + N2O_LATENT_HEAT * delta_mass / capacity_after

    def _ullage_heat_capacity(self) -> float:
        n2_mass = self.ullage_pressurant_moles * N2_MOLAR_MASS
        vapor_mass = self.ullage_n2o_vapor_moles * N2O_MOLAR_MASS
        return n2_mass * N2_HEAT_CAPACITY + vapor_mass * N2O_VAPOR_HEAT_CAPACITY

    def _liquid_heat_capacity(self) -> float:
        return max(self.liquid_mass, 1e-4) * N2O_LIQUID_HEAT_CAPACITY