"""Ideal gas helpers and nitrous oxide (N2O) material properties.

Pressures are in bar, volumes in litres and temperatures in kelvin.
"""

from __future__ import annotations

import math

#: Ambient temperature [K].
AMBIENT_TEMP = 298.15
#: Ambient pressure [bar].
AMBIENT_PRESSURE = 1.0

#: Universal gas constant [J/(mol*K)].
GAS_CONSTANT = 8.314

#: Anchor point of the N2O saturation curve: pressure [bar] and temperature [K].
SAT_ANCHOR_PRESSURE = 42.5
SAT_ANCHOR_TEMP = 283.15

#: Latent heat of vaporisation of N2O [J/kg].
N2O_LATENT_HEAT = 376_000.0
#: Molar masses [kg/mol].
N2O_MOLAR_MASS = 0.044
N2_MOLAR_MASS = 0.028

#: Specific heat capacities [J/(kg*K)].
N2O_LIQUID_HEAT_CAPACITY = 1900.0
N2O_VAPOR_HEAT_CAPACITY = 880.0
N2_HEAT_CAPACITY = 1040.0

#: Time constant of heat exchange between tank walls and ambient air [s].
WALL_COOLING_TIME_CONSTANT = 1800.0
#: Time constant of heat exchange between liquid pool and ullage gas [s].
INTRA_TANK_TIME_CONSTANT = 90.0


def pressure_to_moles(pressure: float, volume: float, temp: float) -> float:
    """Moles of ideal gas at ``pressure`` [bar] in ``volume`` [L] at ``temp`` [K]."""
    pressure_pa = pressure * 1.0e5
    volume_m3 = volume * 1.0e-3
    return pressure_pa * volume_m3 / (GAS_CONSTANT * temp)


def moles_to_pressure(moles: float, volume: float, temp: float) -> float:
    """Pressure [bar] of ``moles`` of ideal gas in ``volume`` [L] at ``temp`` [K].

    A non-positive volume yields ambient pressure.
    """
    if volume <= 0.0:
        return AMBIENT_PRESSURE
    volume_m3 = volume * 1.0e-3
    pressure_pa = moles * GAS_CONSTANT * temp / volume_m3
    return pressure_pa * 1.0e-5


def n2o_saturation_pressure(temp: float) -> float:
    """Saturation pressure of N2O [bar] at ``temp`` [K].

    Clausius-Clapeyron with constant latent heat, anchored at 10 C / 42.5 bar;
    good to about 5 % between 0 and 35 C.
    """
    exponent = (N2O_LATENT_HEAT * N2O_MOLAR_MASS / GAS_CONSTANT) * (
        1.0 / SAT_ANCHOR_TEMP - 1.0 / temp
    )
    return SAT_ANCHOR_PRESSURE * math.exp(exponent)


def n2o_liquid_density(temp: float) -> float:
    """Density of liquid N2O [kg/L] at ``temp`` [K], kept within 0.5..1.0."""
    temp_c = temp - 273.15
    return min(max(0.91 - 0.0066 * temp_c, 0.5), 1.0)