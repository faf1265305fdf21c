import math

import numpy as np
import pytest

from rocketsim.flight_logic import FlightMode
from rocketsim.physics import (
    FlightPhase,
    FlightPhysics,
    PhysicsConfig,
    RecoveryFlags,
    body_x_from_body_z,
    density_ratio,
)


def _run(physics, ticks):
    for _ in range(ticks):
        physics.tick()


def test_density_ratio_is_one_at_sea_level():
    assert density_ratio(0.0) == pytest.approx(1.0)


def test_density_ratio_decreases_with_altitude():
    assert density_ratio(1000.0) < density_ratio(100.0) < density_ratio(0.0)


def test_launch_axis_is_unit_and_upward():
    axis = PhysicsConfig().launch_axis()
    assert np.linalg.norm(axis) == pytest.approx(1.0)
    assert axis[2] > 0.9


def test_vertical_launch_axis():
    axis = PhysicsConfig(launch_elevation_deg=90.0).launch_axis()
    assert axis == pytest.approx([0.0, 0.0, 1.0], abs=1e-12)


def test_body_x_for_vertical_axis_falls_back_to_world_x():
    assert body_x_from_body_z(np.array([0.0, 0.0, 1.0])).tolist() == [1.0, 0.0, 0.0]


def test_body_x_is_unit_horizontal_and_perpendicular():
    body_z = PhysicsConfig().launch_axis()
    body_x = body_x_from_body_z(body_z)
    assert np.linalg.norm(body_x) == pytest.approx(1.0)
    assert float(body_x @ body_z) == pytest.approx(0.0, abs=1e-12)
    assert body_x[2] == pytest.approx(0.0, abs=1e-12)


def test_initial_state_on_pad():
    physics = FlightPhysics(RecoveryFlags())
    assert physics.phase is FlightPhase.PAD
    assert physics.altitude_agl() == pytest.approx(0.0)
    assert physics.mass == pytest.approx(physics.config.dry_mass + physics.config.propellant_mass)


def test_pad_stays_still_without_arming():
    physics = FlightPhysics(RecoveryFlags())
    _run(physics, 1000)
    assert physics.phase is FlightPhase.PAD
    assert physics.velocity.tolist() == [0.0, 0.0, 0.0]
    assert physics.omega_body.tolist() == [0.0, 0.0, 0.0]
    assert physics.altitude_agl() == pytest.approx(0.0)


def test_solid_ignites_five_seconds_after_arming():
    physics = FlightPhysics(RecoveryFlags())
    physics.set_flight_mode(FlightMode.ARMED)
    _run(physics, 4900)
    assert physics.phase is FlightPhase.PAD
    _run(physics, 200)
    assert physics.phase is FlightPhase.BURN


def test_solid_burn_climbs_and_burns_propellant():
    physics = FlightPhysics(RecoveryFlags())
    physics.set_flight_mode(FlightMode.ARMED)
    _run(physics, 6000)
    assert physics.phase is FlightPhase.BURN
    assert physics.velocity[2] > 0.0
    assert physics.altitude_agl() > 0.0
    assert physics.mass < physics.config.dry_mass + physics.config.propellant_mass
    assert physics.mass >= physics.config.dry_mass


def test_idle_resets_state():
    physics = FlightPhysics(RecoveryFlags())
    physics.set_flight_mode(FlightMode.ARMED)
    _run(physics, 6000)
    physics.set_flight_mode(FlightMode.IDLE)
    assert physics.phase is FlightPhase.PAD
    assert physics.time == 0.0
    assert physics.altitude_agl() == pytest.approx(0.0)
    assert physics.velocity.tolist() == [0.0, 0.0, 0.0]
    assert physics.mass == pytest.approx(physics.config.dry_mass + physics.config.propellant_mass)


def test_hybrid_waits_for_ignition_mode():
    physics = FlightPhysics(RecoveryFlags(), hybrid=True)
    physics.set_flight_mode(FlightMode.ARMED)
    _run(physics, 6000)
    assert physics.phase is FlightPhase.PAD
    physics.set_flight_mode(FlightMode.IGNITION)
    physics.tick()
    assert physics.phase is FlightPhase.BURN


def test_hybrid_without_chamber_pressure_goes_to_coast():
    physics = FlightPhysics(RecoveryFlags(), hybrid=True)
    physics.set_flight_mode(FlightMode.IGNITION)
    _run(physics, 400)
    assert physics.phase is FlightPhase.BURN
    _run(physics, 200)
    assert physics.phase is FlightPhase.COAST


def test_hybrid_chamber_pressure_produces_thrust():
    physics = FlightPhysics(RecoveryFlags(), hybrid=True)
    physics.set_flight_mode(FlightMode.IGNITION)
    physics.set_chamber_pressure(17.0)
    _run(physics, 1000)
    assert physics.phase is FlightPhase.BURN
    assert physics.velocity[2] > 0.0


def test_drogue_flag_moves_coast_to_drogue():
    flags = RecoveryFlags()
    physics = FlightPhysics(flags)
    physics.phase = FlightPhase.COAST
    physics.tick()
    assert physics.phase is FlightPhase.COAST
    flags.drogue.set()
    physics.tick()
    assert physics.phase is FlightPhase.DROGUE


def test_main_flag_moves_drogue_to_main():
    flags = RecoveryFlags()
    physics = FlightPhysics(flags)
    physics.position[2] += 1000.0
    physics.phase = FlightPhase.DROGUE
    physics.tick()
    assert physics.phase is FlightPhase.DROGUE
    flags.main.set()
    physics.tick()
    assert physics.phase is FlightPhase.MAIN


def test_main_lands_at_ground():
    physics = FlightPhysics(RecoveryFlags())
    physics.phase = FlightPhase.MAIN
    physics.position[2] = physics.config.ground_altitude - 1.0
    physics.tick()
    assert physics.phase is FlightPhase.LANDED
    assert physics.altitude_agl() == pytest.approx(0.0)
    assert physics.velocity.tolist() == [0.0, 0.0, 0.0]


def test_falling_body_accelerates_down():
    physics = FlightPhysics(RecoveryFlags())
    physics.position[2] += 1000.0
    physics.phase = FlightPhase.COAST
    physics.tick()
    assert physics.acceleration[2] < 0.0
    assert physics.velocity[2] < 0.0
    assert math.isfinite(physics.altitude_agl())