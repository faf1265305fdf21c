"""Point-mass flight physics of the simulated rocket.

World frame: X east, Y north, Z up. Units are SI throughout.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from .flight_logic import FlightMode

_log = logging.getLogger(__name__)

#: Simulation step [s].
DT = 0.001
GRAVITY = 9.80665

#: ISA sea level temperature [K], lapse rate [K/m] and air density [kg/m^3].
T0 = 288.15
L = 0.0065
RHO_0 = 1.225

#: Chamber pressure [bar] at which the hybrid motor delivers full thrust.
_FULL_THRUST_CHAMBER_PRESSURE = 17.0
#: Delay between arming and ignition on solid-motor vehicles [s].
_ARM_TO_IGNITION = 5.0
#: Speed above which the body axis follows the velocity [m/s].
_ALIGN_SPEED = 5.0


@dataclass
class RecoveryFlags:
    """Parachute deployment signals shared between outputs and physics."""

    drogue: threading.Event = field(default_factory=threading.Event)
    main: threading.Event = field(default_factory=threading.Event)


class FlightPhase(Enum):
    """Phase of the simulated flight, driven by the physics itself."""

    PAD = "pad"
    BURN = "burn"
    COAST = "coast"
    DROGUE = "drogue"
    MAIN = "main"
    LANDED = "landed"


@dataclass(frozen=True)
class DragConfig:
    """Drag coefficient and reference area [m^2]."""

    cd: float
    area: float


@dataclass
class PhysicsConfig:
    """Vehicle and environment parameters of the simulation."""

    #: Ground altitude ASL [m].
    ground_altitude: float = 100.0
    #: Mass without propellant [kg].
    dry_mass: float = 22.0
    #: Propellant mass [kg].
    propellant_mass: float = 8.0
    #: Motor thrust [N].
    thrust_force: float = 2000.0
    #: Burn duration [s].
    burn_time: float = 12.0
    body_drag: DragConfig = field(default_factory=lambda: DragConfig(0.8, 0.017_67))
    drogue_drag: DragConfig = field(default_factory=lambda: DragConfig(1.5, 0.200))
    main_drag: DragConfig = field(default_factory=lambda: DragConfig(2.2, 2.695))
    #: Launch elevation above the horizon [deg].
    launch_elevation_deg: float = 84.0
    #: Launch heading [deg], west-southwest by default.
    launch_heading_deg: float = 250.0
    #: Wind speed [m/s].
    wind_speed_mps: float = 3.0
    #: Heading the wind blows toward [deg], southeast by default.
    wind_heading_deg: float = 135.0

    def launch_axis(self) -> np.ndarray:
        """Unit vector along the launch rail in the world frame."""
        elev = math.radians(self.launch_elevation_deg)
        hdg = math.radians(self.launch_heading_deg)
        horizontal = math.cos(elev)
        return np.array(
            [horizontal * math.sin(hdg), horizontal * math.cos(hdg), math.sin(elev)]
        )


def body_x_from_body_z(body_z: np.ndarray) -> np.ndarray:
    """A horizontal unit vector perpendicular to ``body_z``.

    Falls back to world X when ``body_z`` points straight up or down.
    """
    cross = np.cross(np.array([0.0, 0.0, 1.0]), np.asarray(body_z, dtype=float))
    norm_squared = float(cross @ cross)
    if norm_squared > 1e-6:
        return cross / math.sqrt(norm_squared)
    return np.array([1.0, 0.0, 0.0])


def density_ratio(altitude_m: float) -> float:
    """Air density relative to sea level at ``altitude_m`` (ISA troposphere)."""
    base = 1.0 - (L * altitude_m) / T0
    if base < 0.0:
        return math.nan
    return base ** (GRAVITY / (L * 287.05) - 1.0)


class FlightPhysics:
    """Rocket state integrated in fixed 1 ms steps.

    With ``hybrid`` set, thrust during the burn follows the chamber pressure
    handed in through :meth:`set_chamber_pressure`; otherwise the motor is a
    solid that ignites five seconds after arming and burns for its burn time.
    """

    def __init__(
        self,
        flags: RecoveryFlags,
        config: Optional[PhysicsConfig] = None,
        hybrid: bool = False,
    ) -> None:
        self.config = config if config is not None else PhysicsConfig()
        self.flags = flags
        self.hybrid = hybrid
        self.mode = FlightMode.IDLE
        self._chamber_pressure = 0.0
        self._reset()

    def _reset(self) -> None:
        self.time = 0.0
        self.mass = self.config.dry_mass + self.config.propellant_mass
        self.position = np.array([0.0, 0.0, self.config.ground_altitude])
        self.velocity = np.zeros(3)
        self.body_z = self.config.launch_axis()
        self.omega_body = np.zeros(3)
        self.acceleration = np.zeros(3)
        self.phase = FlightPhase.PAD
        self._phase_time = 0.0
        self._armed_time: Optional[float] = None

    def set_chamber_pressure(self, pressure: float) -> None:
        """Chamber pressure [bar] driving hybrid thrust."""
        self._chamber_pressure = pressure

    def set_flight_mode(self, mode: FlightMode) -> None:
        """Follow the vehicle's flight mode; Idle resets the simulation."""
        if mode == self.mode:
            return
        self.mode = mode

        if mode == FlightMode.IDLE:
            _log.info("[SIM] Vehicle mode set to Idle, resetting simulation state")
            self._reset()
        elif mode >= FlightMode.ARMED and self._armed_time is None:
            _log.info("[SIM] Vehicle armed at t=%.2fs, launching in 5s", self.time)
            self._armed_time = self.time

    def _normalized_thrust(self) -> float:
        return min(max(self._chamber_pressure / _FULL_THRUST_CHAMBER_PRESSURE, 0.0), 1.0)

    def tick(self) -> None:
        """Advance the physics by one step of :data:`DT`."""
        self.time += DT
        self._phase_time += DT

        if self.phase in (FlightPhase.PAD, FlightPhase.LANDED):
            self.velocity = np.zeros(3)
            self.acceleration = np.zeros(3)
        else:
            self._integrate()

        self._advance_phase()
        self._update_orientation()

    def _integrate(self) -> None:
        cfg = self.config
        if self.phase is FlightPhase.BURN:
            throttle = self._normalized_thrust() if self.hybrid else 1.0
            self.mass -= throttle * (cfg.propellant_mass / cfg.burn_time) * DT
            self.mass = max(self.mass, cfg.dry_mass)
            thrust = throttle * cfg.thrust_force / self.mass * self.body_z
        else:
            thrust = np.zeros(3)

        v_rel = self.velocity - self._wind_world()
        if self.phase in (FlightPhase.BURN, FlightPhase.COAST):
            drag_cfg = cfg.body_drag
        elif self.phase is FlightPhase.DROGUE:
            drag_cfg = cfg.drogue_drag
        else:
            drag_cfg = cfg.main_drag
        rho = RHO_0 * density_ratio(float(self.position[2]))
        speed = float(np.linalg.norm(v_rel))
        drag = -0.5 * rho * drag_cfg.cd * drag_cfg.area / self.mass * speed * v_rel

        self.acceleration = thrust + drag - np.array([0.0, 0.0, GRAVITY])
        self.velocity = self.velocity + self.acceleration * DT
        self.position = self.position + self.velocity * DT

    def _advance_phase(self) -> None:
        phase = self.phase
        if phase is FlightPhase.PAD:
            if self.hybrid:
                if self.mode == FlightMode.IGNITION:
                    self._transition(FlightPhase.BURN)
            elif (
                self._armed_time is not None
                and self.time - self._armed_time >= _ARM_TO_IGNITION
            ):
                self._transition(FlightPhase.BURN)
        elif phase is FlightPhase.BURN:
            if self.hybrid:
                thrust_accel = (
                    self._normalized_thrust() * self.config.thrust_force / self.mass
                )
                if thrust_accel < 1.0 and self._phase_time > 0.5:
                    self._transition(FlightPhase.COAST)
            elif self._phase_time > self.config.burn_time:
                self._transition(FlightPhase.COAST)
        elif phase is FlightPhase.COAST:
            if self.flags.drogue.is_set():
                self._transition(FlightPhase.DROGUE)
        elif phase is FlightPhase.DROGUE:
            if self.flags.main.is_set():
                self._transition(FlightPhase.MAIN)
        elif phase is FlightPhase.MAIN:
            if self.altitude_agl() <= 0.0:
                self.position[2] = self.config.ground_altitude
                self.velocity = np.zeros(3)
                self._transition(FlightPhase.LANDED)

    def _update_orientation(self) -> None:
        """Point the body axis along the velocity and derive body rates.

        On the ground the body axis stays on the launch axis; below a few m/s
        it is held, avoiding singular behaviour through apogee. No roll.
        """
        if self.phase in (FlightPhase.PAD, FlightPhase.LANDED):
            new_body_z = self.config.launch_axis()
        else:
            speed = float(np.linalg.norm(self.velocity))
            new_body_z = self.velocity / speed if speed > _ALIGN_SPEED else self.body_z

        # Small-angle approximation for unit vectors: omega ~ (u x v) / dt.
        omega_world = np.cross(self.body_z, new_body_z) / DT

        body_x = body_x_from_body_z(self.body_z)
        body_y = np.cross(self.body_z, body_x)

        self.omega_body = np.array(
            [float(omega_world @ body_x), float(omega_world @ body_y), 0.0]
        )
        self.body_z = np.array(new_body_z, dtype=float)

    def altitude_agl(self) -> float:
        """Altitude above the ground [m]."""
        return float(self.position[2]) - self.config.ground_altitude

    def _wind_world(self) -> np.ndarray:
        hdg = math.radians(self.config.wind_heading_deg)
        speed = self.config.wind_speed_mps
        return np.array([speed * math.sin(hdg), speed * math.cos(hdg), 0.0])

    def _transition(self, new_phase: FlightPhase) -> None:
        _log.info(
            "[SIM] Phase transition: %s -> %s (t=%.2fs, alt_agl=%.1fm, vz=%.1fm/s)",
            self.phase.name,
            new_phase.name,
            self.time,
            self.altitude_agl(),
            float(self.velocity[2]),
        )
        self.phase = new_phase
        self._phase_time = 0.0