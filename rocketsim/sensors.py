"""Noisy sensor readings generated from the simulated physical state."""

from __future__ import annotations

import dataclasses
import math
import random
import threading
from dataclasses import dataclass
from typing import Any, Optional, Tuple

import numpy as np

from .battery import Battery
from .physics import DT, FlightPhysics, body_x_from_body_z
from .readings import AdcData, BaroReading, GpsDatum, SensorReadings

MACH_M_PER_S = 343.2
GRAVITY = 9.80665

#: Sea level pressure [Pa].
P0 = 101_325.0
#: Sea level temperature [K].
T0 = 288.15
#: Temperature lapse rate [K/m].
L = 0.0065

METERS_PER_DEGREE_LAT = 111_111.0

#: Below this Mach number the GPS fix is always kept; above the high one it is lost.
GPS_FIX_LOSS_MACH_LOW = 0.6
GPS_FIX_LOSS_MACH_HIGH = 1.0

#: Earth's magnetic field in the world frame [uT].
_EARTH_FIELD = np.array([1.0, 20.0, -43.0])
_MAG_NOISE = 0.2

_U16_MAX = 0xFFFF
_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


@dataclass
class SensorConfig:
    """Noise levels and GPS parameters of the sensor model."""

    accel_noise: float = 0.05
    gyro_noise: float = 0.01
    baro_noise: float = 0.5
    #: GPS origin [decimal degrees].
    gps_origin_lat: float = 49.854_182
    gps_origin_lon: float = 8.592_405
    #: GPS noise [m].
    gps_horizontal_noise: float = 2.5
    gps_vertical_noise: float = 5.0
    #: GPS output period [s].
    gps_update_period: float = 0.1


def project_to_body(physics: FlightPhysics, world: np.ndarray) -> np.ndarray:
    """Express a world-frame vector in the vehicle's body frame."""
    body_z = np.asarray(physics.body_z, dtype=float)
    body_x = body_x_from_body_z(body_z)
    body_y = np.cross(body_z, body_x)
    world = np.asarray(world, dtype=float)
    return np.array([float(world @ body_x), float(world @ body_y), float(world @ body_z)])


def altitude_to_pressure(altitude_m: float) -> float:
    """ISA pressure [hPa] at ``altitude_m``; NaN above the model's range."""
    ratio = 1.0 - (L * altitude_m) / T0
    if ratio < 0.0:
        return math.nan
    return P0 * ratio ** (GRAVITY / (L * 287.05)) / 100.0


def _as_tuple(vector: np.ndarray) -> Tuple[float, float, float]:
    return (float(vector[0]), float(vector[1]), float(vector[2]))


def _saturate(value: float, low: int, high: int) -> int:
    if math.isnan(value):
        return 0
    return min(max(int(value), low), high)


class SensorModel:
    """Samples every sensor from the physics and battery state, adding noise."""

    def __init__(
        self,
        config: Optional[SensorConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config if config is not None else SensorConfig()
        self._rng = rng if rng is not None else random.Random()
        self._gps_time_since_update = math.inf

    def _uniform(self, n: float) -> float:
        return self._rng.uniform(-n, n)

    def _noise(self, n: float) -> np.ndarray:
        return np.array([self._uniform(n), self._uniform(n), self._uniform(n)])

    def sample(self, physics: FlightPhysics, battery: Battery) -> SensorReadings:
        """Read all sensors once; called every simulation step."""
        self._gps_time_since_update += DT

        gyro = _as_tuple(self._gyroscope(physics))
        accel = _as_tuple(self._accelerometer(physics))
        mag = _as_tuple(self._magnetometer(physics))

        baro = BaroReading(
            pressure=self._pressure(physics),
            temperature=self._temperature(physics),
            altitude=self._baro_altitude(physics),
        )
        gps = self._gps(physics)

        pack_mv = _saturate(battery.voltage * 1000.0, 0, _U16_MAX)
        power = AdcData(
            bus_main_voltage=pack_mv,
            bus_supply_voltage=24000,
            fc_current=_saturate(battery.current * 1000.0, _I32_MIN, _I32_MAX),
            recovery_voltage=pack_mv,
            recovery_current=0,
            temperature=0,
        )

        return SensorReadings(
            imu1_gyro=gyro,
            imu1_accel=accel,
            imu2_gyro=gyro,
            imu2_accel=accel,
            imu3_gyro=gyro,
            imu3_accel=accel,
            highg_accel=accel,
            mag=mag,
            baro1=dataclasses.replace(baro),
            baro2=dataclasses.replace(baro),
            baro3=baro,
            power=power,
            gps=gps,
        )

    def _accelerometer(self, physics: FlightPhysics) -> np.ndarray:
        """Body-frame specific force [m/s^2]."""
        specific_force = np.asarray(physics.acceleration, dtype=float) + np.array(
            [0.0, 0.0, GRAVITY]
        )
        return project_to_body(physics, specific_force) + self._noise(self.config.accel_noise)

    def _gyroscope(self, physics: FlightPhysics) -> np.ndarray:
        """Angular rate [deg/s]."""
        rates = np.degrees(np.asarray(physics.omega_body, dtype=float))
        return rates + self._noise(self.config.gyro_noise)

    def _magnetometer(self, physics: FlightPhysics) -> np.ndarray:
        """Earth's field on the body axes [uT]."""
        return project_to_body(physics, _EARTH_FIELD) + self._noise(_MAG_NOISE)

    def _pressure(self, physics: FlightPhysics) -> float:
        altitude = float(physics.position[2]) + self._uniform(self.config.baro_noise)
        return altitude_to_pressure(altitude)

    def _temperature(self, physics: FlightPhysics) -> float:
        return T0 - L * float(physics.position[2]) - 273.15

    def _baro_altitude(self, physics: FlightPhysics) -> float:
        return float(physics.position[2]) + self._uniform(self.config.baro_noise)

    def _gps(self, physics: FlightPhysics) -> Optional[GpsDatum]:
        cfg = self.config
        if self._gps_time_since_update < cfg.gps_update_period:
            return None
        self._gps_time_since_update = 0.0

        mach = float(np.linalg.norm(physics.velocity)) / MACH_M_PER_S
        loss_prob = (mach - GPS_FIX_LOSS_MACH_LOW) / (
            GPS_FIX_LOSS_MACH_HIGH - GPS_FIX_LOSS_MACH_LOW
        )
        loss_prob = min(max(loss_prob, 0.0), 1.0)
        if self._rng.random() < loss_prob:
            return None

        noise_x = self._uniform(cfg.gps_horizontal_noise)
        noise_y = self._uniform(cfg.gps_horizontal_noise)
        noise_z = self._uniform(cfg.gps_vertical_noise)

        meters_per_degree_lon = METERS_PER_DEGREE_LAT * math.cos(
            math.radians(cfg.gps_origin_lat)
        )
        x, y, z = (float(c) for c in physics.position)
        return GpsDatum(
            latitude=cfg.gps_origin_lat + (y + noise_y) / METERS_PER_DEGREE_LAT,
            longitude=cfg.gps_origin_lon + (x + noise_x) / meters_per_degree_lon,
            altitude=z + noise_z,
            hdop=self._rng.randrange(80, 150),
        )


class StdSensors:
    """Sensor source reading from a shared simulation.

    ``sim`` is any object with ``physics`` and ``battery`` attributes;
    ``lock`` guards access when it is shared between threads.
    """

    def __init__(
        self,
        sim: Any,
        lock: Optional[Any] = None,
        model: Optional[SensorModel] = None,
    ) -> None:
        self._sim = sim
        self._lock = lock if lock is not None else threading.Lock()
        self._model = model if model is not None else SensorModel()

    def tick(self) -> SensorReadings:
        """Sample all sensors from the current simulation state."""
        with self._lock:
            return self._model.sample(self._sim.physics, self._sim.battery)