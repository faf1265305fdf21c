"""Sensor reading containers and the settings storage used by the vehicle."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .settings import Settings

Vector3 = Sequence[float]


@dataclass
class AdcData:
    """Power monitoring data; voltages in mV, currents in mA."""

    bus_main_voltage: int = 0
    bus_supply_voltage: int = 0
    fc_current: int = 0
    recovery_voltage: int = 0
    recovery_current: int = 0
    temperature: int = 0


@dataclass
class BaroReading:
    """Barometer reading: pressure [hPa], temperature [C], altitude [m ASL]."""

    pressure: Optional[float] = None
    temperature: Optional[float] = None
    altitude: Optional[float] = None


@dataclass(frozen=True)
class GpsDatum:
    """A GPS fix: degrees, metres ASL and horizontal dilution (x100)."""

    latitude: Optional[float]
    longitude: Optional[float]
    altitude: Optional[float]
    hdop: int


@dataclass
class SensorReadings:
    """All sensor values of one tick; None where a sensor gave nothing."""

    #: IMU angular rates [deg/s] and accelerations [m/s^2].
    imu1_gyro: Optional[Vector3] = None
    imu1_accel: Optional[Vector3] = None
    imu2_gyro: Optional[Vector3] = None
    imu2_accel: Optional[Vector3] = None
    imu3_gyro: Optional[Vector3] = None
    imu3_accel: Optional[Vector3] = None
    #: High-G accelerometer [m/s^2].
    highg_accel: Optional[Vector3] = None
    #: Magnetometer [uT].
    mag: Optional[Vector3] = None
    baro1: BaroReading = field(default_factory=BaroReading)
    baro2: BaroReading = field(default_factory=BaroReading)
    baro3: BaroReading = field(default_factory=BaroReading)
    power: Optional[AdcData] = None
    gps: Optional[GpsDatum] = None


class NoStorage:
    """Settings storage with no capacity: writes are discarded, reads come back empty."""

    capacity = 0

    def __init__(self) -> None:
        self._kept: List[Settings] = []
        self.discarded = 0

    def read_settings(self) -> Optional[Settings]:
        return self._kept[-1] if self._kept else None

    def write_settings(self, settings: Settings) -> None:
        if not isinstance(settings, Settings):
            raise TypeError(f"expected Settings, got {type(settings).__name__}")
        if len(self._kept) < self.capacity:
            self._kept.append(settings)
        else:
            self.discarded += 1