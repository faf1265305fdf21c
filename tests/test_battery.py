import pytest

from rocketsim.battery import CELLS_SERIES, OCV_CURVE, Battery, cell_ocv
from rocketsim.flight_logic import FlightMode


@pytest.mark.parametrize("soc, voltage", OCV_CURVE)
def test_cell_ocv_hits_curve_points(soc, voltage):
    assert cell_ocv(soc) == pytest.approx(voltage)


def test_cell_ocv_clamps_outside_range():
    assert cell_ocv(-0.5) == pytest.approx(cell_ocv(0.0))
    assert cell_ocv(1.5) == pytest.approx(cell_ocv(1.0))


def test_cell_ocv_is_monotonic():
    values = [cell_ocv(i / 100) for i in range(101)]
    assert values == sorted(values)


def test_cell_ocv_interpolates_between_points():
    (s0, v0), (s1, v1) = OCV_CURVE[2], OCV_CURVE[3]
    mid = cell_ocv((s0 + s1) / 2)
    assert mid == pytest.approx((v0 + v1) / 2)


def test_new_battery():
    battery = Battery()
    assert battery.soc == pytest.approx(0.9)
    assert battery.current == 0.0
    assert battery.voltage == pytest.approx(cell_ocv(0.9) * CELLS_SERIES)


@pytest.mark.parametrize(
    "mode, current",
    [
        (FlightMode.IDLE, -0.2),
        (FlightMode.ARMED, 0.3),
        (FlightMode.IGNITION, 4.8),
        (FlightMode.COAST, 2.4),
        (FlightMode.LANDED, 0.6),
    ],
)
def test_current_per_mode(mode, current):
    battery = Battery()
    battery.tick(0.001, mode)
    assert battery.current == current


def test_idle_charges():
    battery = Battery()
    battery.tick(60.0, FlightMode.IDLE)
    assert battery.soc > 0.9
    assert battery.voltage > cell_ocv(battery.soc) * CELLS_SERIES


def test_discharge_sags_voltage():
    battery = Battery()
    battery.tick(60.0, FlightMode.IGNITION)
    assert battery.soc < 0.9
    assert battery.voltage < cell_ocv(battery.soc) * CELLS_SERIES


def test_soc_never_goes_negative():
    battery = Battery()
    for _ in range(10):
        battery.tick(3600.0, FlightMode.IGNITION)
    assert battery.soc == 0.0
    assert battery.voltage >= 0.0


def test_soc_never_exceeds_one():
    battery = Battery()
    for _ in range(100):
        battery.tick(3600.0, FlightMode.IDLE)
    assert battery.soc == 1.0