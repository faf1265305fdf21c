import pytest

from rocketsim.propulsion import ValveCommand
from rocketsim.valves import Valve


def test_new_valve_is_closed():
    valve = Valve(0.1, 0.5)
    assert valve.state == 0.0
    assert valve.conductance == 0.0
    assert valve.commanded == ValveCommand.close()


def test_rejects_non_positive_travel_time():
    with pytest.raises(ValueError):
        Valve(0.1, 0.0)


def test_open_is_rate_limited():
    valve = Valve(0.1, 0.5)
    valve.command(ValveCommand.open())
    valve.tick(0.1)
    assert valve.state == pytest.approx(0.1 / 0.5)


def test_open_fully_after_travel_time():
    valve = Valve(0.1, 0.5)
    valve.command(ValveCommand.open())
    for _ in range(10):
        valve.tick(0.1)
    assert valve.state == pytest.approx(1.0)
    assert valve.conductance == pytest.approx(0.1)


def test_close_returns_to_zero():
    valve = Valve(0.05, 0.2)
    valve.command(ValveCommand.open())
    valve.tick(1.0)
    valve.command(ValveCommand.close())
    valve.tick(1.0)
    assert valve.state == 0.0


def test_partial_settles_at_position():
    valve = Valve(0.05, 0.2)
    valve.command(ValveCommand.partial(0.3))
    for _ in range(10):
        valve.tick(0.1)
    assert valve.state == pytest.approx(0.3)
    assert valve.conductance == pytest.approx(0.3 * 0.05)


def test_pulse_opens_then_closes():
    valve = Valve(0.05, 0.2)
    valve.command(ValveCommand.pulse_open(0.5))
    peak = 0.0
    for _ in range(50):
        valve.tick(0.01)
        peak = max(peak, valve.state)
    assert peak == pytest.approx(1.0)
    for _ in range(100):
        valve.tick(0.01)
    assert valve.state == pytest.approx(0.0)


def test_state_stays_in_range():
    valve = Valve(0.05, 0.2)
    for cmd in (ValveCommand.open(), ValveCommand.partial(0.7), ValveCommand.close()):
        valve.command(cmd)
        for _ in range(30):
            valve.tick(0.05)
            assert 0.0 <= valve.state <= 1.0