import math

import pytest

from rocketsim.flight_logic import FlightMode
from rocketsim.propulsion import ValveCommand, ValveId
from rocketsim.uplink import (
    AvailableMode,
    CommandValve,
    LinkQualityTracker,
    ModeProperty,
    SetFlightMode,
    available_modes,
    count_lost,
    mode_properties,
    parse_valve_command,
    sort_sequences,
)


def test_parse_open_close_partial():
    assert parse_valve_command(1.0, 0.0) == ValveCommand.open()
    assert parse_valve_command(0.0, 0.0) == ValveCommand.close()
    assert parse_valve_command(0.5, math.nan) == ValveCommand.partial(0.5)


def test_parse_clamps_position():
    assert parse_valve_command(7.0, -1.0) == ValveCommand.open()
    assert parse_valve_command(-3.0, 0.0) == ValveCommand.close()


def test_parse_pulse():
    assert parse_valve_command(1.0, 2.5) == ValveCommand.pulse_open(2.5)


def test_parse_invalid_combinations():
    assert parse_valve_command(0.5, 2.0) is None
    assert parse_valve_command(math.nan, 0.0) is None
    assert parse_valve_command(math.inf, 0.0) is None


def test_uplink_commands_compare_by_value():
    cmd = CommandValve(ValveId.MAIN, ValveCommand.open())
    assert cmd == CommandValve(ValveId.MAIN, ValveCommand.open())
    assert SetFlightMode(FlightMode.ARMED).mode is FlightMode.ARMED


def test_sort_keeps_ordered_input():
    seqs = list(range(10, 30))
    assert sort_sequences(seqs) == seqs


def test_sort_fixes_small_swap():
    assert sort_sequences([1, 3, 2, 4]) == [1, 2, 3, 4]


def test_sort_handles_wraparound_swap():
    result = sort_sequences([254, 0, 255, 1])
    assert result == [254, 255, 0, 1]
    assert count_lost(result) == 0


def test_sort_preserves_elements():
    seqs = [5, 9, 7, 200, 3, 250, 1]
    assert sorted(sort_sequences(seqs)) == sorted(seqs)


def test_count_lost_consecutive_is_zero():
    assert count_lost(range(0, 256)) == 0
    assert count_lost([]) == 0


def test_count_lost_gap_and_duplicates():
    seqs = [s for s in range(20) if s != 7]
    assert count_lost(seqs) == 1
    assert count_lost([4, 4, 5]) == 0


def test_count_lost_across_wrap():
    assert count_lost([255, 0]) == 0
    assert count_lost([254, 1]) == count_lost([254, 255, 1])


def test_tracker_counts_and_rate():
    tracker = LinkQualityTracker()
    lq = None
    for i in range(5):
        lq = tracker.record(i * 10.0, i, 20)
    assert lq.messages_received == 5
    assert lq.rx_rate == 100
    assert lq.messages_lost == 0
    assert lq.tx_rate == 0


def test_tracker_reports_loss():
    tracker = LinkQualityTracker()
    tracker.record(0.0, 0, 10)
    lq = tracker.record(1.0, 4, 10)
    assert lq.messages_lost == count_lost([0, 4])
    assert lq.messages_received == 2


def test_tracker_drops_old_frames():
    tracker = LinkQualityTracker()
    tracker.record(0.0, 0, 10)
    tracker.record(100.0, 1, 10)
    lq = tracker.record(5050.0, 2, 10)
    assert lq.messages_received == 2
    assert lq.rx_rate == 20


def test_tracker_capacity_limit():
    tracker = LinkQualityTracker()
    lq = None
    for i in range(100):
        lq = tracker.record(float(i), i, 1)
    assert lq.messages_received == 64


def test_mode_properties_basic_and_auto():
    assert mode_properties(FlightMode.IDLE, hybrid=False) == ModeProperty(0)
    assert mode_properties(FlightMode.BURN, hybrid=True) == (
        ModeProperty.ADVANCED | ModeProperty.AUTO_MODE
    )


def test_mode_properties_hidden_depends_on_build():
    assert ModeProperty.NOT_USER_SELECTABLE in mode_properties(FlightMode.ARMED, True)
    assert ModeProperty.NOT_USER_SELECTABLE not in mode_properties(FlightMode.ARMED, False)
    assert ModeProperty.NOT_USER_SELECTABLE in mode_properties(FlightMode.FILLING, False)
    assert ModeProperty.NOT_USER_SELECTABLE not in mode_properties(FlightMode.FILLING, True)


def test_available_modes_all():
    modes = available_modes(0, hybrid=False)
    assert len(modes) == len(FlightMode)
    assert [m.mode_index for m in modes] == list(range(1, len(FlightMode) + 1))
    assert [m.custom_mode for m in modes] == [int(m) for m in FlightMode]
    assert all(m.number_modes == len(FlightMode) for m in modes)


def test_available_modes_single():
    modes = available_modes(3, hybrid=True)
    assert len(modes) == 1
    entry = modes[0]
    assert isinstance(entry, AvailableMode)
    assert entry.mode_index == 3
    assert entry.custom_mode == int(list(FlightMode)[2])
    assert entry.properties == mode_properties(list(FlightMode)[2], True)


def test_available_modes_out_of_range():
    assert available_modes(len(FlightMode) + 1, hybrid=False) == []


def test_available_modes_negative_index():
    with pytest.raises(ValueError):
        available_modes(-1, hybrid=False)