# rocketsim

Mission logic for a rocket flight computer, together with a
software-in-the-loop simulation of the rocket it flies: flight dynamics,
battery, sensors and a nitrous/nitrogen hybrid motor.

## What is in it

- `rocketsim.flight_logic`: `FlightMode`, an ordered `IntEnum`, so
  `mode >= FlightMode.ARMED` works. Also `FlightLogic`, which handles
  automatic mode transitions:
  - Takeoff is detected when acceleration stays above about 3 G.
  - Burnout is detected when acceleration turns negative, or at the latest
    15 s after takeoff.
  - Apogee is detected when vertical speed stays negative, or at the latest
    30 s after takeoff.
  - Main deployment happens below the configured altitude.
  - Landing is detected at about 1 G with no vertical speed.

  Every condition is debounced. Times are milliseconds on a wrapping 32-bit
  clock.
- `rocketsim.propulsion`: the `Propulsion` interface, with `TankId`,
  `ValveId`, `TankReading`, `ValveReading` and `PropulsionType`.
  `ValveCommand` can be `open()`, `close()`, `partial(position)` or
  `pulse_open(seconds)`. `NoPropulsion` raises `PropulsionError` with reason
  `INHIBITED` for every command.
- `rocketsim.settings`: `RecoverySettings` and `Settings`. By default the
  main parachute deploys at 400 m AGL, drogue is allowed 1000 ms after
  launch, and main is allowed 3000 ms after drogue.
- `rocketsim.readings`: the sensor reading records `SensorReadings`,
  `BaroReading`, `AdcData` and `GpsDatum`. It also holds `NoStorage`, a
  settings store that discards every write and whose `read_settings()`
  always returns `None`.
- `rocketsim.uplink`:
  - The uplink command records: `SetFlightMode`, `RequestAvailableModes`,
    `RequestCanForwarding` and `CommandValve`.
  - `parse_valve_command(position, duration)` turns raw valve parameters into
    a `ValveCommand`, or `None`.
  - `LinkQualityTracker` keeps link statistics over a 5 s window of at most
    64 frames. It undoes small reorderings with `sort_sequences` and counts
    missing frames with `count_lost`.
  - `mode_properties` and `available_modes` give the mode listing for hybrid
    or solid vehicles.
- Simulation:
  - `rocketsim.physics`: `FlightPhysics` takes 1 ms steps with thrust, drag,
    wind and parachutes. `RecoveryFlags` holds two `threading.Event`s that
    deploy the parachutes.
  - `rocketsim.outputs`: `StdOutputs` sets and clears those flags.
  - `rocketsim.battery`: `Battery` is a 3S Li-ion pack whose current draw
    depends on the flight mode. `cell_ocv` gives the cell's open-circuit
    voltage.
  - `rocketsim.sensors`: `SensorModel` and `StdSensors` produce noisy IMU,
    magnetometer, barometer, power and GPS readings. GPS fixes drop out above
    Mach 0.6.
  - Hybrid motor: `rocketsim.fluid` holds the ideal gas and N2O property
    functions. `rocketsim.tank` has the `Tank` nitrogen pressurant tank,
    `rocketsim.two_phase` the `TwoPhaseTank` oxidizer tank, and
    `rocketsim.valves` the `Valve` with finite travel time.
    `rocketsim.hybrid` combines them into `HybridSimulation`, and
    `SitlPropulsion` exposes that as a `Propulsion`.
  - `rocketsim.simulation`: `Simulation` ties physics, battery and the
    optional hybrid motor together. Entering `IDLE` resets all of them.

## Installation

```
pip install .
```

To include the test dependencies:

```
pip install .[test]
```

## Example

This example flies a solid-motor vehicle. With `hybrid=False` the motor
ignites five seconds after arming and burns for 12 s.

```python
from rocketsim.flight_logic import FlightMode
from rocketsim.simulation import Simulation

sim = Simulation(hybrid=False)
sim.set_flight_mode(FlightMode.ARMED)
for _ in range(8000):          # 8 s of 1 ms steps
    sim.tick()

print(sim.physics.phase, sim.physics.altitude_agl(), sim.battery.voltage)
```

A hybrid `Simulation` (the default) enters its burn phase when the mode is set
to `IGNITION`. Thrust follows the chamber pressure of `sim.hybrid`. For that
pressure to rise, three things must happen:

- the igniter has been fired;
- liquid oxidizer has been filled;
- the main valve has been opened.

You can drive all three through `SitlPropulsion(sim, sim.lock)`.

Sensors read from the same shared simulation:

```python
from rocketsim.sensors import StdSensors

sensors = StdSensors(sim, sim.lock)
readings = sensors.tick()
```

## What it does not do

- **No complete vehicle loop.** The package contains no vehicle object that
  runs sensors, flight logic, outputs and telemetry together.
- **No state estimator.** `FlightLogic.update` expects an estimator object
  that you supply. It must provide `acceleration_vehicle()`,
  `vertical_speed()` and `altitude_agl()`.
- **No link layer.** There is no network link, no MAVLink framing or
  encoding, and no telemetry output.
- **No persistent storage.** `NoStorage` is the only settings store.
- **No command-line program.**

## Running the tests

```
pytest
```