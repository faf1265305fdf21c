"""Rocket flight logic, uplink handling, and a flight and hybrid propulsion simulation."""

__version__ = "0.1.0"