"""Persistent vehicle settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class RecoverySettings:
    """Parameters of the recovery sequence."""

    #: Altitude above ground [m] at which the main parachute is deployed.
    main_deploy_altitude: float = 400.0
    #: Minimum time [ms] after launch before drogue deployment is allowed.
    min_time_to_drogue: int = 1000
    #: Minimum time [ms] after drogue before main deployment is allowed.
    min_time_to_main: int = 3000


@dataclass
class Settings:
    """All vehicle settings.

    ``state_estimator`` holds the settings handed to the state estimator,
    or None to use its defaults.
    """

    state_estimator: Optional[Any] = None
    recovery: RecoverySettings = field(default_factory=RecoverySettings)