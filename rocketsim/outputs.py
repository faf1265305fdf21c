"""Recovery outputs of the simulated flight computer."""

from __future__ import annotations

from .physics import RecoveryFlags


class StdOutputs:
    """Drives the shared recovery flags that the physics reacts to."""

    def __init__(self, flags: RecoveryFlags) -> None:
        self._flags = flags
        self._recovery_armed = False

    @property
    def recovery_armed(self) -> bool:
        """Whether the recovery outputs are armed."""
        return self._recovery_armed

    def set_recovery_armed(self, armed: bool) -> None:
        self._recovery_armed = armed

    def set_drogue(self, high: bool) -> None:
        if high:
            self._flags.drogue.set()
        else:
            self._flags.drogue.clear()

    def set_main(self, high: bool) -> None:
        if high:
            self._flags.main.set()
        else:
            self._flags.main.clear()