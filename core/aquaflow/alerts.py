"""
Channel Alerts

Alerts are raised from tier transitions between consecutive snapshots and
kept in a bounded in-memory log for the dashboard. Nothing is persisted.
"""

import itertools
from collections import deque
from dataclasses import asdict, dataclass

from .models import ChannelKind, DeviceSnapshot, Tier

_LABELS = {
    ChannelKind.TEMPERATURE: "Temperature",
    ChannelKind.PRESSURE: "Pressure",
    ChannelKind.FLOW: "Flow rate",
    ChannelKind.VIBRATION: "Vibration",
    ChannelKind.HEAT_EXCHANGER_TEMP: "Heat exchanger temperature",
    ChannelKind.EXHAUST_FAN: "Exhaust fan speed",
    ChannelKind.WATER_INLET: "Water inlet pressure",
    ChannelKind.LEAK: "Leak detector",
    ChannelKind.GAS_VALVE: "Gas valve",
    ChannelKind.IGNITION: "Ignition",
}


@dataclass(frozen=True)
class Alert:
    """A tier change on one channel."""

    id: int
    timestamp: str  # ISO format
    channel: str
    severity: str  # "info", "warning", "critical"
    message: str
    value: float


@dataclass(frozen=True)
class TierTransition:
    kind: ChannelKind
    previous: Tier
    current: Tier
    value: float


def detect_transitions(previous: DeviceSnapshot, current: DeviceSnapshot) -> list[TierTransition]:
    """Channels whose tier differs between two snapshots."""
    transitions = []
    for state in current.channels:
        before = previous.channel(state.kind).tier
        if before is not state.tier:
            transitions.append(TierTransition(state.kind, before, state.tier, state.value))
    return transitions


def _message(transition: TierTransition) -> str:
    label = _LABELS[transition.kind]
    if transition.kind is ChannelKind.LEAK:
        if transition.current is Tier.CRITICAL:
            return "Leak detected - shut off water supply"
        return "No leaks detected - System secure"
    if transition.current is Tier.NORMAL:
        return f"{label} back within normal range"
    if transition.current is Tier.CRITICAL:
        return f"{label} critical ({transition.value:.2f}) - service immediately"
    return f"{label} outside optimal range ({transition.value:.2f})"


class AlertLog:
    """Bounded log of recent alerts.

    Written only by the clock's tick handler and read from the same event
    loop, so no locking is needed.
    """

    def __init__(self, max_alerts: int = 100):
        self.alerts: deque[Alert] = deque(maxlen=max_alerts)
        self._ids = itertools.count(1)

    def record(self, transitions: list[TierTransition], timestamp: str) -> list[Alert]:
        """Turn transitions into alerts and append them.

        Args:
            transitions: Tier changes from detect_transitions
            timestamp: ISO timestamp of the snapshot that caused them

        Returns:
            The alerts that were added
        """
        added = []
        for transition in transitions:
            severity = "info" if transition.current is Tier.NORMAL else transition.current.value
            alert = Alert(
                id=next(self._ids),
                timestamp=timestamp,
                channel=transition.kind.value,
                severity=severity,
                message=_message(transition),
                value=transition.value,
            )
            self.alerts.append(alert)
            added.append(alert)
        return added

    def recent(self, limit: int | None = None) -> list[dict]:
        """Newest alerts first."""
        alerts = list(reversed(self.alerts))
        if limit is not None:
            alerts = alerts[:limit]
        return [asdict(a) for a in alerts]

    def clear(self):
        self.alerts.clear()
