"""
Maintenance countdown and service status.
"""

from dataclasses import dataclass
from enum import Enum

from .models import Tier
from .settings import MaintenanceSettings
from .thresholds import AtMost, ThresholdTable, classify


class MaintenanceStatus(str, Enum):
    GOOD = "good"
    DUE = "due"
    OVERDUE = "overdue"


_STATUS_BY_TIER = {
    Tier.NORMAL: MaintenanceStatus.GOOD,
    Tier.WARNING: MaintenanceStatus.DUE,
    Tier.CRITICAL: MaintenanceStatus.OVERDUE,
}

_MESSAGES = {
    MaintenanceStatus.GOOD: "Service OK",
    MaintenanceStatus.DUE: "Service Due Soon",
    MaintenanceStatus.OVERDUE: "Service Overdue!",
}


def maintenance_table(warning_window: int) -> ThresholdTable:
    """Overdue at zero days left, due within the warning window."""
    return ThresholdTable.bands(warning=AtMost(warning_window), critical=AtMost(0))


@dataclass(frozen=True)
class MaintenanceState:
    """Service countdown, display-only."""

    days_since_service: int
    days_until_service: int
    interval: int
    warning_window: int

    @classmethod
    def from_settings(cls, settings: MaintenanceSettings) -> "MaintenanceState":
        return cls(
            days_since_service=settings.last_maintenance_days,
            days_until_service=settings.interval_days - settings.last_maintenance_days,
            interval=settings.interval_days,
            warning_window=settings.warning_days,
        )

    @property
    def status(self) -> MaintenanceStatus:
        tier = classify(self.days_until_service, maintenance_table(self.warning_window))
        return _STATUS_BY_TIER[tier]

    def to_dict(self) -> dict:
        status = self.status
        return {
            "days_since_service": self.days_since_service,
            "days_until_service": self.days_until_service,
            "interval": self.interval,
            "warning_window": self.warning_window,
            "status": status.value,
            "message": _MESSAGES[status],
        }
