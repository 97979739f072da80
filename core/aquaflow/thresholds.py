"""
Threshold Classification

Maps a numeric value to a severity tier using a static table of
(predicate, tier) rules.

Precedence is critical > warning > normal: all critical rules are checked
first, then warning rules, and a value matching nothing is normal. Warning
and critical bands overlap at their edges, so a value far out of range
satisfies both predicates and must come out critical.
"""

from dataclasses import dataclass

from .exceptions import ConfigError
from .models import ChannelKind, Tier


@dataclass(frozen=True)
class Outside:
    """True when value lies strictly outside the closed band [lo, hi]."""

    lo: float
    hi: float

    def __post_init__(self):
        if self.lo > self.hi:
            raise ConfigError(f"Inverted threshold band [{self.lo}, {self.hi}]")

    def __call__(self, value: float) -> bool:
        return value < self.lo or value > self.hi

    def describe(self) -> str:
        return f"outside [{self.lo}, {self.hi}]"


@dataclass(frozen=True)
class Above:
    limit: float

    def __call__(self, value: float) -> bool:
        return value > self.limit

    def describe(self) -> str:
        return f"above {self.limit}"


@dataclass(frozen=True)
class AtMost:
    limit: float

    def __call__(self, value: float) -> bool:
        return value <= self.limit

    def describe(self) -> str:
        return f"at most {self.limit}"


@dataclass(frozen=True)
class NonZero:
    def __call__(self, value: float) -> bool:
        return value != 0

    def describe(self) -> str:
        return "non-zero"


Predicate = Outside | Above | AtMost | NonZero


@dataclass(frozen=True)
class Rule:
    predicate: Predicate
    tier: Tier


@dataclass(frozen=True)
class ThresholdTable:
    """Ordered classification rules for one quantity."""

    rules: tuple[Rule, ...] = ()

    def __post_init__(self):
        for rule in self.rules:
            if rule.tier not in (Tier.WARNING, Tier.CRITICAL):
                raise ConfigError(f"Threshold rules must be warning or critical, got {rule.tier}")
            if not callable(rule.predicate):
                raise ConfigError(f"Threshold predicate is not callable: {rule.predicate!r}")

    @classmethod
    def bands(cls, warning: Predicate | None = None, critical: Predicate | None = None) -> "ThresholdTable":
        """Build a two-tier table from a warning and a critical predicate."""
        rules = []
        if critical is not None:
            rules.append(Rule(critical, Tier.CRITICAL))
        if warning is not None:
            rules.append(Rule(warning, Tier.WARNING))
        return cls(tuple(rules))

    def describe(self) -> dict[str, list[str]]:
        described: dict[str, list[str]] = {}
        for rule in self.rules:
            described.setdefault(rule.tier.value, []).append(rule.predicate.describe())
        return described


def classify(value: float, table: ThresholdTable) -> Tier:
    """Classify a value against a threshold table.

    Args:
        value: Current reading
        table: Rules for this quantity

    Returns:
        The most severe tier whose predicate matches, else NORMAL
    """
    for tier in (Tier.CRITICAL, Tier.WARNING):
        for rule in table.rules:
            if rule.tier is tier and rule.predicate(value):
                return tier
    return Tier.NORMAL


THRESHOLD_TABLES: dict[ChannelKind, ThresholdTable] = {
    ChannelKind.TEMPERATURE: ThresholdTable.bands(warning=Outside(20, 50), critical=Outside(18, 52)),
    ChannelKind.PRESSURE: ThresholdTable.bands(warning=Outside(0.6, 1.0), critical=Outside(0.5, 1.1)),
    ChannelKind.FLOW: ThresholdTable.bands(warning=Outside(2.0, 2.5), critical=Outside(1.9, 2.6)),
    ChannelKind.VIBRATION: ThresholdTable.bands(warning=Above(1.0), critical=Above(1.5)),
    ChannelKind.HEAT_EXCHANGER_TEMP: ThresholdTable.bands(warning=Above(48), critical=Above(52)),
    ChannelKind.EXHAUST_FAN: ThresholdTable.bands(warning=Outside(1500, 2800), critical=Outside(1200, 2900)),
    ChannelKind.WATER_INLET: ThresholdTable.bands(warning=Outside(0.6, 1.0), critical=Outside(0.5, 1.1)),
    # Leak has no warning tier: any reading is critical
    ChannelKind.LEAK: ThresholdTable.bands(critical=NonZero()),
    ChannelKind.GAS_VALVE: ThresholdTable(),
    ChannelKind.IGNITION: ThresholdTable(),
}

if set(THRESHOLD_TABLES) != set(ChannelKind):
    raise ConfigError("THRESHOLD_TABLES must cover every ChannelKind")


def classify_channel(kind: ChannelKind, value: float) -> Tier:
    return classify(value, THRESHOLD_TABLES[kind])
