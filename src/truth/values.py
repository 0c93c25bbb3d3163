"""
Truth value types for probabilistic term logic.

Two representations are supported:

    SimpleTruthValue      <s, n>             strength and evidence count
    IndefiniteTruthValue  <[L, U], b, k>     interval, credibility, lookahead

Both are immutable. Conversions between them follow the width/confidence
correspondence ``confidence = 1 - (U - L)``.
"""

from dataclasses import dataclass
from typing import Dict, Any, Union

# Lookahead ("personality") parameter used in confidence = n / (n + k)
DEFAULT_K = 800.0

# Defaults for indefinite truth values
DEFAULT_CREDIBILITY = 0.9
DEFAULT_LOOKAHEAD = 20.0

# Zero-width intervals stand for effectively infinite evidence
MAX_COUNT = 1e9


@dataclass(frozen=True)
class SimpleTruthValue:
    """A <strength, count> truth value."""

    strength: float
    count: float = 0.0

    def __post_init__(self):
        if not 0.0 <= self.strength <= 1.0:
            raise ValueError(f"Strength must be in [0, 1]: {self.strength}")
        if self.count < 0:
            raise ValueError(f"Count must be non-negative: {self.count}")

    @property
    def mean(self) -> float:
        return self.strength

    @property
    def is_indefinite(self) -> bool:
        return False

    def confidence(self, k: float = DEFAULT_K) -> float:
        """Weight of evidence, n / (n + k)."""
        return count_to_confidence(self.count, k)

    @classmethod
    def from_confidence(cls, strength: float, confidence: float,
                        k: float = DEFAULT_K) -> "SimpleTruthValue":
        """Create a truth value from strength and confidence."""
        return cls(strength, confidence_to_count(confidence, k))

    def revise(self, other: "SimpleTruthValue") -> "SimpleTruthValue":
        """
        Merge two truth values built on independent evidence.

        Strengths are averaged weighted by count and the counts add up.
        """
        total = self.count + other.count
        if total == 0:
            return SimpleTruthValue((self.strength + other.strength) / 2, 0.0)
        strength = (self.strength * self.count + other.strength * other.count) / total
        return SimpleTruthValue(_unit(strength), total)

    def to_indefinite(self, credibility: float = DEFAULT_CREDIBILITY,
                      lookahead: float = DEFAULT_LOOKAHEAD,
                      k: float = DEFAULT_K) -> "IndefiniteTruthValue":
        return IndefiniteTruthValue.from_simple(self, credibility, lookahead, k)

    def to_simple(self, k: float = DEFAULT_K) -> "SimpleTruthValue":
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {"strength": self.strength, "count": self.count}

    def __str__(self) -> str:
        return f"<{self.strength:.4g}, {self.count:.4g}>"


@dataclass(frozen=True)
class IndefiniteTruthValue:
    """
    An indefinite probability <[L, U], b, k>.

    The interval [L, U] is believed with credibility b to contain the mean
    of the probability distribution obtained after k further observations.
    """

    lower: float
    upper: float
    credibility: float = DEFAULT_CREDIBILITY
    lookahead: float = DEFAULT_LOOKAHEAD

    def __post_init__(self):
        if not 0.0 <= self.lower <= self.upper <= 1.0:
            raise ValueError(
                f"Interval must satisfy 0 <= L <= U <= 1: [{self.lower}, {self.upper}]"
            )
        if not 0.0 < self.credibility <= 1.0:
            raise ValueError(f"Credibility must be in (0, 1]: {self.credibility}")
        if self.lookahead <= 0:
            raise ValueError(f"Lookahead must be positive: {self.lookahead}")

    @property
    def mean(self) -> float:
        return (self.lower + self.upper) / 2

    @property
    def strength(self) -> float:
        return self.mean

    @property
    def width(self) -> float:
        return self.upper - self.lower

    @property
    def is_indefinite(self) -> bool:
        return True

    @property
    def count(self) -> float:
        return self.to_simple().count

    def confidence(self, k: float = DEFAULT_K) -> float:
        return 1.0 - self.width

    def to_simple(self, k: float = DEFAULT_K) -> SimpleTruthValue:
        """Collapse to <s, n> with s the interval midpoint and n from its width."""
        width = self.width
        if width <= 0:
            return SimpleTruthValue(self.mean, MAX_COUNT)
        count = min(k * (1.0 - width) / width, MAX_COUNT)
        return SimpleTruthValue(_unit(self.mean), count)

    def to_indefinite(self, credibility: float = DEFAULT_CREDIBILITY,
                      lookahead: float = DEFAULT_LOOKAHEAD,
                      k: float = DEFAULT_K) -> "IndefiniteTruthValue":
        return self

    @classmethod
    def from_simple(cls, tv: SimpleTruthValue,
                    credibility: float = DEFAULT_CREDIBILITY,
                    lookahead: float = DEFAULT_LOOKAHEAD,
                    k: float = DEFAULT_K) -> "IndefiniteTruthValue":
        """Interval of width 1 - confidence centred on the strength, kept inside [0, 1]."""
        width = 1.0 - tv.confidence(k)
        lower = tv.strength - width / 2
        upper = tv.strength + width / 2
        if lower < 0.0:
            lower, upper = 0.0, width
        elif upper > 1.0:
            lower, upper = 1.0 - width, 1.0
        return cls(_unit(lower), _unit(upper), credibility, lookahead)

    def revise(self, other: "TruthValue", k: float = DEFAULT_K) -> "IndefiniteTruthValue":
        """Revise through the simple representation and convert back."""
        merged = self.to_simple(k).revise(other.to_simple(k))
        return IndefiniteTruthValue.from_simple(merged, self.credibility, self.lookahead, k)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lower": self.lower,
            "upper": self.upper,
            "credibility": self.credibility,
            "lookahead": self.lookahead,
        }

    def __str__(self) -> str:
        return (f"<[{self.lower:.4g}, {self.upper:.4g}], "
                f"{self.credibility:.4g}, {self.lookahead:.4g}>")


TruthValue = Union[SimpleTruthValue, IndefiniteTruthValue]

DEFAULT_TV = SimpleTruthValue(0.5, 0.0)


def count_to_confidence(count: float, k: float = DEFAULT_K) -> float:
    """Convert an evidence count into a confidence in [0, 1)."""
    if k <= 0:
        raise ValueError(f"k must be positive: {k}")
    return count / (count + k)


def confidence_to_count(confidence: float, k: float = DEFAULT_K) -> float:
    """Inverse of count_to_confidence."""
    if not 0.0 <= confidence <= 1.0:
        raise ValueError(f"Confidence must be in [0, 1]: {confidence}")
    if confidence >= 1.0:
        return MAX_COUNT
    return min(k * confidence / (1.0 - confidence), MAX_COUNT)


def revise(first: TruthValue, second: TruthValue, k: float = DEFAULT_K) -> TruthValue:
    """Revise two truth values; the result keeps the type of the first."""
    if first.is_indefinite:
        return first.revise(second, k)
    return first.revise(second.to_simple(k))


def truth_value_from_dict(data: Dict[str, Any]) -> TruthValue:
    """Build a truth value from its dict form."""
    if "lower" in data or "upper" in data:
        return IndefiniteTruthValue(
            lower=float(data["lower"]),
            upper=float(data["upper"]),
            credibility=float(data.get("credibility", DEFAULT_CREDIBILITY)),
            lookahead=float(data.get("lookahead", DEFAULT_LOOKAHEAD)),
        )
    if "strength" not in data:
        raise ValueError(f"Unrecognised truth value: {data}")
    if "confidence" in data and "count" not in data:
        return SimpleTruthValue.from_confidence(float(data["strength"]), float(data["confidence"]))
    return SimpleTruthValue(float(data["strength"]), float(data.get("count", 0.0)))


def _unit(value: float) -> float:
    return max(0.0, min(1.0, value))
