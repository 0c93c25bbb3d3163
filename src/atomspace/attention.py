"""
Short- and long-term importance used to focus inference and to forget.
"""

from dataclasses import dataclass

INITIAL_STI = 0.1
INITIAL_LTI_FACTOR = 0.1
STI_DECAY_RATE = 0.05
LTI_DECAY_RATE = 0.005
STI_TO_LTI_RATE = 0.02

BOOST_ON_ACCESS = 0.05
BOOST_ON_REVISION_MAX = 0.4
REVISION_CONFIDENCE_THRESHOLD = 0.1


def _unit(value: float) -> float:
    return max(0.0, min(1.0, value))


@dataclass(frozen=True)
class AttentionValue:
    """Short-term (sti) and long-term (lti) importance, both in [0, 1]."""

    sti: float = INITIAL_STI
    lti: float = INITIAL_STI * INITIAL_LTI_FACTOR

    def __post_init__(self):
        object.__setattr__(self, "sti", _unit(self.sti))
        object.__setattr__(self, "lti", _unit(self.lti))

    def boost(self, amount: float) -> "AttentionValue":
        """STI rises by ``amount``; LTI learns from the STI increase."""
        if amount <= 0:
            return self
        sti = _unit(self.sti + amount)
        lti = self.lti + (sti - self.sti) * STI_TO_LTI_RATE * abs(amount)
        return AttentionValue(sti, lti)

    def decay(self) -> "AttentionValue":
        """STI decays; LTI decays slower and keeps part of what STI lost."""
        lost = self.sti * STI_DECAY_RATE
        return AttentionValue(
            self.sti - lost,
            self.lti * (1 - LTI_DECAY_RATE) + lost * STI_TO_LTI_RATE,
        )

    @property
    def importance(self) -> float:
        return self.sti * 0.6 + self.lti * 0.4
