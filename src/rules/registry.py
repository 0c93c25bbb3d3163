"""
Rule registry and factory.
"""

import logging
from typing import Dict, List, Optional, Type

from atomspace.atoms import AtomType
from data.schema import ReasonerConfig

from .base import InferenceRule, LinkRule
from .boolean import ConjunctionRule, DisjunctionRule, NegationRule
from .term_logic import (
    AbductionRule, DeductionRule, InductionRule, InheritanceFromSimilarityRule,
    InversionRule, ModusPonensRule, SimilarityRule,
)

logger = logging.getLogger(__name__)


class RuleRegistry:
    """
    Named rule classes and the rule instances built from them.

    Link rules are instantiated once per configured link type they apply
    to; connective rules once.
    """

    _rule_classes: Dict[str, Type[InferenceRule]] = {}

    def __init__(self, rules: Optional[List[InferenceRule]] = None):
        self._rules: Dict[str, InferenceRule] = {}
        for rule in rules or []:
            self.add(rule)

    @classmethod
    def register(cls, name: str, rule_class: Type[InferenceRule]) -> None:
        """Make a rule class available by name."""
        cls._rule_classes[name] = rule_class

    @classmethod
    def names(cls) -> List[str]:
        return sorted(cls._rule_classes)

    @classmethod
    def create(cls, name: str, config: Optional[ReasonerConfig] = None,
               link_types: Optional[List[AtomType]] = None) -> List[InferenceRule]:
        """
        Instantiate a named rule.

        Args:
            name: Registered rule name
            config: Reasoner settings passed to the rule
            link_types: Link types for link rules (default: the config's)

        Returns:
            One instance per applicable link type
        """
        if name not in cls._rule_classes:
            raise ValueError(f"Unknown rule: {name}. Available: {', '.join(cls.names())}")
        config = config or ReasonerConfig()
        rule_class = cls._rule_classes[name]
        if not issubclass(rule_class, LinkRule):
            return [rule_class(config=config)]
        if link_types is None:
            link_types = config.get_link_types()
        return [
            rule_class(link_type, config=config)
            for link_type in link_types if link_type in rule_class.link_types
        ]

    @classmethod
    def create_from_config(cls, config: ReasonerConfig) -> "RuleRegistry":
        registry = cls()
        for name in config.rules:
            created = cls.create(name, config)
            if not created:
                logger.warning("Rule %s has no configured link type to apply to", name)
            for rule in created:
                registry.add(rule)
        return registry

    def add(self, rule: InferenceRule) -> None:
        self._rules[rule.id] = rule

    def get(self, rule_id: str) -> Optional[InferenceRule]:
        return self._rules.get(rule_id)

    @property
    def forward_rules(self) -> List[InferenceRule]:
        return [rule for rule in self._rules.values() if rule.forward]

    @property
    def rules(self) -> List[InferenceRule]:
        return list(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self.rules)


for _name, _rule_class in [
    ("deduction", DeductionRule),
    ("induction", InductionRule),
    ("abduction", AbductionRule),
    ("inversion", InversionRule),
    ("modus_ponens", ModusPonensRule),
    ("similarity", SimilarityRule),
    ("inheritance_from_similarity", InheritanceFromSimilarityRule),
    ("negation", NegationRule),
    ("conjunction", ConjunctionRule),
    ("disjunction", DisjunctionRule),
]:
    RuleRegistry.register(_name, _rule_class)


def create_default_rules(config: Optional[ReasonerConfig] = None) -> RuleRegistry:
    """Registry with every rule the config enables."""
    return RuleRegistry.create_from_config(config or ReasonerConfig())
