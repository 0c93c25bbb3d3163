"""
Configuration and knowledge-base schemas.
"""

from typing import List, Optional, Dict, Any

import yaml
from pydantic import BaseModel, Field, model_validator

from atomspace.atoms import Atom, AtomType, Link, Node
from truth.values import (
    TruthValue, SimpleTruthValue, IndefiniteTruthValue,
    DEFAULT_K, DEFAULT_CREDIBILITY, DEFAULT_LOOKAHEAD,
)

DEFAULT_RULES = [
    "deduction", "induction", "abduction", "inversion", "modus_ponens",
    "similarity", "inheritance_from_similarity",
    "negation", "conjunction", "disjunction",
]


class IndefiniteConfig(BaseModel):
    """Monte-Carlo settings for indefinite truth value propagation."""

    credibility: float = Field(DEFAULT_CREDIBILITY, gt=0.0, le=1.0)
    lookahead: float = Field(DEFAULT_LOOKAHEAD, gt=0.0)
    n_first_order: int = Field(100, ge=2)
    n_second_order: int = Field(100, ge=1)


class AttentionConfig(BaseModel):
    """Importance bookkeeping during chaining."""

    inferred_importance_factor: float = Field(0.3, ge=0.0, le=1.0)
    decay_every: int = Field(0, ge=0)  # steps between decays, 0 disables
    forget_threshold: float = Field(0.0, ge=0.0, le=1.0)  # 0 disables forgetting
    max_atoms: Optional[int] = Field(15000, ge=1)  # None leaves the space unbounded
    target_fraction: float = Field(0.8, gt=0.0, le=1.0)  # share of max_atoms kept after trimming
    protected: List[str] = []


class ReasonerConfig(BaseModel):
    """Settings shared by the rules and the chainers."""

    k: float = Field(DEFAULT_K, gt=0.0)
    default_node_strength: float = Field(0.5, ge=0.0, le=1.0)
    confidence_discount: float = Field(0.9, gt=0.0, le=1.0)
    min_confidence: float = Field(0.0, ge=0.0, le=1.0)
    check_consistency: bool = True
    revise_asserted: bool = False  # let chainers revise given facts with conclusions
    modus_ponens_default: float = Field(0.2, ge=0.0, le=1.0)

    max_steps: int = Field(10, ge=1)
    max_inferences: int = Field(1000, ge=1)
    batch_size: int = Field(50, ge=1)
    max_depth: int = Field(3, ge=0)
    trail_max_size: int = Field(100, ge=1)

    indefinite: IndefiniteConfig = IndefiniteConfig()
    attention: AttentionConfig = AttentionConfig()

    rules: List[str] = list(DEFAULT_RULES)
    link_types: List[str] = ["InheritanceLink", "ImplicationLink"]

    seed: Optional[int] = 42
    show_progress: bool = False

    def get_link_types(self) -> List[AtomType]:
        return [AtomType.parse(name) for name in self.link_types]


class OptimizerConfig(BaseModel):
    """Settings for consistency optimization of link strengths."""

    type: str = "adam"
    lr: float = Field(0.05, gt=0.0)
    weight_decay: float = Field(0.0, ge=0.0)
    scheduler: str = "none"
    epochs: int = Field(200, ge=1)
    anchor_weight: float = Field(1.0, ge=0.0)
    link_types: List[str] = ["InheritanceLink"]
    use_wandb: bool = False
    wandb_project: str = "pln-consistency"


def load_config(config_path: str) -> Dict[str, Any]:
    """Load configuration from YAML file."""
    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)
    return config or {}


def load_reasoner_config(config_path: Optional[str] = None) -> ReasonerConfig:
    """Reasoner settings from the ``reasoner`` section of a YAML file."""
    if config_path is None:
        return ReasonerConfig()
    return ReasonerConfig(**load_config(config_path).get("reasoner", {}))


class TruthValueSpec(BaseModel):
    """Either <strength, count|confidence> or <[lower, upper], credibility, lookahead>."""

    strength: Optional[float] = Field(None, ge=0.0, le=1.0)
    count: Optional[float] = Field(None, ge=0.0)
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    lower: Optional[float] = Field(None, ge=0.0, le=1.0)
    upper: Optional[float] = Field(None, ge=0.0, le=1.0)
    credibility: float = Field(DEFAULT_CREDIBILITY, gt=0.0, le=1.0)
    lookahead: float = Field(DEFAULT_LOOKAHEAD, gt=0.0)

    @model_validator(mode="after")
    def check_shape(self) -> "TruthValueSpec":
        simple = self.strength is not None
        indefinite = self.lower is not None or self.upper is not None
        if simple == indefinite:
            raise ValueError("Give either strength or lower/upper")
        if indefinite and (self.lower is None or self.upper is None):
            raise ValueError("Indefinite truth values need both lower and upper")
        return self

    def to_truth_value(self, k: float = DEFAULT_K) -> TruthValue:
        if self.strength is not None:
            if self.count is None and self.confidence is not None:
                return SimpleTruthValue.from_confidence(self.strength, self.confidence, k)
            return SimpleTruthValue(self.strength, self.count or 0.0)
        return IndefiniteTruthValue(self.lower, self.upper, self.credibility, self.lookahead)

    @classmethod
    def from_truth_value(cls, tv: TruthValue) -> "TruthValueSpec":
        return cls(**tv.to_dict())


class AtomSpec(BaseModel):
    """A node (type + name) or a link (type + outgoing) with an optional truth value."""

    type: str
    name: Optional[str] = None
    outgoing: List["AtomSpec"] = []
    tv: Optional[TruthValueSpec] = None

    @model_validator(mode="after")
    def check_shape(self) -> "AtomSpec":
        atom_type = AtomType.parse(self.type)
        if atom_type.is_node and not self.name:
            raise ValueError(f"{atom_type.value} needs a name")
        if atom_type.is_link and not self.outgoing:
            raise ValueError(f"{atom_type.value} needs outgoing atoms")
        return self

    def to_atom(self) -> Atom:
        atom_type = AtomType.parse(self.type)
        if atom_type.is_node:
            return Node(atom_type, self.name)
        return Link(atom_type, tuple(child.to_atom() for child in self.outgoing))

    @classmethod
    def from_atom(cls, atom: Atom, tv: Optional[TruthValue] = None) -> "AtomSpec":
        spec_tv = TruthValueSpec.from_truth_value(tv) if tv is not None else None
        if isinstance(atom, Node):
            return cls(type=atom.type.value, name=atom.name, tv=spec_tv)
        return cls(
            type=atom.type.value,
            outgoing=[cls.from_atom(child) for child in atom.outgoing],
            tv=spec_tv,
        )


AtomSpec.model_rebuild()


class KnowledgeBaseSpec(BaseModel):
    """Serialized knowledge base."""

    name: str = "knowledge_base"
    k: float = Field(DEFAULT_K, gt=0.0)
    atoms: List[AtomSpec] = []
