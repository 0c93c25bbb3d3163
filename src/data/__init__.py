"""
Configuration, knowledge-base schemas and file formats.
"""

from .schema import (
    ReasonerConfig, OptimizerConfig, IndefiniteConfig, AttentionConfig,
    TruthValueSpec, AtomSpec, KnowledgeBaseSpec, load_config, load_reasoner_config
)
from .parser import ParseError, parse, parse_atom, parse_file, format_atom
from .loader import load_knowledge_base, save_knowledge_base

__all__ = [
    "ReasonerConfig", "OptimizerConfig", "IndefiniteConfig", "AttentionConfig",
    "TruthValueSpec", "AtomSpec", "KnowledgeBaseSpec", "load_config", "load_reasoner_config",
    "ParseError", "parse", "parse_atom", "parse_file", "format_atom",
    "load_knowledge_base", "save_knowledge_base"
]
