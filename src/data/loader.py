"""
Loading and saving knowledge bases.

The format is chosen by file suffix: ``.yaml``/``.yml`` and ``.json`` hold a
KnowledgeBaseSpec document, ``.pln``/``.scm`` the S-expression format.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Union

import yaml

from atomspace.atoms import Atom, Node
from atomspace.space import AtomSpace

from .parser import format_atom, parse_file
from .schema import AtomSpec, KnowledgeBaseSpec, ReasonerConfig

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")
JSON_SUFFIXES = (".json",)
SEXPR_SUFFIXES = (".pln", ".scm")


def _format(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in YAML_SUFFIXES:
        return "yaml"
    if suffix in JSON_SUFFIXES:
        return "json"
    if suffix in SEXPR_SUFFIXES:
        return "sexpr"
    supported = ", ".join(YAML_SUFFIXES + JSON_SUFFIXES + SEXPR_SUFFIXES)
    raise ValueError(f"Unknown knowledge base format: {path.suffix!r}. Supported: {supported}")


def _new_space(config: Optional[ReasonerConfig], k: Optional[float] = None) -> AtomSpace:
    if config is not None:
        return AtomSpace(k=config.k, trail_max_size=config.trail_max_size)
    return AtomSpace(k=k) if k is not None else AtomSpace()


def load_knowledge_base(path: Union[str, Path], space: Optional[AtomSpace] = None,
                        config: Optional[ReasonerConfig] = None) -> AtomSpace:
    """
    Read a knowledge file into an AtomSpace.

    Args:
        path: Knowledge file
        space: Space to add to; a new one is created if None
        config: Settings for a new space (k and trail size); without one a
            document's own k is used

    Returns:
        The space holding the loaded atoms as asserted facts
    """
    path = Path(path)
    kind = _format(path)

    if kind == "sexpr":
        space = space if space is not None else _new_space(config)
        for atom, tv in parse_file(path):
            space.add(atom, tv)
        logger.info("Loaded %d atoms from %s", len(space), path)
        return space

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) if kind == "yaml" else json.load(f)
    spec = KnowledgeBaseSpec(**(data or {}))
    space = space if space is not None else _new_space(config, spec.k)
    for atom_spec in spec.atoms:
        tv = atom_spec.tv.to_truth_value(space.k) if atom_spec.tv is not None else None
        space.add(atom_spec.to_atom(), tv)
    logger.info("Loaded knowledge base %r (%d atoms) from %s", spec.name, len(space), path)
    return space


def _atoms_to_save(space: AtomSpace) -> List[Atom]:
    """Links, plus nodes that carry evidence; other nodes come back with their links."""
    atoms = [
        atom for atom in space
        if not isinstance(atom, Node) or space.get_tv(atom).to_simple(space.k).count > 0
    ]
    return sorted(atoms, key=lambda a: (not isinstance(a, Node), a.to_sexpr()))


def save_knowledge_base(space: AtomSpace, path: Union[str, Path], name: Optional[str] = None) -> None:
    """Write the atoms of ``space`` and their truth values to ``path``."""
    path = Path(path)
    kind = _format(path)
    atoms = _atoms_to_save(space)

    if kind == "sexpr":
        lines = [format_atom(atom, space.get_tv(atom)) for atom in atoms]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    else:
        spec = KnowledgeBaseSpec(
            name=name or path.stem,
            k=space.k,
            atoms=[AtomSpec.from_atom(atom, space.get_tv(atom)) for atom in atoms],
        )
        data = spec.model_dump(exclude_none=True, exclude_defaults=True)
        data.setdefault("name", spec.name)
        with open(path, "w", encoding="utf-8") as f:
            if kind == "yaml":
                yaml.safe_dump(data, f, sort_keys=False)
            else:
                json.dump(data, f, indent=2)
    logger.info("Saved %d atoms to %s", len(atoms), path)
