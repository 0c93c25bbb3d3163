#!/usr/bin/env python3
"""
Example script demonstrating forward and backward chaining on a small taxonomy.
"""

import sys
from pathlib import Path

# Add src to path
sys.path.append(str(Path(__file__).parent.parent / "src"))

from atomspace.atoms import concept, inheritance, variable
from data.loader import load_knowledge_base
from data.parser import format_atom
from data.schema import ReasonerConfig
from reasoning.backward import BackwardChainer
from reasoning.batch import BatchDeduction
from reasoning.forward import ForwardChainer


def run_example(kb_path: str = str(Path(__file__).parent / "animals.pln")):
    """Chain over the example knowledge base and explain one conclusion."""
    config = ReasonerConfig(max_steps=5, seed=0)

    print("1. Loading knowledge...")
    space = load_knowledge_base(kb_path, config=config)
    print(f"   {len(space)} atoms")

    print("2. Batch deduction (not committed)...")
    for conclusion in BatchDeduction(space, config=config).run():
        print(f"   {format_atom(conclusion.atom, conclusion.tv)}")

    print("3. Forward chaining...")
    forward = ForwardChainer(space, config=config)
    result = forward.run()
    print(f"   {len(result)} inferences in {result.steps} steps ({result.stopped_reason})")

    target = inheritance(concept("cat"), concept("animal"))
    explanation = forward.explain(target)
    print(f"   {format_atom(target, space.get_tv(target))} via {explanation.rules_applied}")
    for atom in explanation.supporting_atoms:
        print(f"     <- {format_atom(atom, space.get_tv(atom))}")

    print("4. Backward chaining on (Inheritance dog $x)...")
    fresh = load_knowledge_base(kb_path, config=config)
    backward = BackwardChainer(fresh, config=config)
    for answer in backward.prove(inheritance(concept("dog"), variable("x")), max_depth=2):
        print(f"   {format_atom(answer.atom, answer.tv)}")


if __name__ == "__main__":
    run_example()
