#!/usr/bin/env python3
"""
Run forward or backward chaining over a knowledge file.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.append(str(Path(__file__).parent.parent / "src"))

from data.schema import load_reasoner_config
from data.parser import parse_atom, format_atom
from data.loader import load_knowledge_base, save_knowledge_base
from reasoning.forward import ForwardChainer
from reasoning.backward import BackwardChainer
from rules.registry import create_default_rules


def run_forward(space, rules, config, args):
    """Forward chain and print the conclusions."""
    chainer = ForwardChainer(space, rules, config)
    result = chainer.run(steps=args.steps)
    print(f"Stopped after {result.steps} steps ({result.stopped_reason}), "
          f"{len(result)} inferences")
    for conclusion in result.inferences[:args.top]:
        print(f"  [{conclusion.rule}] {format_atom(conclusion.atom, conclusion.tv)}")
    return chainer, [c.atom for c in result.inferences]


def run_backward(space, rules, config, args):
    """Prove the query and print the answers."""
    if not args.query:
        raise ValueError("--query is required in backward mode")
    target = parse_atom(args.query)
    chainer = BackwardChainer(space, rules, config)
    answers = chainer.prove(target, max_depth=args.depth)
    print(f"{len(answers)} answers for {target}")
    for answer in answers[:args.top]:
        bindings = ", ".join(f"{var} = {value}" for var, value in answer.bindings.items())
        suffix = f"  {{{bindings}}}" if bindings else ""
        print(f"  {format_atom(answer.atom, answer.tv)}{suffix}")
    return chainer, [a.atom for a in answers]


def main():
    parser = argparse.ArgumentParser(description="Probabilistic term logic inference")
    parser.add_argument("--kb", type=str, required=True,
                       help="Knowledge file (.pln, .scm, .yaml, .yml or .json)")
    parser.add_argument("--config", type=str, default=None,
                       help="Path to configuration file")
    parser.add_argument("--mode", type=str, choices=["forward", "backward"], default="forward",
                       help="Chaining direction")
    parser.add_argument("--query", type=str, default=None,
                       help="Goal for backward chaining, e.g. '(Inheritance cat $x)'")
    parser.add_argument("--steps", type=int, default=None,
                       help="Forward chaining steps (overrides config)")
    parser.add_argument("--depth", type=int, default=None,
                       help="Backward chaining depth (overrides config)")
    parser.add_argument("--top", type=int, default=20,
                       help="Number of results to print")
    parser.add_argument("--explain", action="store_true",
                       help="Print proof trees for the results")
    parser.add_argument("--output", type=str, default=None,
                       help="Save the resulting knowledge base to this file")
    parser.add_argument("--seed", type=int, default=None,
                       help="Random seed for indefinite propagation (overrides config)")
    parser.add_argument("--log-level", type=str, default="WARNING",
                       choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                       help="Logging level")

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    config = load_reasoner_config(args.config)
    if args.seed is not None:
        config = config.model_copy(update={"seed": args.seed})

    print(f"Loading knowledge base from {args.kb}...")
    space = load_knowledge_base(args.kb, config=config)
    print(f"  {len(space)} atoms")

    rules = create_default_rules(config)
    print(f"Rules: {', '.join(rule.id for rule in rules)}")

    if args.mode == "forward":
        chainer, atoms = run_forward(space, rules, config, args)
    else:
        chainer, atoms = run_backward(space, rules, config, args)

    if args.explain:
        for atom in atoms[:args.top]:
            print(json.dumps(chainer.explain(atom).to_dict(), indent=2))

    if args.output:
        save_knowledge_base(space, args.output)
        print(f"Knowledge base saved to {args.output}")


if __name__ == "__main__":
    main()
