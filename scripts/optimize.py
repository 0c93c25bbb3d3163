#!/usr/bin/env python3
"""
Make the link strengths of a knowledge base consistent with deduction.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

import torch

# Add src to path
sys.path.append(str(Path(__file__).parent.parent / "src"))

from data.schema import OptimizerConfig, ReasonerConfig, load_config
from data.loader import load_knowledge_base, save_knowledge_base
from training.consistency import ConsistencyTrainer


def main():
    parser = argparse.ArgumentParser(description="Consistency optimization of link strengths")
    parser.add_argument("--kb", type=str, required=True,
                       help="Knowledge file to optimize")
    parser.add_argument("--config", type=str, default=None,
                       help="Path to configuration file")
    parser.add_argument("--epochs", type=int, default=None,
                       help="Number of epochs (overrides config)")
    parser.add_argument("--output", type=str, required=True,
                       help="Where to save the optimized knowledge base")
    parser.add_argument("--checkpoint", type=str, default=None,
                       help="Save a training checkpoint to this path")
    parser.add_argument("--seed", type=int, default=42,
                       help="Random seed")
    parser.add_argument("--log-level", type=str, default="WARNING",
                       choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                       help="Logging level")

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    torch.manual_seed(args.seed)

    config = load_config(args.config) if args.config else {}
    reasoner_config = ReasonerConfig(**config.get("reasoner", {}))
    optimizer_config = OptimizerConfig(**config.get("optimizer", {}))

    print(f"Loading knowledge base from {args.kb}...")
    space = load_knowledge_base(args.kb, config=reasoner_config)

    print("Setting up trainer...")
    trainer = ConsistencyTrainer(space, optimizer_config, reasoner_config)
    print(f"  {len(trainer.model.links)} links, {trainer.model.num_triangles} deduction triangles")

    print("Optimizing...")
    history = trainer.fit(args.epochs)
    if history:
        print("Final losses:")
        for key, value in history[-1].items():
            print(f"  {key}: {value:.6f}")

    changed = trainer.commit()
    print(f"Updated {changed} link strengths")

    if args.checkpoint:
        os.makedirs(os.path.dirname(args.checkpoint) or ".", exist_ok=True)
        trainer.save_checkpoint(args.checkpoint)
        print(f"Checkpoint saved to {args.checkpoint}")

    save_knowledge_base(space, args.output)
    print(f"Knowledge base saved to {args.output}")


if __name__ == "__main__":
    main()
