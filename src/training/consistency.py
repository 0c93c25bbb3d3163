"""
Trail-free inference by optimization.

Instead of chaining, the strengths of all links are treated as free
parameters and nudged towards a state where every stored deduction
triangle (A->B, B->C, A->C) agrees with the deduction formula, while
staying close to the observed strengths in proportion to their confidence.
"""

import logging
from typing import Any, Dict, List, Optional

import torch
import torch.nn as nn
import wandb
from tqdm import tqdm

from atomspace.atoms import Atom, AtomType, Link
from atomspace.space import AtomSpace
from data.schema import OptimizerConfig, ReasonerConfig
from truth.formulas import deduction_strength
from truth.values import IndefiniteTruthValue, SimpleTruthValue, TruthValue

from .optimizer import get_optimizer, get_scheduler

logger = logging.getLogger(__name__)

STRENGTH_CLAMP = 1e-4


class TruthValueOptimizer(nn.Module):
    """One learnable strength per link, with a deduction-consistency loss."""

    def __init__(self, space: AtomSpace, link_types: Optional[List[AtomType]] = None,
                 anchor_weight: float = 1.0, config: Optional[ReasonerConfig] = None):
        super().__init__()
        self.config = config or ReasonerConfig()
        self.anchor_weight = anchor_weight
        link_types = link_types or [AtomType.INHERITANCE]

        self.links: List[Link] = []
        for link_type in link_types:
            for link in sorted(space.get_atoms_by_type(link_type), key=str):
                if link.arity == 2 and space.get_tv(link).to_simple(space.k).count > 0:
                    self.links.append(link)
        self.index: Dict[Link, int] = {link: i for i, link in enumerate(self.links)}

        strengths = torch.tensor([space.get_tv(l).strength for l in self.links],
                                 dtype=torch.float64)
        confidences = torch.tensor([space.confidence(l) for l in self.links],
                                   dtype=torch.float64)
        self.register_buffer("initial", strengths)
        self.register_buffer("confidence", confidences)
        clamped = strengths.clamp(STRENGTH_CLAMP, 1.0 - STRENGTH_CLAMP)
        self.logits = nn.Parameter(torch.logit(clamped))

        triangles, terms = [], []
        for ab in self.links:
            a, b = ab.outgoing
            for bc in self.links:
                if bc.type != ab.type or bc.outgoing[0] != b or bc.outgoing[1] == a:
                    continue
                ac = Link(ab.type, (a, bc.outgoing[1]))
                if ac in self.index:
                    triangles.append([self.index[ab], self.index[bc], self.index[ac]])
                    terms.append([self._term(space, a), self._term(space, b),
                                  self._term(space, bc.outgoing[1])])
        self.register_buffer("triangles", torch.tensor(triangles, dtype=torch.long).reshape(-1, 3))
        self.register_buffer("terms", torch.tensor(terms, dtype=torch.float64).reshape(-1, 3))

    def _term(self, space: AtomSpace, atom: Atom) -> float:
        if atom in space and space.get_tv(atom).to_simple(space.k).count > 0:
            return space.get_tv(atom).strength
        return self.config.default_node_strength

    @property
    def num_triangles(self) -> int:
        return self.triangles.shape[0]

    def strengths(self) -> torch.Tensor:
        return torch.sigmoid(self.logits)

    def forward(self) -> Dict[str, torch.Tensor]:
        s = self.strengths()
        anchor = self.anchor_weight * (self.confidence * (s - self.initial) ** 2).sum()
        if self.num_triangles == 0:
            consistency = torch.zeros((), dtype=s.dtype)
        else:
            ab, bc, ac = self.triangles.unbind(dim=1)
            sA, sB, sC = self.terms.unbind(dim=1)
            predicted = deduction_strength(sA, sB, sC, s[ab], s[bc])
            consistency = ((s[ac] - predicted) ** 2).sum()
        return {"loss": consistency + anchor, "consistency": consistency, "anchor": anchor}


class ConsistencyTrainer:
    """Fits a TruthValueOptimizer and writes the results back to the space."""

    def __init__(self, space: AtomSpace, config: Optional[OptimizerConfig] = None,
                 reasoner_config: Optional[ReasonerConfig] = None):
        self.space = space
        self.config = config or OptimizerConfig()
        self.reasoner_config = reasoner_config or ReasonerConfig()
        link_types = [AtomType.parse(name) for name in self.config.link_types]
        self.model = TruthValueOptimizer(space, link_types, self.config.anchor_weight,
                                         self.reasoner_config)

        self.optimizer = get_optimizer(
            self.model.parameters(),
            type=self.config.type,
            lr=self.config.lr,
            weight_decay=self.config.weight_decay,
        )
        self.scheduler = get_scheduler(
            self.optimizer,
            type=self.config.scheduler,
            num_training_steps=self.config.epochs,
        )

        self.current_epoch = 0
        self.history: List[Dict[str, float]] = []

        if self.config.use_wandb:
            wandb.init(project=self.config.wandb_project, config=self.config.model_dump())

    def fit(self, epochs: Optional[int] = None) -> List[Dict[str, float]]:
        """Run gradient descent on the consistency loss."""
        epochs = epochs or self.config.epochs
        if self.model.num_triangles == 0:
            logger.warning("No deduction triangles among %d links, nothing to optimize",
                           len(self.model.links))
            return self.history

        logger.info("Optimizing %d links over %d triangles for %d epochs",
                    len(self.model.links), self.model.num_triangles, epochs)
        progress_bar = tqdm(range(epochs), desc="Consistency",
                            disable=not self.reasoner_config.show_progress)
        for _ in progress_bar:
            self.model.train()
            outputs = self.model()
            self.optimizer.zero_grad()
            outputs["loss"].backward()
            self.optimizer.step()
            if self.scheduler:
                self.scheduler.step()

            metrics = {key: value.item() for key, value in outputs.items()}
            self.history.append(metrics)
            if self.config.use_wandb:
                wandb.log(metrics, step=self.current_epoch)
            progress_bar.set_postfix({"loss": f"{metrics['loss']:.6f}"})
            self.current_epoch += 1
        return self.history

    def commit(self, min_change: float = 1e-6) -> int:
        """
        Write optimized strengths back to the space.

        Counts are kept; indefinite intervals are shifted to the new mean.

        Returns:
            Number of links whose strength changed
        """
        changed = 0
        strengths = self.model.strengths().detach()
        for link, value in zip(self.model.links, strengths.tolist()):
            old = self.space.get_tv(link)
            if abs(old.strength - value) < min_change:
                continue
            self.space.set_tv(link, self._with_strength(old, value))
            changed += 1
        logger.info("Committed %d optimized strengths", changed)
        return changed

    @staticmethod
    def _with_strength(tv: TruthValue, strength: float) -> TruthValue:
        if not tv.is_indefinite:
            return SimpleTruthValue(strength, tv.count)
        half = tv.width / 2
        lower = min(max(strength - half, 0.0), 1.0 - tv.width)
        upper = min(lower + tv.width, 1.0)
        return IndefiniteTruthValue(lower, upper, tv.credibility, tv.lookahead)

    def save_checkpoint(self, path: str) -> None:
        """Save optimizer state and history."""
        checkpoint: Dict[str, Any] = {
            "model_state_dict": self.model.state_dict(),
            "optimizer_state_dict": self.optimizer.state_dict(),
            "scheduler_state_dict": self.scheduler.state_dict() if self.scheduler else None,
            "links": [link.to_sexpr() for link in self.model.links],
            "config": self.config.model_dump(),
            "current_epoch": self.current_epoch,
            "history": self.history,
        }
        torch.save(checkpoint, path)
        logger.info("Checkpoint saved to %s", path)

    def load_checkpoint(self, path: str) -> None:
        """Restore a checkpoint saved for the same set of links."""
        checkpoint = torch.load(path, map_location="cpu", weights_only=False)
        links = [link.to_sexpr() for link in self.model.links]
        if checkpoint["links"] != links:
            raise ValueError("Checkpoint was saved for a different set of links")
        self.model.load_state_dict(checkpoint["model_state_dict"])
        self.optimizer.load_state_dict(checkpoint["optimizer_state_dict"])
        if checkpoint["scheduler_state_dict"] and self.scheduler:
            self.scheduler.load_state_dict(checkpoint["scheduler_state_dict"])
        self.current_epoch = checkpoint["current_epoch"]
        self.history = checkpoint["history"]
        logger.info("Checkpoint loaded from %s", path)
