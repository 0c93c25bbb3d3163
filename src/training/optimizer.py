"""
Optimizer and scheduler utilities for consistency optimization.
"""

import torch
from torch.optim import AdamW, Adam, SGD
from torch.optim.lr_scheduler import CosineAnnealingLR, LinearLR, StepLR
from typing import Iterable, Optional

OPTIMIZERS = {"adamw": AdamW, "adam": Adam, "sgd": SGD}
SCHEDULERS = ["cosine", "linear", "step", "none"]


def get_optimizer(parameters: Iterable[torch.nn.Parameter], type: str = "adam", lr: float = 0.05,
                  weight_decay: float = 0.0, **kwargs) -> torch.optim.Optimizer:
    """Get optimizer over the given parameters."""
    name = type.lower()
    if name not in OPTIMIZERS:
        raise ValueError(f"Unknown optimizer type: {type}. Available: {', '.join(OPTIMIZERS)}")
    return OPTIMIZERS[name](parameters, lr=lr, weight_decay=weight_decay, **kwargs)


def get_scheduler(optimizer, type: str = "none", num_training_steps: int = 1000,
                  **kwargs) -> Optional[torch.optim.lr_scheduler.LRScheduler]:
    """Get learning rate scheduler, or None for a constant rate."""
    name = type.lower()
    if name == "cosine":
        return CosineAnnealingLR(optimizer, T_max=num_training_steps, **kwargs)
    elif name == "linear":
        return LinearLR(
            optimizer,
            start_factor=1.0,
            end_factor=kwargs.pop("end_factor", 0.1),
            total_iters=num_training_steps,
            **kwargs
        )
    elif name == "step":
        return StepLR(
            optimizer,
            step_size=kwargs.pop("step_size", max(1, num_training_steps // 4)),
            gamma=kwargs.pop("gamma", 0.5),
            **kwargs
        )
    elif name == "none":
        return None
    else:
        raise ValueError(f"Unknown scheduler type: {type}. Available: {', '.join(SCHEDULERS)}")
