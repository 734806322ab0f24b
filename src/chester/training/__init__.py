"""Network training drivers."""

from chester.training.trainer import Trainer

__all__ = ["Trainer"]
