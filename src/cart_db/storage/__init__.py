from .base import CartStorage
from .memory import InMemoryCartStore, SweepResult
from .sweeper import Sweeper

__all__ = ["CartStorage", "InMemoryCartStore", "SweepResult", "Sweeper"]
