"""Reachability and impact analysis over a module graph."""

from .impact import ImpactCalculator, compute_impact
from .reachability import compute_reachability

__all__ = ["ImpactCalculator", "compute_impact", "compute_reachability"]
