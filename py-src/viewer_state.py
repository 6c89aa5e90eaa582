from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from common_quantum import ORBITALS, Orbital
from orbital_sampler import RandomSource, SampleResult, SampleStatus, SamplerConfig, generate_points

logger = logging.getLogger(__name__)

REGENERATION_INTERVAL = 0.5


@dataclass
class ViewerState:
    orbitals: tuple[Orbital, ...] = ORBITALS
    config: SamplerConfig = field(default_factory=SamplerConfig)
    interval: float = REGENERATION_INTERVAL
    current: int = 0
    points: np.ndarray = field(default_factory=lambda: np.empty((0, 3)))
    last_generation_time: float = -100.0
    status: Optional[SampleStatus] = None
    frozen: bool = False

    def __post_init__(self) -> None:
        if not self.orbitals:
            raise ValueError("viewer needs at least one orbital")
        if self.interval < 0.0:
            raise ValueError(f"interval must be >= 0, got {self.interval}")
        if not 0 <= self.current < len(self.orbitals):
            raise ValueError(f"current must index one of {len(self.orbitals)} orbitals, got {self.current}")

    @property
    def orbital(self) -> Orbital:
        return self.orbitals[self.current]

    def select(self, index: int) -> bool:
        if not 0 <= index < len(self.orbitals):
            return False
        self.current = index
        self.frozen = False
        self.last_generation_time = -100.0
        logger.info("selected orbital %s", self.orbital.name)
        return True

    def due(self, now: float) -> bool:
        return not self.frozen and now - self.last_generation_time > self.interval

    def maybe_regenerate(self, now: float, rng: RandomSource = None) -> Optional[SampleResult]:
        if not self.due(now):
            return None
        result = generate_points(self.orbital, now, self.config, rng)
        self.points = result.points
        self.status = result.status
        self.last_generation_time = now
        return result

    def show(self, points: np.ndarray) -> None:
        """Display a fixed cloud; regeneration stays off until the next selection."""
        self.points = np.asarray(points, dtype=float).reshape(-1, 3)
        self.status = SampleStatus.DONE
        self.frozen = True

    def scaled_points(self) -> np.ndarray:
        return self.points * self.orbital.scale
