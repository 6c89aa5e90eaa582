from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Optional, Union

import numpy as np

from common_quantum import (
    A0,
    HARMONIC_CONVENTIONS,
    ORBITALS,
    VIBRATION_AMPLITUDE,
    Orbital,
    is_supported,
    probability_density,
    radial_function,
    spherical_harmonic,
    spherical_to_cartesian,
    vibration_factor,
)

logger = logging.getLogger(__name__)

NUM_POINTS = 10000
R_MAX = 8.0 * A0
MAX_ATTEMPTS = 5_000_000
BATCH_SIZE = 65536
# Used when no fixed bound is set and the orbital has zero density everywhere
FALLBACK_MAX_PROB = 1.0

RandomSource = Union[np.random.Generator, int, None]


class SampleStatus(enum.Enum):
    SAMPLING = "sampling"
    ACCEPTED = "accepted"
    DONE = "done"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class SamplerConfig:
    num_points: int = NUM_POINTS
    r_max: float = R_MAX
    # Acceptance bound M. None derives it per orbital from a grid search; a fixed value
    # below the true density maximum under-samples the densest region.
    max_prob: Optional[float] = None
    max_attempts: int = MAX_ATTEMPTS
    batch_size: int = BATCH_SIZE
    convention: str = "real"

    def validate(self) -> None:
        if self.num_points < 0:
            raise ValueError(f"num_points must be >= 0, got {self.num_points}")
        if self.r_max <= 0.0:
            raise ValueError(f"r_max must be positive, got {self.r_max}")
        if self.max_prob is not None and self.max_prob <= 0.0:
            raise ValueError(f"max_prob must be positive, got {self.max_prob}")
        if self.max_attempts <= 0:
            raise ValueError(f"max_attempts must be positive, got {self.max_attempts}")
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.convention not in HARMONIC_CONVENTIONS:
            raise ValueError(f"unknown harmonic convention: {self.convention}")

    def bound_for(self, orbital: Orbital) -> float:
        if self.max_prob is not None:
            return self.max_prob
        bound = _grid_bound(orbital, self.r_max, self.convention)
        return bound if bound > 0.0 else FALLBACK_MAX_PROB


@dataclass
class SampleResult:
    points: np.ndarray
    status: SampleStatus
    attempts: int
    target: int

    @property
    def accepted(self) -> int:
        return len(self.points)

    @property
    def complete(self) -> bool:
        return self.status is SampleStatus.DONE

    @property
    def acceptance_rate(self) -> float:
        return self.accepted / self.attempts if self.attempts else 0.0


@dataclass(frozen=True)
class Variant:
    name: str
    orbitals: tuple[Orbital, ...]
    r_max: float
    convention: str

    def config(self, **overrides) -> SamplerConfig:
        return replace(SamplerConfig(r_max=self.r_max, convention=self.convention), **overrides)


VARIANTS: dict[str, Variant] = {
    "multi": Variant("multi", ORBITALS, 8.0 * A0, "real"),
    "single": Variant("single", ORBITALS[:1], 5.0 * A0, "complex"),
}


def as_generator(rng: RandomSource = None) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def generate_points(
    orbital: Orbital,
    time: float,
    config: Optional[SamplerConfig] = None,
    rng: RandomSource = None,
) -> SampleResult:
    """Rejection-sample ``config.num_points`` positions for ``orbital`` at ``time``.

    Candidates are drawn uniformly in (r, theta, phi) over the sampling
    region and accepted when ``u < density / M``, with M from
    ``config.bound_for(orbital)``. Candidates are
    evaluated in batches but accepted in draw order, and ``attempts``
    counts only the candidates up to the last accepted one.

    The loop ends ``DONE`` with exactly ``num_points`` points, or
    ``DEGRADED`` with a partial set once ``max_attempts`` candidates have
    been drawn. ``rng`` may be a ``numpy.random.Generator`` or a seed;
    ``None`` uses a fresh unseeded generator.
    """
    config = config or SamplerConfig()
    config.validate()
    gen = as_generator(rng)
    bound = config.bound_for(orbital)

    if not is_supported(orbital):
        logger.warning("orbital %s (n=%d l=%d m=%d) has zero density everywhere", orbital.name, orbital.n, orbital.l, orbital.m)

    chunks: list[np.ndarray] = []
    accepted = 0
    attempts = 0
    status = SampleStatus.SAMPLING

    while True:
        if accepted >= config.num_points:
            status = SampleStatus.DONE
            break
        if attempts >= config.max_attempts:
            status = SampleStatus.DEGRADED
            break

        size = min(config.batch_size, config.max_attempts - attempts)
        r = gen.uniform(0.0, config.r_max, size)
        theta = gen.uniform(0.0, math.pi, size)
        phi = gen.uniform(0.0, 2.0 * math.pi, size)
        u = gen.random(size)

        density = probability_density(orbital, r, theta, phi, time, config.convention)
        keep = np.flatnonzero(u < density / bound)

        need = config.num_points - accepted
        if keep.size >= need:
            keep = keep[:need]
            attempts += int(keep[-1]) + 1
        else:
            attempts += size

        if keep.size:
            x, y, z = spherical_to_cartesian(r[keep], theta[keep], phi[keep])
            chunks.append(np.column_stack((x, y, z)))
            accepted += keep.size
            status = SampleStatus.ACCEPTED

    points = np.concatenate(chunks) if chunks else np.empty((0, 3))
    result = SampleResult(points, status, attempts, config.num_points)

    if status is SampleStatus.DEGRADED:
        logger.warning(
            "sampling %s stopped after %d attempts with %d/%d points",
            orbital.name,
            attempts,
            result.accepted,
            config.num_points,
        )
    else:
        logger.debug("sampled %d points for %s in %d attempts", result.accepted, orbital.name, attempts)
    return result


def estimate_acceptance_bound(
    orbital: Orbital,
    r_max: float,
    time: Optional[float] = None,
    convention: str = "real",
    safety: float = 1.05,
    samples: tuple[int, int, int] = (400, 91, 181),
) -> float:
    """Grid-search upper bound on the density over the sampling region.

    The density factors into R(r)^2 * Y(theta, phi)^2 * vibration, so the
    radial and angular peaks are searched separately. Without ``time`` the
    peak of the vibration term is used, which keeps the bound valid at any
    time.
    """
    if not is_supported(orbital):
        return 0.0

    nr, nt, np_ = samples
    r = np.linspace(0.0, r_max, nr)
    theta = np.linspace(0.0, math.pi, nt)
    phi = np.linspace(0.0, 2.0 * math.pi, np_)
    tt, pp = np.meshgrid(theta, phi, indexing="ij")

    radial_peak = float(np.max(radial_function(orbital.n, r) ** 2))
    angular_peak = float(np.max(spherical_harmonic(orbital.l, orbital.m, tt, pp, convention) ** 2))
    vibration = 1.0 + VIBRATION_AMPLITUDE if time is None else vibration_factor(time)
    return safety * radial_peak * angular_peak * vibration


@lru_cache(maxsize=128)
def _grid_bound(orbital: Orbital, r_max: float, convention: str) -> float:
    return estimate_acceptance_bound(orbital, r_max, convention=convention)
