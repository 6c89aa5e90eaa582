from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

A0 = 1.0
VIBRATION_FREQ = 0.1
VIBRATION_AMPLITUDE = 0.1

# (normalization of the l=1, |m|=1 terms, sign of the m=-1 term)
HARMONIC_CONVENTIONS: dict[str, Tuple[float, float]] = {
    "real": (math.sqrt(3.0 / (4.0 * math.pi)), -1.0),
    "complex": (math.sqrt(3.0 / (8.0 * math.pi)), 1.0),
}

Color = Tuple[float, float, float]


@dataclass(frozen=True)
class Orbital:
    n: int
    l: int
    m: int
    scale: float
    name: str
    color: Color


ORBITALS: tuple[Orbital, ...] = (
    Orbital(1, 0, 0, 2.0, "1s", (1.0, 0.0, 0.0)),
    Orbital(2, 1, 1, 2.0, "2px", (0.0, 1.0, 0.0)),
    Orbital(2, 1, -1, 2.0, "2py", (0.0, 0.5, 1.0)),
    Orbital(2, 1, 0, 2.0, "2pz", (1.0, 1.0, 0.0)),
)

_RADIAL_TERMS = {1, 2}
_ANGULAR_TERMS = {(0, 0), (1, 0), (1, 1), (1, -1)}


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def find_orbital(name: str) -> Orbital:
    for orbital in ORBITALS:
        if orbital.name == name:
            return orbital
    raise KeyError(f"unknown orbital: {name} (expected one of {', '.join(o.name for o in ORBITALS)})")


def is_supported(orbital: Orbital) -> bool:
    """True when the closed-form tables give a non-zero density for ``orbital``."""
    return orbital.n in _RADIAL_TERMS and (orbital.l, orbital.m) in _ANGULAR_TERMS


def spherical_to_cartesian(r, theta, phi):
    x = r * np.sin(theta) * np.cos(phi)
    y = r * np.sin(theta) * np.sin(phi)
    z = r * np.cos(theta)
    return x, y, z


def radial_function(n: int, r):
    if n == 1:
        return 2.0 * np.exp(-r / A0) / A0**1.5
    if n == 2:
        return (1.0 / (2.0 * math.sqrt(2.0))) * (1.0 - r / (2.0 * A0)) * np.exp(-r / (2.0 * A0)) / A0**1.5
    return np.zeros_like(r, dtype=float) if isinstance(r, np.ndarray) else 0.0


def spherical_harmonic(l: int, m: int, theta, phi, convention: str = "real"):
    """Real-valued simplification of Y_lm for the s and p terms.

    Unimplemented (l, m) pairs return zero so that the density collapses
    instead of failing.
    """
    try:
        norm, sign = HARMONIC_CONVENTIONS[convention]
    except KeyError:
        raise ValueError(f"unknown harmonic convention: {convention}") from None

    shape = np.broadcast(theta, phi).shape
    if l == 0 and m == 0:
        value = 0.5 * math.sqrt(1.0 / math.pi)
        return np.full(shape, value) if shape else value
    if l == 1 and m == 0:
        value = math.sqrt(3.0 / (4.0 * math.pi)) * np.cos(theta)
        return np.broadcast_to(value, shape).copy() if shape else value
    if l == 1 and m == 1:
        return -norm * np.sin(theta) * np.cos(phi)
    if l == 1 and m == -1:
        return sign * norm * np.sin(theta) * np.sin(phi)
    return np.zeros(shape) if shape else 0.0


def vibration_factor(time: float) -> float:
    return 1.0 + VIBRATION_AMPLITUDE * math.sin(VIBRATION_FREQ * time)


def probability_density(orbital: Orbital, r, theta, phi, time: float, convention: str = "real"):
    radial = radial_function(orbital.n, r)
    angular = spherical_harmonic(orbital.l, orbital.m, theta, phi, convention)
    psi = radial * angular
    return psi * psi * vibration_factor(time)


@dataclass
class Camera:
    radius: float = 10.0
    azimuth: float = 0.0
    elevation: float = math.pi / 2
    rotation_speed: float = 0.01
    orbit_speed: float = 0.01
    zoom_speed: float = 1.0
    dragging: bool = False
    last_x: float = 0.0
    last_y: float = 0.0

    def advance(self) -> None:
        self.azimuth = (self.azimuth + self.rotation_speed) % (2.0 * math.pi)

    def zoom(self, steps: float) -> None:
        self.radius = max(1.0, self.radius - steps * self.zoom_speed)

    def position(self) -> Tuple[float, float, float]:
        e = clamp(self.elevation, 0.01, math.pi - 0.01)
        x = self.radius * math.sin(e) * math.sin(self.azimuth)
        y = self.radius * math.cos(e)
        z = self.radius * math.sin(e) * math.cos(self.azimuth)
        return x, y, z
