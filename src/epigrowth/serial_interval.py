"""
===========================================================
serial_interval.py
Author: Veronica Scerra
Last Updated: 2026-03-18
===========================================================

Description:
    Discrete serial-interval kernel omega(s), s = 1..h, for the
    renewal equation.

    The serial interval is Gamma(shape, scale). It is discretised
    on whole days as
        omega(s) = F(s) - F(s-1),   s = 1..h
    and renormalised to sum to one over the window, where
        h = ceil(F^-1(coverage)),   coverage = 0.99 by default.

Example Usage:
    kernel = SerialIntervalKernel.from_moments(mean=7.5, std=3.4)
    kernel.window, kernel.pmf

Notes:
    - The kernel is immutable and shared read-only by every R_t
      computation; build it once and pass it around.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional
import numpy as np
from scipy.stats import gamma

from .errors import DomainParameterError

# literature serial interval for COVID-19 (days)
MEAN_SERIAL_INTERVAL = 7.5
STD_SERIAL_INTERVAL = 3.4


@dataclass(frozen=True)
class SerialIntervalKernel:
    shape: float
    scale: float
    coverage: float = 0.99
    window: Optional[int] = None    # h; derived from coverage when None
    pmf: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not (self.shape > 0 and self.scale > 0):
            raise DomainParameterError(
                f"serial interval needs shape > 0 and scale > 0, got ({self.shape}, {self.scale})")
        if not 0 < self.coverage < 1:
            raise DomainParameterError("coverage must be in (0, 1)")
        dist = gamma(a=self.shape, scale=self.scale)
        h = self.window
        if h is None:
            h = int(np.ceil(dist.ppf(self.coverage)))
        if int(h) < 1:
            raise DomainParameterError(f"serial interval window must be >= 1, got {h}")
        h = int(h)

        cdf = dist.cdf(np.arange(0, h + 1, dtype=float))
        w = np.diff(cdf)
        total = float(w.sum())
        if total <= 0:
            raise DomainParameterError("serial interval has no mass inside the window")
        w = w / total
        w.setflags(write=False)
        object.__setattr__(self, "window", h)
        object.__setattr__(self, "pmf", w)

    @classmethod
    def from_moments(cls, mean: float = MEAN_SERIAL_INTERVAL, std: float = STD_SERIAL_INTERVAL,
                     **kwargs) -> "SerialIntervalKernel":
        """Gamma shape/scale matching a mean and standard deviation"""
        if mean <= 0 or std <= 0:
            raise DomainParameterError("mean and std of the serial interval must be > 0")
        shape = (mean / std) ** 2
        scale = std ** 2 / mean
        return cls(shape=shape, scale=scale, **kwargs)

    @property
    def lags(self) -> np.ndarray:
        """s = 1..h"""
        return np.arange(1, self.window + 1, dtype=float)

    @property
    def mean(self) -> float:
        return float(np.sum(self.lags * self.pmf))
