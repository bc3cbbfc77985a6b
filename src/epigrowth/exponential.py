"""
===========================================================
exponential.py
Author: Veronica Scerra
Last Updated: 2026-03-04
===========================================================

Description:
    Early-phase growth curves used for reproduction-number work.

        dC/dt = r C^alpha

    - Exponential (alpha = 1):           C(t) = c0 exp(r t)
    - Generalized exponential (alpha<1): C(t) = ((1-alpha) r t + A)^(1/(1-alpha))

    alpha measures how far from exponential the early growth is
    (alpha = 0 is constant incidence, alpha -> 1 exponential).

Notes:
    - The generalized model's derivatives go through signed_power():
      |base|^p * sign(base). Fitted (A, r, alpha) combinations can make
      the base negative at early lags, and a plain real power would
      return NaN there. The curve itself keeps the plain power and
      raises FractionalPowerError on a negative base.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
from dataclasses import dataclass
import numpy as np

from .errors import DomainParameterError, FractionalPowerError
from .params import ParamSet, Theta, as_time, clipped_exp


@dataclass(frozen=True)
class ExponentialParams(ParamSet):
    c0: float       # cumulative count at t = 0
    r: float        # growth rate
    model_name = "exponential"


@dataclass(frozen=True)
class GeneralizedExponentialParams(ParamSet):
    A: float        # C(0) = A^(1/(1-alpha))
    r: float
    alpha: float    # deceleration of growth, alpha != 1
    model_name = "generalized_exponential"

    def __post_init__(self):
        if self.alpha == 1.0:
            raise DomainParameterError(
                "generalized_exponential: alpha = 1 is the exponential model")

    @property
    def exponent(self) -> float:
        return 1.0 / (1.0 - self.alpha)


def signed_power(base, exponent: float) -> np.ndarray:
    """sign(base) * |base|^exponent, real-valued for any base"""
    base = np.asarray(base, dtype=float)
    return np.sign(base) * np.abs(base) ** exponent


# ------------------ Exponential ------------------

def exponential_curve(theta: Theta, t) -> np.ndarray:
    p = ExponentialParams.from_theta(theta)
    return p.c0 * clipped_exp(p.r * as_time(t))


def exponential_first_derivative(theta: Theta, t) -> np.ndarray:
    p = ExponentialParams.from_theta(theta)
    return p.r * p.c0 * clipped_exp(p.r * as_time(t))


def exponential_second_derivative(theta: Theta, t) -> np.ndarray:
    p = ExponentialParams.from_theta(theta)
    return p.r ** 2 * p.c0 * clipped_exp(p.r * as_time(t))


# ------------------ Generalized exponential ------------------

def _base(p: GeneralizedExponentialParams, t) -> np.ndarray:
    return (1.0 - p.alpha) * p.r * as_time(t) + p.A


def generalized_exponential_curve(theta: Theta, t) -> np.ndarray:
    p = GeneralizedExponentialParams.from_theta(theta)
    base = _base(p, t)
    if np.any(base < 0) and not float(p.exponent).is_integer():
        raise FractionalPowerError(
            "generalized_exponential: (1-alpha) r t + A < 0 raised to "
            f"non-integer power {p.exponent:.4g}")
    return base ** p.exponent


def generalized_exponential_first_derivative(theta: Theta, t) -> np.ndarray:
    p = GeneralizedExponentialParams.from_theta(theta)
    # r C^alpha = r base^(alpha/(1-alpha))
    return p.r * signed_power(_base(p, t), p.alpha * p.exponent)


def generalized_exponential_second_derivative(theta: Theta, t) -> np.ndarray:
    p = GeneralizedExponentialParams.from_theta(theta)
    return p.alpha * p.r ** 2 * signed_power(_base(p, t), (2.0 * p.alpha - 1.0) * p.exponent)
