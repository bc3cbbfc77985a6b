"""
===========================================================
sigmoid.py
Author: Veronica Scerra
Last Updated: 2026-03-04
===========================================================

Description:
    Single-wave sigmoid growth curves for cumulative counts.

    All three are solutions of the generalised Richards ODE
        dC/dt = r C^alpha (1 - (C/K)^delta)
    with alpha = 1 and
        - Logistic:  delta = 1
        - Gompertz:  the delta -> 0 limit, dC/dt = r C ln(K/C)
        - Richards:  delta > 0 free
    parameterised by the final size K, the inflection time tau and
    the growth rate r (plus delta for Richards).

    For every model three closed forms are provided:
        <model>_curve(theta, t)               C(t)
        <model>_first_derivative(theta, t)    c(t)   = dC/dt
        <model>_second_derivative(theta, t)   c'(t)  = d2C/dt2
    No numerical differentiation anywhere; the closed forms stay
    accurate near the asymptotes where finite differences do not.

Notes:
    - theta is a mapping addressed by name; see params.ParamSet.
    - Inflection identities: Logistic C(tau) = K/2,
      Gompertz C(tau) = K/e, Richards C(tau) = K / (1+delta)^(1/delta).
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
from dataclasses import dataclass
import numpy as np

from .errors import DomainParameterError
from .params import ParamSet, Theta, as_time, clipped_exp


@dataclass(frozen=True)
class LogisticParams(ParamSet):
    K: float        # final epidemic size
    tau: float      # inflection time
    r: float        # growth rate
    model_name = "logistic"


@dataclass(frozen=True)
class GompertzParams(ParamSet):
    K: float
    tau: float
    r: float
    model_name = "gompertz"


@dataclass(frozen=True)
class RichardsParams(ParamSet):
    K: float
    tau: float
    r: float
    delta: float    # shape; delta = 1 gives the logistic
    model_name = "richards"

    def __post_init__(self):
        if not self.delta > 0:
            raise DomainParameterError(f"richards: delta must be > 0, got {self.delta}")


# ------------------ Logistic ------------------

def _logistic_terms(theta: Theta, t):
    p = LogisticParams.from_theta(theta)
    v = clipped_exp(-p.r * (as_time(t) - p.tau))
    return p, v


def logistic_curve(theta: Theta, t) -> np.ndarray:
    p, v = _logistic_terms(theta, t)
    return p.K / (1.0 + v)


def logistic_first_derivative(theta: Theta, t) -> np.ndarray:
    p, v = _logistic_terms(theta, t)
    return p.K * p.r * v / (1.0 + v) ** 2


def logistic_second_derivative(theta: Theta, t) -> np.ndarray:
    p, v = _logistic_terms(theta, t)
    c = p.K * p.r * v / (1.0 + v) ** 2
    return p.r * c * (v - 1.0) / (1.0 + v)


# ------------------ Gompertz ------------------

def _gompertz_terms(theta: Theta, t):
    p = GompertzParams.from_theta(theta)
    u = clipped_exp(-p.r * (as_time(t) - p.tau))
    return p, u


def gompertz_curve(theta: Theta, t) -> np.ndarray:
    p, u = _gompertz_terms(theta, t)
    return p.K * np.exp(-u)


def gompertz_first_derivative(theta: Theta, t) -> np.ndarray:
    p, u = _gompertz_terms(theta, t)
    return p.r * p.K * np.exp(-u) * u


def gompertz_second_derivative(theta: Theta, t) -> np.ndarray:
    p, u = _gompertz_terms(theta, t)
    return p.r ** 2 * p.K * np.exp(-u) * u * (u - 1.0)


# ------------------ Richards ------------------

def _richards_terms(theta: Theta, t):
    p = RichardsParams.from_theta(theta)
    v = clipped_exp(-p.r * p.delta * (as_time(t) - p.tau))
    # delta > 0 is checked on RichardsParams, so the base stays positive
    base = 1.0 + p.delta * v
    return p, v, base


def richards_curve(theta: Theta, t) -> np.ndarray:
    p, v, base = _richards_terms(theta, t)
    return p.K * base ** (-1.0 / p.delta)


def richards_first_derivative(theta: Theta, t) -> np.ndarray:
    p, v, base = _richards_terms(theta, t)
    C = p.K * base ** (-1.0 / p.delta)
    return p.r * p.delta * C * v / base


def richards_second_derivative(theta: Theta, t) -> np.ndarray:
    p, v, base = _richards_terms(theta, t)
    C = p.K * base ** (-1.0 / p.delta)
    c = p.r * p.delta * C * v / base
    return p.r * p.delta * c * (v - 1.0) / base


def inflection_value(kind: str, theta: Theta) -> float:
    """Value of C at t = tau for the given sigmoid family"""
    if kind == "logistic":
        return LogisticParams.from_theta(theta).K / 2.0
    if kind == "gompertz":
        return GompertzParams.from_theta(theta).K / np.e
    if kind == "richards":
        p = RichardsParams.from_theta(theta)
        return p.K / (1.0 + p.delta) ** (1.0 / p.delta)
    raise ValueError(f"no inflection identity for '{kind}'")
