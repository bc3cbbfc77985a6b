"""
===========================================================
double_wave.py
Author: Veronica Scerra
Last Updated: 2026-03-06
===========================================================

Description:
    Two-wave growth curves built from two single-wave sigmoids.

        C(t) = C_1(K1, tau1, r1; t) + C_2(K2 - K1, tau2, r2; t)

    K1 is the intermediate plateau reached after the first wave and
    K2 the final size, so the second component only carries the
    K2 - K1 cases added by the second wave. Derivatives are sums of
    the component derivatives.

    components() returns the two pieces separately, which the
    diagnostic decomposition plot uses.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Tuple
import numpy as np

from . import sigmoid
from .params import ParamSet, Theta


@dataclass(frozen=True)
class DoubleLogisticParams(ParamSet):
    K1: float
    tau1: float
    r1: float
    K2: float
    tau2: float
    r2: float
    model_name = "double_logistic"


@dataclass(frozen=True)
class DoubleGompertzParams(ParamSet):
    K1: float
    tau1: float
    r1: float
    K2: float
    tau2: float
    r2: float
    model_name = "double_gompertz"


@dataclass(frozen=True)
class DoubleRichardsParams(ParamSet):
    K1: float
    tau1: float
    r1: float
    delta1: float
    K2: float
    tau2: float
    r2: float
    delta2: float
    model_name = "double_richards"


# family -> (params record, single-wave curve, first, second derivative)
_FAMILIES = {
    "logistic": (DoubleLogisticParams, sigmoid.logistic_curve,
                 sigmoid.logistic_first_derivative, sigmoid.logistic_second_derivative),
    "gompertz": (DoubleGompertzParams, sigmoid.gompertz_curve,
                 sigmoid.gompertz_first_derivative, sigmoid.gompertz_second_derivative),
    "richards": (DoubleRichardsParams, sigmoid.richards_curve,
                 sigmoid.richards_first_derivative, sigmoid.richards_second_derivative),
}


def split_theta(family: str, theta: Theta) -> Tuple[Dict[str, float], Dict[str, float]]:
    """Map a double-wave theta onto the two single-wave parameter sets"""
    params_cls = _FAMILIES[family][0]
    p = params_cls.from_theta(theta)
    first = {"K": p.K1, "tau": p.tau1, "r": p.r1}
    second = {"K": p.K2 - p.K1, "tau": p.tau2, "r": p.r2}
    if family == "richards":
        first["delta"] = p.delta1
        second["delta"] = p.delta2
    return first, second


def _sum_of(family: str, which: int, theta: Theta, t) -> np.ndarray:
    fn = _FAMILIES[family][which]
    first, second = split_theta(family, theta)
    return fn(first, t) + fn(second, t)


def components(family: str, theta: Theta, t) -> Tuple[np.ndarray, np.ndarray]:
    """First-wave and second-wave cumulative curves, evaluated separately"""
    curve = _FAMILIES[family][1]
    first, second = split_theta(family, theta)
    return curve(first, t), curve(second, t)


def double_curve(family: str, theta: Theta, t) -> np.ndarray:
    return _sum_of(family, 1, theta, t)


def double_first_derivative(family: str, theta: Theta, t) -> np.ndarray:
    return _sum_of(family, 2, theta, t)


def double_second_derivative(family: str, theta: Theta, t) -> np.ndarray:
    return _sum_of(family, 3, theta, t)
