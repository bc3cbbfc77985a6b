"""
===========================================================
models.py
Author: Veronica Scerra
Last Updated: 2026-03-10
===========================================================

Description:
    The catalogue of growth models the pipeline can fit.

    ModelKind is the tagged variant; get_model() returns the
    GrowthModel record for a kind, bundling
        - the parameter record (exact, ordered name set)
        - C(theta, t), c(theta, t), c'(theta, t)
        - the names of the inflection-time parameters (one per wave)
    so downstream code never has to switch on the kind itself.

    initial_guess() and default_bounds() give data-driven starting
    values and box constraints for every kind.

Example Usage:
    from epigrowth.models import ModelKind, get_model
    model = get_model(ModelKind.GOMPERTZ)
    model.curve({"K": 5000, "tau": 30, "r": 0.2}, t)
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Callable, Dict, Mapping, Optional, Tuple, Type, Union
import numpy as np

from . import double_wave, exponential, sigmoid
from .errors import InsufficientDataError
from .params import ParamSet, Theta
from .sample import TimeSeriesSample

Bounds = Mapping[str, Tuple[float, float]]
ModelFn = Callable[[Theta, np.ndarray], np.ndarray]


class ModelKind(str, Enum):
    """Growth-model families"""
    EXPONENTIAL = "exponential"
    GENERALIZED_EXPONENTIAL = "generalized_exponential"
    LOGISTIC = "logistic"
    GOMPERTZ = "gompertz"
    RICHARDS = "richards"
    DOUBLE_LOGISTIC = "double_logistic"
    DOUBLE_GOMPERTZ = "double_gompertz"
    DOUBLE_RICHARDS = "double_richards"


@dataclass(frozen=True)
class GrowthModel:
    kind: ModelKind
    params: Type[ParamSet]
    curve: ModelFn
    first_derivative: ModelFn
    second_derivative: ModelFn
    tau_names: Tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def param_names(self) -> Tuple[str, ...]:
        return self.params.names()

    @property
    def n_waves(self) -> int:
        return max(len(self.tau_names), 1)

    @property
    def is_double(self) -> bool:
        return len(self.tau_names) == 2

    @property
    def family(self) -> Optional[str]:
        """Single-wave family behind a double-wave model"""
        if not self.is_double:
            return None
        return self.kind.value.split("_", 1)[1]

    def validate(self, theta: Theta) -> ParamSet:
        return self.params.from_theta(theta)

    def components(self, theta: Theta, t) -> Tuple[np.ndarray, np.ndarray]:
        if not self.is_double:
            raise ValueError(f"{self.name} is a single-wave model")
        return double_wave.components(self.family, theta, t)


def _double(family: str, params: Type[ParamSet], kind: ModelKind) -> GrowthModel:
    return GrowthModel(
        kind=kind,
        params=params,
        curve=partial(double_wave.double_curve, family),
        first_derivative=partial(double_wave.double_first_derivative, family),
        second_derivative=partial(double_wave.double_second_derivative, family),
        tau_names=("tau1", "tau2"),
    )


_MODELS: Dict[ModelKind, GrowthModel] = {
    ModelKind.EXPONENTIAL: GrowthModel(
        ModelKind.EXPONENTIAL, exponential.ExponentialParams,
        exponential.exponential_curve,
        exponential.exponential_first_derivative,
        exponential.exponential_second_derivative),
    ModelKind.GENERALIZED_EXPONENTIAL: GrowthModel(
        ModelKind.GENERALIZED_EXPONENTIAL, exponential.GeneralizedExponentialParams,
        exponential.generalized_exponential_curve,
        exponential.generalized_exponential_first_derivative,
        exponential.generalized_exponential_second_derivative),
    ModelKind.LOGISTIC: GrowthModel(
        ModelKind.LOGISTIC, sigmoid.LogisticParams,
        sigmoid.logistic_curve, sigmoid.logistic_first_derivative,
        sigmoid.logistic_second_derivative, ("tau",)),
    ModelKind.GOMPERTZ: GrowthModel(
        ModelKind.GOMPERTZ, sigmoid.GompertzParams,
        sigmoid.gompertz_curve, sigmoid.gompertz_first_derivative,
        sigmoid.gompertz_second_derivative, ("tau",)),
    ModelKind.RICHARDS: GrowthModel(
        ModelKind.RICHARDS, sigmoid.RichardsParams,
        sigmoid.richards_curve, sigmoid.richards_first_derivative,
        sigmoid.richards_second_derivative, ("tau",)),
    ModelKind.DOUBLE_LOGISTIC: _double("logistic", double_wave.DoubleLogisticParams,
                                       ModelKind.DOUBLE_LOGISTIC),
    ModelKind.DOUBLE_GOMPERTZ: _double("gompertz", double_wave.DoubleGompertzParams,
                                       ModelKind.DOUBLE_GOMPERTZ),
    ModelKind.DOUBLE_RICHARDS: _double("richards", double_wave.DoubleRichardsParams,
                                       ModelKind.DOUBLE_RICHARDS),
}


def get_model(kind: Union[ModelKind, str]) -> GrowthModel:
    return _MODELS[ModelKind(kind)]


# ------------------ starting values ------------------

def _check_plateau(family: str, K: float, label: str) -> None:
    if not K > 0:
        raise InsufficientDataError(f"{family}: no growth to fit in the {label}")


def _sigmoid_guess(family: str, t: np.ndarray, y: np.ndarray, label: str = "sample") -> Dict[str, float]:
    """K from the level at the steepest day, tau at that day, r from the peak rate"""
    daily = np.diff(y, prepend=y[0])
    idx = int(np.argmax(daily))
    peak_rate = max(float(daily[idx]), 1e-8)
    level = float(y[idx])
    if family == "gompertz":
        K = max(np.e * level, 1.05 * float(y[-1]))
        _check_plateau(family, K, label)
        r = np.e * peak_rate / K
    else:
        # logistic / richards with delta = 1
        K = max(2.0 * level, 1.05 * float(y[-1]))
        _check_plateau(family, K, label)
        r = 4.0 * peak_rate / K
    guess = {"K": float(K), "tau": float(t[idx]), "r": float(r)}
    if family == "richards":
        guess["delta"] = 1.0
    return guess


def _wave_boundary(t: np.ndarray, y: np.ndarray) -> int:
    """Index of the quietest day between the two busiest halves of the series"""
    daily = np.diff(y, prepend=y[0])
    mid = len(t) // 2
    first_peak = int(np.argmax(daily[:mid]))
    second_peak = mid + int(np.argmax(daily[mid:]))
    if second_peak - first_peak < 2:
        return mid
    return first_peak + int(np.argmin(daily[first_peak:second_peak + 1]))


def initial_guess(kind: Union[ModelKind, str], sample: TimeSeriesSample,
                  boundary: Optional[float] = None) -> Dict[str, float]:
    """
    Data-driven starting theta for a model.

    Args:
        kind: model kind
        sample: the in-sample series
        boundary: for double-wave models, the day index where the
                  second wave starts; estimated from the daily
                  increments when omitted.

    Returns:
        dict {parameter name: starting value}
    """
    model = get_model(kind)
    t, y = sample.t, sample.y
    if len(sample) < len(model.param_names) + 1:
        raise InsufficientDataError(
            f"{model.name}: {len(sample)} observations for {len(model.param_names)} parameters")

    if model.kind == ModelKind.EXPONENTIAL:
        pos = y > 0
        if pos.sum() < 2:
            raise InsufficientDataError(
                f"{model.name}: needs at least two positive counts, got {int(pos.sum())}")
        slope, intercept = np.polyfit(t[pos], np.log(y[pos]), 1)
        return {"c0": float(np.exp(intercept)), "r": float(slope)}

    if model.kind == ModelKind.GENERALIZED_EXPONENTIAL:
        if not np.any(y > 0):
            raise InsufficientDataError(f"{model.name}: no growth to fit (all counts are zero)")
        alpha = 0.5
        # y^(1-alpha) is linear in t with slope (1-alpha) r
        slope, intercept = np.polyfit(t, y ** (1.0 - alpha), 1)
        return {"A": float(max(intercept, 1e-6)), "r": float(max(slope / (1.0 - alpha), 1e-6)),
                "alpha": alpha}

    if not model.is_double:
        return _sigmoid_guess(model.kind.value, t, y)

    family = model.family
    if boundary is None:
        cut = _wave_boundary(t, y)
    else:
        cut = int(np.searchsorted(t, boundary))
    cut = min(max(cut, 3), len(t) - 3)
    first = _sigmoid_guess(family, t[:cut], y[:cut], label="first wave")
    second = _sigmoid_guess(family, t[cut:], y[cut:] - y[cut - 1], label="second wave")
    guess = {"K1": min(first["K"], float(y[cut - 1]) * 1.05), "tau1": first["tau"], "r1": first["r"]}
    guess["K2"] = guess["K1"] + second["K"]
    guess["tau2"] = max(second["tau"], first["tau"] + 1.0)
    guess["r2"] = second["r"]
    if family == "richards":
        guess["delta1"] = first["delta"]
        guess["delta2"] = second["delta"]
    # keep names in declaration order
    return {name: guess[name] for name in model.param_names}


def default_bounds(kind: Union[ModelKind, str], sample: TimeSeriesSample) -> Dict[str, Tuple[float, float]]:
    """
    Box constraints that keep each model identifiable.

    Plateaus and rates are non-negative, inflection times stay within
    one sample length either side of the window, delta is kept away
    from zero. The exponential model is left unconstrained.
    """
    model = get_model(kind)
    t0, t1 = float(sample.t[0]), float(sample.t[-1])
    span = max(t1 - t0, 1.0)
    y_max = float(np.max(sample.y))
    inf = np.inf

    if model.kind == ModelKind.EXPONENTIAL:
        return {}
    if model.kind == ModelKind.GENERALIZED_EXPONENTIAL:
        return {"A": (0.0, inf), "r": (0.0, inf), "alpha": (0.0, 0.999)}

    bounds = {}
    for name in model.param_names:
        if name.startswith("K"):
            bounds[name] = (0.0, inf)
        elif name.startswith("tau"):
            bounds[name] = (t0 - span, t1 + 2.0 * span)
        elif name.startswith("r"):
            bounds[name] = (0.0, inf)
        elif name.startswith("delta"):
            bounds[name] = (1e-3, 50.0)
    if model.is_double:
        bounds["K1"] = (0.0, max(y_max, 1.0) * 1.5)
    return bounds
