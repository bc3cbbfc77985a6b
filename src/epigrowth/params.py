"""
===========================================================
params.py
Author: Veronica Scerra
Last Updated: 2026-03-02
===========================================================

Description:
    Named parameter records shared by every growth model.

    A fitted parameter vector travels through the pipeline as a plain
    mapping {name: value}. Each model family declares a small frozen
    dataclass listing its fields; ParamSet.from_theta() converts the
    mapping into that record and refuses anything whose key set is not
    an exact match, so a model can never silently read a parameter by
    position or pick up a stray one.

Example Usage:
    @dataclass(frozen=True)
    class LogisticParams(ParamSet):
        K: float
        tau: float
        r: float

    p = LogisticParams.from_theta({"K": 5000, "tau": 30, "r": 0.2})
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
from dataclasses import dataclass, fields, asdict
from typing import Dict, Mapping, Tuple
import numpy as np

from .errors import ParameterNameError

Theta = Mapping[str, float]


@dataclass(frozen=True)
class ParamSet:
    """Base class for per-model parameter records"""

    model_name = "model"

    @classmethod
    def names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def check_names(cls, keys) -> None:
        expected = set(cls.names())
        got = set(keys)
        if got != expected:
            raise ParameterNameError(cls.model_name, missing=expected - got, extra=got - expected)

    @classmethod
    def from_theta(cls, theta: Theta):
        cls.check_names(theta.keys())
        return cls(**{name: float(theta[name]) for name in cls.names()})

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


def as_time(t) -> np.ndarray:
    """Coerce scalars / sequences of time points to a float array"""
    return np.asarray(t, dtype=float)


def clipped_exp(x: np.ndarray) -> np.ndarray:
    # keep exp() finite far from the inflection point
    return np.exp(np.clip(x, -700.0, 700.0))
