"""
===========================================================
reproduction.py
Author: Veronica Scerra
Last Updated: 2026-03-18
===========================================================

Description:
    Instantaneous reproduction number from a fitted growth curve via
    the discrete renewal equation

        R_t = c(t) / sum_{s=1}^{h} c(t - s) omega(s)

    with c the model's first derivative (new cases per day) and
    omega the serial-interval kernel.

Example Usage:
    from epigrowth.reproduction import reproduction_number
    kernel = SerialIntervalKernel(shape=4.82, scale=1.56, window=17)
    R = reproduction_number("exponential", {"c0": 100, "r": 0.1}, 20, kernel)

Notes:
    - t_i - h must not precede the first day of the series; earlier
      times lack the history for the sum and are rejected, not padded.
    - A zero (or non-finite) denominator raises DegenerateRenewalError.
      That includes the no-growth case r = 0, where R_t would be 0/0.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
from typing import Sequence, Union
import numpy as np

from .errors import DegenerateRenewalError, HistoryWindowError
from .models import GrowthModel, ModelKind, get_model
from .params import Theta
from .serial_interval import SerialIntervalKernel


def _renewal(model: GrowthModel, theta: Theta, times: np.ndarray,
             kernel: SerialIntervalKernel) -> np.ndarray:
    # rows: evaluation times, columns: lags 1..h
    lagged = times[:, None] - kernel.lags[None, :]
    incidence_now = model.first_derivative(theta, times)
    incidence_past = model.first_derivative(theta, lagged.ravel()).reshape(lagged.shape)
    denom = incidence_past @ kernel.pmf
    bad = ~np.isfinite(denom) | (denom == 0) | ~np.isfinite(incidence_now)
    if np.any(bad):
        where = times[bad]
        raise DegenerateRenewalError(
            f"{model.name}: renewal denominator is zero or not finite at t={where.tolist()}")
    return incidence_now / denom


def check_history(times: np.ndarray, kernel: SerialIntervalKernel, t_start: float) -> None:
    early = times[times - kernel.window < t_start]
    if early.size:
        raise HistoryWindowError(
            f"R_t needs t_i >= t_start + h = {t_start + kernel.window:g}; got {early.tolist()}")


def reproduction_number(
        kind: Union[ModelKind, str],
        theta: Theta,
        t_i: float,
        kernel: SerialIntervalKernel,
        t_start: float = 0.0,
) -> float:
    """R_t at a single evaluation time"""
    return float(reproduction_numbers(kind, theta, [t_i], kernel, t_start)[0])


def reproduction_numbers(
        kind: Union[ModelKind, str],
        theta: Theta,
        times: Sequence[float],
        kernel: SerialIntervalKernel,
        t_start: float = 0.0,
) -> np.ndarray:
    """R_t at several evaluation times (one renewal sum each)"""
    model = get_model(kind)
    model.validate(theta)
    times = np.atleast_1d(np.asarray(times, dtype=float))
    check_history(times, kernel, t_start)
    return _renewal(model, theta, times, kernel)
