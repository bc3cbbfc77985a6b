"""
===========================================================
monte_carlo.py
Author: Veronica Scerra
Last Updated: 2026-03-20
===========================================================

Description:
    Parametric Monte Carlo propagation of fit uncertainty into R_t.

      1) Cholesky factor L of the fit's asymptotic covariance
      2) theta_j = theta_hat + L z_j,  z_j ~ N(0, I),  j = 1..n_draws
      3) R_t(theta_j) through the renewal equation
      4) mean and standard deviation across draws

Notes:
    - A covariance that is not finite or not positive definite raises
      CovarianceError; nothing is patched up.
    - Draws that land outside a model's domain (delta <= 0, zero
      renewal denominator, ...) are discarded and counted in
      n_rejected. If every draw is rejected, DegenerateRenewalError.
    - The normal approximation is poor when the fit rests on a box
      constraint; such fits trigger a BoundaryWarning.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
import warnings
from dataclasses import dataclass, asdict
from typing import List, Optional, Sequence
import numpy as np

from .errors import (BoundaryWarning, CovarianceError, DegenerateRenewalError,
                     DomainParameterError, InputContractError, NumericalDomainError)
from .fitting.least_squares import FitResult
from .reproduction import check_history, reproduction_numbers
from .serial_interval import SerialIntervalKernel

N_DRAWS = 1000


@dataclass(frozen=True)
class ReproductionEstimate:
    t: float
    mean: float
    std: float
    point: float        # R_t at theta_hat
    n_draws: int
    n_rejected: int

    def as_dict(self):
        return asdict(self)


def cholesky_factor(covariance: np.ndarray) -> np.ndarray:
    cov = np.asarray(covariance, dtype=float)
    if cov.ndim != 2 or cov.shape[0] != cov.shape[1]:
        raise CovarianceError(f"covariance must be square, got shape {cov.shape}")
    if not np.all(np.isfinite(cov)):
        raise CovarianceError("covariance has non-finite entries")
    if not np.allclose(cov, cov.T, rtol=1e-8, atol=1e-12 * max(np.abs(cov).max(), 1.0)):
        raise CovarianceError("covariance is not symmetric")
    try:
        return np.linalg.cholesky(cov)
    except np.linalg.LinAlgError as err:
        raise CovarianceError(f"covariance is not positive definite: {err}") from err


def draw_parameters(fit: FitResult, n_draws: int, rng: np.random.Generator) -> np.ndarray:
    """n_draws x k matrix of draws from N(theta_hat, Sigma)"""
    L = cholesky_factor(fit.covariance)
    z = rng.standard_normal((n_draws, L.shape[0]))
    return fit.vector[None, :] + z @ L.T


def simulate_reproduction_number(
        fit: FitResult,
        times: Sequence[float],
        kernel: SerialIntervalKernel,
        n_draws: int = N_DRAWS,
        seed: Optional[int] = None,
        t_start: float = 0.0,
) -> List[ReproductionEstimate]:
    """
    Monte Carlo mean and standard deviation of R_t at each time.

    Args:
        fit: fitted model with covariance
        times: evaluation times (each >= t_start + h)
        kernel: serial-interval kernel
        n_draws: number of parameter draws
        seed: seed for numpy's default_rng; fix it per task for
              reproducible bands

    Returns:
        one ReproductionEstimate per evaluation time
    """
    if n_draws < 2:
        raise InputContractError("n_draws must be >= 2")
    times = np.atleast_1d(np.asarray(times, dtype=float))
    check_history(times, kernel, t_start)
    if fit.active_bounds:
        warnings.warn(f"{fit.kind.value}: parameters {list(fit.active_bounds)} sit on their "
                      "bounds; the normal approximation of their uncertainty is unreliable",
                      BoundaryWarning, stacklevel=2)

    point = reproduction_numbers(fit.kind, fit.theta, times, kernel, t_start)
    rng = np.random.default_rng(seed)
    draws = draw_parameters(fit, n_draws, rng)
    names = fit.param_names

    values = []
    n_rejected = 0
    for row in draws:
        try:
            values.append(reproduction_numbers(fit.kind, dict(zip(names, row)), times, kernel, t_start))
        except (NumericalDomainError, DomainParameterError):
            n_rejected += 1
    if not values:
        raise DegenerateRenewalError(f"all {n_draws} parameter draws fell outside the model domain")

    values = np.vstack(values)
    mean = values.mean(axis=0)
    std = values.std(axis=0, ddof=1) if values.shape[0] > 1 else np.zeros_like(mean)
    return [
        ReproductionEstimate(t=float(t), mean=float(m), std=float(s), point=float(p),
                             n_draws=n_draws, n_rejected=n_rejected)
        for t, m, s, p in zip(times, mean, std, point)
    ]
