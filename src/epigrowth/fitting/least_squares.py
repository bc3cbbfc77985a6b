"""
===========================================================
least_squares.py
Author: Veronica Scerra
Last Updated: 2026-03-12
===========================================================

Description:
    Bounded nonlinear least-squares fit of a growth curve to a
    cumulative-count sample, using scipy least_squares (trust-region
    reflective, the bounded member of the Levenberg-Marquardt family).

    The driver minimises sum_t (y_t - C(theta, t))^2 subject to
    optional per-parameter boxes and returns a FitResult carrying the
    point estimate, the asymptotic covariance
        Sigma = s^2 (J^T J)^-1,   s^2 = RSS / (n - k)
    the residuals, the number of function evaluations and the
    optimizer's convergence flag.

Example Usage:
    from epigrowth.fitting import fit_model
    fit = fit_model("gompertz", sample,
                    start={"K": 4000, "tau": 25, "r": 0.1},
                    bounds={"r": (0, 2)})
    fit.theta, fit.converged

Notes:
    - No automatic restart from other starting points; callers that
      want restarts loop over starts themselves.
    - Non-convergence is reported, never raised.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
import logging
import warnings
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple, Union
import numpy as np
from scipy.optimize import least_squares

from ..errors import (ConvergenceWarning, CovarianceWarning, DomainParameterError,
                      ParameterNameError)
from ..models import Bounds, GrowthModel, ModelKind, get_model
from ..params import Theta
from ..sample import TimeSeriesSample

logger = logging.getLogger(__name__)

MAX_ITER_SINGLE_WAVE = 100
MAX_ITER_DOUBLE_WAVE = 250


@dataclass(frozen=True)
class FitResult:
    """Outcome of one (model, sample) fit. Read-only."""
    kind: ModelKind
    estimates: Tuple[Tuple[str, float], ...]
    covariance: np.ndarray
    residuals: np.ndarray
    n_iterations: int
    converged: bool
    status: int
    message: str
    active_bounds: Tuple[str, ...] = ()

    @property
    def model(self) -> GrowthModel:
        return get_model(self.kind)

    @property
    def theta(self) -> Dict[str, float]:
        return dict(self.estimates)

    @property
    def param_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.estimates)

    @property
    def vector(self) -> np.ndarray:
        return np.array([value for _, value in self.estimates], dtype=float)

    @property
    def n_obs(self) -> int:
        return int(self.residuals.size)

    @property
    def rss(self) -> float:
        return float(np.sum(self.residuals ** 2))

    @property
    def std_errors(self) -> Dict[str, float]:
        se = np.sqrt(np.diag(self.covariance))
        return dict(zip(self.param_names, se.astype(float)))

    def predict(self, t) -> np.ndarray:
        return self.model.curve(self.theta, t)


def default_max_iter(model: GrowthModel) -> int:
    return MAX_ITER_DOUBLE_WAVE if model.is_double else MAX_ITER_SINGLE_WAVE


def _bounds_arrays(model: GrowthModel, bounds: Optional[Bounds]) -> Tuple[np.ndarray, np.ndarray]:
    names = model.param_names
    lb = np.full(len(names), -np.inf)
    ub = np.full(len(names), np.inf)
    if not bounds:
        return lb, ub
    extra = set(bounds) - set(names)
    if extra:
        raise ParameterNameError(model.name, extra=extra)
    for i, name in enumerate(names):
        if name not in bounds or bounds[name] is None:
            continue
        lo, hi = bounds[name]
        lo = -np.inf if lo is None else float(lo)
        hi = np.inf if hi is None else float(hi)
        if not lo < hi:
            raise DomainParameterError(f"{model.name}: bounds for '{name}' need lower < upper, got ({lo}, {hi})")
        lb[i], ub[i] = lo, hi
    return lb, ub


def asymptotic_covariance(jac: np.ndarray, residuals: np.ndarray) -> np.ndarray:
    """
    s^2 (J^T J)^-1 through an SVD of J.

    Singular values below eps * max(J.shape) * s_max are dropped; if
    that loses rank (or n <= k) the covariance is not estimable and an
    inf-filled matrix is returned with a CovarianceWarning.
    """
    n, k = jac.shape
    _, s, VT = np.linalg.svd(jac, full_matrices=False)
    threshold = np.finfo(float).eps * max(jac.shape) * (s[0] if s.size else 0.0)
    keep = s > threshold
    if n <= k or keep.sum() < k:
        warnings.warn("covariance of the parameters could not be estimated "
                      f"(n={n}, k={k}, rank={int(keep.sum())})", CovarianceWarning, stacklevel=3)
        return np.full((k, k), np.inf)
    s, VT = s[keep], VT[keep]
    jtj_inv = (VT.T / s ** 2) @ VT
    s2 = float(np.sum(residuals ** 2)) / (n - k)
    return jtj_inv * s2


def fit_model(
        kind: Union[ModelKind, str],
        sample: TimeSeriesSample,
        start: Theta,
        bounds: Optional[Bounds] = None,
        max_iter: Optional[int] = None,
        ftol: float = 1e-10,
        xtol: float = 1e-10,
        gtol: float = 1e-10,
) -> FitResult:
    """
    Fit one growth model to one sample.

    Args:
        kind: model kind (ModelKind or its string value)
        sample: in-sample series
        start: starting value for every parameter, by name
        bounds: optional {name: (lower, upper)}; missing names are unbounded
        max_iter: cap on function evaluations (100 single-wave, 250 double-wave)

    Returns:
        FitResult
    """
    model = get_model(kind)
    names = model.param_names
    model.params.check_names(start.keys())
    lb, ub = _bounds_arrays(model, bounds)
    x0 = np.array([float(start[name]) for name in names])
    outside = [name for name, x, lo, hi in zip(names, x0, lb, ub) if not lo <= x <= hi]
    if outside:
        raise DomainParameterError(f"{model.name}: start values outside bounds for {outside}")
    if max_iter is None:
        max_iter = default_max_iter(model)

    t, y = sample.t, sample.y

    def resid(x: np.ndarray) -> np.ndarray:
        return y - model.curve(dict(zip(names, x)), t)

    res = least_squares(resid, x0, bounds=(lb, ub), method="trf", x_scale="jac",
                        max_nfev=max_iter, ftol=ftol, xtol=xtol, gtol=gtol)

    converged = bool(res.status > 0)
    if not converged:
        warnings.warn(f"{model.name} fit on '{sample.name}' stopped after {res.nfev} "
                      f"evaluations: {res.message}", ConvergenceWarning, stacklevel=2)
    logger.debug("%s fit on '%s': status=%s nfev=%s cost=%.6g",
                 model.name, sample.name, res.status, res.nfev, res.cost)

    # trf stays strictly interior, so also flag estimates that sit on a finite bound
    at_bound = np.isclose(res.x, lb, rtol=1e-6, atol=1e-10) | np.isclose(res.x, ub, rtol=1e-6, atol=1e-10)
    active = tuple(name for name, flag, hit in zip(names, res.active_mask, at_bound) if flag != 0 or hit)
    residuals = np.asarray(res.fun, dtype=float)
    return FitResult(
        kind=model.kind,
        estimates=tuple((name, float(x)) for name, x in zip(names, res.x)),
        covariance=asymptotic_covariance(np.asarray(res.jac, dtype=float), residuals),
        residuals=residuals,
        n_iterations=int(res.nfev),
        converged=converged,
        status=int(res.status),
        message=str(res.message),
        active_bounds=active,
    )
