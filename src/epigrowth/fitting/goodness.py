"""
===========================================================
goodness.py
Author: Veronica Scerra
Last Updated: 2026-03-12
===========================================================

Description:
    Goodness-of-fit statistics for a fitted growth curve on a data
    split (in-sample or held-out).

    Gaussian log-likelihood of a least-squares fit:
        logL = -n/2 * (log(2 pi) + log(RSS/n) + 1)
    The residual variance counts as one estimated parameter, so
        AIC = 2 (k+1) - 2 logL
        BIC = log(n) (k+1) - 2 logL

Notes:
    - n <= k or RSS == 0 leaves logL undefined and raises
      InsufficientDataError.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Optional, Union
import numpy as np

from ..errors import InsufficientDataError
from ..models import ModelKind, get_model
from ..params import Theta
from ..sample import TimeSeriesSample


@dataclass(frozen=True)
class GoodnessOfFit:
    n: int
    k: int
    rss: float
    rmse: float
    log_likelihood: float
    aic: float
    bic: float

    def as_dict(self):
        return asdict(self)


def residuals(kind: Union[ModelKind, str], theta: Theta, sample: TimeSeriesSample) -> np.ndarray:
    """y_t - C(theta, t) over the sample"""
    return sample.y - get_model(kind).curve(theta, sample.t)


def rmse(resid: np.ndarray) -> float:
    resid = np.asarray(resid, dtype=float)
    if resid.size == 0:
        raise InsufficientDataError("RMSE of an empty sample")
    return float(np.sqrt(np.mean(resid ** 2)))


def gaussian_log_likelihood(resid: np.ndarray) -> float:
    n = resid.size
    rss = float(np.sum(resid ** 2))
    if rss <= 0:
        raise InsufficientDataError("residual sum of squares is zero; log-likelihood undefined")
    return -0.5 * n * (np.log(2.0 * np.pi) + np.log(rss / n) + 1.0)


def goodness_of_fit(
        kind: Union[ModelKind, str],
        theta: Theta,
        sample: TimeSeriesSample,
        n_params: Optional[int] = None,
) -> GoodnessOfFit:
    """
    RMSE, AIC and BIC of theta on a sample.

    Args:
        kind: model kind
        theta: fitted parameters
        sample: evaluation window (in-sample or out-of-sample)
        n_params: number of estimated parameters; defaults to len(theta)
    """
    resid = residuals(kind, theta, sample)
    n = int(resid.size)
    k = len(theta) if n_params is None else int(n_params)
    if n <= k:
        raise InsufficientDataError(f"goodness of fit needs n > k (n={n}, k={k})")
    ll = gaussian_log_likelihood(resid)
    df = k + 1
    return GoodnessOfFit(
        n=n,
        k=k,
        rss=float(np.sum(resid ** 2)),
        rmse=rmse(resid),
        log_likelihood=float(ll),
        aic=float(2.0 * df - 2.0 * ll),
        bic=float(np.log(n) * df - 2.0 * ll),
    )
