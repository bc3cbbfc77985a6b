"""
===========================================================
tables.py
Author: Veronica Scerra
Last Updated: 2026-03-26
===========================================================

Description:
    Tidy pandas tables handed to plotting / reporting:

        parameters       (country, model, parameter) -> estimate, std_error
        goodness_of_fit  (country, model, window)    -> n, k, rmse, aic, bic
        fitted_values    (country, model, t)         -> observed, fitted, category
        key_moments      (country, model, moment)    -> status, time, date, value
        reproduction     (country, model, t)         -> mean, std, point

    All builders take a list of TaskResult records and return one
    DataFrame each, rows in task order.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
from typing import Dict, Iterable, Optional, Union
import numpy as np
import pandas as pd

from .models import ModelKind, get_model
from .params import Theta
from .sample import TimeSeriesSample

OBSERVED = "observed"
OUT_OF_SAMPLE = "out-of-sample"


def fitted_values(
        kind: Union[ModelKind, str],
        theta: Theta,
        sample: TimeSeriesSample,
        out_of_sample: Optional[TimeSeriesSample] = None,
        horizon: int = 0,
) -> pd.DataFrame:
    """
    Observed and fitted cumulative counts from the first in-sample day
    to the last held-out day plus `horizon` projected days.

    Rows from the in-sample window are tagged "observed", everything
    after it "out-of-sample"; observed is NaN past the data.
    """
    last_obs = sample.t[-1] if out_of_sample is None else out_of_sample.t[-1]
    t = np.arange(sample.t[0], last_obs + horizon + 1, dtype=float)
    observed = pd.Series(np.nan, index=t)
    observed.loc[sample.t] = sample.y
    if out_of_sample is not None:
        observed.loc[out_of_sample.t] = out_of_sample.y

    df = pd.DataFrame({
        "t": t.astype(int),
        "observed": observed.to_numpy(),
        "fitted": get_model(kind).curve(theta, t),
        "category": np.where(t <= sample.t[-1], OBSERVED, OUT_OF_SAMPLE),
    })
    if sample.dates is not None:
        df.insert(1, "date", [sample.date_at(x) for x in t])
    return df


def _key(result) -> Dict[str, str]:
    return {"country": result.country, "model": result.kind.value}


def parameter_table(results: Iterable) -> pd.DataFrame:
    rows = []
    for res in results:
        se = res.fit.std_errors
        for name, value in res.fit.estimates:
            rows.append({**_key(res), "parameter": name, "estimate": value,
                         "std_error": se[name]})
    return pd.DataFrame(rows, columns=["country", "model", "parameter", "estimate", "std_error"])


def goodness_table(results: Iterable) -> pd.DataFrame:
    rows = []
    for res in results:
        for window, gof in (("in_sample", res.gof_in), ("out_of_sample", res.gof_out)):
            if gof is None:
                continue
            rows.append({**_key(res), "window": window, "converged": res.fit.converged,
                         **gof.as_dict()})
    columns = ["country", "model", "window", "converged", "n", "k", "rss", "rmse",
               "log_likelihood", "aic", "bic"]
    return pd.DataFrame(rows, columns=columns)


def fitted_table(results: Iterable) -> pd.DataFrame:
    frames = []
    for res in results:
        df = res.fitted.copy()
        df.insert(0, "model", res.kind.value)
        df.insert(0, "country", res.country)
        frames.append(df)
    if not frames:
        return pd.DataFrame(columns=["country", "model", "t", "observed", "fitted", "category"])
    return pd.concat(frames, ignore_index=True)


def key_moment_table(results: Iterable) -> pd.DataFrame:
    rows = []
    for res in results:
        if res.moments is None:
            continue
        for rec, moment in zip(res.moments.to_records(), res.moments.moments):
            date = res.sample.date_at(moment.time) if moment.observed else None
            rows.append({**_key(res), "moment": moment.label, **rec, "date": date})
        for wave, speed in enumerate(res.moments.relative_speed, start=1):
            rows.append({**_key(res), "moment": f"relative_speed_{wave}",
                         "name": "relative_speed", "wave": wave,
                         "status": "observed" if speed is not None else "not_observed",
                         "time": None, "value": speed, "date": None})
    columns = ["country", "model", "moment", "name", "wave", "status", "time", "date", "value"]
    return pd.DataFrame(rows, columns=columns)


def reproduction_table(results: Iterable) -> pd.DataFrame:
    rows = []
    for res in results:
        for est in res.reproduction:
            rows.append({**_key(res), **est.as_dict()})
    columns = ["country", "model", "t", "mean", "std", "point", "n_draws", "n_rejected"]
    return pd.DataFrame(rows, columns=columns)


def build_tables(results) -> Dict[str, pd.DataFrame]:
    results = list(results)
    return {
        "parameters": parameter_table(results),
        "goodness_of_fit": goodness_table(results),
        "fitted_values": fitted_table(results),
        "key_moments": key_moment_table(results),
        "reproduction": reproduction_table(results),
    }
