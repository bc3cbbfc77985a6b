import numpy as np
import pandas as pd
import pytest

from epigrowth.sample import TimeSeriesSample, split_sample
from epigrowth.tables import OBSERVED, OUT_OF_SAMPLE, fitted_values

THETA = {"K": 5000.0, "tau": 30.0, "r": 0.2}


def _sample(n=41, dates=True):
    t = np.arange(n)
    y = 5000.0 * np.exp(-np.exp(-0.2 * (t - 30.0)))
    idx = pd.date_range("2020-03-01", periods=n) if dates else None
    return TimeSeriesSample(t, y, dates=idx, name="X")


def test_in_sample_only():
    df = fitted_values("gompertz", THETA, _sample(dates=False))
    assert list(df.columns) == ["t", "observed", "fitted", "category"]
    assert len(df) == 41
    assert set(df["category"]) == {OBSERVED}
    np.testing.assert_allclose(df["fitted"], df["observed"])


def test_out_of_sample_and_horizon():
    first, second = split_sample(_sample(), 6)
    df = fitted_values("gompertz", THETA, first, out_of_sample=second, horizon=10)
    assert list(df.columns) == ["t", "date", "observed", "fitted", "category"]
    assert len(df) == 51
    assert (df["category"] == OBSERVED).sum() == 35
    assert (df["category"] == OUT_OF_SAMPLE).sum() == 16
    # observed values end with the held-out data
    assert df["observed"].iloc[:41].notna().all()
    assert df["observed"].iloc[41:].isna().all()
    assert df["date"].iloc[-1] == pd.Timestamp("2020-03-01") + pd.Timedelta(days=50)


def test_fitted_follows_the_model():
    df = fitted_values("logistic", {"K": 100.0, "tau": 20.0, "r": 0.5}, _sample(dates=False), horizon=5)
    row = df[df["t"] == 20].iloc[0]
    assert row["fitted"] == pytest.approx(50.0)
