import numpy as np
import pandas as pd
import pytest

from epigrowth.errors import DomainParameterError
from epigrowth.sir import SIRModel, sir_euler


def test_population_is_conserved():
    out = sir_euler(120, N=1e6, beta=0.3, gamma=0.1, I0=10)
    np.testing.assert_allclose(out["S"] + out["I"] + out["R"], 1e6, rtol=1e-12)
    assert np.all(np.diff(out["S"]) <= 0)
    assert np.all(np.diff(out["cumulative"]) >= 0)
    assert out["cumulative"][-1] == pytest.approx(1e6 - out["S"][-1])


def test_infections_never_exceed_susceptibles():
    out = sir_euler(30, N=1000, beta=50.0, gamma=0.1, I0=10, h=1.0)
    assert np.all(out["S"] >= 0)
    assert out["S"][-1] == 0


def test_cumulative_is_sigmoid():
    out = SIRModel(N=1e5, beta=0.4, gamma=0.2).simulate(200, I0=5)
    daily = np.diff(out["cumulative"].to_numpy())
    peak = int(np.argmax(daily))
    assert 0 < peak < len(daily) - 1
    assert daily[-1] < daily[peak] / 100


def test_model_summary():
    model = SIRModel(N=1e5, beta=0.3, gamma=0.1)
    assert model.R0 == pytest.approx(3.0)
    out = model.simulate(300, I0=1, start_date="2020-03-01")
    assert out["date"].iloc[0] == pd.Timestamp("2020-03-01")
    summary = SIRModel.summary(out)
    assert 0 < summary["peak_day"] < 300
    # final size for R0 = 3 solves z = 1 - exp(-3 z)
    assert summary["final_size"] == pytest.approx(0.94, abs=0.02)


@pytest.mark.parametrize("kwargs", [
    {"N": 0, "beta": 0.3, "gamma": 0.1},
    {"N": 100, "beta": -0.3, "gamma": 0.1},
    {"N": 100, "beta": 0.3, "gamma": 0.0},
])
def test_invalid_parameters(kwargs):
    with pytest.raises(DomainParameterError):
        SIRModel(**kwargs)


def test_invalid_initial_infected():
    with pytest.raises(DomainParameterError):
        SIRModel(N=100, beta=0.3, gamma=0.1).simulate(10, I0=200)
