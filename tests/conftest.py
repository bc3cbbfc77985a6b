import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from epigrowth.sample import TimeSeriesSample
from epigrowth.sigmoid import gompertz_curve


@pytest.fixture
def gompertz_theta():
    return {"K": 5000.0, "tau": 30.0, "r": 0.2}


@pytest.fixture
def gompertz_sample(gompertz_theta):
    t = np.arange(0, 61)
    return TimeSeriesSample(t=t, y=gompertz_curve(gompertz_theta, t), name="synthetic")


@pytest.fixture
def noisy_gompertz_sample(gompertz_theta):
    rng = np.random.default_rng(7)
    t = np.arange(0, 61)
    y = gompertz_curve(gompertz_theta, t) + rng.normal(0, 10.0, t.size)
    return TimeSeriesSample(t=t, y=np.maximum(y, 0.0), name="noisy")
