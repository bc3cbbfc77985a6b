import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from epigrowth.key_moments import extract_key_moments
from epigrowth.sample import split_sample
from epigrowth.tables import fitted_values
from epigrowth.utils.plotting import plot_decomposition, plot_fit, plot_reproduction


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


def test_plot_fit(gompertz_sample, gompertz_theta):
    first, second = split_sample(gompertz_sample, 5)
    fitted = fitted_values("gompertz", gompertz_theta, first, second, horizon=5)
    moments = extract_key_moments("gompertz", gompertz_theta, 0, 65)
    ax = plot_fit(fitted, moments, show=False, title="Synthetic")
    assert ax.get_title() == "Synthetic"
    assert len(ax.lines) == 3 + 3
    labels = [t.get_text() for t in ax.get_legend().get_texts()]
    assert labels == ["Observed", "Out-of-sample", "Fitted"]


def test_plot_decomposition():
    theta = {"K1": 1000.0, "tau1": 30.0, "r1": 0.2, "K2": 3000.0, "tau2": 90.0, "r2": 0.15}
    t = np.arange(0, 150, dtype=float)
    ax = plot_decomposition("double_logistic", theta, t, show=False)
    np.testing.assert_allclose(ax.lines[0].get_ydata()[-1], 4000.0, rtol=1e-3)


def test_plot_decomposition_needs_two_waves():
    with pytest.raises(ValueError):
        plot_decomposition("logistic", {"K": 1.0, "tau": 1.0, "r": 1.0}, np.arange(5.0), show=False)


def test_plot_reproduction():
    df = pd.DataFrame({"t": [17.0, 18.0, 19.0], "mean": [2.0, 1.5, 1.1], "std": [0.1, 0.1, 0.1]})
    fig, ax = plt.subplots()
    assert plot_reproduction(df, ax=ax, show=False) is ax
    np.testing.assert_array_equal(ax.lines[0].get_ydata(), [2.0, 1.5, 1.1])
