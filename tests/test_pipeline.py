import logging

import numpy as np
import pandas as pd
import pytest

from epigrowth.config import PipelineConfig
from epigrowth.errors import InputContractError
from epigrowth.pipeline import (FitTask, TaskFailure, TaskResult, default_eval_times,
                                run_batch, run_task)
from epigrowth.sample import TimeSeriesSample, split_sample
from epigrowth.serial_interval import SerialIntervalKernel


@pytest.fixture
def config():
    return PipelineConfig(serial_interval=SerialIntervalKernel(4.82, 1.56, window=17),
                          horizon=10, n_draws=50)


@pytest.fixture
def noisy_sample(noisy_gompertz_sample):
    s = noisy_gompertz_sample
    return TimeSeriesSample(s.t, s.y, dates=pd.date_range("2020-03-01", periods=len(s)), name="Testland")


def test_single_task(noisy_sample, config):
    first, second = split_sample(noisy_sample, 7)
    result = run_task(FitTask("Testland", "gompertz", first, out_of_sample=second), config)
    assert isinstance(result, TaskResult)
    assert result.fit.theta["K"] == pytest.approx(5000.0, rel=0.05)
    assert result.gof_out is not None and result.gof_out.n == 7
    assert result.moments.get("peak").observed
    assert len(result.fitted) == len(noisy_sample) + 10
    # R_t from t0 + h to the end of the projection
    assert [est.t for est in result.reproduction] == list(np.arange(17.0, 71.0))
    assert all(np.isfinite(est.mean) for est in result.reproduction)


def test_failures_do_not_stop_the_batch(noisy_sample, config, caplog):
    short = TimeSeriesSample([0, 1, 2], [1.0, 2.0, 4.0], name="Tiny")
    tasks = [FitTask("Testland", "gompertz", noisy_sample),
             FitTask("Tiny", "richards", short),
             FitTask("Testland", "logistic", noisy_sample)]
    with caplog.at_level(logging.WARNING, logger="epigrowth.pipeline"):
        batch = run_batch(tasks, config)
    assert [r.kind.value for r in batch.results] == ["gompertz", "logistic"]
    failure, = batch.failures
    assert failure == TaskFailure("Tiny", "richards", "setup", "InsufficientDataError", failure.message)
    assert "Tiny/richards failed at setup" in caplog.text


def test_exponential_task_has_no_key_moments(noisy_sample, config):
    early = TimeSeriesSample(noisy_sample.t[:25], noisy_sample.y[:25] + 1.0, name="early")
    result = run_task(FitTask("Testland", "exponential", early), config)
    assert isinstance(result, TaskResult)
    assert result.moments is None


def test_tables(noisy_sample, config):
    batch = run_batch([FitTask("Testland", "gompertz", noisy_sample),
                       FitTask("Tiny", "logistic", TimeSeriesSample([0, 1], [1.0, 2.0]))], config)
    tables = batch.tables()
    assert set(tables) == {"parameters", "goodness_of_fit", "fitted_values", "key_moments",
                           "reproduction", "failures"}
    assert list(tables["parameters"]["parameter"]) == ["K", "tau", "r"]
    assert tables["goodness_of_fit"]["window"].tolist() == ["in_sample"]
    assert len(tables["key_moments"]) == 4
    assert tables["key_moments"]["date"].iloc[1] == pd.Timestamp("2020-03-01") + pd.Timedelta(
        days=tables["key_moments"]["time"].iloc[1])
    assert len(tables["reproduction"]) == 61 + 10 - 17
    assert tables["failures"]["country"].tolist() == ["Tiny"]


def test_explicit_eval_times(noisy_sample):
    config = PipelineConfig(serial_interval=SerialIntervalKernel(4.82, 1.56, window=17),
                            r_eval_times=(20.0, 40.0), n_draws=20)
    result = run_task(FitTask("Testland", "gompertz", noisy_sample), config)
    assert [est.t for est in result.reproduction] == [20.0, 40.0]


def test_eval_times_before_history_fail_the_task(noisy_sample):
    config = PipelineConfig(serial_interval=SerialIntervalKernel(4.82, 1.56, window=17),
                            r_eval_times=(5.0,), n_draws=20)
    failure = run_task(FitTask("Testland", "gompertz", noisy_sample), config)
    assert isinstance(failure, TaskFailure)
    assert failure.stage == "reproduction_number"
    assert failure.error_type == "HistoryWindowError"


def test_process_pool_matches_serial(noisy_sample, config):
    tasks = [FitTask("Testland", kind, noisy_sample) for kind in ("gompertz", "logistic", "richards")]
    serial = run_batch(tasks, config)
    pooled = run_batch(tasks, PipelineConfig(serial_interval=config.serial_interval, horizon=10,
                                             n_draws=50, n_workers=2))
    assert [r.kind for r in pooled.results] == [r.kind for r in serial.results]
    for a, b in zip(serial.results, pooled.results):
        assert a.fit.estimates == b.fit.estimates
        assert a.reproduction == b.reproduction


def test_default_eval_times(noisy_sample, config):
    times = default_eval_times(noisy_sample, config)
    assert times[0] == 17.0 and times[-1] == 70.0


def test_task_seed_is_stable(config):
    assert config.task_seed("France", "gompertz") == config.task_seed("France", "gompertz")
    assert config.task_seed("France", "gompertz") != config.task_seed("Italy", "gompertz")


@pytest.mark.parametrize("kwargs", [{"grid_step": 0}, {"horizon": -1}, {"n_draws": 1}, {"n_workers": 0}])
def test_invalid_config(kwargs):
    with pytest.raises(InputContractError):
        PipelineConfig(**kwargs)


@pytest.mark.parametrize("kind", ["gompertz", "exponential", "generalized_exponential",
                                  "double_logistic"])
def test_all_zero_series_fails_alone(kind, noisy_sample, config):
    zeros = TimeSeriesSample(np.arange(40), np.zeros(40), name="Zeroland")
    batch = run_batch([FitTask("Zeroland", kind, zeros),
                       FitTask("Testland", "gompertz", noisy_sample)], config)
    assert [r.country for r in batch.results] == ["Testland"]
    failure, = batch.failures
    assert (failure.country, failure.stage, failure.error_type) == (
        "Zeroland", "setup", "InsufficientDataError")


def test_short_holdout_keeps_the_fit(noisy_sample, config, caplog):
    first, second = split_sample(noisy_sample, 3)
    with caplog.at_level(logging.WARNING, logger="epigrowth.pipeline"):
        result = run_task(FitTask("Testland", "gompertz", first, out_of_sample=second), config)
    assert isinstance(result, TaskResult)
    assert result.gof_out is None
    assert result.moments.get("peak").observed
    assert result.reproduction
    assert "no out-of-sample goodness of fit" in caplog.text
    goodness = run_batch([FitTask("Testland", "gompertz", first, out_of_sample=second)],
                         config).tables()["goodness_of_fit"]
    assert goodness["window"].tolist() == ["in_sample"]
