"""
===========================================================
pipeline.py
Author: Veronica Scerra
Last Updated: 2026-03-28
===========================================================

Description:
    Per-task pipeline and batch driver.

    One task = one (country, model) pair, run as
        fit -> goodness of fit -> key moments -> R_t Monte Carlo
    Tasks share nothing but the read-only configuration, so the batch
    driver farms them out to a process pool (or runs them in-process
    when n_workers == 1) and collects results once all are done.

    A task that hits an EpiGrowthError (or a linear-algebra failure)
    is turned into a TaskFailure record naming the stage; its siblings
    carry on. A holdout too short to score (n <= k) only leaves
    gof_out empty.

Example Usage:
    from epigrowth.pipeline import FitTask, run_batch
    tasks = [FitTask("France", "gompertz", sample)]
    batch = run_batch(tasks, PipelineConfig(horizon=30))
    tables = batch.tables()
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union
import numpy as np
import pandas as pd

from .config import PipelineConfig
from .errors import EpiGrowthError, InsufficientDataError
from .fitting.goodness import GoodnessOfFit, goodness_of_fit
from .fitting.least_squares import FitResult, fit_model
from .key_moments import KeyMoments, extract_key_moments
from .models import Bounds, ModelKind, default_bounds, get_model, initial_guess
from .monte_carlo import ReproductionEstimate, simulate_reproduction_number
from .params import Theta
from .sample import TimeSeriesSample
from .tables import build_tables, fitted_values

logger = logging.getLogger(__name__)


@dataclass
class FitTask:
    """
    One (country, model) unit of work.

    start / bounds default to initial_guess() / default_bounds();
    pass bounds={} to fit unconstrained.
    """
    country: str
    kind: Union[ModelKind, str]
    sample: TimeSeriesSample
    out_of_sample: Optional[TimeSeriesSample] = None
    start: Optional[Theta] = None
    bounds: Optional[Bounds] = None
    wave_boundary: Optional[float] = None

    def __post_init__(self):
        self.kind = ModelKind(self.kind)

    @property
    def key(self) -> Tuple[str, str]:
        return self.country, self.kind.value


@dataclass
class TaskResult:
    country: str
    kind: ModelKind
    sample: TimeSeriesSample
    fit: FitResult
    gof_in: GoodnessOfFit
    gof_out: Optional[GoodnessOfFit]
    fitted: pd.DataFrame
    moments: Optional[KeyMoments]
    reproduction: List[ReproductionEstimate] = field(default_factory=list)


@dataclass(frozen=True)
class TaskFailure:
    country: str
    model: str
    stage: str
    error_type: str
    message: str


@dataclass
class BatchResult:
    results: List[TaskResult]
    failures: List[TaskFailure]

    def tables(self) -> Dict[str, pd.DataFrame]:
        tables = build_tables(self.results)
        tables["failures"] = pd.DataFrame(
            [f.__dict__ for f in self.failures],
            columns=["country", "model", "stage", "error_type", "message"])
        return tables


def default_eval_times(sample: TimeSeriesSample, config: PipelineConfig,
                       out_of_sample: Optional[TimeSeriesSample] = None) -> np.ndarray:
    """Every day with a full serial-interval history, up to the end of the projection"""
    first = sample.t[0] + config.serial_interval.window
    last = sample.t[-1] if out_of_sample is None else out_of_sample.t[-1]
    return np.arange(first, last + config.horizon + 1, dtype=float)


def run_task(task: FitTask, config: PipelineConfig) -> Union[TaskResult, TaskFailure]:
    """Run the full pipeline for one task; errors become a TaskFailure"""
    model = get_model(task.kind)
    sample = task.sample
    stage = "setup"
    try:
        start = task.start if task.start is not None else initial_guess(
            model.kind, sample, boundary=task.wave_boundary)
        bounds = task.bounds if task.bounds is not None else default_bounds(model.kind, sample)

        stage = "fit"
        fit = fit_model(model.kind, sample, start, bounds=bounds, max_iter=config.max_iter(model),
                        ftol=config.ftol, xtol=config.xtol, gtol=config.gtol)
        theta = fit.theta

        stage = "goodness_of_fit"
        gof_in = goodness_of_fit(model.kind, theta, sample)
        gof_out = None
        if task.out_of_sample is not None:
            try:
                gof_out = goodness_of_fit(model.kind, theta, task.out_of_sample)
            except InsufficientDataError as err:
                # a short holdout only loses its own row
                logger.warning("task %s/%s: no out-of-sample goodness of fit: %s",
                               task.country, model.name, err)
        fitted = fitted_values(model.kind, theta, sample, task.out_of_sample, config.horizon)

        stage = "key_moments"
        moments = None
        t_end = float(fitted["t"].iloc[-1])
        if model.tau_names:
            moments = extract_key_moments(model.kind, theta, float(sample.t[0]), t_end,
                                          step=config.grid_step)

        stage = "reproduction_number"
        if config.r_eval_times is not None:
            times = np.asarray(config.r_eval_times, dtype=float)
        else:
            times = default_eval_times(sample, config, task.out_of_sample)
        reproduction = []
        if times.size:
            reproduction = simulate_reproduction_number(
                fit, times, config.serial_interval, n_draws=config.n_draws,
                seed=config.task_seed(*task.key), t_start=float(sample.t[0]))
    except (EpiGrowthError, np.linalg.LinAlgError) as err:
        logger.warning("task %s/%s failed at %s: %s", task.country, model.name, stage, err)
        return TaskFailure(task.country, model.name, stage, type(err).__name__, str(err))

    return TaskResult(
        country=task.country,
        kind=model.kind,
        sample=sample,
        fit=fit,
        gof_in=gof_in,
        gof_out=gof_out,
        fitted=fitted,
        moments=moments,
        reproduction=reproduction,
    )


def run_batch(tasks: Sequence[FitTask], config: Optional[PipelineConfig] = None) -> BatchResult:
    """
    Run independent tasks, in-process or on a process pool.

    Results and failures come back in task order regardless of the
    order in which workers finish.
    """
    config = config or PipelineConfig()
    tasks = list(tasks)
    outcomes: List[Optional[Union[TaskResult, TaskFailure]]] = [None] * len(tasks)
    logger.info("running %d tasks with %d worker(s)", len(tasks), config.n_workers)

    if config.n_workers == 1:
        for i, task in enumerate(tasks):
            outcomes[i] = run_task(task, config)
    else:
        with ProcessPoolExecutor(max_workers=config.n_workers) as executor:
            future_to_index = {executor.submit(run_task, task, config): i
                               for i, task in enumerate(tasks)}
            for future in as_completed(future_to_index):
                i = future_to_index[future]
                outcomes[i] = future.result()
                logger.info("task %s/%s done", *tasks[i].key)

    results = [o for o in outcomes if isinstance(o, TaskResult)]
    failures = [o for o in outcomes if isinstance(o, TaskFailure)]
    logger.info("%d tasks succeeded, %d failed", len(results), len(failures))
    return BatchResult(results=results, failures=failures)
