"""
===============================================================================
config.py
Author: Veronica Scerra
Last Updated: 2026-03-24
===============================================================================
Pipeline configuration

One immutable object holding every setting the fitting pipeline needs:
the serial-interval kernel, optimizer limits and tolerances, the
key-moment grid, the prediction horizon and the Monte Carlo settings.
It is built once and passed explicitly to each component.

References:
    - Serial interval 7.5 +/- 3.4 days (Li et al. 2020, NEJM)
--------------------------------------------------------------------------------
License: MIT
================================================================================
"""
from __future__ import annotations
import zlib
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .errors import InputContractError
from .fitting.least_squares import MAX_ITER_DOUBLE_WAVE, MAX_ITER_SINGLE_WAVE
from .models import GrowthModel
from .monte_carlo import N_DRAWS
from .serial_interval import SerialIntervalKernel


@dataclass(frozen=True)
class PipelineConfig:
    """
    Settings for one batch run.

    All times are in days.
    """

    # ==================== Renewal equation =======================================
    serial_interval: SerialIntervalKernel = field(
        default_factory=SerialIntervalKernel.from_moments)
    r_eval_times: Optional[Tuple[float, ...]] = None   # None: every day with full history

    # ==================== Optimizer ===============================================
    max_iter_single: int = MAX_ITER_SINGLE_WAVE
    max_iter_double: int = MAX_ITER_DOUBLE_WAVE
    ftol: float = 1e-10
    xtol: float = 1e-10
    gtol: float = 1e-10

    # ==================== Key moments / projection ================================
    grid_step: float = 1.0      # whole days, matching the daily data
    horizon: int = 0            # days projected past the last observation

    # ==================== Monte Carlo =============================================
    n_draws: int = N_DRAWS
    seed: int = 20200311

    # ==================== Execution ===============================================
    n_workers: int = 1          # 1 runs tasks in-process

    def __post_init__(self):
        if self.grid_step <= 0:
            raise InputContractError("grid_step must be positive")
        if self.horizon < 0:
            raise InputContractError("horizon must be >= 0")
        if self.n_draws < 2:
            raise InputContractError("n_draws must be >= 2")
        if self.n_workers < 1:
            raise InputContractError("n_workers must be >= 1")
        if min(self.max_iter_single, self.max_iter_double) < 1:
            raise InputContractError("iteration caps must be >= 1")

    def max_iter(self, model: GrowthModel) -> int:
        return self.max_iter_double if model.is_double else self.max_iter_single

    def task_seed(self, *key) -> int:
        """Seed derived from the base seed and a task key, stable across runs"""
        text = "|".join(str(k) for k in key)
        return (self.seed + zlib.crc32(text.encode("utf-8"))) % (2 ** 32)
