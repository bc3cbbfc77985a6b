"""Growth-curve fitting, key moments and reproduction numbers for epidemic counts."""

__version__ = "0.1.0"

from .errors import (EpiGrowthError, InputContractError, NumericalDomainError,
                     ParameterNameError, InsufficientDataError, DomainParameterError,
                     HistoryWindowError, FractionalPowerError, CovarianceError,
                     DegenerateRenewalError)
from .models import ModelKind, GrowthModel, get_model, initial_guess, default_bounds
from .sample import TimeSeriesSample, CharacteristicDates, select_window, split_sample
from .fitting import FitResult, fit_model, goodness_of_fit, GoodnessOfFit
from .key_moments import extract_key_moments, KeyMoments, KeyMoment, MomentStatus
from .serial_interval import SerialIntervalKernel
from .reproduction import reproduction_number, reproduction_numbers
from .monte_carlo import simulate_reproduction_number, ReproductionEstimate
from .config import PipelineConfig
from .pipeline import FitTask, run_batch, run_task, BatchResult
