"""
===========================================================
errors.py
Author: Veronica Scerra
Last Updated: 2026-03-02
===========================================================

Description:
    Exception and warning classes for the growth-model pipeline.

    Two families:
        - InputContractError: the caller handed over something the
          math is not defined for (missing parameter names, n <= k,
          delta <= 0, t_i < h). Fatal at the call site.
        - NumericalDomainError: the inputs were valid but the
          arithmetic left the real line (negative base to a fractional
          power, non-PD covariance, zero renewal denominator). Batch
          drivers catch these and flag the one task.

    Optimizer non-convergence is not an exception; it lives on
    FitResult.converged.
-----------------------------------------------------------
License: MIT
===========================================================
"""


class EpiGrowthError(Exception):
    """Base class for every error raised by epigrowth"""


# ------------------ input contract ------------------

class InputContractError(EpiGrowthError, ValueError):
    """Fatal violation of a function's input contract"""


class ParameterNameError(InputContractError, KeyError):
    """Parameter mapping does not carry exactly the names the model needs"""

    def __init__(self, model: str, missing=(), extra=()):
        self.model = model
        self.missing = tuple(sorted(missing))
        self.extra = tuple(sorted(extra))
        parts = []
        if self.missing:
            parts.append(f"missing {list(self.missing)}")
        if self.extra:
            parts.append(f"unexpected {list(self.extra)}")
        super().__init__(f"{model}: parameter names {'; '.join(parts)}")

    def __str__(self):
        # KeyError would otherwise repr() the message
        return self.args[0]


class InsufficientDataError(InputContractError):
    """Not enough (or degenerate) data for the requested statistic"""


class DomainParameterError(InputContractError):
    """A parameter value lies outside the model's domain"""


class HistoryWindowError(InputContractError):
    """Evaluation time too early for the renewal sum to have full history"""


# ------------------ numerical domain ------------------

class NumericalDomainError(EpiGrowthError, ArithmeticError):
    """Valid inputs, but the computation left the real numbers"""


class FractionalPowerError(NumericalDomainError):
    """Negative base raised to a non-integer power"""


class CovarianceError(NumericalDomainError):
    """Parameter covariance is not finite or not positive definite"""


class DegenerateRenewalError(NumericalDomainError):
    """Renewal-equation denominator is zero or not finite"""


# ------------------ warnings ------------------

class ConvergenceWarning(UserWarning):
    """Optimizer stopped without reporting convergence"""


class CovarianceWarning(UserWarning):
    """Covariance could not be estimated from the Jacobian"""


class BoundaryWarning(UserWarning):
    """Fit has parameters resting on a box constraint"""
