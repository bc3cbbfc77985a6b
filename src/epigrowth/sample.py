"""
===========================================================
sample.py
Author: Veronica Scerra
Last Updated: 2026-03-08
===========================================================

Description:
    Time-series samples handed to the fitting core, plus the
    windowing helpers that cut them out of a country table.

    A TimeSeriesSample is an ordered run of (t, y, date) with
        - t an integer day index, strictly increasing by one day
        - y a non-negative, finite cumulative count
    Gaps are expected to have been filled upstream (smoothing /
    interpolation is not done here).

Example Usage:
    from epigrowth.sample import select_window, split_sample
    sample = select_window(df, start="2020-03-01", end="2020-06-30",
                           name="France")
    in_sample, out_sample = split_sample(sample, n_out=14)

Notes:
    - Out-of-sample pieces keep the t index of the full window so
      fitted curves can be evaluated on them directly.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple
import numpy as np
import pandas as pd

from .errors import InputContractError, InsufficientDataError


@dataclass
class TimeSeriesSample:
    """
    Container for one cumulative-count series.

    Attributes:
    -----------
    t: np.ndarray
        Day index (integers, strictly increasing by 1)
    y: np.ndarray
        Cumulative counts aligned with t
    dates: pd.DatetimeIndex, optional
        Calendar dates aligned with t
    name: str
        Label of the series (usually the country)
    """

    t: np.ndarray
    y: np.ndarray
    dates: Optional[pd.DatetimeIndex] = None
    name: str = ""

    def __post_init__(self):
        self.t = np.asarray(self.t, dtype=float)
        self.y = np.asarray(self.y, dtype=float)
        if self.t.ndim != 1 or self.t.shape != self.y.shape:
            raise InputContractError("t and y must be 1-D arrays of equal length")
        if self.t.size and not np.all(self.t == np.round(self.t)):
            raise InputContractError("t must hold whole-day indices")
        if self.t.size > 1 and not np.all(np.diff(self.t) == 1):
            raise InputContractError("t must increase by exactly one day (fill gaps upstream)")
        if not np.all(np.isfinite(self.y)):
            raise InputContractError("y contains non-finite values")
        if np.any(self.y < 0):
            raise InputContractError("y must be non-negative")
        if self.dates is not None:
            self.dates = pd.DatetimeIndex(self.dates)
            if len(self.dates) != self.t.size:
                raise InputContractError("dates must align with t")

    def __len__(self) -> int:
        return int(self.t.size)

    @property
    def daily(self) -> np.ndarray:
        """Day-on-day increments (first entry is y[0])"""
        return np.diff(self.y, prepend=0.0)

    def date_at(self, t: float) -> Optional[pd.Timestamp]:
        """Calendar date for a (possibly out-of-range) day index"""
        if self.dates is None or not len(self):
            return None
        return self.dates[0] + pd.Timedelta(days=float(t - self.t[0]))

    def to_dataframe(self) -> pd.DataFrame:
        data = {"t": self.t.astype(int), "y": self.y}
        if self.dates is not None:
            data["date"] = self.dates
        return pd.DataFrame(data)


@dataclass(frozen=True)
class CharacteristicDates:
    """
    The four per-country dates used to slice samples.

    start_first_wave: first day of the first-wave sample
    start_high_stringency: first day of strict containment
    start_reduce_restrict: first day restrictions were eased
    start_date_sample_second_wave: first day of the second-wave sample
    """
    start_first_wave: pd.Timestamp
    start_high_stringency: pd.Timestamp
    start_reduce_restrict: pd.Timestamp
    start_date_sample_second_wave: pd.Timestamp

    def __post_init__(self):
        for name in ("start_first_wave", "start_high_stringency",
                     "start_reduce_restrict", "start_date_sample_second_wave"):
            object.__setattr__(self, name, pd.Timestamp(getattr(self, name)))

    def first_wave(self) -> Tuple[pd.Timestamp, pd.Timestamp]:
        """[start_first_wave, day before the second-wave sample]"""
        return self.start_first_wave, self.start_date_sample_second_wave - pd.Timedelta(days=1)

    def both_waves(self, end) -> Tuple[pd.Timestamp, pd.Timestamp]:
        return self.start_first_wave, pd.Timestamp(end)


def select_window(
        frame: pd.DataFrame,
        start=None,
        end=None,
        date_col: str = "date",
        value_col: str = "cumulative_count",
        name: str = "",
) -> TimeSeriesSample:
    """
    Slice a {date, cumulative_count} table into a sample.

    t is counted in days since the first included date. Rows are
    sorted by date; the window is inclusive on both ends.
    """
    sub = frame[[date_col, value_col]].copy()
    sub[date_col] = pd.to_datetime(sub[date_col])
    sub = sub.sort_values(date_col)
    if start is not None:
        sub = sub[sub[date_col] >= pd.to_datetime(start)]
    if end is not None:
        sub = sub[sub[date_col] <= pd.to_datetime(end)]
    sub = sub.reset_index(drop=True)
    if sub.empty:
        raise InsufficientDataError(f"no rows between {start} and {end} for '{name}'")

    t = (sub[date_col] - sub[date_col].iloc[0]).dt.days.to_numpy()
    return TimeSeriesSample(
        t=t,
        y=sub[value_col].to_numpy(dtype=float),
        dates=pd.DatetimeIndex(sub[date_col]),
        name=name,
    )


def split_sample(sample: TimeSeriesSample, n_out: int) -> Tuple[TimeSeriesSample, Optional[TimeSeriesSample]]:
    """Hold out the last n_out observations; returns (in_sample, out_of_sample)"""
    if n_out < 0:
        raise InputContractError("n_out must be >= 0")
    if n_out >= len(sample):
        raise InsufficientDataError(
            f"cannot hold out {n_out} of {len(sample)} observations")
    if n_out == 0:
        return sample, None
    cut = len(sample) - n_out
    dates = sample.dates
    first = TimeSeriesSample(sample.t[:cut], sample.y[:cut],
                             None if dates is None else dates[:cut], sample.name)
    second = TimeSeriesSample(sample.t[cut:], sample.y[cut:],
                              None if dates is None else dates[cut:], sample.name)
    return first, second
