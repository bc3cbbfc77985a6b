"""
===========================================================
key_moments.py
Author: Veronica Scerra
Last Updated: 2026-03-15
===========================================================

Description:
    Characteristic times of a fitted growth wave, read off the
    second derivative c'(t) of the fitted curve (no re-fit):

      acceleration  argmax c' on [first observed t, tau]
      deceleration  argmin c' on [tau, second-wave tau or horizon]
      peak          argmin |c'| on [acceleration, deceleration];
                    tied grid points are averaged

    plus the relative speed at the peak, c(peak) / C(peak).

    For two-wave models the second wave is scanned after the first
    wave's deceleration:
      acceleration_2 on [deceleration_1, horizon]
      deceleration_2 on [tau2, horizon]
      peak_2         on [acceleration_2, deceleration_2]

    Every scan runs on a grid anchored at the first observed day with
    a configurable step (whole days by default).

Notes:
    - An extremum that lands on the horizon end of its window means
      the wave has not got there yet: status NOT_OBSERVED, no time.
    - Second-wave moments that come out of order (tau2 <= tau1, or
      not dec_1 < acc_2 < peak_2 < dec_2) are NOT_IDENTIFIABLE.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union
import numpy as np

from .errors import InputContractError
from .models import GrowthModel, ModelKind, get_model
from .params import Theta

MOMENT_NAMES = ("acceleration", "peak", "deceleration")


class MomentStatus(str, Enum):
    OBSERVED = "observed"
    NOT_OBSERVED = "not_observed"
    NOT_IDENTIFIABLE = "not_identifiable"


@dataclass(frozen=True)
class KeyMoment:
    name: str
    wave: int
    status: MomentStatus
    time: Optional[float] = None
    value: Optional[float] = None   # C(time)

    @property
    def observed(self) -> bool:
        return self.status == MomentStatus.OBSERVED

    @property
    def label(self) -> str:
        return f"{self.name}_{self.wave}"


@dataclass(frozen=True)
class KeyMoments:
    moments: Tuple[KeyMoment, ...]
    relative_speed: Tuple[Optional[float], ...]   # one per wave

    def get(self, name: str, wave: int = 1) -> KeyMoment:
        for m in self.moments:
            if m.name == name and m.wave == wave:
                return m
        raise KeyError(f"no moment '{name}' for wave {wave}")

    def to_records(self) -> List[Dict]:
        records = []
        for m in self.moments:
            rec = asdict(m)
            rec["status"] = m.status.value
            records.append(rec)
        return records


def _grid(lo: float, hi: float, anchor: float, step: float) -> np.ndarray:
    """Grid points anchor + k*step lying in [lo, hi]"""
    k_lo = int(np.ceil((lo - anchor) / step - 1e-9))
    k_hi = int(np.floor((hi - anchor) / step + 1e-9))
    if k_hi < k_lo:
        return np.empty(0)
    return anchor + step * np.arange(k_lo, k_hi + 1)


def _scan(fn: Callable, theta: Theta, grid: np.ndarray, reduce) -> Optional[Tuple[int, float]]:
    """(index, time) of the reduced c' value over the grid, None on an empty grid"""
    if grid.size == 0:
        return None
    values = fn(theta, grid)
    idx = int(reduce(values))
    return idx, float(grid[idx])


def _moment(model: GrowthModel, theta: Theta, name: str, wave: int,
            time: Optional[float], status: MomentStatus = MomentStatus.OBSERVED) -> KeyMoment:
    if time is None or status != MomentStatus.OBSERVED:
        if status == MomentStatus.OBSERVED:
            status = MomentStatus.NOT_OBSERVED
        return KeyMoment(name, wave, status)
    value = float(model.curve(theta, np.array([time]))[0])
    return KeyMoment(name, wave, status, float(time), value)


def _scan_moment(model: GrowthModel, theta: Theta, name: str, wave: int, grid: np.ndarray,
                 reduce, open_end: bool) -> KeyMoment:
    """One argmax/argmin scan; open_end marks a window ending at the horizon"""
    hit = _scan(model.second_derivative, theta, grid, reduce)
    if hit is None:
        return KeyMoment(name, wave, MomentStatus.NOT_OBSERVED)
    idx, time = hit
    if idx == grid.size - 1 and grid.size > 1:
        status = MomentStatus.NOT_OBSERVED if open_end else MomentStatus.NOT_IDENTIFIABLE
        return KeyMoment(name, wave, status)
    return _moment(model, theta, name, wave, time)


def _peak(model: GrowthModel, theta: Theta, wave: int, grid: np.ndarray) -> KeyMoment:
    """Minimum of |c'| on the grid; ties are averaged"""
    if grid.size == 0:
        return KeyMoment("peak", wave, MomentStatus.NOT_OBSERVED)
    magnitude = np.abs(model.second_derivative(theta, grid))
    lowest = float(np.min(magnitude))
    if lowest > 0:
        ties = grid[np.isclose(magnitude / lowest, 1.0, rtol=1e-9, atol=0.0)]
    else:
        ties = grid[magnitude == 0]
    return _moment(model, theta, "peak", wave, float(np.mean(ties)))


def _ordered(*moments: KeyMoment) -> bool:
    times = [m.time for m in moments]
    return all(m.observed for m in moments) and all(a < b for a, b in zip(times, times[1:]))


def _wave(model: GrowthModel, theta: Theta, wave: int, anchor: float, step: float,
          acc_window: Tuple[float, float], dec_window: Tuple[float, float],
          acc_open_end: bool, dec_open_end: bool) -> List[KeyMoment]:
    acc = _scan_moment(model, theta, "acceleration", wave,
                       _grid(*acc_window, anchor, step), np.argmax, open_end=acc_open_end)
    dec = _scan_moment(model, theta, "deceleration", wave,
                       _grid(*dec_window, anchor, step), np.argmin, open_end=dec_open_end)
    if acc.observed and dec.observed:
        peak = _peak(model, theta, wave, _grid(acc.time, dec.time, anchor, step))
    else:
        peak = KeyMoment("peak", wave, MomentStatus.NOT_OBSERVED)
    if acc.observed and peak.observed and dec.observed and not _ordered(acc, peak, dec):
        return [KeyMoment(m.name, wave, MomentStatus.NOT_IDENTIFIABLE) for m in (acc, peak, dec)]
    return [acc, peak, dec]


def relative_speed(model: GrowthModel, theta: Theta, time: float) -> float:
    """Proportional growth rate c(t) / C(t)"""
    t = np.array([time])
    return float(model.first_derivative(theta, t)[0] / model.curve(theta, t)[0])


def extract_key_moments(
        kind: Union[ModelKind, str],
        theta: Theta,
        t_start: float,
        t_end: float,
        step: float = 1.0,
) -> KeyMoments:
    """
    Locate acceleration / peak / deceleration for every wave.

    Args:
        kind: a sigmoid or double-wave model kind
        theta: fitted parameters
        t_start: first observed day index
        t_end: last day to scan (observed horizon plus prediction)
        step: grid resolution in days

    Returns:
        KeyMoments with three moments per wave, in wave order
    """
    model = get_model(kind)
    if not model.tau_names:
        raise InputContractError(f"{model.name} has no inflection parameter to scan around")
    if step <= 0:
        raise InputContractError("grid step must be positive")
    if t_end <= t_start:
        raise InputContractError("t_end must come after t_start")
    model.validate(theta)

    not_identifiable = [KeyMoment(n, 2, MomentStatus.NOT_IDENTIFIABLE) for n in MOMENT_NAMES]
    if not model.is_double:
        tau = float(theta["tau"])
        moments = _wave(model, theta, 1, t_start, step,
                        acc_window=(t_start, min(tau, t_end)), dec_window=(tau, t_end),
                        acc_open_end=tau >= t_end, dec_open_end=True)
    else:
        tau1, tau2 = float(theta["tau1"]), float(theta["tau2"])
        if tau2 <= tau1:
            first = _wave(model, theta, 1, t_start, step,
                          acc_window=(t_start, min(tau1, t_end)), dec_window=(tau1, t_end),
                          acc_open_end=tau1 >= t_end, dec_open_end=True)
            second = not_identifiable
        else:
            first = _wave(model, theta, 1, t_start, step,
                          acc_window=(t_start, min(tau1, t_end)),
                          dec_window=(tau1, min(tau2, t_end)),
                          acc_open_end=tau1 >= t_end, dec_open_end=tau2 >= t_end)
            dec1 = first[2]
            if not dec1.observed:
                second = not_identifiable
            else:
                second = _wave(model, theta, 2, t_start, step,
                               acc_window=(dec1.time, t_end), dec_window=(tau2, t_end),
                               acc_open_end=True, dec_open_end=True)
                acc2 = second[0]
                if acc2.observed and not acc2.time > dec1.time:
                    second = not_identifiable
        moments = first + second

    speeds = []
    for wave in range(1, model.n_waves + 1):
        peak = next(m for m in moments if m.name == "peak" and m.wave == wave)
        speeds.append(relative_speed(model, theta, peak.time) if peak.observed else None)
    return KeyMoments(moments=tuple(moments), relative_speed=tuple(speeds))
