import numpy as np
import pytest

from epigrowth.errors import InputContractError
from epigrowth.key_moments import MomentStatus, extract_key_moments

LOGISTIC = {"K": 1000.0, "tau": 30.0, "r": 0.2}
# argmax / argmin of the logistic c' lie ln(2 + sqrt 3) / r either side of tau
LOGISTIC_OFFSET = np.log(2.0 + np.sqrt(3.0)) / 0.2


class TestSingleWave:

    def test_logistic_moments(self):
        km = extract_key_moments("logistic", LOGISTIC, t_start=0, t_end=100)
        acc, peak, dec = (km.get(n) for n in ("acceleration", "peak", "deceleration"))
        assert all(m.observed for m in (acc, peak, dec))
        assert acc.time < peak.time < dec.time
        assert abs(acc.time - (30 - LOGISTIC_OFFSET)) <= 1.0
        assert abs(dec.time - (30 + LOGISTIC_OFFSET)) <= 1.0
        assert peak.time == 30.0
        assert peak.value == pytest.approx(500.0)
        assert km.relative_speed == (pytest.approx(0.1),)

    def test_times_are_on_the_grid(self):
        km = extract_key_moments("gompertz", {"K": 5000.0, "tau": 30.0, "r": 0.2},
                                 t_start=3, t_end=90, step=0.5)
        for m in km.moments:
            assert m.observed
            assert ((m.time - 3) / 0.5) == pytest.approx(round((m.time - 3) / 0.5))

    def test_tied_peak_is_averaged(self):
        theta = dict(LOGISTIC, tau=30.5)
        km = extract_key_moments("logistic", theta, t_start=0, t_end=100)
        assert km.get("peak").time == pytest.approx(30.5)

    def test_deceleration_beyond_horizon(self):
        km = extract_key_moments("logistic", LOGISTIC, t_start=0, t_end=33)
        assert km.get("acceleration").observed
        assert km.get("deceleration").status == MomentStatus.NOT_OBSERVED
        assert km.get("peak").status == MomentStatus.NOT_OBSERVED
        assert km.get("peak").time is None
        assert km.relative_speed == (None,)

    def test_inflection_beyond_horizon(self):
        km = extract_key_moments("logistic", LOGISTIC, t_start=0, t_end=15)
        assert km.get("acceleration").status == MomentStatus.NOT_OBSERVED
        assert km.get("deceleration").status == MomentStatus.NOT_OBSERVED

    def test_finer_grid_gets_closer(self):
        coarse = extract_key_moments("logistic", LOGISTIC, 0, 100, step=1.0)
        fine = extract_key_moments("logistic", LOGISTIC, 0, 100, step=0.01)
        target = 30 - LOGISTIC_OFFSET
        assert abs(fine.get("acceleration").time - target) <= 0.01
        assert (abs(fine.get("acceleration").time - target)
                <= abs(coarse.get("acceleration").time - target))

    def test_records(self):
        records = extract_key_moments("logistic", LOGISTIC, 0, 100).to_records()
        assert [r["name"] for r in records] == ["acceleration", "peak", "deceleration"]
        assert {r["status"] for r in records} == {"observed"}


class TestDoubleWave:
    THETA = {"K1": 1000.0, "tau1": 30.0, "r1": 0.2, "K2": 3000.0, "tau2": 90.0, "r2": 0.15}

    def test_two_ordered_waves(self):
        km = extract_key_moments("double_logistic", self.THETA, t_start=0, t_end=200)
        assert len(km.moments) == 6
        assert all(m.observed for m in km.moments)
        times = [km.get(n, w).time for w in (1, 2) for n in ("acceleration", "peak", "deceleration")]
        assert times == sorted(times)
        assert abs(km.get("peak", 1).time - 30) <= 1.0
        assert abs(km.get("peak", 2).time - 90) <= 1.0
        assert len(km.relative_speed) == 2
        assert all(s is not None and s > 0 for s in km.relative_speed)

    def test_overlapping_waves_not_identifiable(self):
        theta = dict(self.THETA, tau2=25.0)
        km = extract_key_moments("double_logistic", theta, t_start=0, t_end=200)
        assert km.get("peak", 1).observed
        for name in ("acceleration", "peak", "deceleration"):
            assert km.get(name, 2).status == MomentStatus.NOT_IDENTIFIABLE
        assert km.relative_speed[1] is None

    def test_second_wave_still_rising(self):
        km = extract_key_moments("double_logistic", self.THETA, t_start=0, t_end=92)
        assert km.get("deceleration", 1).observed
        assert km.get("acceleration", 2).observed
        assert km.get("deceleration", 2).status == MomentStatus.NOT_OBSERVED


def test_exponential_has_no_key_moments():
    with pytest.raises(InputContractError):
        extract_key_moments("exponential", {"c0": 1.0, "r": 0.1}, 0, 50)


def test_bad_window():
    with pytest.raises(InputContractError):
        extract_key_moments("logistic", LOGISTIC, 10, 10)
    with pytest.raises(InputContractError):
        extract_key_moments("logistic", LOGISTIC, 0, 10, step=0)


def test_unknown_moment():
    km = extract_key_moments("logistic", LOGISTIC, 0, 100)
    with pytest.raises(KeyError):
        km.get("peak", wave=2)
