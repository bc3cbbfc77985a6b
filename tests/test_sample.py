import numpy as np
import pandas as pd
import pytest

from epigrowth.errors import InputContractError, InsufficientDataError
from epigrowth.sample import CharacteristicDates, TimeSeriesSample, select_window, split_sample


@pytest.fixture
def frame():
    dates = pd.date_range("2020-03-01", periods=40, freq="D")
    # shuffled on purpose; select_window sorts by date
    df = pd.DataFrame({"date": dates.strftime("%Y-%m-%d"),
                       "cumulative_count": np.arange(40.0) ** 2})
    return df.sample(frac=1.0, random_state=0)


class TestTimeSeriesSample:

    def test_basic(self):
        s = TimeSeriesSample([0, 1, 2, 3], [1, 3, 6, 10], name="X")
        assert len(s) == 4
        np.testing.assert_array_equal(s.daily, [1, 2, 3, 4])
        assert s.t.dtype == float
        assert list(s.to_dataframe().columns) == ["t", "y"]

    @pytest.mark.parametrize("t, y", [
        ([0, 1, 2], [1, 2]),
        ([0, 1.5, 2], [1, 2, 3]),
        ([0, 2, 3], [1, 2, 3]),
        ([0, 1, 2], [1, np.nan, 3]),
        ([0, 1, 2], [1, -2, 3]),
        ([[0, 1]], [[1, 2]]),
    ])
    def test_rejects_malformed_series(self, t, y):
        with pytest.raises(InputContractError):
            TimeSeriesSample(t, y)

    def test_date_lookup(self):
        s = TimeSeriesSample([0, 1, 2], [1, 2, 3], dates=pd.date_range("2020-01-01", periods=3))
        assert s.date_at(0) == pd.Timestamp("2020-01-01")
        assert s.date_at(10) == pd.Timestamp("2020-01-11")
        assert TimeSeriesSample([0, 1], [1, 2]).date_at(1) is None

    def test_misaligned_dates(self):
        with pytest.raises(InputContractError):
            TimeSeriesSample([0, 1, 2], [1, 2, 3], dates=pd.date_range("2020-01-01", periods=2))


def test_select_window(frame):
    s = select_window(frame, "2020-03-05", "2020-03-14", name="France")
    assert len(s) == 10
    np.testing.assert_array_equal(s.t, np.arange(10))
    np.testing.assert_array_equal(s.y, np.arange(4.0, 14.0) ** 2)
    assert s.dates[0] == pd.Timestamp("2020-03-05")
    assert s.name == "France"


def test_select_window_open_ended(frame):
    assert len(select_window(frame, start="2020-04-01")) == 9
    assert len(select_window(frame)) == 40


def test_select_empty_window(frame):
    with pytest.raises(InsufficientDataError):
        select_window(frame, "2021-01-01", "2021-02-01")


def test_characteristic_dates(frame):
    dates = CharacteristicDates("2020-03-01", "2020-03-10", "2020-03-25", "2020-04-01")
    start, end = dates.first_wave()
    assert end == pd.Timestamp("2020-03-31")
    assert len(select_window(frame, start, end)) == 31
    assert dates.both_waves("2020-04-09") == (pd.Timestamp("2020-03-01"), pd.Timestamp("2020-04-09"))


class TestSplit:

    def test_holdout(self):
        s = TimeSeriesSample(np.arange(10), np.arange(10.0), dates=pd.date_range("2020-01-01", periods=10))
        first, second = split_sample(s, 3)
        assert len(first) == 7 and len(second) == 3
        assert second.t[0] == 7
        assert second.dates[0] == pd.Timestamp("2020-01-08")

    def test_no_holdout(self):
        s = TimeSeriesSample(np.arange(5), np.arange(5.0))
        first, second = split_sample(s, 0)
        assert first is s and second is None

    def test_holdout_too_long(self):
        with pytest.raises(InsufficientDataError):
            split_sample(TimeSeriesSample(np.arange(5), np.arange(5.0)), 5)
