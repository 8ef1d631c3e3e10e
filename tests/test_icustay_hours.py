import numpy as np
import pytest

from conftest import HOUR, T
from icustay_hours import MalformedStayError, build_icustay_hours, count_icustay_hours


def test_one_row_per_whole_or_partial_hour():
    assert len(build_icustay_hours(1, T, T + 3 * HOUR)) == 3
    assert len(build_icustay_hours(1, T, T + 3 * HOUR + 1)) == 4
    assert count_icustay_hours(T, T + 0.5 * HOUR) == 1


def test_windows_are_contiguous_and_anchored_on_intime():
    hours = build_icustay_hours(7, T, T + 5 * HOUR, hadm_id=70)

    assert hours['hr'].tolist() == [0, 1, 2, 3, 4]
    assert hours['endtime'].iloc[0] == T + HOUR
    assert (hours['endtime'] - hours['starttime'] == HOUR).all()
    np.testing.assert_array_equal(hours['starttime'].values[1:], hours['endtime'].values[:-1])
    assert (hours['stay_id'] == 7).all()
    assert (hours['hadm_id'] == 70).all()


def test_zero_length_stay_has_no_hours():
    hours = build_icustay_hours(1, T, T)
    assert len(hours) == 0
    assert list(hours.columns) == ['stay_id', 'hadm_id', 'hr', 'starttime', 'endtime']


@pytest.mark.parametrize("intime,outtime,reason", [
    (None, T, "missing intime"),
    (np.nan, T, "missing intime"),
    (T, np.nan, "missing outtime"),
    (T, T - 1, "outtime before intime"),
])
def test_malformed_stay(intime, outtime, reason):
    with pytest.raises(MalformedStayError) as excinfo:
        build_icustay_hours(5, intime, outtime)
    assert excinfo.value.stay_id == 5
    assert excinfo.value.reason == reason
