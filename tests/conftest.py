import pandas as pd
import pytest


# ICU intake time used by the synthetic stays, in epoch seconds
T = 1_600_000_000
HOUR = 3600


def vitals_frame(rows):
    """rows: list of (stay_id, charttime, heartrate, tempc, meanbp, resprate)"""
    return pd.DataFrame(rows, columns=['stay_id', 'charttime', 'heartrate', 'tempc', 'meanbp', 'resprate'])


@pytest.fixture
def hours():
    from icustay_hours import build_icustay_hours
    return build_icustay_hours(1, T, T + 30 * HOUR, hadm_id=10)


@pytest.fixture
def cohort():
    """Three ICU stays: a 30 hour stay with a bit of everything, a 5 hour
    stay without admission facts and a stay discharged before its intake."""
    stays = pd.DataFrame({
        'subject_id': [100, 200, 300],
        'hadm_id': [10, 20, 30],
        'stay_id': [1, 2, 3],
        'intime': [T, T, T],
        'outtime': [T + 30 * HOUR, T + 4.5 * HOUR, T - HOUR],
    })
    data = {
        'stay': stays,
        'admissions': pd.DataFrame({
            'stay_id': [1, 3],
            'hadm_id': [10, 30],
            'admittime': [T - 2 * HOUR, T - 2 * HOUR],
            'admission_type': ['ELECTIVE', 'URGENT'],
            'surgical': [1, 0],
            'age': [65, 40],
        }),
        'vitals': vitals_frame([
            (1, T + 30 * 60, 130, 37.0, 80, 18),
            (1, T + 2 * HOUR + 60, 90, 36.0, 70, 25),
            (2, T + 10 * 60, 80, 37.0, 45, 16),
        ]),
        'gcs': pd.DataFrame({'stay_id': [1], 'charttime': [T + 1.5 * HOUR], 'gcs': [14]}),
        'vent': pd.DataFrame({'stay_id': [1], 'starttime': [T + 2 * HOUR + 600], 'endtime': [T + 5 * HOUR]}),
        'uo': pd.DataFrame({'stay_id': [1, 1], 'charttime': [T + HOUR, T + 3 * HOUR], 'urineoutput': [200, 300]}),
    }
    return data
