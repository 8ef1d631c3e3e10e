import math

import numpy as np
import pandas as pd


HOUR = 3600

HOURS_COLUMNS = ['stay_id', 'hadm_id', 'hr', 'starttime', 'endtime']


class MalformedStayError(ValueError):
    """ICU stay whose intime is missing or whose outtime is missing or before intime."""

    def __init__(self, stay_id, reason):
        super().__init__(f"stay {stay_id}: {reason}")
        self.stay_id = stay_id
        self.reason = reason


def count_icustay_hours(intime, outtime):
    """Number of whole or partial hours between intime and outtime (epoch seconds)."""
    return int(math.ceil((outtime - intime) / HOUR))


def build_icustay_hours(stay_id, intime, outtime, hadm_id=None):
    """Generate a row for every hour the patient was in the ICU.

    Hour ``hr`` covers the half-open window (starttime, endtime] with
    endtime = intime + (hr + 1) hours. Hour 0 is the first hour of the stay.

    Args:
        stay_id: ICU stay identifier
        intime: ICU intake time in epoch seconds
        outtime: ICU discharge time in epoch seconds
        hadm_id: parent hospital admission identifier
    Returns:
        DataFrame with columns stay_id, hadm_id, hr, starttime, endtime
    Raises:
        MalformedStayError: intime or outtime missing, or outtime before intime
    """
    if intime is None or pd.isna(intime):
        raise MalformedStayError(stay_id, "missing intime")
    if outtime is None or pd.isna(outtime):
        raise MalformedStayError(stay_id, "missing outtime")
    if outtime < intime:
        raise MalformedStayError(stay_id, "outtime before intime")

    hr = np.arange(count_icustay_hours(intime, outtime))
    endtime = intime + (hr + 1) * HOUR

    return pd.DataFrame({
        'stay_id': stay_id,
        'hadm_id': hadm_id,
        'hr': hr,
        'starttime': endtime - HOUR,
        'endtime': endtime,
    }, columns=HOURS_COLUMNS)
