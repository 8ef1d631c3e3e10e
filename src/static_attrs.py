import numpy as np
import pandas as pd


STATIC_COLUMNS = ['preiculos', 'electivesurgery', 'age']


def _known(value):
    return value is not None and not pd.isna(value)


def elective_surgery(admission_type, surgical):
    """1 for an elective surgical admission, 0 otherwise, NaN if either input is unknown."""
    if not _known(admission_type) or not _known(surgical):
        return np.nan
    if str(admission_type).strip().upper() == 'ELECTIVE' and int(surgical) == 1:
        return 1
    return 0


def resolve_static_attributes(intime, facts):
    """Time-invariant OASIS inputs of one ICU stay.

    Args:
        intime: ICU intake time in epoch seconds
        facts: dict-like admission facts with admittime, admission_type,
            surgical and age, or None when the stay has no admission row
    Returns:
        dict with preiculos (seconds), electivesurgery (1/0/NaN) and age
    """
    if facts is None:
        return {col: np.nan for col in STATIC_COLUMNS}

    admittime = facts.get('admittime')
    if _known(admittime) and _known(intime):
        preiculos = intime - admittime
    else:
        preiculos = np.nan

    age = facts.get('age')

    return {
        'preiculos': preiculos,
        'electivesurgery': elective_surgery(facts.get('admission_type'), facts.get('surgical')),
        'age': age if _known(age) else np.nan,
    }


def attach_static_attributes(hourly, static):
    """Copy the static attributes onto every hour of the stay."""
    hourly = hourly.copy()
    for col in STATIC_COLUMNS:
        hourly[col] = static[col]
    return hourly
