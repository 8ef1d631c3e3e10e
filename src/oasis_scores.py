"""
OASIS component scores.

Each function maps the hourly inputs of one component to its points, or to
None when the input it depends on was not observed. Conditions are checked
top to bottom and the first match wins, which resolves the ranges of the
published rubric that overlap.

Reference:
    Johnson AEW, Kramer AA, Clifford GD. A new severity of illness scale using
    a subset of acute physiology and chronic health evaluation data elements
    shows comparable predictive accuracy. Crit Care Med 2013;41(7):1711-1718.
"""

import pandas as pd


MINUTE = 60
HOUR = 3600
DAY = 24 * HOUR


def _missing(value):
    return value is None or pd.isna(value)


def score_preiculos(preiculos):
    """Pre-ICU in-hospital length of stay, in seconds."""
    if _missing(preiculos):
        return None
    if preiculos < 10 * MINUTE + 12:
        return 5
    if preiculos < 4 * HOUR + 57 * MINUTE:
        return 3
    if preiculos < DAY:
        return 0
    if preiculos < 12 * DAY + 23 * HOUR + 48 * MINUTE:
        return 1
    return 2


def score_age(age):
    if _missing(age):
        return None
    if age < 24:
        return 0
    if age <= 53:
        return 3
    if age <= 77:
        return 6
    if age <= 89:
        return 9
    if age >= 90:
        return 7
    return 0


def score_gcs(gcs_min):
    if _missing(gcs_min):
        return None
    if gcs_min <= 7:
        return 10
    if gcs_min < 14:
        return 4
    if gcs_min == 14:
        return 3
    return 0


def score_heartrate(heartrate_min, heartrate_max):
    if _missing(heartrate_max):
        return None
    if heartrate_max > 125:
        return 6
    if heartrate_min < 33:
        return 4
    if 107 <= heartrate_max <= 125:
        return 3
    if 89 <= heartrate_max <= 106:
        return 1
    return 0


def score_meanbp(meanbp_min, meanbp_max):
    if _missing(meanbp_min):
        return None
    if meanbp_min < 20.65:
        return 4
    if meanbp_min < 51:
        return 3
    if meanbp_max > 143.44:
        return 3
    if 51 <= meanbp_min < 61.33:
        return 2
    return 0


def score_resprate(resprate_min, resprate_max):
    if _missing(resprate_min):
        return None
    if resprate_min < 6:
        return 10
    if resprate_max > 44:
        return 9
    if resprate_max > 30:
        return 6
    if resprate_max > 22:
        return 1
    if resprate_min < 13:
        return 1
    return 0


def score_temp(tempc_min, tempc_max):
    if _missing(tempc_max):
        return None
    if tempc_max > 39.88:
        return 6
    if 33.22 <= tempc_min <= 35.93:
        return 4
    if 33.22 <= tempc_max <= 35.93:
        return 4
    if tempc_min < 33.22:
        return 3
    if 35.93 < tempc_min <= 36.39:
        return 2
    if 36.89 <= tempc_max <= 39.88:
        return 2
    return 0


def score_urineoutput(urineoutput_24hours):
    """Urine output summed over the trailing 24 hours, in mL."""
    if _missing(urineoutput_24hours):
        return None
    if urineoutput_24hours < 671.09:
        return 10
    if urineoutput_24hours > 6896.80:
        return 8
    if 671.09 <= urineoutput_24hours <= 1426.99:
        return 5
    if 1427.00 <= urineoutput_24hours <= 2544.14:
        return 1
    return 0


def score_mechvent(mechvent):
    # ventilation is never missing, no episode means not ventilated
    return 9 if mechvent == 1 else 0


def score_electivesurgery(electivesurgery):
    if _missing(electivesurgery):
        return None
    if electivesurgery == 1:
        return 0
    return 6


# score column -> (scoring function, input columns)
COMPONENTS = {
    'preiculos_score': (score_preiculos, ['preiculos']),
    'age_score': (score_age, ['age']),
    'gcs_score': (score_gcs, ['gcs_min']),
    'heartrate_score': (score_heartrate, ['heartrate_min', 'heartrate_max']),
    'meanbp_score': (score_meanbp, ['meanbp_min', 'meanbp_max']),
    'resprate_score': (score_resprate, ['resprate_min', 'resprate_max']),
    'temp_score': (score_temp, ['tempc_min', 'tempc_max']),
    'urineoutput_score': (score_urineoutput, ['urineoutput_24hours']),
    'mechvent_score': (score_mechvent, ['mechvent']),
    'electivesurgery_score': (score_electivesurgery, ['electivesurgery']),
}


def score_components(df):
    """Add the ten raw component scores to the hourly table.

    Scores are stored as nullable integers so that an unobserved component
    stays distinguishable from a genuine score of 0.
    """
    df = df.copy()
    for score_col, (func, cols) in COMPONENTS.items():
        missing_cols = [c for c in cols if c not in df.columns]
        if missing_cols:
            raise ValueError(f"Cannot compute {score_col}, missing columns: {missing_cols}")
        values = [func(*row) for row in zip(*(df[c] for c in cols))]
        df[score_col] = pd.array(values, dtype='Int64')
    return df
