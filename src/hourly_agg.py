"""
Summarize the irregularly sampled event streams of one ICU stay onto its
hourly timeline.

An event charted at ``charttime`` belongs to hour ``hr`` when
``starttime < charttime <= endtime``. Aggregates of hours without any event
stay NaN, except for ``mechvent`` which is 0 when no episode overlaps.
"""

import numpy as np
import pandas as pd


VITALS = ['heartrate', 'tempc', 'meanbp', 'resprate']

VENT_OVERLAP_MODES = ('endpoints', 'any')


def check_columns(df, required, name):
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"{name} is missing required columns: {missing}")


def assign_hours(hours, charttime):
    """Map each charttime onto the index of the hour containing it.

    Returns an integer array aligned with ``charttime``; events that fall
    outside every window of the timeline get -1.
    """
    endtime = hours['endtime'].to_numpy(dtype=float)
    starttime = hours['starttime'].to_numpy(dtype=float)
    charttime = np.asarray(charttime, dtype=float)

    # first window whose endtime is >= charttime
    idx = np.searchsorted(endtime, charttime, side='left')
    in_range = idx < len(endtime)
    valid = np.zeros(len(charttime), dtype=bool)
    valid[in_range] = charttime[in_range] > starttime[idx[in_range]]

    return np.where(valid, idx, -1)


def _events_by_hour(hours, events):
    events = events.copy()
    events['hour_idx'] = assign_hours(hours, events['charttime'].values)
    return events[events['hour_idx'] >= 0]


def aggregate_vitals(hours, vitals):
    """Min and max of each vital sign per hour."""
    columns = [f"{v}_{agg}" for v in VITALS for agg in ('min', 'max')]
    out = pd.DataFrame(np.nan, index=np.arange(len(hours)), columns=columns)
    if vitals is None or len(vitals) == 0:
        return out

    check_columns(vitals, ['charttime'] + VITALS, 'vitals')
    window = _events_by_hour(hours, vitals)
    if len(window) == 0:
        return out

    agg = window.groupby('hour_idx')[VITALS].agg(['min', 'max'])
    agg.columns = [f"{v}_{a}" for v, a in agg.columns]
    out.loc[agg.index, agg.columns] = agg.values
    return out[columns]


def aggregate_gcs(hours, gcs):
    """Lowest GCS charted in each hour."""
    out = pd.DataFrame({'gcs_min': np.nan}, index=np.arange(len(hours)))
    if gcs is None or len(gcs) == 0:
        return out

    check_columns(gcs, ['charttime', 'gcs'], 'gcs')
    window = _events_by_hour(hours, gcs)
    if len(window) == 0:
        return out

    agg = window.groupby('hour_idx')['gcs'].min()
    out.loc[agg.index, 'gcs_min'] = agg.values
    return out


def aggregate_mechvent(hours, vent, overlap='endpoints'):
    """Flag the hours during which the patient was mechanically ventilated.

    With ``overlap='endpoints'`` an hour is ventilated when an episode
    [starttime, endtime] contains the start instant of the hour
    (vent start <= starttime < vent end) or its end instant
    (vent start <= endtime <= vent end). An episode lying entirely inside one
    hour touches neither instant and is not counted.

    With ``overlap='any'`` every episode that intersects the open hour
    window counts.
    """
    if overlap not in VENT_OVERLAP_MODES:
        raise ValueError(f"Unknown ventilation overlap mode: {overlap}")

    out = pd.DataFrame({'mechvent': 0}, index=np.arange(len(hours)))
    if vent is None or len(vent) == 0 or len(hours) == 0:
        return out

    check_columns(vent, ['starttime', 'endtime'], 'ventilation episodes')
    vent = vent.dropna(subset=['starttime', 'endtime'])

    # hours along axis 0, episodes along axis 1
    hr_start = hours['starttime'].to_numpy(dtype=float)[:, None]
    hr_end = hours['endtime'].to_numpy(dtype=float)[:, None]
    vent_start = vent['starttime'].to_numpy(dtype=float)[None, :]
    vent_end = vent['endtime'].to_numpy(dtype=float)[None, :]

    if overlap == 'endpoints':
        covers_start = (vent_start <= hr_start) & (hr_start < vent_end)
        covers_end = (vent_start <= hr_end) & (hr_end <= vent_end)
        ventilated = covers_start | covers_end
    else:
        ventilated = (vent_start < hr_end) & (vent_end > hr_start)

    out['mechvent'] = ventilated.any(axis=1).astype(int)
    return out


def aggregate_urine_output(hours, uo):
    """Total urine output per hour; NaN, not 0, when nothing was charted."""
    out = pd.DataFrame({'urineoutput': np.nan}, index=np.arange(len(hours)))
    if uo is None or len(uo) == 0:
        return out

    check_columns(uo, ['charttime', 'urineoutput'], 'urine output')
    window = _events_by_hour(hours, uo)
    if len(window) == 0:
        return out

    # sum separately from the vitals to avoid duplicating values
    agg = window.groupby('hour_idx')['urineoutput'].sum(min_count=1)
    out.loc[agg.index, 'urineoutput'] = agg.values
    return out


def aggregate_hourly_events(hours, vitals=None, gcs=None, vent=None, uo=None, vent_overlap='endpoints'):
    """Aggregate the four event streams of one stay onto its hourly timeline.

    Args:
        hours: timeline from ``build_icustay_hours``, ordered by hr
        vitals: DataFrame [charttime, heartrate, tempc, meanbp, resprate]
        gcs: DataFrame [charttime, gcs]
        vent: DataFrame [starttime, endtime] of ventilation episodes
        uo: DataFrame [charttime, urineoutput]
        vent_overlap: 'endpoints' or 'any', see ``aggregate_mechvent``
    Returns:
        ``hours`` with the aggregate columns appended
    """
    hours = hours.reset_index(drop=True)
    parts = [
        hours,
        aggregate_vitals(hours, vitals),
        aggregate_gcs(hours, gcs),
        aggregate_mechvent(hours, vent, overlap=vent_overlap),
        aggregate_urine_output(hours, uo),
    ]
    return pd.concat(parts, axis=1)
