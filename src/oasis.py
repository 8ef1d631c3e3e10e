"""
Hourly Oxford Acute Severity of Illness Score (OASIS).

The score is calculated for every hour of every ICU stay. Each component is
scored per hour, the worst score over the trailing 24 hours is kept, and the
ten 24-hour component scores are summed. As the window covers 24 hours, care
should be taken when using the score before the end of the first day.

Inputs are the pipe-separated files produced by the extraction scripts
(icustays.py, admissions.py, ce.py, mechvent.py, uo.py).
"""

import argparse
import os
from functools import partial
from multiprocessing import Pool

import numpy as np
import pandas as pd
import pyprind

from icustay_hours import HOURS_COLUMNS, MalformedStayError, build_icustay_hours
from hourly_agg import VENT_OVERLAP_MODES, aggregate_hourly_events, check_columns
from static_attrs import STATIC_COLUMNS, attach_static_attributes, resolve_static_attributes
from oasis_scores import COMPONENTS, score_components


# components whose worst score over the trailing window is kept
WINDOWED_SCORES = [
    'age_score', 'gcs_score', 'heartrate_score', 'meanbp_score',
    'resprate_score', 'temp_score', 'urineoutput_score', 'mechvent_score',
]
# stay-level components carried through unchanged
STATIC_SCORES = ['preiculos_score', 'electivesurgery_score']

AGGREGATE_COLUMNS = [
    'heartrate_min', 'heartrate_max', 'tempc_min', 'tempc_max',
    'meanbp_min', 'meanbp_max', 'resprate_min', 'resprate_max',
    'gcs_min', 'mechvent', 'urineoutput',
]

OUTPUT_COLUMNS = (
    HOURS_COLUMNS
    + AGGREGATE_COLUMNS
    + STATIC_COLUMNS
    + ['urineoutput_24hours']
    + list(COMPONENTS)
    + [f"{col}_24hours" for col in COMPONENTS]
    + ['oasis']
)


def parse_args(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument("--input_dir", type=str, default="processed_files",
                       help="Directory containing the extracted files (default: processed_files)")
    parser.add_argument("--output_dir", type=str, default="processed_files",
                       help="Directory to save the scored hours (default: processed_files)")
    parser.add_argument("--output_file", type=str, default="oasis_hourly.csv",
                       help="Name of the output file (default: oasis_hourly.csv)")
    parser.add_argument("--window_hours", type=int, default=24,
                       help="Size of the trailing window in hours (default: 24)")
    parser.add_argument("--vent_overlap", type=str, default="endpoints", choices=VENT_OVERLAP_MODES,
                       help="How a ventilation episode has to overlap an hour to count (default: endpoints)")
    parser.add_argument("--n_jobs", type=int, default=1,
                       help="Number of worker processes, stays are scored independently (default: 1)")
    parser.add_argument("--sample_size", type=int, default=None,
                       help="Number of ICU stays to sample for testing (default: None, use all stays)")
    return parser.parse_args(argv)


def load_processed_files(input_dir):
    print('Loading processed files created from database using the extraction scripts')
    files = {
        'stay': 'icustays.csv',
        'admissions': 'admissions.csv',
        'vitals': 'vitals.csv',
        'gcs': 'gcs.csv',
        'vent': 'ventdurations.csv',
        'uo': 'uo.csv',
    }

    data = {}
    for key, filename in files.items():
        data[key] = pd.read_csv(os.path.join(input_dir, filename), sep='|')

    return data


def rolling_urine_output(hourly, window=24):
    """Urine output summed over the current hour and the preceding window - 1 hours.

    Hours without any measurement add nothing to the sum; the sum is NaN only
    when no hour of the window has a measurement.
    """
    return hourly['urineoutput'].rolling(window=window, min_periods=1).sum()


def combine_scores(scored, window=24):
    """Worst score per component over the trailing window and the final OASIS.

    The window holds the current hour and up to ``window - 1`` preceding
    hours of the same stay, so early hours use a partial window. Missing
    scores are ignored by the max and imputed as 0 only in the 24-hour
    columns and the final sum; the raw score columns keep them missing.

    Args:
        scored: hourly table of one stay with the raw component scores,
            ordered by ascending hr
        window: number of hours in the trailing window
    """
    if window < 1:
        raise ValueError(f"window must be at least 1 hour, got {window}")
    hr = scored['hr']
    if not hr.is_monotonic_increasing or hr.duplicated().any():
        raise ValueError("hours must be strictly increasing within a stay")

    df = scored.copy()
    for col in STATIC_SCORES:
        df[f"{col}_24hours"] = df[col]

    for col in WINDOWED_SCORES:
        values = pd.Series(df[col].to_numpy(dtype='float64', na_value=np.nan), index=df.index)
        worst = values.rolling(window=window, min_periods=1).max()
        df[f"{col}_24hours"] = worst.fillna(0).astype(int)

    df['oasis'] = sum(
        df[f"{col}_24hours"].fillna(0).astype(int)
        for col in STATIC_SCORES + WINDOWED_SCORES
    )
    return df


def score_icustay(stay, events, facts, window=24, vent_overlap='endpoints'):
    """Compute the scored hours of a single ICU stay.

    Args:
        stay: dict-like with stay_id, hadm_id, intime and outtime
        events: dict with the vitals, gcs, vent and uo rows of this stay
            (any of them None when the stay has no such events)
        facts: admission facts of the stay, None if there are none
        window: trailing window size in hours
        vent_overlap: see ``hourly_agg.aggregate_mechvent``
    Returns:
        DataFrame with OUTPUT_COLUMNS, one row per hour
    Raises:
        MalformedStayError: the stay's times do not describe a valid interval
    """
    hours = build_icustay_hours(stay['stay_id'], stay['intime'], stay['outtime'], stay.get('hadm_id'))
    hourly = aggregate_hourly_events(
        hours,
        vitals=events.get('vitals'),
        gcs=events.get('gcs'),
        vent=events.get('vent'),
        uo=events.get('uo'),
        vent_overlap=vent_overlap,
    )
    static = resolve_static_attributes(stay['intime'], facts)
    hourly = attach_static_attributes(hourly, static)
    hourly['urineoutput_24hours'] = rolling_urine_output(hourly, window)

    scored = score_components(hourly)
    return combine_scores(scored, window)[OUTPUT_COLUMNS]


def group_by_stay(df):
    if df is None or len(df) == 0:
        return {}
    return {stay_id: group for stay_id, group in df.groupby('stay_id')}


def _stay_tasks(stays, data):
    """Yield (stay, events, facts) for every stay, each with only its own rows."""
    streams = {key: group_by_stay(data.get(key)) for key in ('vitals', 'gcs', 'vent', 'uo')}
    admissions = data.get('admissions')
    if admissions is not None and len(admissions) > 0:
        facts_by_stay = admissions.drop_duplicates(subset='stay_id').set_index('stay_id').to_dict('index')
    else:
        facts_by_stay = {}

    for stay in stays.to_dict('records'):
        stay_id = stay['stay_id']
        events = {key: rows.get(stay_id) for key, rows in streams.items()}
        yield stay, events, facts_by_stay.get(stay_id)


def _score_task(task, window=24, vent_overlap='endpoints'):
    stay, events, facts = task
    try:
        return stay['stay_id'], score_icustay(stay, events, facts, window, vent_overlap), None
    except MalformedStayError as e:
        return stay['stay_id'], None, e.reason


def score_icustays(stays, data, n_jobs=1, window=24, vent_overlap='endpoints'):
    """Score every hour of every ICU stay.

    Stays share no state, so with ``n_jobs > 1`` they are fanned out over a
    process pool. Malformed stays are reported and skipped.

    Args:
        stays: DataFrame of ICU stays [stay_id, hadm_id, intime, outtime]
        data: dict with the 'admissions', 'vitals', 'gcs', 'vent' and 'uo' tables
        n_jobs: number of worker processes
        window: trailing window size in hours
        vent_overlap: see ``hourly_agg.aggregate_mechvent``
    Returns:
        (scored hours ordered by stay_id and hr, list of malformed stay ids)
    """
    check_columns(stays, ['stay_id', 'intime', 'outtime'], 'icustays')
    if vent_overlap not in VENT_OVERLAP_MODES:
        raise ValueError(f"Unknown ventilation overlap mode: {vent_overlap}")

    # sorting keeps the output identical however the stays were listed
    stays = stays.sort_values('stay_id', kind='mergesort')
    admissions = data.get('admissions')
    if admissions is not None and len(admissions) > 0:
        no_admission = stays.loc[~stays['stay_id'].isin(admissions['stay_id']), 'stay_id'].tolist()
    else:
        no_admission = stays['stay_id'].tolist()

    if len(stays) == 0:
        return pd.DataFrame(columns=OUTPUT_COLUMNS), []

    worker = partial(_score_task, window=window, vent_overlap=vent_overlap)
    tasks = _stay_tasks(stays, data)

    print(f'Scoring {len(stays)} ICU stays')
    results = []
    bar = pyprind.ProgBar(len(stays))
    if n_jobs > 1:
        with Pool(n_jobs) as pool:
            for result in pool.imap(worker, tasks, chunksize=50):
                results.append(result)
                bar.update()
    else:
        for task in tasks:
            results.append(worker(task))
            bar.update()

    scored, malformed = [], []
    for stay_id, df, reason in results:
        if reason is not None:
            print(f"Skipping malformed stay {stay_id}: {reason}")
            malformed.append(stay_id)
        elif len(df) > 0:
            scored.append(df)

    if no_admission:
        print(f"{len(no_admission)} stays without admission facts, "
              f"pre-ICU LOS, elective surgery and age are missing for them")

    if not scored:
        return pd.DataFrame(columns=OUTPUT_COLUMNS), malformed

    out = pd.concat(scored, ignore_index=True)
    out = out.sort_values(['stay_id', 'hr'], kind='mergesort').reset_index(drop=True)
    return out, malformed


def summarize_missingness(scored):
    """Percentage of hours for which each raw component score is missing."""
    if len(scored) == 0:
        return pd.Series(dtype=float)
    return scored[list(COMPONENTS)].isna().sum() / len(scored) * 100


def main(argv=None):
    args = parse_args(argv)

    data = load_processed_files(args.input_dir)
    stays = data['stay']

    # Sample stays if sample_size is specified
    if args.sample_size is not None:
        print(f'Sampling {args.sample_size} ICU stays for testing')
        stays = stays.sample(n=min(args.sample_size, len(stays)), random_state=42)

    scored, malformed = score_icustays(
        stays, data,
        n_jobs=args.n_jobs,
        window=args.window_hours,
        vent_overlap=args.vent_overlap,
    )

    print("\nOASIS Statistics:")
    print("-" * 50)
    print(f"ICU stays scored: {scored['stay_id'].nunique()}")
    print(f"Malformed stays skipped: {len(malformed)}")
    print(f"Hours scored: {len(scored)}")
    if len(scored) > 0:
        print(f"Median hourly OASIS: {scored['oasis'].median():.1f}")
    print("-" * 50)

    # Print missingness statistics
    missing_pct = summarize_missingness(scored)
    print("\nMissing component percentages:")
    for col, pct in missing_pct.sort_values(ascending=False).items():
        if pct > 0:
            print(f"{col}: {pct:.1f}%")

    os.makedirs(args.output_dir, exist_ok=True)
    output_path = os.path.join(args.output_dir, args.output_file)
    scored.to_csv(output_path, index=False)
    print(f"Saved scored hours to {output_path}")

    return scored


if __name__ == "__main__":
    main()
