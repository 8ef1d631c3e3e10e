"""
OASIS inputs extraction from MIMIC-IV: ICU stays.

One row per ICU stay with the stay and parent admission identifiers and the
intake / discharge times as epoch seconds.
"""

from db import run_extraction


# 0. icustay mappings
# outtime can be null for a handful of stays, those are reported as malformed
# when scoring rather than filtered here.
QUERY = """
select subject_id, hadm_id, stay_id
    , extract(epoch from intime) as intime
    , extract(epoch from outtime) as outtime
from mimiciv_icu.icustays
order by subject_id, hadm_id, stay_id
"""

QUERIES = {'icustays.csv': QUERY}


def main(argv=None):
    run_extraction(QUERIES, argv)


if __name__ == "__main__":
    main()
