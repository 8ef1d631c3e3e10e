"""
OASIS inputs extraction from MIMIC-IV: mechanical ventilation episodes.

Episodes come from the ventilation concept (mimiciv_derived.ventilation);
only invasive ventilation and tracheostomy count as mechanical ventilation.
"""

from db import run_extraction


# ventdurations (start/end of each episode)
QUERY = """
select stay_id
    , extract(epoch from starttime) as starttime
    , extract(epoch from endtime) as endtime
from mimiciv_derived.ventilation
where stay_id is not null
and ventilation_status in ('InvasiveVent', 'Tracheostomy')
order by stay_id, starttime
"""

QUERIES = {'ventdurations.csv': QUERY}


def main(argv=None):
    run_extraction(QUERIES, argv)


if __name__ == "__main__":
    main()
