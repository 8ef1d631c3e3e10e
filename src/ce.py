"""
OASIS inputs extraction from MIMIC-IV: vital signs and Glasgow Coma Scale.

Both are pivoted from chartevents to one row per stay and charttime.
"""

from db import run_extraction


# vitals: heart rate, mean BP, respiratory rate, temperature in Celsius.
# Readings outside the physiological bounds below are dropped at extraction.
VITALS_QUERY = """
select stay_id, extract(epoch from charttime) as charttime
    , avg(case when itemid = 220045 and valuenum > 0 and valuenum < 300 then valuenum end) as heartrate
    , avg(case when itemid in (220052, 220181, 225312) and valuenum > 0 and valuenum < 300 then valuenum end) as meanbp
    , avg(case when itemid in (220210, 224690) and valuenum > 0 and valuenum < 70 then valuenum end) as resprate
    , round(cast(avg(case
        when itemid = 223761 and valuenum > 70 and valuenum < 120 then (valuenum - 32) / 1.8
        when itemid = 223762 and valuenum > 10 and valuenum < 50 then valuenum
      end) as numeric), 2) as tempc
from mimiciv_icu.chartevents
where stay_id is not null
and itemid in (220045, 220052, 220181, 225312, 220210, 224690, 223761, 223762)
group by stay_id, charttime
order by stay_id, charttime
"""

"""
 Itemid | Label
-----------------------------------------------------
 220045 | Heart Rate
 220052 | Arterial Blood Pressure mean
 220181 | Non Invasive Blood Pressure mean
 225312 | ART BP Mean
 220210 | Respiratory Rate
 224690 | Respiratory Rate (Total)
 223761 | Temperature Fahrenheit
 223762 | Temperature Celsius
"""

# gcs: the three components are charted separately, the total is their sum.
# A verbal response of "No Response-ETT" (intubated) scores as normal (5).
GCS_QUERY = """
select stay_id, extract(epoch from charttime) as charttime
    , max(case when itemid = 220739 then valuenum end)
    + max(case when itemid = 223900 then
        case when value = 'No Response-ETT' then 5 else valuenum end end)
    + max(case when itemid = 223901 then valuenum end) as gcs
from mimiciv_icu.chartevents
where stay_id is not null
and itemid in (220739, 223900, 223901)
group by stay_id, charttime
order by stay_id, charttime
"""

"""
 Itemid | Label
-----------------------------------------------------
 220739 | GCS - Eye Opening
 223900 | GCS - Verbal Response
 223901 | GCS - Motor Response
"""

QUERIES = {
    'vitals.csv': VITALS_QUERY,
    'gcs.csv': GCS_QUERY,
}


def main(argv=None):
    run_extraction(QUERIES, argv)


if __name__ == "__main__":
    main()
