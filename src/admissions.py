"""
OASIS inputs extraction from MIMIC-IV: admission facts.

One row per ICU stay with the hospital admission time, the admission type,
a surgical flag and the patient's age at admission.
"""

from db import run_extraction


# surgical: the patient was under a surgical service (any *SURG* service or
# orthopaedics) before the end of the first ICU day.
# Left joins keep stays whose admission or service rows are absent so that the
# missing facts show up as nulls downstream.
QUERY = """
with surgflag as
(
  select ie.stay_id
    , max(case
        when lower(se.curr_service) like '%surg%' then 1
        when se.curr_service = 'ORTHO' then 1
        else 0 end) as surgical
  from mimiciv_icu.icustays ie
  left join mimiciv_hosp.services se
    on ie.hadm_id = se.hadm_id
    and se.transfertime < ie.intime + interval '1' day
  group by ie.stay_id
)
select ie.stay_id, ie.hadm_id
    , extract(epoch from adm.admittime) as admittime
    , adm.admission_type
    , sf.surgical
    , pat.anchor_age + extract(year from adm.admittime) - pat.anchor_year as age
from mimiciv_icu.icustays ie
left join mimiciv_hosp.admissions adm
  on ie.hadm_id = adm.hadm_id
left join mimiciv_hosp.patients pat
  on ie.subject_id = pat.subject_id
left join surgflag sf
  on ie.stay_id = sf.stay_id
order by ie.stay_id
"""

"""
 admission_type (MIMIC-IV)
-----------------------------------------------------
 ELECTIVE | SURGICAL SAME DAY ADMISSION | URGENT | EW EMER. | DIRECT EMER. | ...
 Only ELECTIVE counts as elective for OASIS.
"""

QUERIES = {'admissions.csv': QUERY}


def main(argv=None):
    run_extraction(QUERIES, argv)


if __name__ == "__main__":
    main()
