"""
OASIS inputs extraction from MIMIC-IV: urine output.

One row per stay and charttime with the summed volume (mL). GU irrigant
instilled is subtracted from the volume out, as it is not urine.
"""

from db import run_extraction


# uo (Real-time Urine Output)
QUERY = """
select stay_id, extract(epoch from charttime) as charttime
    , sum(case when itemid = 227488 then -1 * value else value end) as urineoutput
from mimiciv_icu.outputevents
where stay_id is not null and value is not null and itemid in
(226559, 226560, 226561, 226584, 226563, 226564, 226565, 226567,
226557, 226558, 227488, 227489)
group by stay_id, charttime
order by stay_id, charttime
"""

"""
 Itemid | Label
-----------------------------------------------------
 226559 | Foley
 226560 | Void
 226561 | Condom Cath
 226584 | Ileoconduit
 226563 | Suprapubic
 226564 | R Nephrostomy
 226565 | L Nephrostomy
 226567 | Straight Cath
 226557 | R Ureteral Stent
 226558 | L Ureteral Stent
 227488 | GU Irrigant Volume In
 227489 | GU Irrigant/Urine Volume Out
"""

QUERIES = {'uo.csv': QUERY}


def main(argv=None):
    run_extraction(QUERIES, argv)


if __name__ == "__main__":
    main()
