"""SQL statements shared by the storage adapters.

Statements use ``?`` placeholders (DuckDB's qmark style); the PostgreSQL
adapter rewrites them to ``%s`` before execution. Caller-supplied values are
always bound as parameters.
"""

from anak_trials.domain.models import CHECKPOINT_FIELDS

PLACEHOLDER = "?"

SELECT_ONE = "SELECT 1"

LIST_CHILDREN = "SELECT * FROM anak ORDER BY tahun_masuk, nama, tanggal_lahir"

GET_CHILD = "SELECT * FROM anak WHERE nisn = ?"

# medicine_kode is taken from the medicine row, so it is NULL when unmatched
MATCHED_MEDICINE_KODE = "matched_medicine_kode"

LIST_TRIALS_FOR_CHILD = f"""
    SELECT ct.*,
           m.kode AS {MATCHED_MEDICINE_KODE},
           m.nama AS medicine_name
    FROM clinical_trials AS ct
    LEFT JOIN medicine AS m ON ct.medicine_kode = m.kode
    WHERE ct.nisn = ?
    ORDER BY ct.id
"""

UPDATE_TRIAL_CHECKPOINT = f"""
    UPDATE clinical_trials
    SET
        {", ".join(f"{field} = ?" for field in CHECKPOINT_FIELDS)}
    WHERE id = ?
"""

LIST_ALL_TRIALS = "SELECT * FROM clinical_trials ORDER BY id"
