from unittest import mock

import pandas as pd
import pytest

import admissions
import ce
import db
import icustays
import mechvent
import uo


def test_queries_select_the_scoring_inputs():
    assert 'extract(epoch from intime) as intime' in icustays.QUERY
    assert 'extract(epoch from outtime) as outtime' in icustays.QUERY
    for col in ('admittime', 'admission_type', 'surgical', 'age'):
        assert col in admissions.QUERY
    for col in ('heartrate', 'meanbp', 'resprate', 'tempc'):
        assert f'as {col}' in ce.VITALS_QUERY
    assert 'as gcs' in ce.GCS_QUERY
    assert 'mimiciv_derived.ventilation' in mechvent.QUERY
    assert 'as urineoutput' in uo.QUERY


def test_output_files_match_what_the_scorer_loads():
    filenames = set()
    for module in (icustays, admissions, ce, mechvent, uo):
        filenames.update(module.QUERIES)
    assert filenames == {'icustays.csv', 'admissions.csv', 'vitals.csv', 'gcs.csv', 'ventdurations.csv', 'uo.csv'}


def test_parse_db_args_defaults():
    pargs = db.parse_db_args(['-u', 'user', '-p', 'secret'])
    assert pargs.username == 'user'
    assert pargs.password == 'secret'
    assert pargs.host == 'localhost'
    assert pargs.dbname == 'mimiciv'


def test_run_extraction_writes_pipe_separated_files(tmp_path):
    stays = pd.DataFrame({'subject_id': [1], 'hadm_id': [2], 'stay_id': [3],
                          'intime': [1.6e9], 'outtime': [1.6e9 + 7200]})
    conn = mock.MagicMock()
    with mock.patch.object(db.pg, 'connect', return_value=conn) as connect, \
            mock.patch.object(db.pd, 'read_sql_query', return_value=stays) as read_sql:
        icustays.main(['-u', 'user', '-p', 'secret', '--exportdir', str(tmp_path / 'processed_files')])

    connect.assert_called_once()
    assert "user=user" in connect.call_args[0][0]
    read_sql.assert_called_once_with(icustays.QUERY, conn)
    conn.close.assert_called_once()

    written = pd.read_csv(tmp_path / 'processed_files' / 'icustays.csv', sep='|')
    pd.testing.assert_frame_equal(written, stays)


def test_run_extraction_closes_connection_on_error(tmp_path):
    conn = mock.MagicMock()
    with mock.patch.object(db.pg, 'connect', return_value=conn), \
            mock.patch.object(db.pd, 'read_sql_query', side_effect=RuntimeError('timeout')):
        with pytest.raises(RuntimeError):
            ce.main(['-u', 'user', '-p', 'secret', '--exportdir', str(tmp_path)])
    conn.close.assert_called_once()
