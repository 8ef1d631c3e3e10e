"""
Shared database helpers for the MIMIC-IV extraction scripts.

Every extraction script takes the same credentials, opens one connection and
dumps a single query to a pipe-separated file under ``processed_files``.
"""

import argparse
import os

import pandas as pd
import psycopg2 as pg


def parse_db_args(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument("-u", "--username", help="Username used to access the MIMIC Database", type=str)
    parser.add_argument("-p", "--password", help="User's password for MIMIC Database", type=str)
    parser.add_argument("--host", help="Database host (default: localhost)", type=str, default="localhost")
    parser.add_argument("--dbname", help="Database name (default: mimiciv)", type=str, default="mimiciv")
    parser.add_argument("--exportdir", help="Directory for extracted files (default: ./processed_files)",
                        type=str, default=os.path.join(os.getcwd(), 'processed_files'))
    return parser.parse_args(argv)


def connect(pargs):
    # Initializing database connection
    return pg.connect("dbname='{0}' user={1} host='{2}' options='--search_path=mimiciv' password={3}".format(
        pargs.dbname, pargs.username, pargs.host, pargs.password))


def get_exportdir(exportdir):
    # Path for processed data storage
    if not os.path.exists(exportdir):
        os.makedirs(exportdir)
    return exportdir


def export_query(conn, query, filename, exportdir):
    """Run ``query`` and write the result to ``exportdir/filename`` (sep='|')."""
    d = pd.read_sql_query(query, conn)
    path = os.path.join(exportdir, filename)
    d.to_csv(path, index=False, sep='|')
    print(f"Saved {len(d)} rows to {path}")
    return d


def run_extraction(queries, argv=None):
    """Entry point shared by the extraction scripts.

    Args:
        queries: dict mapping output filename to SQL query
    """
    pargs = parse_db_args(argv)
    exportdir = get_exportdir(pargs.exportdir)
    conn = connect(pargs)
    try:
        for filename, query in queries.items():
            print(f"Extracting {filename}...")
            export_query(conn, query, filename, exportdir)
    finally:
        conn.close()
