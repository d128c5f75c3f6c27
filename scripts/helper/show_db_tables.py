#!/usr/bin/env python3
"""Print every table's columns, row count and first rows."""

import os
import sys
import argparse
import logging

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from sqlalchemy import MetaData, Table, func, inspect, select

from ellarises.db import Database

logging.basicConfig(level=logging.WARNING)

MAX_WIDTH = 30

def _cell(value) -> str:
    return ('NULL' if value is None else str(value))[:MAX_WIDTH]

def _print_rows(columns, rows) -> None:
    widths = {
        col: min(max([len(col)] + [len(_cell(row[i])) for row in rows]), MAX_WIDTH)
        for i, col in enumerate(columns)
    }
    header = ' | '.join(col.ljust(widths[col]) for col in columns)
    print('  ' + header)
    print('  ' + '-' * len(header))
    for row in rows:
        print('  ' + ' | '.join(_cell(row[i]).ljust(widths[col]) for i, col in enumerate(columns)))

def show_tables(limit: int) -> None:
    database = Database()
    inspector = inspect(database.engine)
    metadata = MetaData()

    print('=' * 80)
    print('DATABASE TABLES AND CONTENTS')
    print('=' * 80)
    print(f"\nDatabase: {database.engine.url.render_as_string(hide_password=True)}\n")

    names = sorted(inspector.get_table_names())
    if not names:
        print('No tables found in the database.')
        database.dispose()
        return
    print(f"Found {len(names)} tables:\n")

    with database.engine.connect() as conn:
        for name in names:
            print('─' * 80)
            print(f"TABLE: {name.upper()}")
            print('─' * 80)

            print('\nColumns:')
            for col in inspector.get_columns(name):
                nullable = 'NULL' if col['nullable'] else 'NOT NULL'
                default = f" DEFAULT {col['default']}" if col.get('default') else ''
                print(f"  - {col['name']}: {col['type']} {nullable}{default}")

            table = Table(name, metadata, autoload_with=conn)
            count = conn.execute(select(func.count()).select_from(table)).scalar()
            print(f"\nRow count: {count}")

            if count:
                result = conn.execute(select(table).limit(limit))
                print('\nData:')
                _print_rows(list(result.keys()), result.fetchall())
                if count > limit:
                    print(f"  ... (showing first {limit} rows, total: {count})")
            else:
                print('  (No data)')
            print('')

    print('=' * 80)
    print('END OF DATABASE CONTENTS')
    print('=' * 80)
    database.dispose()

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Show database tables and their contents')
    parser.add_argument('--limit', type=int, default=50, help='Rows to show per table')
    args = parser.parse_args()

    try:
        show_tables(args.limit)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)
