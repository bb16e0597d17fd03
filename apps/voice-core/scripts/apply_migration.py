#!/usr/bin/env python3
"""
Show the voice report migration and how to apply it.

The Supabase Python client cannot run DDL through the REST API, so this
script prints the statements and the manual steps instead.
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def apply_migration(sql_file_path: str):
    """Print migration statements from SQL file"""
    print("\n" + "="*80)
    print(f"MIGRATION: {os.path.basename(sql_file_path)}")
    print("="*80 + "\n")

    try:
        with open(sql_file_path, 'r') as f:
            sql = f.read()
    except FileNotFoundError:
        print(f"❌ Error: Migration file not found: {sql_file_path}")
        sys.exit(1)

    statements = [s.strip() for s in sql.split(';')]
    statements = [s for s in statements if s and not all(line.startswith('--') for line in s.splitlines())]

    print(f"{len(statements)} statements:")
    print("-" * 80)
    for i, statement in enumerate(statements, 1):
        first_line = next(line for line in statement.splitlines() if not line.startswith('--'))
        print(f"  {i}. {first_line}")
    print("-" * 80 + "\n")

    print("⚠️  The Supabase Python client doesn't support direct SQL execution.")
    print("  Please apply this migration manually:")
    print("  1. Go to your Supabase dashboard")
    print("  2. Navigate to SQL Editor")
    print(f"  3. Copy and paste the contents of: {sql_file_path}")
    print("  4. Execute the SQL, then run scripts/verify_migration.py")
    print()


if __name__ == '__main__':
    migration_file = os.path.join(
        os.path.dirname(__file__),
        '..',
        '..',
        '..',
        'docs',
        'migrations',
        'create_voice_reports.sql'
    )

    apply_migration(migration_file)
