#!/usr/bin/env python3
"""
Simple migration verification without user prompts
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from config import settings
from services.report_store import ReportStore, REPORTS_TABLE, CASES_TABLE
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def verify():
    print("\n" + "=" * 70)
    print("Voice Report Migration Verification")
    print("=" * 70)

    store = ReportStore.from_settings(settings)
    logger.info("Connected to database")

    checks = {
        f"{REPORTS_TABLE} table": lambda: store.client.table(REPORTS_TABLE)
        .select("id, session_id, transcript_summary, received_at, source")
        .limit(1)
        .execute(),
        f"{CASES_TABLE} correlation columns": lambda: store.client.table(CASES_TABLE)
        .select("id, vapi_session_id, vapi_report_summary")
        .limit(1)
        .execute(),
    }

    passed = True
    for name, check in checks.items():
        try:
            check()
            print(f"   - {name}: ✅ EXISTS")
        except Exception as e:
            passed = False
            print(f"   - {name}: ❌ MISSING ({e})")

    if passed:
        print("\n✅ Migration SUCCESSFUL!\n")
    else:
        print("\n❌ Migration incomplete - run scripts/apply_migration.py for instructions\n")

    return passed


if __name__ == "__main__":
    sys.exit(0 if verify() else 1)
