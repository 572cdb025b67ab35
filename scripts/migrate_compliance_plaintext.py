#!/usr/bin/env python3
"""
Encrypt legacy plaintext NIF/NISS/IBAN values on user_compliance.

Runs the same batch as POST /functions/v1/compliance-migrate until no
plaintext rows remain. Needs PII_ENCRYPTION_KEY.
"""
import sys
import os

# Add parent directory to path to import agrox modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from agrox.config import settings
from agrox.db import session_scope
from agrox.services.compliance import migrate_plaintext


def migrate_all() -> int:
    if not settings.pii_encryption_key:
        print("PII_ENCRYPTION_KEY is not set.")
        return 0

    total = 0
    with session_scope() as db:
        while True:
            result = migrate_plaintext(db)
            total += result["migrated"]
            print(f"  - batch: scanned {result['scanned']}, migrated {result['migrated']}")
            if result["scanned"] == 0:
                break
    return total


if __name__ == "__main__":
    count = migrate_all()
    print(f"[OK] {count} rows migrated")
