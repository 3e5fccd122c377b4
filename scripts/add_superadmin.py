from __future__ import annotations

import argparse
import getpass
import importlib
import os
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from dotenv import load_dotenv

from config import get_settings_module

from calendar_admin.common.app_logger import setup_logging
from calendar_admin.core.constants import MIN_PASSWORD_LENGTH
from calendar_admin.database.bootstrap import ensure_superadmin
from calendar_admin.users.schemas import normalize_email


def main() -> int:
    load_dotenv(override=False)
    parser = argparse.ArgumentParser(description="Create an admin with edit rights on every module (once).")
    parser.add_argument("--email", default=os.getenv("SUPERADMIN_EMAIL", ""))
    parser.add_argument("--name", default=os.getenv("SUPERADMIN_NAME", "Super Admin"))
    args = parser.parse_args()

    email = normalize_email(args.email)
    if not email:
        print("ERROR: --email (or SUPERADMIN_EMAIL) is required", file=sys.stderr)
        return 2

    password = os.getenv("SUPERADMIN_PASSWORD") or getpass.getpass("Password: ")
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"ERROR: password must be at least {MIN_PASSWORD_LENGTH} characters", file=sys.stderr)
        return 2

    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", None))

    if ensure_superadmin(dict(settings.DB_CONFIG), name=args.name, email=email, password=password):
        print(f"[OK] Created superadmin: {email}")
    else:
        print(f"[OK] User {email} already exists.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
