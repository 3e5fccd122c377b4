from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from dotenv import load_dotenv

from config import get_settings_module

from calendar_admin.common.app_logger import setup_logging
from calendar_admin.database.bootstrap import DEMO_ADMIN, DEMO_PASSWORD, DEMO_USERS, ensure_demo_users


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", None))
    db_config = dict(settings.DB_CONFIG)

    ensure_demo_users(db_config)

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )
    print(f"  admin: {DEMO_ADMIN[1]} / {DEMO_PASSWORD}")
    for _, email in DEMO_USERS:
        print(f"  user:  {email} / {DEMO_PASSWORD}")


if __name__ == "__main__":
    main()
