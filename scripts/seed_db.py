from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.qr_attendance.qr_attendance.database.bootstrap import DEFAULT_ADMIN, ensure_admin_user


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    created = ensure_admin_user(db_config)
    if created:
        print(f"OK: Created admin {DEFAULT_ADMIN['email']} (password: {DEFAULT_ADMIN['password']})")
    else:
        print("OK: An admin account already exists, nothing to do")


if __name__ == "__main__":
    main()
