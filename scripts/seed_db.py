from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.vaccination_system.vaccination_system.database.bootstrap import DEMO_COORDINATOR, ensure_demo_data
from src.vaccination_system.vaccination_system.database.connection import DatabaseConnection, DBConfig


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection(DBConfig.from_mapping(settings.DB_CONFIG))

    coordinator_id = ensure_demo_data(conn)
    print(
        f"OK: Seeded database -> {conn.config.describe()} "
        f"(coordinator #{coordinator_id}: {DEMO_COORDINATOR['email']} / {DEMO_COORDINATOR['password']})"
    )


if __name__ == "__main__":
    main()
