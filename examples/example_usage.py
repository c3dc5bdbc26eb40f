"""Example: drive the service layer directly (no Flask).

Prints the demo coordinator's dashboard numbers and next drives.
"""

import importlib

from config import get_settings_module

from src.vaccination_system.vaccination_system.container import build_container
from src.vaccination_system.vaccination_system.database.bootstrap import ensure_demo_data


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, jwt_secret=settings.JWT_SECRET)
    coordinator_id = ensure_demo_data(container.conn)

    stats = container.report_service.dashboard(coordinator_id)
    print(f"students={stats.total_students} vaccinated={stats.vaccinated_students} rate={stats.vaccination_rate}%")
    for drive in container.drive_service.upcoming(coordinator_id):
        print(drive.scheduled_at.isoformat(), drive.name, drive.location)


if __name__ == "__main__":
    main()
