"""Example: drive the service layer directly (no Flask).

Controllers stay thin; the attendance rules live in the service and the
state machine underneath it.
"""

import importlib

from config import get_settings_module

from src.geo_attendance.geo_attendance.attendance.model import Identity
from src.geo_attendance.geo_attendance.container import build_container
from src.geo_attendance.geo_attendance.geo.model import Coordinate


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    identity = Identity.of("Budi", 1, 1)
    here = Coordinate(latitude=-6.2003, longitude=106.8166)
    print(container.attendance_service.get_status(identity, here).to_dict())


if __name__ == "__main__":
    main()
