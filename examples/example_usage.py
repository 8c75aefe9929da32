"""Example: use the service layer directly (no Flask).

Prints the roster of an activity with each member's current status.
"""

import importlib
import sys

from config import get_settings_module

from attendees.container import build_container


def main(activity_id: int = 1):
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, tz_name=settings.TIMEZONE)

    activity = container.activity_service.get(activity_id)
    roster = container.roster_service.build(activity)
    for entry in roster.entries:
        print(f"{entry.status.value:>3}  {entry.full_name}")


if __name__ == "__main__":
    main(int(sys.argv[1]) if len(sys.argv) > 1 else 1)
