"""Example: drive the service layer directly, without Flask.

Registers today's records for every student marked present in a class and
prints the most recent history of the first one.
"""

import importlib
import logging
import sys
from datetime import date

from config import get_settings_module

from daily_care.container import build_container


def main(class_id: str, staff_id: str):
    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    batch = container.batch_registrar.register_present_students(class_id, date.today(), staff_id).unwrap()
    print(f"created={batch.created} skipped={batch.skipped} failed={list(batch.failed)}")

    present = container.attendance_gate.view(class_id, date.today()).present_ids
    if present:
        for record in container.history_query.most_recent(present[0], 5).unwrap():
            print(record.day, record.meals)


if __name__ == "__main__":
    main(*(sys.argv[1:3] if len(sys.argv) >= 3 else ("class-1", "staff-1")))
