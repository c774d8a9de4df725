"""
Export active actions as CSV or JSON.

Both formats carry the same fields, in camelCase, in display order.
"""
import csv
import io
import json

from sqlalchemy.orm import Session

from taskapp.infrastructure.db.models import ActionModel
from taskapp.infrastructure.db.repositories import ActionRepository

EXPORT_FIELDS = [
    "id",
    "title",
    "list",
    "sortIndex",
    "createdAt",
    "updatedAt",
    "reminderType",
    "reminderDate",
    "reminderTime",
    "reminderWeekday",
    "reminderMonthday",
]


def _export_row(action: ActionModel) -> dict:
    return {
        "id": action.id,
        "title": action.title,
        "list": action.list,
        "sortIndex": action.sort_index,
        "createdAt": action.created_at,
        "updatedAt": action.updated_at,
        "reminderType": action.reminder_type,
        "reminderDate": action.reminder_date,
        "reminderTime": action.reminder_time,
        "reminderWeekday": action.reminder_weekday,
        "reminderMonthday": action.reminder_monthday,
    }


class ExportService:
    def __init__(self, db: Session):
        self.db = db

    def rows(self) -> list[dict]:
        return [_export_row(action) for action in ActionRepository(self.db).list_active()]

    def export_actions_csv(self) -> str:
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=EXPORT_FIELDS, lineterminator="\n")
        writer.writeheader()
        for row in self.rows():
            writer.writerow({key: "" if value is None else value for key, value in row.items()})
        return buffer.getvalue()

    def export_actions_json(self) -> str:
        return json.dumps(self.rows(), indent=2, ensure_ascii=False)
