"""
Editable schedule rows for talent and talent groups.

Each row holds the talent's selected project days. Toggling a day makes the
row pending; confirm() sends the full selection to the backend. Rows register
themselves with a PendingChangeRegistry so the page can confirm them all.
"""
from datetime import date
from typing import Iterable, List, Optional

from talentdesk.assignments.pending import EditableField, PendingChangeRegistry, PendingRow
from talentdesk.datetime_utils import to_calendar_date
from talentdesk.logging_config import get_logger
from talentdesk.scheduling.calculator import ProjectSchedule, format_date_range, toggle_scheduled_date

logger = get_logger(__name__)


def _normalize(dates: Iterable) -> frozenset:
    return frozenset(to_calendar_date(d) for d in dates)


class TalentScheduleEditor:
    """Pending schedule edits for one talent or group."""

    def __init__(self, project_id: str, talent_id: str, schedule: ProjectSchedule, backend,
                 scheduled_dates: Iterable = (), is_group: bool = False,
                 registry: Optional[PendingChangeRegistry] = None, auto_add_show_dates: bool = True):
        self.project_id = project_id
        self.talent_id = talent_id
        self.schedule = schedule
        self.is_group = is_group
        self.auto_add_show_dates = auto_add_show_dates
        self._backend = backend
        self._row = PendingRow(
            key=self.row_key,
            field=EditableField(_normalize(scheduled_dates)),
            persist=self._persist,
            registry=registry,
        )

    @property
    def row_key(self) -> str:
        kind = 'group' if self.is_group else 'talent'
        return f"schedule:{kind}:{self.talent_id}"

    @property
    def scheduled_dates(self) -> List[date]:
        return sorted(self._row.field.value)

    @property
    def confirmed_dates(self) -> List[date]:
        return sorted(self._row.field.baseline)

    @property
    def dirty(self) -> bool:
        return self._row.dirty

    @property
    def state(self):
        return self._row.field.state

    def summary(self) -> str:
        return format_date_range(self.scheduled_dates)

    def toggle(self, day) -> List[date]:
        """
        Select or deselect one day.

        Raises:
            ValidationError: If the day is outside the project, or a save is in flight
        """
        updated = toggle_scheduled_date(
            self._row.field.value,
            day,
            self.schedule,
            auto_add_show_dates=self.auto_add_show_dates,
        )
        self._row.edit(updated)
        return self.scheduled_dates

    def set_dates(self, dates: Iterable) -> None:
        self._row.edit(_normalize(dates))

    def cancel(self) -> None:
        self._row.cancel()

    def reload(self, scheduled_dates: Iterable) -> None:
        """Replace the confirmed schedule with fresh backend data."""
        self._row.reset(_normalize(scheduled_dates))

    def detach(self) -> None:
        self._row.detach()

    def confirm(self):
        """Persist the selection; the row stays pending if the backend call fails."""
        return self._row.confirm()

    def _persist(self, dates: frozenset):
        logger.info(
            "Saving talent schedule",
            project_id=self.project_id,
            talent_id=self.talent_id,
            is_group=self.is_group,
            days=len(dates),
        )
        return self._backend.update_talent_schedule(
            self.project_id,
            self.talent_id,
            sorted(dates),
            is_group=self.is_group,
        )
