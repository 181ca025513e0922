"""
Service layer for project scheduling and escort assignment.
Combines backend reads with the pure scheduling, escort and assignment modules.
"""
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from talentdesk.assignments.pending import PendingChangeRegistry
from talentdesk.assignments.slots import AssignmentList, build_assignment_payload
from talentdesk.assignments.validation import AssignmentValidator, TalentGroupValidator
from talentdesk.datetime_utils import format_iso_date, parse_iso_date, to_calendar_date
from talentdesk.errors import ErrorCode, ValidationError
from talentdesk.escorts.engine import (
    build_assignments_by_escort,
    escort_from_roster_entry,
    filter_escorts_available_on,
    filter_escorts_by_name,
    group_by_section,
    partition_escorts,
    visible_sections,
)
from talentdesk.logging_config import get_logger
from talentdesk.scheduling.calculator import (
    ProjectSchedule,
    build_project_timeline,
    build_schedule_from_strings,
    classify_date,
    dates_to_iso_strings,
    is_date_in_project_range,
    next_transition_at,
    validate_project_dates,
    validate_scheduled_dates,
)
from talentdesk.scheduling.editor import TalentScheduleEditor

logger = get_logger(__name__)


def _project_field(project: Dict[str, Any], snake: str, camel: str):
    return project.get(snake) if project.get(snake) is not None else project.get(camel)


class ProjectService:
    """Project operations backed by the project backend."""

    def __init__(self, backend, auto_add_show_dates: bool = True):
        self.backend = backend
        self.auto_add_show_dates = auto_add_show_dates

    # -------------------------
    # Schedule
    # -------------------------
    def load_schedule(self, project_id: str, project: Optional[Dict[str, Any]] = None) -> ProjectSchedule:
        """
        Fetch the project (unless given) and build its schedule.

        Raises:
            ValidationError: If the project has no usable start/end dates
        """
        if project is None:
            project = self.backend.get_project(project_id) or {}
        start = _project_field(project, 'start_date', 'startDate')
        end = _project_field(project, 'end_date', 'endDate')
        if not start or not end:
            raise ValidationError(
                "Project start and end dates are required",
                code=ErrorCode.INVALID_DATE_RANGE,
                details={'projectId': project_id},
            )
        return build_schedule_from_strings(start, end)

    def get_project_schedule(self, project_id: str, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Schedule, timeline and date checks for a project.

        The next automatic transition depends on the project's lifecycle
        phase (pre_show, active, ...), which the backend reports separately
        from the project's status.

        Returns:
            dict with status, phase, schedule, timeline, validation and nextTransitionAt
        """
        project = self.backend.get_project(project_id) or {}
        schedule = self.load_schedule(project_id, project)
        report = validate_project_dates(schedule.start_date, schedule.end_date)
        phase = (self.backend.get_phase(project_id) or {}).get('currentPhase')
        transition = next_transition_at(schedule, phase)

        return {
            'projectId': project_id,
            'status': project.get('status'),
            'phase': phase,
            'schedule': schedule.to_dict(),
            'timeline': [entry.to_dict() for entry in build_project_timeline(schedule, today)],
            'validation': {
                'isValid': report.is_valid,
                'errors': report.errors,
                'warnings': report.warnings,
            },
            'nextTransitionAt': transition.isoformat() if transition else None,
        }

    def _require_project_day(self, schedule: ProjectSchedule, day) -> date:
        day = parse_iso_date(day) if isinstance(day, str) else to_calendar_date(day)
        if not is_date_in_project_range(day, schedule):
            raise ValidationError(
                f"{format_iso_date(day)} is outside the project range",
                code=ErrorCode.DATE_OUT_OF_RANGE,
                field='date',
            )
        return day

    def schedule_editor(self, project_id: str, talent_id: Optional[str], scheduled_dates: Iterable = (),
                        is_group: bool = False, registry: Optional[PendingChangeRegistry] = None,
                        schedule: Optional[ProjectSchedule] = None) -> TalentScheduleEditor:
        """Editable schedule row for one talent or group, saved through this service's backend."""
        if schedule is None:
            schedule = self.load_schedule(project_id)
        return TalentScheduleEditor(
            project_id,
            talent_id,
            schedule,
            self.backend,
            scheduled_dates=scheduled_dates,
            is_group=is_group,
            registry=registry,
            auto_add_show_dates=self.auto_add_show_dates,
        )

    def toggle_schedule_date(self, project_id: str, selected: Iterable, day,
                             talent_id: Optional[str] = None, is_group: bool = False) -> List[str]:
        """
        Apply one day toggle to a talent's unsaved selection.

        Returns:
            list: The new selection as sorted YYYY-MM-DD strings
        """
        current = [parse_iso_date(d) if isinstance(d, str) else d for d in selected]
        editor = self.schedule_editor(project_id, talent_id, scheduled_dates=current, is_group=is_group)
        editor.toggle(parse_iso_date(day) if isinstance(day, str) else day)
        return dates_to_iso_strings(editor.scheduled_dates)

    def update_talent_schedule(self, project_id: str, talent_id: str, scheduled_dates: Iterable,
                               is_group: bool = False) -> Any:
        """
        Validate a talent's selected days against the project and save them.

        Raises:
            ValidationError: If any day is outside the project range
        """
        schedule = self.load_schedule(project_id)
        dates = sorted({parse_iso_date(d) if isinstance(d, str) else to_calendar_date(d)
                        for d in scheduled_dates})
        result = validate_scheduled_dates(dates, schedule)
        if not result.is_valid:
            raise ValidationError(
                result.error_message,
                code=ErrorCode.DATE_OUT_OF_RANGE,
                field='scheduledDates',
                details={'invalidDates': [format_iso_date(d) for d in result.invalid_dates]},
            )
        return self.backend.update_talent_schedule(project_id, talent_id, dates, is_group=is_group)

    # -------------------------
    # Escorts
    # -------------------------
    def get_escort_options(self, project_id: str, day, talent_id: Optional[str] = None,
                           search: Optional[str] = None, available_only: bool = False) -> Dict[str, Any]:
        """
        Escort picker contents for one talent on one day.

        Args:
            project_id: Project id
            day: Day being assigned (date or YYYY-MM-DD)
            talent_id: Talent whose slot is being edited
            search: Optional name filter
            available_only: Drop escorts who did not declare this day available

        Returns:
            dict: {date, dayType, sections: [{section, escorts: [...]}]}
        """
        schedule = self.load_schedule(project_id)
        day = self._require_project_day(schedule, day)

        escorts = [escort_from_roster_entry(entry, schedule) for entry in self.backend.get_team_roster(project_id)]
        if available_only:
            escorts = filter_escorts_available_on(escorts, day)
        escorts = filter_escorts_by_name(escorts, search)

        day_assignments = {
            project_day: (self.backend.get_assignments(project_id, project_day) or {}).get('assignments') or []
            for project_day in schedule.all_dates
        }
        statuses = partition_escorts(
            escorts,
            build_assignments_by_escort(day_assignments),
            day,
            schedule,
            editing_talent_id=talent_id,
        )

        day_type = classify_date(day, schedule)
        grouped = group_by_section(statuses)
        logger.info(
            "Built escort options",
            project_id=project_id,
            date=format_iso_date(day),
            day_type=day_type.value,
            escorts=len(statuses),
        )
        return {
            'date': format_iso_date(day),
            'dayType': day_type.value,
            'sections': [
                {'section': section.value, 'escorts': [status.to_dict() for status in grouped[section]]}
                for section in visible_sections(day_type)
            ],
        }

    # -------------------------
    # Assignments
    # -------------------------
    def get_day_assignments(self, project_id: str, day,
                            registry: Optional[PendingChangeRegistry] = None) -> List[AssignmentList]:
        """
        One day's assignment lists.

        With a registry, each edited slot registers itself there and confirming
        any of them saves the whole day through save_day_assignments().
        """
        response = self.backend.get_assignments(project_id, day) or {}
        lists: List[AssignmentList] = []
        options: Dict[str, Any] = {}
        if registry is not None:
            options = {
                'registry': registry,
                'persist': lambda _changed: self.save_day_assignments(project_id, day, lists),
            }
        lists.extend(AssignmentList.from_backend(entry, **options) for entry in response.get('assignments') or [])
        return lists

    def save_day_assignments(self, project_id: str, day, lists: Iterable[AssignmentList]) -> Any:
        """
        Validate one day's escort assignments and save them.

        Raises:
            ValidationError: Day outside the project, too many escorts, double booking,
            or escorts bound to talent not scheduled that day
        """
        lists = list(lists)
        schedule = self.load_schedule(project_id)
        day = self._require_project_day(schedule, day)
        AssignmentValidator.validate_day(lists, day, schedule)

        result = self.backend.update_assignments(project_id, day, build_assignment_payload(lists))
        for assignment_list in lists:
            assignment_list.mark_confirmed()
        logger.info("Saved day assignments", project_id=project_id, date=format_iso_date(day), rows=len(lists))
        return result

    # -------------------------
    # Talent groups
    # -------------------------
    def save_talent_group(self, project_id: str, group_id: str, group_name: Optional[str],
                          members: Optional[List[Dict[str, Any]]],
                          point_of_contact_name: Optional[str] = None,
                          point_of_contact_phone: Optional[str] = None) -> Any:
        body = TalentGroupValidator.validate(group_name, members, point_of_contact_name, point_of_contact_phone)
        return self.backend.update_talent_group(project_id, group_id, body)

    # -------------------------
    # Dashboard and lifecycle
    # -------------------------
    def get_dashboard(self, project_id: str) -> Dict[str, Any]:
        return {
            'project': self.backend.get_project(project_id),
            'phase': self.backend.get_phase(project_id),
            'actionItems': self.backend.get_action_items(project_id, include_readiness=True),
        }

    def activate(self, project_id: str) -> Any:
        logger.info("Activating project", project_id=project_id)
        return self.backend.activate_project(project_id)

    def archive(self, project_id: str) -> Any:
        logger.info("Archiving project", project_id=project_id)
        return self.backend.archive_project(project_id)

    def set_roles_complete(self, project_id: str, complete: bool) -> Any:
        return self.backend.set_roles_complete(project_id, complete)
