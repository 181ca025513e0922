"""
Project schedule calculation module.

A project runs from its start date to its end date inclusive. The last day
is the show day; every earlier day is a rehearsal day. All functions here
are pure and work on calendar dates, so a datetime is always reduced to its
day before it is compared.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from talentdesk.datetime_utils import (
    format_display_date,
    format_iso_date,
    parse_iso_date,
    to_calendar_date,
)
from talentdesk.errors import ErrorCode, InvalidRangeError, ValidationError
from talentdesk.scheduling.config import SchedulingConfig


class DayType(str, Enum):
    """Role of a calendar day within a project."""
    SHOW = "show"
    REHEARSAL = "rehearsal"
    OUTSIDE = "outside_project"


@dataclass(frozen=True)
class ProjectSchedule:
    """Immutable schedule derived from a project's start and end date."""
    start_date: date
    end_date: date
    all_dates: Tuple[date, ...]
    rehearsal_dates: Tuple[date, ...]
    show_dates: Tuple[date, ...]

    @property
    def is_single_day(self) -> bool:
        return self.start_date == self.end_date

    def to_dict(self) -> dict:
        return {
            'startDate': format_iso_date(self.start_date),
            'endDate': format_iso_date(self.end_date),
            'allDates': dates_to_iso_strings(self.all_dates),
            'rehearsalDates': dates_to_iso_strings(self.rehearsal_dates),
            'showDates': dates_to_iso_strings(self.show_dates),
            'isSingleDay': self.is_single_day,
        }


@dataclass
class ScheduleValidationResult:
    """Outcome of checking a set of dates against a project schedule."""
    is_valid: bool
    invalid_dates: List[date] = field(default_factory=list)
    error_message: Optional[str] = None


@dataclass
class TimelineEntry:
    """One block of the project timeline shown on the info dashboard."""
    phase: str
    description: str
    start_date: Optional[date]
    end_date: Optional[date]
    days_remaining: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            'phase': self.phase,
            'description': self.description,
            'startDate': format_iso_date(self.start_date),
            'endDate': format_iso_date(self.end_date),
            'daysRemaining': self.days_remaining,
        }


@dataclass
class DateValidationReport:
    """Errors block automatic phase transitions; warnings are informational."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


# ------------------------------------------------------------------
# Building schedules
# ------------------------------------------------------------------

def build_schedule(start_date, end_date) -> ProjectSchedule:
    """
    Build the schedule for a project.

    Args:
        start_date: First project day (date or datetime)
        end_date: Show day (date or datetime)

    Returns:
        ProjectSchedule: all days from start to end inclusive, with the end
        date as the only show date and every earlier day as a rehearsal date

    Raises:
        InvalidRangeError: If end_date is before start_date
    """
    start = to_calendar_date(start_date)
    end = to_calendar_date(end_date)
    if end < start:
        raise InvalidRangeError(start, end)

    span = (end - start).days
    all_dates = tuple(start + timedelta(days=offset) for offset in range(span + 1))

    return ProjectSchedule(
        start_date=start,
        end_date=end,
        all_dates=all_dates,
        rehearsal_dates=all_dates[:-1],
        show_dates=(end,),
    )


def build_schedule_from_strings(start_date: str, end_date: str) -> ProjectSchedule:
    """
    Build a schedule from the backend's ISO date strings.

    Raises:
        ValidationError: If either string is missing or malformed
        InvalidRangeError: If end_date is before start_date
    """
    return build_schedule(parse_iso_date(start_date), parse_iso_date(end_date))


# ------------------------------------------------------------------
# Classifying days
# ------------------------------------------------------------------

def classify_date(day, schedule: ProjectSchedule) -> DayType:
    """
    Determine whether a day is a show day, a rehearsal day, or outside the project.

    Comparison is by calendar day, so a datetime at any time of day matches.
    """
    day = to_calendar_date(day)
    if day in schedule.show_dates:
        return DayType.SHOW
    if day in schedule.rehearsal_dates:
        return DayType.REHEARSAL
    return DayType.OUTSIDE


def is_rehearsal_day(day, schedule: ProjectSchedule) -> bool:
    return classify_date(day, schedule) is DayType.REHEARSAL


def is_show_day(day, schedule: ProjectSchedule) -> bool:
    return classify_date(day, schedule) is DayType.SHOW


def is_date_in_project_range(day, schedule: ProjectSchedule) -> bool:
    day = to_calendar_date(day)
    return schedule.start_date <= day <= schedule.end_date


def validate_scheduled_dates(dates: Iterable, schedule: ProjectSchedule) -> ScheduleValidationResult:
    """
    Check that every date lies within the project range.

    Returns:
        ScheduleValidationResult: invalid_dates lists the offending days in input order
    """
    invalid = [to_calendar_date(d) for d in dates if not is_date_in_project_range(d, schedule)]
    if not invalid:
        return ScheduleValidationResult(is_valid=True)

    listed = ', '.join(format_iso_date(d) for d in invalid)
    return ScheduleValidationResult(
        is_valid=False,
        invalid_dates=invalid,
        error_message=f"The following dates are outside the project range: {listed}",
    )


def escort_available_dates(availability: Iterable, schedule: ProjectSchedule) -> List[date]:
    """Restrict an escort's declared availability to the project's days."""
    return [
        to_calendar_date(d) for d in availability
        if is_date_in_project_range(d, schedule)
    ]


def is_escort_available_on_date(availability: Iterable, day) -> bool:
    target = to_calendar_date(day)
    return any(to_calendar_date(d) == target for d in availability)


# ------------------------------------------------------------------
# Conversions and display
# ------------------------------------------------------------------

def dates_to_iso_strings(dates: Iterable) -> List[str]:
    return [format_iso_date(d) for d in dates]


def iso_strings_to_dates(values: Iterable[str]) -> List[date]:
    return [parse_iso_date(v) for v in values]


def format_date_range(dates: Iterable) -> str:
    """
    Format a set of dates as a short range for display.

    Returns 'No dates' for an empty input, a single date like '6/1/2024',
    or 'first - last' after sorting.
    """
    days = sorted(to_calendar_date(d) for d in dates)
    if not days:
        return 'No dates'
    if len(days) == 1:
        return format_display_date(days[0])
    return f"{format_display_date(days[0])} - {format_display_date(days[-1])}"


# ------------------------------------------------------------------
# Talent schedule selection
# ------------------------------------------------------------------

def toggle_scheduled_date(selected: Iterable, day, schedule: ProjectSchedule,
                          auto_add_show_dates: bool = True) -> frozenset:
    """
    Toggle one day in a talent's selected schedule.

    If the day is already selected it is removed. Otherwise it is added, and
    when it is the first day picked for the talent and it is not a show day,
    the show date(s) are added too (talent who rehearse also perform).

    Args:
        selected: Currently selected days
        day: Day being toggled
        schedule: Project schedule
        auto_add_show_dates: Whether the first rehearsal pick also selects the show

    Returns:
        frozenset: The new selection

    Raises:
        ValidationError: If the day is outside the project range
    """
    day = to_calendar_date(day)
    current = frozenset(to_calendar_date(d) for d in selected)

    validation = validate_scheduled_dates([day], schedule)
    if not validation.is_valid:
        raise ValidationError(
            validation.error_message,
            code=ErrorCode.DATE_OUT_OF_RANGE,
            field='scheduledDates',
        )

    if day in current:
        return current - {day}

    updated = current | {day}
    if auto_add_show_dates and not current and not is_show_day(day, schedule):
        updated = updated | set(schedule.show_dates)
    return frozenset(updated)


# ------------------------------------------------------------------
# Timeline and transitions
# ------------------------------------------------------------------

def build_project_timeline(schedule: ProjectSchedule, today: Optional[date] = None) -> List[TimelineEntry]:
    """
    Build the project timeline: preparation, rehearsals, show day and wrap-up.

    Args:
        schedule: Project schedule
        today: Reference date for days_remaining (defaults to today)

    Returns:
        list: Timeline entries in chronological order
    """
    if today is None:
        today = date.today()
    today = to_calendar_date(today)

    descriptions = SchedulingConfig.TIMELINE_DESCRIPTIONS
    timeline = [
        TimelineEntry(
            phase='prep',
            description=descriptions['prep'],
            start_date=None,
            end_date=schedule.start_date - timedelta(days=1),
        )
    ]

    if schedule.rehearsal_dates:
        timeline.append(TimelineEntry(
            phase='active',
            description=SchedulingConfig.rehearsal_description(len(schedule.rehearsal_dates)),
            start_date=schedule.rehearsal_dates[0],
            end_date=schedule.rehearsal_dates[-1],
        ))

    timeline.append(TimelineEntry(
        phase='active',
        description=descriptions['show'],
        start_date=schedule.end_date,
        end_date=schedule.end_date,
    ))

    timeline.append(TimelineEntry(
        phase='post_show',
        description=descriptions['post_show'],
        start_date=schedule.end_date + timedelta(days=1),
        end_date=None,
    ))

    for entry in timeline:
        if entry.start_date is not None and entry.start_date > today:
            entry.days_remaining = (entry.start_date - today).days

    return timeline


def next_transition_at(schedule: ProjectSchedule, current_phase: str) -> Optional[datetime]:
    """
    When the project should automatically leave its current phase.

    - pre_show: midnight on the first project day
    - active: the morning after the show day
    - any other phase: not date driven, returns None
    """
    if current_phase == 'pre_show':
        return datetime.combine(schedule.start_date, time.min)
    if current_phase == 'active':
        morning_after = schedule.end_date + timedelta(days=1)
        return datetime.combine(morning_after, time(hour=SchedulingConfig.POST_SHOW_TRANSITION_HOUR))
    return None


def validate_project_dates(start_date, end_date, assignment_dates: Iterable = ()) -> DateValidationReport:
    """
    Sanity-check a project's dates before enabling automatic transitions.

    Args:
        start_date: Project start (None if unset)
        end_date: Project end (None if unset)
        assignment_dates: Dates that already have talent assignments

    Returns:
        DateValidationReport
    """
    report = DateValidationReport()
    start = to_calendar_date(start_date) if start_date else None
    end = to_calendar_date(end_date) if end_date else None

    if start is None:
        report.errors.append('Project start date is required for automatic transitions.')
    if end is None:
        report.errors.append('Project end date is required for automatic transitions.')

    if start is not None and end is not None:
        span = (end - start).days
        if span < 0:
            report.errors.append('Project end date is before project start date.')
        elif span > SchedulingConfig.MAX_PROJECT_SPAN_DAYS:
            report.warnings.append('Project spans more than a year. This may affect automatic archiving.')
        elif span == 0:
            report.warnings.append('Project starts and ends on the same day. Consider if this is correct.')

    assigned = sorted({to_calendar_date(d) for d in assignment_dates})
    if assigned:
        if start is not None and assigned[0] < start:
            report.warnings.append('Some talent assignments are scheduled before project start date.')
        if end is not None and assigned[-1] > end:
            report.warnings.append('Some talent assignments are scheduled after project end date.')

    return report
