"""
Pure business logic for escort availability.
Contains no backend dependencies - works with plain data structures.

For a given day, every escort on the roster lands in exactly one section:

- current_day_assigned: already escorting another talent that day
- rehearsal_assigned: free that day but escorting someone on a rehearsal day
- available: neither of the above

Hiding the rehearsal section on show days is a display rule, applied by
callers through visible_sections(), so the partition itself is reusable.
"""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from talentdesk.datetime_utils import format_iso_date, to_calendar_date
from talentdesk.logging_config import get_logger
from talentdesk.scheduling.calculator import (
    DayType,
    ProjectSchedule,
    classify_date,
    escort_available_dates,
    is_escort_available_on_date,
)

logger = get_logger(__name__)


class EscortSection(str, Enum):
    AVAILABLE = "available"
    REHEARSAL_ASSIGNED = "rehearsal_assigned"
    CURRENT_DAY_ASSIGNED = "current_day_assigned"


# Display order of the picker sections
SECTION_ORDER: Tuple[EscortSection, ...] = (
    EscortSection.AVAILABLE,
    EscortSection.REHEARSAL_ASSIGNED,
    EscortSection.CURRENT_DAY_ASSIGNED,
)


@dataclass(frozen=True)
class Escort:
    """A team member who can escort talent."""
    escort_id: str
    escort_name: str
    available_dates: Optional[Tuple[date, ...]] = None


@dataclass(frozen=True)
class EscortAssignment:
    """An existing escort -> talent link on one day."""
    talent_id: str
    talent_name: str
    assignment_date: date


@dataclass(frozen=True)
class CurrentAssignment:
    talent_name: str
    date: date


@dataclass(frozen=True)
class EscortAvailabilityStatus:
    escort_id: str
    escort_name: str
    section: EscortSection
    current_assignment: Optional[CurrentAssignment] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'escortId': self.escort_id,
            'escortName': self.escort_name,
            'section': self.section.value,
        }
        if self.current_assignment is not None:
            data['currentAssignment'] = {
                'talentName': self.current_assignment.talent_name,
                'date': format_iso_date(self.current_assignment.date),
            }
        return data


def classify_escort(
    assignments: Iterable[EscortAssignment],
    query_date,
    schedule: ProjectSchedule,
    editing_talent_id: Optional[str] = None,
) -> Tuple[EscortSection, Optional[CurrentAssignment]]:
    """
    Classify a single escort for a day.

    Args:
        assignments: The escort's existing assignments
        query_date: Day the picker is open for
        schedule: Project schedule, used to find rehearsal days
        editing_talent_id: Talent whose slot is being edited; its own
            assignment on query_date does not make the escort busy

    Returns:
        (section, current_assignment) with priority
        current_day_assigned > rehearsal_assigned > available
    """
    day = to_calendar_date(query_date)
    rehearsal_hit = None

    for assignment in assignments:
        assigned_on = to_calendar_date(assignment.assignment_date)
        if assigned_on == day:
            if assignment.talent_id != editing_talent_id:
                return (
                    EscortSection.CURRENT_DAY_ASSIGNED,
                    CurrentAssignment(talent_name=assignment.talent_name, date=assigned_on),
                )
            continue
        if rehearsal_hit is None and classify_date(assigned_on, schedule) is DayType.REHEARSAL:
            rehearsal_hit = CurrentAssignment(talent_name=assignment.talent_name, date=assigned_on)

    if rehearsal_hit is not None:
        return EscortSection.REHEARSAL_ASSIGNED, rehearsal_hit
    return EscortSection.AVAILABLE, None


def partition_escorts(
    escorts: Sequence[Escort],
    assignments_by_escort: Mapping[str, Iterable[EscortAssignment]],
    query_date,
    schedule: ProjectSchedule,
    editing_talent_id: Optional[str] = None,
) -> List[EscortAvailabilityStatus]:
    """
    Classify every escort on the roster for query_date.

    Returns one status per escort, in roster order. Callers group the
    result with group_by_section().
    """
    statuses = []
    for escort in escorts:
        section, current = classify_escort(
            assignments_by_escort.get(escort.escort_id, ()),
            query_date,
            schedule,
            editing_talent_id,
        )
        statuses.append(EscortAvailabilityStatus(
            escort_id=escort.escort_id,
            escort_name=escort.escort_name,
            section=section,
            current_assignment=current,
        ))

    logger.debug(
        "Partitioned escorts",
        date=format_iso_date(query_date),
        total=len(statuses),
        editing_talent_id=editing_talent_id,
    )
    return statuses


def filter_escorts_by_name(escorts: Iterable, search: Optional[str]) -> List:
    """Case-insensitive substring match on escort_name; a blank search keeps everyone."""
    needle = (search or '').strip().lower()
    escorts = list(escorts)
    if not needle:
        return escorts
    return [escort for escort in escorts if needle in escort.escort_name.lower()]


def filter_escorts_available_on(escorts: Iterable[Escort], day) -> List[Escort]:
    """Keep escorts who declared availability for day (or declared nothing at all)."""
    return [
        escort for escort in escorts
        if escort.available_dates is None or is_escort_available_on_date(escort.available_dates, day)
    ]


def group_by_section(statuses: Iterable[EscortAvailabilityStatus]) -> Dict[EscortSection, List[EscortAvailabilityStatus]]:
    grouped: Dict[EscortSection, List[EscortAvailabilityStatus]] = {section: [] for section in SECTION_ORDER}
    for status in statuses:
        grouped[status.section].append(status)
    return grouped


def visible_sections(day_type: DayType) -> Tuple[EscortSection, ...]:
    """Sections the picker shows for a day; rehearsal conflicts are irrelevant on show days."""
    if day_type is DayType.SHOW:
        return (EscortSection.AVAILABLE, EscortSection.CURRENT_DAY_ASSIGNED)
    return SECTION_ORDER


def build_assignments_by_escort(day_assignments: Mapping[Any, Iterable[Dict[str, Any]]]) -> Dict[str, List[EscortAssignment]]:
    """
    Index the backend's daily assignments by escort.

    Args:
        day_assignments: day -> entries of the backend's daily assignments
            ({talentId, talentName, escortId, escortAssignments: [{escortId}]})

    Returns:
        dict: escort_id -> EscortAssignment list, in day then entry order
    """
    by_escort: Dict[str, List[EscortAssignment]] = {}
    for day in sorted(day_assignments, key=to_calendar_date):
        assigned_on = to_calendar_date(day)
        for entry in day_assignments[day] or []:
            escort_ids = [entry.get('escortId')]
            escort_ids.extend(a.get('escortId') for a in entry.get('escortAssignments') or [])
            seen = set()
            for escort_id in escort_ids:
                if not escort_id or escort_id in seen:
                    continue
                seen.add(escort_id)
                by_escort.setdefault(escort_id, []).append(EscortAssignment(
                    talent_id=entry.get('talentId'),
                    talent_name=entry.get('talentName') or '',
                    assignment_date=assigned_on,
                ))
    return by_escort


def escort_from_roster_entry(entry: Dict[str, Any], schedule: Optional[ProjectSchedule] = None) -> Escort:
    """
    Build an Escort from a team-assignments row.

    Accepts both the flattened shape ({escortId, escortName, availableDates})
    and the raw one ({user_id, profiles: {full_name}, available_dates}).
    With a schedule, declared availability outside the project is dropped.
    """
    escort_id = entry.get('escortId') or entry.get('user_id')
    name = entry.get('escortName') or entry.get('full_name') or (entry.get('profiles') or {}).get('full_name') or ''
    raw_dates = entry.get('availableDates', entry.get('available_dates'))
    if raw_dates is None:
        available = None
    elif schedule is not None:
        available = tuple(escort_available_dates(raw_dates, schedule))
    else:
        available = tuple(to_calendar_date(d) for d in raw_dates)
    return Escort(escort_id=escort_id, escort_name=name, available_dates=available)
