"""
Scheduling logic module for project day classification.

A project's last day is its show day and every earlier day is a rehearsal
day. Talent schedules, escort availability and the project timeline are all
derived from that split.
"""

from talentdesk.scheduling.config import SchedulingConfig
from talentdesk.scheduling.calculator import (
    DayType,
    ProjectSchedule,
    build_schedule,
    build_schedule_from_strings,
    classify_date,
    is_rehearsal_day,
    is_show_day,
    is_date_in_project_range,
    validate_scheduled_dates,
    format_date_range,
    toggle_scheduled_date,
    build_project_timeline,
    next_transition_at,
    validate_project_dates,
)
from talentdesk.scheduling.editor import TalentScheduleEditor

__all__ = [
    'SchedulingConfig',
    'DayType',
    'ProjectSchedule',
    'build_schedule',
    'build_schedule_from_strings',
    'classify_date',
    'is_rehearsal_day',
    'is_show_day',
    'is_date_in_project_range',
    'validate_scheduled_dates',
    'format_date_range',
    'toggle_scheduled_date',
    'build_project_timeline',
    'next_transition_at',
    'validate_project_dates',
    'TalentScheduleEditor',
]
