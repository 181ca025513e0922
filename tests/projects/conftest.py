import pytest
from unittest.mock import Mock

from talentdesk.datetime_utils import format_iso_date


PROJECT = {
    "id": "p1",
    "name": "Summer Gala",
    "status": "prep",
    "start_date": "2024-06-01",
    "end_date": "2024-06-03",
}

ROSTER = [
    {"user_id": "e1", "profiles": {"full_name": "Erin Escort"}, "available_dates": ["2024-06-01", "2024-06-02", "2024-06-03"]},
    {"user_id": "e2", "profiles": {"full_name": "Sam Smith"}, "available_dates": ["2024-06-03"]},
    {"user_id": "e3", "profiles": {"full_name": "Alex Avery"}, "available_dates": None},
]

# Escort e1 takes talent T1 on the 2nd rehearsal day
DAY_ASSIGNMENTS = {
    "2024-06-02": [
        {"talentId": "t1", "talentName": "Taylor", "isGroup": False, "escortId": "e1",
         "escortName": "Erin Escort", "escortAssignments": [], "displayOrder": 1},
    ],
}


@pytest.fixture
def backend():
    """Mock backend serving a 3-day project (2024-06-01 .. 2024-06-03)."""
    backend = Mock()
    backend.get_project.return_value = dict(PROJECT)
    backend.get_phase.return_value = {"currentPhase": "pre_show"}
    backend.get_team_roster.return_value = [dict(entry) for entry in ROSTER]

    def get_assignments(project_id, day):
        key = format_iso_date(day)
        return {"date": key, "assignments": list(DAY_ASSIGNMENTS.get(key, []))}

    backend.get_assignments.side_effect = get_assignments

    # Write endpoints answer with JSON-serialisable bodies, as the real backend does
    backend.update_assignments.return_value = {}
    backend.update_talent_schedule.return_value = {}
    backend.update_talent_group.return_value = {}
    backend.set_roles_complete.return_value = {}
    backend.activate_project.return_value = {}
    backend.archive_project.return_value = {}
    return backend
