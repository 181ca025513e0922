"""
Helper functions for turning request bodies into domain objects.
"""
from datetime import date
from typing import Any, Dict, List, Optional

from talentdesk.assignments.slots import AssignmentList
from talentdesk.errors import ErrorCode, ValidationError
from talentdesk.scheduling.calculator import iso_strings_to_dates


def parse_bool_arg(value: Optional[str]) -> bool:
    """Query-string flag: 'true', '1' or 'yes' (any case) mean True."""
    return (value or '').strip().lower() in ('true', '1', 'yes')


def parse_date_list(values: Any, field: str) -> List[date]:
    """
    Parse a JSON list of YYYY-MM-DD strings. A missing value is an empty list.

    Raises:
        ValidationError: If the value is not a list of strings, or a string is not a date
    """
    if values is None:
        return []
    if not isinstance(values, list) or not all(isinstance(value, str) for value in values):
        raise ValidationError(
            f"{field} must be a list of YYYY-MM-DD strings",
            code=ErrorCode.INVALID_DATE_FORMAT,
            field=field,
        )
    return iso_strings_to_dates(values)


def lists_from_payload(payload: Optional[Dict[str, Any]]) -> List[AssignmentList]:
    """
    Build assignment lists from a save-assignments body.

    Args:
        payload: {talents: [{talentId, escortIds, scheduledDates?}],
                  groups: [{groupId, escortIds, scheduledDates?}]}

    Raises:
        ValidationError: If the body is missing, an entry is not an object,
        an entry has no id, or escortIds is not a list of strings
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    lists = []
    for key, id_field, is_group in (('talents', 'talentId', False), ('groups', 'groupId', True)):
        entries = payload.get(key) or []
        if not isinstance(entries, list):
            raise ValidationError(f"{key} must be a list", field=key)

        for entry in entries:
            if not isinstance(entry, dict):
                raise ValidationError(f"Each entry in {key} must be an object", field=key)
            owner_id = entry.get(id_field)
            if not owner_id or not isinstance(owner_id, str):
                raise ValidationError(
                    f"Each entry in {key} needs a {id_field}",
                    code=ErrorCode.VALIDATION_ERROR,
                    field=key,
                )

            raw_escort_ids = entry.get('escortIds') or []
            if not isinstance(raw_escort_ids, list) or not all(
                    escort_id is None or isinstance(escort_id, str) for escort_id in raw_escort_ids):
                raise ValidationError(f"escortIds for {owner_id} must be a list of ids", field=key)
            escort_ids = [escort_id for escort_id in raw_escort_ids if escort_id]

            scheduled_dates = None
            if entry.get('scheduledDates') is not None:
                scheduled_dates = parse_date_list(entry['scheduledDates'], 'scheduledDates')
            lists.append(AssignmentList.for_talent(
                owner_id,
                escort_ids,
                is_group=is_group,
                scheduled_dates=scheduled_dates,
            ))
    return lists
