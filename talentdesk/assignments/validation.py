"""
Client-side validation for assignments and talent groups.
Runs before any request is sent; failures raise ValidationError and are shown inline.
"""
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from talentdesk.assignments.slots import AssignmentList
from talentdesk.datetime_utils import to_calendar_date
from talentdesk.errors import ErrorCode, ValidationError
from talentdesk.scheduling.calculator import ProjectSchedule, is_date_in_project_range


class AssignmentValidator:
    """Rules for escort assignments on a single day."""

    MAX_ESCORTS_PER_TALENT = 5
    MAX_ESCORTS_PER_GROUP = 10

    @staticmethod
    def validate_escort_counts(lists: Iterable[AssignmentList]) -> None:
        """
        Raises:
            ValidationError: If a talent or group has more escorts than allowed
        """
        for assignment_list in lists:
            limit = (AssignmentValidator.MAX_ESCORTS_PER_GROUP if assignment_list.is_group
                     else AssignmentValidator.MAX_ESCORTS_PER_TALENT)
            count = len(assignment_list.escort_ids())
            if count > limit:
                kind = 'group' if assignment_list.is_group else 'talent'
                raise ValidationError(
                    f"Cannot assign more than {limit} escorts to a single {kind}",
                    code=ErrorCode.MAX_ESCORTS_EXCEEDED,
                    field=assignment_list.talent_id,
                    details={'count': count, 'limit': limit},
                )

    @staticmethod
    def find_double_bookings(lists: Iterable[AssignmentList]) -> Dict[str, List[str]]:
        """
        Find escorts bound to more than one talent/group (or twice to the same one).

        Returns:
            dict: escort_id -> talent ids holding that escort, only for conflicts
        """
        holders: Dict[str, List[str]] = {}
        for assignment_list in lists:
            for escort_id in assignment_list.escort_ids():
                holders.setdefault(escort_id, []).append(assignment_list.talent_id)
        return {escort_id: talents for escort_id, talents in holders.items() if len(talents) > 1}

    @staticmethod
    def validate_day(lists: Iterable[AssignmentList], day=None, schedule: Optional[ProjectSchedule] = None) -> None:
        """
        Run every rule for one day's assignments.

        The schedule check only runs when day and schedule are given, and only
        for lists that carry the talent's scheduled dates.
        """
        lists = list(lists)
        AssignmentValidator.validate_escort_counts(lists)
        conflicts = AssignmentValidator.find_double_bookings(lists)
        if conflicts:
            raise ValidationError(
                "An escort cannot be assigned to multiple talents/groups on the same day",
                code=ErrorCode.ESCORT_DOUBLE_BOOKING,
                details={'conflicts': conflicts},
            )
        if day is not None and schedule is not None:
            AssignmentValidator.validate_scheduled_talent(lists, day, schedule)

    @staticmethod
    def validate_scheduled_talent(lists: Iterable[AssignmentList], day, schedule: ProjectSchedule) -> None:
        """
        Raises:
            ValidationError: TALENT_NOT_SCHEDULED if escorts are bound to a talent
            whose known schedule does not include the day
        """
        for assignment_list in lists:
            if assignment_list.scheduled_dates is None or not assignment_list.escort_ids():
                continue
            is_valid, errors = AssignmentValidator.validate_schedule_consistency(
                assignment_list.scheduled_dates, day, schedule,
            )
            if not is_valid:
                raise ValidationError(
                    errors[0],
                    code=ErrorCode.TALENT_NOT_SCHEDULED,
                    field=assignment_list.talent_id,
                    details={'errors': errors},
                )

    @staticmethod
    def validate_schedule_consistency(
        talent_scheduled_dates: Iterable,
        assignment_date,
        schedule: ProjectSchedule,
    ) -> Tuple[bool, List[str]]:
        """
        Check an assignment date against the talent's schedule and the project range.

        Returns:
            (is_valid, errors)
        """
        errors = []
        day = to_calendar_date(assignment_date)
        scheduled = {to_calendar_date(d) for d in talent_scheduled_dates}

        if day not in scheduled:
            errors.append("Cannot assign escort to talent on a day they are not scheduled")
        if not is_date_in_project_range(day, schedule):
            errors.append("Assignment date is outside project date range")

        return len(errors) == 0, errors


class TalentGroupValidator:
    """Rules for creating or editing a talent group."""

    MAX_MEMBERS = 20
    MAX_NAME_LENGTH = 100
    MAX_ROLE_LENGTH = 50
    MAX_CONTACT_NAME_LENGTH = 255
    MAX_PHONE_LENGTH = 20

    GROUP_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\s'-]+$")
    PERSON_NAME_PATTERN = re.compile(r"^[a-zA-Z\s'-]+$")
    CONTACT_NAME_PATTERN = re.compile(r"^[a-zA-Z\s'-]*$")
    PHONE_PATTERN = re.compile(r"^[\d\s\-\(\)\+\.]*$")

    @staticmethod
    def _text(value: Any) -> str:
        """Trimmed string value; anything that is not a string counts as blank."""
        return value.strip() if isinstance(value, str) else ''

    @staticmethod
    def _member_errors(index: int, member: Dict[str, Any]) -> List[Dict[str, str]]:
        errors = []
        if not isinstance(member, dict):
            return [{'field': f"members.{index}", 'message': "Member must be an object with a name and role"}]
        name = TalentGroupValidator._text(member.get('name'))
        role = TalentGroupValidator._text(member.get('role'))
        field = f"members.{index}"

        if not name:
            errors.append({'field': f"{field}.name", 'message': "Member name is required"})
        elif len(name) > TalentGroupValidator.MAX_NAME_LENGTH:
            errors.append({'field': f"{field}.name", 'message': "Member name must be 100 characters or less"})
        elif not TalentGroupValidator.PERSON_NAME_PATTERN.match(name):
            errors.append({
                'field': f"{field}.name",
                'message': "Member name can only contain letters, spaces, hyphens, and apostrophes",
            })

        if len(role) > TalentGroupValidator.MAX_ROLE_LENGTH:
            errors.append({'field': f"{field}.role", 'message': "Member role must be 50 characters or less"})
        return errors

    @staticmethod
    def validate(group_name: Optional[str], members: Optional[List[Dict[str, Any]]],
                 point_of_contact_name: Optional[str] = None,
                 point_of_contact_phone: Optional[str] = None) -> Dict[str, Any]:
        """
        Validate and normalize a talent group.

        Returns:
            dict: Request body with trimmed values
            ({groupName, pointOfContactName, pointOfContactPhone, members: [{name, role}]})

        Raises:
            ValidationError: With a list of {field, message} in details
        """
        errors: List[Dict[str, str]] = []
        code = ErrorCode.VALIDATION_ERROR

        name = TalentGroupValidator._text(group_name)
        if not name:
            errors.append({'field': 'groupName', 'message': "Group name is required"})
        elif len(name) > TalentGroupValidator.MAX_NAME_LENGTH:
            errors.append({'field': 'groupName', 'message': "Group name must be 100 characters or less"})
        elif not TalentGroupValidator.GROUP_NAME_PATTERN.match(name):
            errors.append({
                'field': 'groupName',
                'message': "Group name can only contain letters, numbers, spaces, hyphens, and apostrophes",
            })

        if members is not None and not isinstance(members, list):
            raise ValidationError(
                "Members must be a list",
                code=ErrorCode.INVALID_MEMBER_DATA,
                field='members',
                details=[{'field': 'members', 'message': "Members must be a list"}],
            )
        members = members or []
        if not members:
            errors.append({'field': 'members', 'message': "At least one group member is required"})
        elif len(members) > TalentGroupValidator.MAX_MEMBERS:
            errors.append({'field': 'members', 'message': "Groups cannot have more than 20 members"})
            code = ErrorCode.GROUP_SIZE_EXCEEDED

        member_errors = []
        for index, member in enumerate(members):
            member_errors.extend(TalentGroupValidator._member_errors(index, member))
        if member_errors:
            errors.extend(member_errors)
            code = ErrorCode.INVALID_MEMBER_DATA

        names = [TalentGroupValidator._text(m.get('name')).lower() for m in members if isinstance(m, dict)]
        named = [n for n in names if n]
        if len(set(named)) != len(named):
            errors.append({'field': 'members', 'message': "Duplicate member names are not allowed"})
            code = ErrorCode.DUPLICATE_MEMBER_NAMES

        contact_name = TalentGroupValidator._text(point_of_contact_name)
        if len(contact_name) > TalentGroupValidator.MAX_CONTACT_NAME_LENGTH:
            errors.append({
                'field': 'pointOfContactName',
                'message': "Point of contact name must be 255 characters or less",
            })
        elif not TalentGroupValidator.CONTACT_NAME_PATTERN.match(contact_name):
            errors.append({
                'field': 'pointOfContactName',
                'message': "Point of contact name can only contain letters, spaces, hyphens, and apostrophes",
            })

        phone = TalentGroupValidator._text(point_of_contact_phone)
        if len(phone) > TalentGroupValidator.MAX_PHONE_LENGTH:
            errors.append({'field': 'pointOfContactPhone', 'message': "Phone number must be 20 characters or less"})
        elif not TalentGroupValidator.PHONE_PATTERN.match(phone):
            errors.append({'field': 'pointOfContactPhone', 'message': "Invalid phone number format"})

        if errors:
            if len(errors) > 1 and code is not ErrorCode.GROUP_SIZE_EXCEEDED:
                code = ErrorCode.VALIDATION_ERROR
            raise ValidationError(errors[0]['message'], code=code, field=errors[0]['field'], details=errors)

        return {
            'groupName': name,
            'pointOfContactName': contact_name or None,
            'pointOfContactPhone': phone or None,
            'members': [
                {'name': TalentGroupValidator._text(m.get('name')), 'role': TalentGroupValidator._text(m.get('role'))}
                for m in members
            ],
        }
