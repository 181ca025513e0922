"""
Escort assignment slots for a single talent or talent group.

A talent holds an ordered, never-empty list of slots; each slot is bound to
one escort or left empty. Slots carry a stable id assigned at creation, and
everything that tracks per-slot state (pending confirmations, open pickers)
is keyed by that id rather than by position, so removing a slot cannot shift
state onto its neighbour.

When a list has a PendingChangeRegistry, every slot whose escort differs from
the last confirmed one is registered under its slot id. Removing a slot that
held a confirmed escort registers the list itself under registry_key until
the next confirm.
"""
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional

from talentdesk.assignments.pending import PendingChangeRegistry
from talentdesk.datetime_utils import to_calendar_date
from talentdesk.errors import ErrorCode, ValidationError
from talentdesk.logging_config import get_logger

logger = get_logger(__name__)


def _new_slot_id() -> str:
    return str(uuid.uuid4())


@dataclass
class AssignmentSlot:
    """One escort position for a talent."""
    escort_id: Optional[str] = None
    slot_id: str = field(default_factory=_new_slot_id)
    picker_open: bool = False

    @property
    def is_empty(self) -> bool:
        return self.escort_id is None


class AssignmentList:
    """Ordered escort slots of one talent or group; slot 0 is the permanent primary slot."""

    def __init__(self, talent_id: str, slots: Optional[List[AssignmentSlot]] = None,
                 is_group: bool = False, talent_name: Optional[str] = None,
                 registry: Optional[PendingChangeRegistry] = None,
                 persist: Optional[Callable[["AssignmentList"], Any]] = None,
                 scheduled_dates: Optional[Iterable] = None):
        if registry is not None and persist is None:
            raise ValueError("An assignment list with a registry needs a persist callback")
        self.talent_id = talent_id
        self.talent_name = talent_name
        self.is_group = is_group
        self.registry = registry
        self._persist = persist
        self.scheduled_dates: Optional[List[date]] = (
            None if scheduled_dates is None else sorted({to_calendar_date(d) for d in scheduled_dates})
        )
        self.slots: List[AssignmentSlot] = list(slots) if slots else [AssignmentSlot()]
        self._confirmed_ids = self.escort_ids()
        self._confirmed_slots = {slot.slot_id: slot.escort_id for slot in self.slots}

    @classmethod
    def for_talent(cls, talent_id: str, escort_ids: Iterable[Optional[str]] = (), **kwargs) -> "AssignmentList":
        slots = [AssignmentSlot(escort_id=escort_id) for escort_id in escort_ids]
        return cls(talent_id, slots=slots, **kwargs)

    @classmethod
    def from_backend(cls, entry: Dict[str, Any], **kwargs) -> "AssignmentList":
        """
        Build a list from one entry of the backend's daily assignments.

        Individual talent report a primary escortId plus any additional
        escortAssignments; groups list every escort in escortAssignments.
        scheduledDates is kept when the backend includes it.
        """
        is_group = bool(entry.get('isGroup'))
        additional = [a.get('escortId') for a in entry.get('escortAssignments') or []]

        if is_group:
            escort_ids = additional
        else:
            escort_ids = [entry.get('escortId')] + additional

        return cls.for_talent(
            entry.get('talentId'),
            escort_ids,
            is_group=is_group,
            talent_name=entry.get('talentName'),
            scheduled_dates=entry.get('scheduledDates'),
            **kwargs,
        )

    # -------------------------
    # Lookup
    # -------------------------
    def __len__(self) -> int:
        return len(self.slots)

    def index_of(self, slot_id: str) -> int:
        for index, slot in enumerate(self.slots):
            if slot.slot_id == slot_id:
                return index
        raise ValidationError(
            f"Assignment slot {slot_id} not found for talent {self.talent_id}",
            code=ErrorCode.SLOT_NOT_FOUND,
        )

    def get(self, slot_id: str) -> AssignmentSlot:
        return self.slots[self.index_of(slot_id)]

    @property
    def primary(self) -> AssignmentSlot:
        return self.slots[0]

    def escort_ids(self) -> List[str]:
        """Bound escort ids in slot order, empty slots skipped."""
        return [slot.escort_id for slot in self.slots if slot.escort_id is not None]

    @property
    def dirty(self) -> bool:
        return self.escort_ids() != self._confirmed_ids

    @property
    def registry_key(self) -> str:
        kind = 'group' if self.is_group else 'talent'
        return f"assignments:{kind}:{self.talent_id}"

    def _removed_confirmed_escort(self) -> bool:
        current = {slot.slot_id for slot in self.slots}
        return any(escort_id is not None and slot_id not in current
                   for slot_id, escort_id in self._confirmed_slots.items())

    def _sync_registration(self) -> None:
        if self.registry is None:
            return
        for slot in self.slots:
            if slot.escort_id != self._confirmed_slots.get(slot.slot_id):
                self.registry.register(slot.slot_id, self.confirm)
            else:
                self.registry.unregister(slot.slot_id)
        if self._removed_confirmed_escort():
            self.registry.register(self.registry_key, self.confirm)
        else:
            self.registry.unregister(self.registry_key)

    def mark_confirmed(self) -> None:
        """Take the current slots as saved and drop their pending registrations."""
        self._confirmed_ids = self.escort_ids()
        self._confirmed_slots = {slot.slot_id: slot.escort_id for slot in self.slots}
        self._sync_registration()

    def confirm(self) -> Any:
        """
        Save this list through its persist callback.

        Returns:
            Whatever persist returned, or None if nothing needed saving

        Raises:
            Any error raised by persist; the slots then stay registered
        """
        if not self.dirty:
            self.mark_confirmed()
            return None
        if self._persist is None:
            raise ValueError(f"No persist callback for assignments of {self.talent_id}")
        result = self._persist(self)
        self.mark_confirmed()
        return result

    # -------------------------
    # Mutations
    # -------------------------
    def add_slot(self) -> AssignmentSlot:
        slot = AssignmentSlot()
        self.slots.append(slot)
        self._confirmed_slots.setdefault(slot.slot_id, None)
        return slot

    def can_remove(self, slot_id: str) -> bool:
        return len(self.slots) > 1 and self.index_of(slot_id) != 0

    def remove_slot(self, slot_id: str) -> AssignmentSlot:
        """
        Remove a non-primary slot.

        Later slots move up one position. A pending confirmation registered
        under the removed slot's id is dropped with it.

        Raises:
            ValidationError: If the slot is the primary slot, the only slot,
            or does not exist
        """
        index = self.index_of(slot_id)
        if index == 0 or len(self.slots) <= 1:
            raise ValidationError(
                "The primary escort slot cannot be removed",
                code=ErrorCode.SLOT_NOT_REMOVABLE,
            )

        removed = self.slots.pop(index)
        if self.registry is not None and self.registry.unregister(slot_id):
            logger.debug("Dropped pending change for removed slot", talent_id=self.talent_id, slot_id=slot_id)
        self._sync_registration()
        return removed

    def assign(self, slot_id: str, escort_id: str) -> AssignmentSlot:
        slot = self.get(slot_id)
        slot.escort_id = escort_id
        slot.picker_open = False
        self._sync_registration()
        return slot

    def clear(self, slot_id: str) -> bool:
        """
        Unbind the escort from a slot and close its picker.

        Returns:
            bool: False if the slot was already empty (nothing changed)
        """
        slot = self.get(slot_id)
        slot.picker_open = False
        if slot.escort_id is None:
            return False
        slot.escort_id = None
        self._sync_registration()
        return True

    def open_picker(self, slot_id: str) -> None:
        self.get(slot_id).picker_open = True

    def close_picker(self, slot_id: str) -> None:
        self.get(slot_id).picker_open = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'talentId': self.talent_id,
            'talentName': self.talent_name,
            'isGroup': self.is_group,
            'slots': [
                {'slotId': slot.slot_id, 'escortId': slot.escort_id}
                for slot in self.slots
            ],
        }


def build_assignment_payload(lists: Iterable[AssignmentList]) -> Dict[str, List[Dict[str, Any]]]:
    """
    Build the body for saving one day's assignments.

    Returns:
        dict: {'talents': [{'talentId', 'escortIds'}], 'groups': [{'groupId', 'escortIds'}]}
    """
    talents = []
    groups = []
    for assignment_list in lists:
        if assignment_list.is_group:
            groups.append({'groupId': assignment_list.talent_id, 'escortIds': assignment_list.escort_ids()})
        else:
            talents.append({'talentId': assignment_list.talent_id, 'escortIds': assignment_list.escort_ids()})
    return {'talents': talents, 'groups': groups}
