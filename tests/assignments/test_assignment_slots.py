"""
Tests for multi-escort assignment slots.
"""
import pytest
from datetime import date
from unittest.mock import Mock

from talentdesk.assignments.pending import PendingChangeRegistry
from talentdesk.assignments.slots import AssignmentList, AssignmentSlot, build_assignment_payload
from talentdesk.errors import ErrorCode, NetworkError, ValidationError


@pytest.fixture
def registry():
    return PendingChangeRegistry()


# ==============================================================================
# CONSTRUCTION
# ==============================================================================

class TestAssignmentListConstruction:
    """Tests for building assignment lists."""

    def test_new_list_has_one_empty_slot(self):
        assignment_list = AssignmentList("t1")

        assert len(assignment_list) == 1
        assert assignment_list.primary.is_empty

    def test_for_talent_keeps_order(self):
        assignment_list = AssignmentList.for_talent("t1", ["e1", "e2", None])

        assert [s.escort_id for s in assignment_list.slots] == ["e1", "e2", None]
        assert assignment_list.escort_ids() == ["e1", "e2"]

    def test_slot_ids_are_unique(self):
        assignment_list = AssignmentList.for_talent("t1", ["e1", "e2", "e3"])

        assert len({s.slot_id for s in assignment_list.slots}) == 3

    def test_from_backend_individual(self):
        assignment_list = AssignmentList.from_backend({
            "talentId": "t1",
            "talentName": "Taylor",
            "isGroup": False,
            "escortId": "e1",
            "escortAssignments": [{"escortId": "e2"}],
        })

        assert assignment_list.escort_ids() == ["e1", "e2"]
        assert assignment_list.is_group is False
        assert assignment_list.dirty is False

    def test_from_backend_group(self):
        assignment_list = AssignmentList.from_backend({
            "talentId": "g1",
            "isGroup": True,
            "escortId": None,
            "escortAssignments": [{"escortId": "e3"}, {"escortId": "e4"}],
        })

        assert assignment_list.escort_ids() == ["e3", "e4"]
        assert assignment_list.is_group is True

    def test_from_backend_without_escorts(self):
        assignment_list = AssignmentList.from_backend({"talentId": "t1", "escortId": None})

        assert len(assignment_list) == 1
        assert assignment_list.primary.is_empty


# ==============================================================================
# ADDING AND REMOVING SLOTS
# ==============================================================================

class TestAddRemoveSlots:
    """Tests for add_slot and remove_slot."""

    def test_add_slot_appends_empty(self):
        assignment_list = AssignmentList.for_talent("t1", ["e1"])

        slot = assignment_list.add_slot()

        assert assignment_list.slots[-1] is slot
        assert slot.is_empty
        assert len(assignment_list) == 2

    def test_remove_middle_slot_shifts_later_slots(self):
        assignment_list = AssignmentList.for_talent("t1", ["e1", "e2", "e3"])
        middle = assignment_list.slots[1]
        last = assignment_list.slots[2]

        assignment_list.remove_slot(middle.slot_id)

        assert [s.escort_id for s in assignment_list.slots] == ["e1", "e3"]
        assert assignment_list.index_of(last.slot_id) == 1

    def test_remove_drops_only_removed_slot_registration(self, registry):
        persist = Mock()
        assignment_list = AssignmentList.for_talent("t1", ["e1", None, None], registry=registry, persist=persist)
        middle = assignment_list.slots[1]
        last = assignment_list.slots[2]
        assignment_list.assign(middle.slot_id, "e2")
        assignment_list.assign(last.slot_id, "e3")

        assignment_list.remove_slot(middle.slot_id)

        assert not registry.is_registered(middle.slot_id)
        assert registry.is_registered(last.slot_id)
        registry.confirm_all()
        persist.assert_called_once_with(assignment_list)
        assert assignment_list.escort_ids() == ["e1", "e3"]
        assert not registry.has_pending

    def test_primary_slot_cannot_be_removed(self):
        assignment_list = AssignmentList.for_talent("t1", ["e1", "e2"])

        with pytest.raises(ValidationError) as exc_info:
            assignment_list.remove_slot(assignment_list.primary.slot_id)

        assert exc_info.value.code is ErrorCode.SLOT_NOT_REMOVABLE
        assert len(assignment_list) == 2

    def test_only_slot_cannot_be_removed(self):
        assignment_list = AssignmentList("t1")

        assert assignment_list.can_remove(assignment_list.primary.slot_id) is False
        with pytest.raises(ValidationError):
            assignment_list.remove_slot(assignment_list.primary.slot_id)

    def test_can_remove_secondary(self):
        assignment_list = AssignmentList.for_talent("t1", ["e1", "e2"])

        assert assignment_list.can_remove(assignment_list.slots[1].slot_id) is True

    def test_unknown_slot(self):
        assignment_list = AssignmentList("t1")

        with pytest.raises(ValidationError) as exc_info:
            assignment_list.index_of("missing")

        assert exc_info.value.code is ErrorCode.SLOT_NOT_FOUND


# ==============================================================================
# ASSIGNING AND CLEARING
# ==============================================================================

class TestAssignAndClear:
    """Tests for binding escorts and picker state."""

    def test_assign_closes_picker(self):
        assignment_list = AssignmentList("t1")
        slot_id = assignment_list.primary.slot_id
        assignment_list.open_picker(slot_id)

        assignment_list.assign(slot_id, "e9")

        assert assignment_list.primary.escort_id == "e9"
        assert assignment_list.primary.picker_open is False
        assert assignment_list.dirty is True

    def test_clear_twice_is_a_no_op(self):
        assignment_list = AssignmentList.for_talent("t1", ["e1"])
        slot_id = assignment_list.primary.slot_id

        assert assignment_list.clear(slot_id) is True
        assert assignment_list.clear(slot_id) is False
        assert assignment_list.primary.escort_id is None

    def test_clear_closes_picker(self):
        assignment_list = AssignmentList("t1")
        slot_id = assignment_list.primary.slot_id
        assignment_list.open_picker(slot_id)

        assignment_list.clear(slot_id)

        assert assignment_list.primary.picker_open is False

    def test_close_picker(self):
        slot = AssignmentSlot()
        assignment_list = AssignmentList("t1", slots=[slot])
        assignment_list.open_picker(slot.slot_id)

        assignment_list.close_picker(slot.slot_id)

        assert slot.picker_open is False

    def test_mark_confirmed(self):
        assignment_list = AssignmentList("t1")
        assignment_list.assign(assignment_list.primary.slot_id, "e1")

        assignment_list.mark_confirmed()

        assert assignment_list.dirty is False

    def test_to_dict(self):
        assignment_list = AssignmentList.for_talent("t1", ["e1"], talent_name="Taylor")

        data = assignment_list.to_dict()

        assert data['talentId'] == 't1'
        assert data['talentName'] == 'Taylor'
        assert data['slots'][0]['escortId'] == 'e1'
        assert data['slots'][0]['slotId'] == assignment_list.primary.slot_id


class TestBuildAssignmentPayload:
    """Tests for build_assignment_payload."""

    def test_splits_talents_and_groups(self):
        lists = [
            AssignmentList.for_talent("t1", ["e1", None, "e2"]),
            AssignmentList.for_talent("g1", ["e3"], is_group=True),
        ]

        assert build_assignment_payload(lists) == {
            'talents': [{'talentId': 't1', 'escortIds': ['e1', 'e2']}],
            'groups': [{'groupId': 'g1', 'escortIds': ['e3']}],
        }


# ==============================================================================
# PENDING REGISTRATION
# ==============================================================================

class TestPendingSlotRegistration:
    """Tests for slots registering their own pending confirmations."""

    def make_list(self, registry, escort_ids=("e1",), persist=None):
        return AssignmentList.for_talent("t1", list(escort_ids), registry=registry, persist=persist or Mock())

    def test_registry_requires_persist(self, registry):
        with pytest.raises(ValueError):
            AssignmentList("t1", registry=registry)

    def test_assign_registers_slot(self, registry):
        assignment_list = self.make_list(registry)
        slot = assignment_list.add_slot()

        assignment_list.assign(slot.slot_id, "e2")

        assert registry.pending_keys == [slot.slot_id]

    def test_assign_back_to_confirmed_escort_unregisters(self, registry):
        assignment_list = self.make_list(registry)
        slot_id = assignment_list.primary.slot_id

        assignment_list.assign(slot_id, "e2")
        assignment_list.assign(slot_id, "e1")

        assert not registry.has_pending

    def test_clear_registers_slot(self, registry):
        assignment_list = self.make_list(registry)
        slot_id = assignment_list.primary.slot_id

        assignment_list.clear(slot_id)

        assert registry.is_registered(slot_id)

    def test_empty_slot_is_not_registered(self, registry):
        assignment_list = self.make_list(registry)

        assignment_list.add_slot()

        assert not registry.has_pending

    def test_removing_confirmed_escort_registers_list(self, registry):
        assignment_list = self.make_list(registry, escort_ids=("e1", "e2"))

        assignment_list.remove_slot(assignment_list.slots[1].slot_id)

        assert registry.pending_keys == ["assignments:talent:t1"]
        assert assignment_list.dirty is True

    def test_mark_confirmed_unregisters_every_slot(self, registry):
        assignment_list = self.make_list(registry)
        slot = assignment_list.add_slot()
        assignment_list.assign(slot.slot_id, "e2")
        assignment_list.clear(assignment_list.primary.slot_id)

        assignment_list.mark_confirmed()

        assert not registry.has_pending
        assert assignment_list.dirty is False

    def test_confirm_all_persists_list_once(self, registry):
        persist = Mock(return_value={"saved": True})
        assignment_list = self.make_list(registry, persist=persist)
        first = assignment_list.add_slot()
        second = assignment_list.add_slot()
        assignment_list.assign(first.slot_id, "e2")
        assignment_list.assign(second.slot_id, "e3")

        result = registry.confirm_all()

        persist.assert_called_once_with(assignment_list)
        assert sorted(result.succeeded) == sorted([first.slot_id, second.slot_id])
        assert not registry.has_pending

    def test_failed_confirm_keeps_slots_registered(self, registry):
        persist = Mock(side_effect=NetworkError())
        assignment_list = self.make_list(registry, persist=persist)
        slot_id = assignment_list.primary.slot_id
        assignment_list.assign(slot_id, "e2")

        result = registry.confirm_all()

        assert list(result.failed) == [slot_id]
        assert registry.is_registered(slot_id)
        assert assignment_list.dirty is True

    def test_confirm_without_changes_skips_persist(self, registry):
        persist = Mock()
        assignment_list = self.make_list(registry, persist=persist)

        assert assignment_list.confirm() is None
        persist.assert_not_called()

    def test_scheduled_dates_normalized(self):
        assignment_list = AssignmentList("t1", scheduled_dates=["2024-06-03", date(2024, 6, 1), "2024-06-03"])

        assert assignment_list.scheduled_dates == [date(2024, 6, 1), date(2024, 6, 3)]

    def test_from_backend_keeps_scheduled_dates(self):
        assignment_list = AssignmentList.from_backend({"talentId": "t1", "scheduledDates": ["2024-06-02"]})

        assert assignment_list.scheduled_dates == [date(2024, 6, 2)]
        assert AssignmentList("t2").scheduled_dates is None
