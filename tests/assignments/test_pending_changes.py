"""
Tests for editable fields, pending rows and the confirm-all registry.
"""
import pytest
from unittest.mock import Mock

from talentdesk.assignments.pending import (
    EditableField,
    FieldState,
    PendingChangeRegistry,
    PendingRow,
)
from talentdesk.errors import ErrorCode, NetworkError, ValidationError


# ==============================================================================
# EDITABLE FIELD
# ==============================================================================

class TestEditableField:
    """Tests for EditableField state transitions."""

    def test_edit_marks_pending(self):
        field = EditableField("a")

        field.edit("b")

        assert field.state is FieldState.PENDING_LOCAL_EDIT
        assert field.dirty is True

    def test_edit_back_to_baseline_is_confirmed(self):
        field = EditableField("a")
        field.edit("b")

        field.edit("a")

        assert field.state is FieldState.CONFIRMED
        assert field.dirty is False

    def test_custom_equality(self):
        field = EditableField(frozenset({1, 2}), equals=lambda a, b: set(a) == set(b))

        field.edit([2, 1])

        assert field.dirty is False

    def test_confirm_success_moves_baseline(self):
        field = EditableField("a")
        field.edit("b")
        persist = Mock(return_value={"ok": True})

        result = field.confirm(persist)

        persist.assert_called_once_with("b")
        assert result == {"ok": True}
        assert field.baseline == "b"
        assert field.state is FieldState.CONFIRMED

    def test_confirm_failure_keeps_edit_and_releases_busy(self):
        field = EditableField("a")
        field.edit("b")

        with pytest.raises(NetworkError):
            field.confirm(Mock(side_effect=NetworkError()))

        assert field.value == "b"
        assert field.baseline == "a"
        assert field.state is FieldState.PENDING_LOCAL_EDIT
        assert field.busy is False

    def test_confirm_keeps_baseline_when_commit_declined(self):
        field = EditableField("a")
        field.edit("b")
        persist = Mock(return_value={"ok": True})

        assert field.confirm(persist, should_commit=lambda: False) == {"ok": True}

        persist.assert_called_once_with("b")
        assert field.baseline == "a"
        assert field.state is FieldState.PENDING_LOCAL_EDIT

    def test_confirm_when_clean_skips_persist(self):
        field = EditableField("a")
        persist = Mock()

        assert field.confirm(persist) is None
        persist.assert_not_called()

    def test_edit_rejected_while_submitting(self):
        field = EditableField("a")
        field.edit("b")
        seen = {}

        def persist(value):
            with pytest.raises(ValidationError) as exc_info:
                field.edit("c")
            seen['code'] = exc_info.value.code
            seen['state'] = field.state

        field.confirm(persist)

        assert seen == {'code': ErrorCode.FIELD_BUSY, 'state': FieldState.SUBMITTING}
        assert field.value == "b"

    def test_cancel_reverts(self):
        field = EditableField("a")
        field.edit("b")

        field.cancel()

        assert field.value == "a"
        assert field.state is FieldState.CONFIRMED

    def test_reset_replaces_baseline(self):
        field = EditableField("a")
        field.edit("b")

        field.reset("z")

        assert field.value == "z"
        assert field.baseline == "z"
        assert field.dirty is False


# ==============================================================================
# REGISTRY
# ==============================================================================

class TestPendingChangeRegistry:
    """Tests for PendingChangeRegistry."""

    def test_register_and_unregister(self):
        registry = PendingChangeRegistry()
        registry.register("row-1", Mock())

        assert registry.has_pending is True
        assert registry.pending_keys == ["row-1"]
        assert registry.unregister("row-1") is True
        assert registry.unregister("row-1") is False
        assert registry.has_pending is False

    def test_confirm_all_attempts_every_row(self):
        registry = PendingChangeRegistry()
        first = Mock(side_effect=NetworkError())
        second = Mock()
        registry.register("row-1", first)
        registry.register("row-2", second)

        result = registry.confirm_all()

        first.assert_called_once_with()
        second.assert_called_once_with()
        assert result.succeeded == ["row-2"]
        assert list(result.failed) == ["row-1"]
        assert isinstance(result.failed["row-1"], NetworkError)
        assert result.all_succeeded is False

    def test_confirm_all_empty(self):
        result = PendingChangeRegistry().confirm_all()

        assert result.all_succeeded is True
        assert result.succeeded == []


# ==============================================================================
# PENDING ROWS
# ==============================================================================

class TestPendingRow:
    """Tests for PendingRow registration bookkeeping."""

    def make_row(self, registry, persist=None, key="slot-1"):
        return PendingRow(key, EditableField(None), persist or Mock(), registry)

    def test_registered_while_dirty(self):
        registry = PendingChangeRegistry()
        row = self.make_row(registry)

        row.edit("e1")
        assert registry.is_registered("slot-1")

        row.cancel()
        assert not registry.is_registered("slot-1")

    def test_confirm_all_clears_successful_rows(self):
        registry = PendingChangeRegistry()
        good = self.make_row(registry, key="good")
        bad = self.make_row(registry, persist=Mock(side_effect=NetworkError()), key="bad")
        good.edit("e1")
        bad.edit("e2")

        result = registry.confirm_all()

        assert result.succeeded == ["good"]
        assert registry.pending_keys == ["bad"]
        assert bad.dirty is True
        assert good.dirty is False

    def test_detached_row_leaves_registry_alone(self):
        registry = PendingChangeRegistry()
        row = self.make_row(registry)
        row.edit("e1")

        row.detach()
        row.edit("e2")

        assert row.detached is True
        assert not registry.has_pending

    def test_response_after_detach_is_ignored(self):
        registry = PendingChangeRegistry()
        row = None

        def persist(value):
            row.detach()
            return {"saved": value}

        row = self.make_row(registry, persist=persist)
        row.edit("e1")

        assert row.confirm() is None
        assert not registry.has_pending
        assert row.field.baseline is None
        assert row.field.value == "e1"
        assert row.field.state is FieldState.PENDING_LOCAL_EDIT
