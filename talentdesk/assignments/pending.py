"""
Pending-change tracking for editable rows.

Each editable row (a talent's schedule, an escort slot) keeps its working
value next to the last confirmed one. While the two differ the row is dirty
and registers its own confirm callback with a PendingChangeRegistry, so a
"confirm all" action can persist every pending row. Rows are committed
independently: one failing row never blocks or rolls back another.
"""
import operator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Hashable, List, Optional

from talentdesk.errors import ErrorCode, ValidationError
from talentdesk.logging_config import get_logger

logger = get_logger(__name__)


class FieldState(str, Enum):
    CONFIRMED = "confirmed"
    PENDING_LOCAL_EDIT = "pending_local_edit"
    SUBMITTING = "submitting"


class EditableField:
    """
    A value with a confirmed baseline and an optional local edit.

    Transitions:
    - edit: confirmed/pending -> pending (or confirmed if equal to baseline)
    - confirm: pending -> submitting -> confirmed (success) or pending (failure)
    - cancel: confirmed/pending -> confirmed, value reverted to baseline
    """

    def __init__(self, baseline: Any, equals: Optional[Callable[[Any, Any], bool]] = None):
        self._equals = equals or operator.eq
        self.baseline = baseline
        self.value = baseline
        self.state = FieldState.CONFIRMED

    @property
    def dirty(self) -> bool:
        return not self._equals(self.value, self.baseline)

    @property
    def busy(self) -> bool:
        return self.state is FieldState.SUBMITTING

    def _ensure_idle(self):
        if self.busy:
            raise ValidationError("Field is being saved", code=ErrorCode.FIELD_BUSY)

    def _settle(self):
        self.state = FieldState.PENDING_LOCAL_EDIT if self.dirty else FieldState.CONFIRMED

    def edit(self, value: Any) -> None:
        self._ensure_idle()
        self.value = value
        self._settle()

    def cancel(self) -> None:
        self._ensure_idle()
        self.value = self.baseline
        self.state = FieldState.CONFIRMED

    def reset(self, baseline: Any) -> None:
        """Replace both baseline and value, e.g. after reloading from the backend."""
        self._ensure_idle()
        self.baseline = baseline
        self.value = baseline
        self.state = FieldState.CONFIRMED

    def confirm(self, persist: Callable[[Any], Any], should_commit: Optional[Callable[[], bool]] = None) -> Any:
        """
        Persist the working value.

        Args:
            persist: Callable receiving the working value; raises on failure
            should_commit: Checked after persist returns; when it says False the
                baseline is left alone (the owner went away mid-request)

        Returns:
            Whatever persist returned, or None if there was nothing to save

        Raises:
            Any error raised by persist. The field then stays pending with
            the user's edit intact.
        """
        self._ensure_idle()
        if not self.dirty:
            return None

        submitted = self.value
        self.state = FieldState.SUBMITTING
        succeeded = False
        try:
            result = persist(submitted)
            succeeded = True
        finally:
            if succeeded and (should_commit is None or should_commit()):
                self.baseline = submitted
            self._settle()
        return result


@dataclass
class ConfirmAllResult:
    """Per-row outcome of a bulk confirm."""
    succeeded: List[Hashable] = field(default_factory=list)
    failed: Dict[Hashable, Exception] = field(default_factory=dict)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed


class PendingChangeRegistry:
    """Confirm callbacks of dirty rows, keyed by row identity."""

    def __init__(self):
        self._pending: Dict[Hashable, Callable[[], Any]] = {}

    def register(self, key: Hashable, confirm_fn: Callable[[], Any]) -> None:
        self._pending[key] = confirm_fn

    def unregister(self, key: Hashable) -> bool:
        """Drop a registration. Returns False if the key was not registered."""
        return self._pending.pop(key, None) is not None

    def is_registered(self, key: Hashable) -> bool:
        return key in self._pending

    @property
    def pending_keys(self) -> List[Hashable]:
        return list(self._pending)

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    def confirm_all(self) -> ConfirmAllResult:
        """
        Invoke every registered confirm callback.

        Each row is attempted regardless of earlier failures; failures are
        collected per key and the failing rows stay registered.
        """
        result = ConfirmAllResult()
        for key, confirm_fn in list(self._pending.items()):
            try:
                confirm_fn()
            except Exception as exc:
                logger.warning("Pending change failed to confirm", key=str(key), error=str(exc))
                result.failed[key] = exc
            else:
                result.succeeded.append(key)
        logger.info(
            "Confirmed pending changes",
            succeeded=len(result.succeeded),
            failed=len(result.failed),
        )
        return result


class PendingRow:
    """
    An EditableField bound to a registry under a stable key.

    The row is registered while dirty and unregistered once clean. After
    detach() (the row went away) it no longer touches the registry and
    results of an in-flight confirm are ignored.
    """

    def __init__(self, key: Hashable, field: EditableField, persist: Callable[[Any], Any],
                 registry: Optional[PendingChangeRegistry] = None):
        self.key = key
        self.field = field
        self._persist = persist
        self._registry = registry
        self._detached = False

    @property
    def dirty(self) -> bool:
        return self.field.dirty

    @property
    def detached(self) -> bool:
        return self._detached

    def _sync_registration(self) -> None:
        if self._registry is None or self._detached:
            return
        if self.field.dirty:
            self._registry.register(self.key, self.confirm)
        else:
            self._registry.unregister(self.key)

    def edit(self, value: Any) -> None:
        self.field.edit(value)
        self._sync_registration()

    def cancel(self) -> None:
        self.field.cancel()
        self._sync_registration()

    def reset(self, baseline: Any) -> None:
        self.field.reset(baseline)
        self._sync_registration()

    def confirm(self) -> Any:
        try:
            result = self.field.confirm(self._persist, should_commit=lambda: not self._detached)
        finally:
            self._sync_registration()
        if self._detached:
            logger.info("Ignoring confirm result for detached row", key=str(self.key))
            return None
        return result

    def detach(self) -> None:
        if self._registry is not None:
            self._registry.unregister(self.key)
        self._detached = True
