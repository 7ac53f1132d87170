"""Unit tests for AuditState."""

import pytest

from auditable.exceptions import TypeMismatchError
from auditable.models import Delta
from auditable.state import AuditState
from tests.factories import Pet


@pytest.fixture
def state() -> AuditState:
    return AuditState()


class TestTrackingLifecycle:
    """Tests for start/stop tracking."""

    def test_not_tracking_initially(self, state: AuditState) -> None:
        """New state does not track."""
        assert state.is_tracking is False

    def test_start_tracking(self, state: AuditState) -> None:
        """start_tracking sets the flag."""
        state.start_tracking()
        assert state.is_tracking is True

    def test_start_is_idempotent(self, state: AuditState) -> None:
        """Starting twice keeps tracking on."""
        state.start_tracking()
        state.start_tracking()
        assert state.is_tracking is True

    def test_stop_tracking(self, state: AuditState) -> None:
        """stop_tracking clears the flag."""
        state.start_tracking()
        state.stop_tracking()
        assert state.is_tracking is False

    def test_stop_is_idempotent(self, state: AuditState) -> None:
        """Stopping an idle state is a no-op."""
        state.stop_tracking()
        assert state.is_tracking is False


class TestRecordWrite:
    """Tests for record_write."""

    def test_ignored_when_not_tracking(self, state: AuditState) -> None:
        """Writes before tracking leave no entry."""
        state.record_write("age", 0, 1)
        assert state.get_change("age") is None

    def test_first_write_captures_current_value(self, state: AuditState) -> None:
        """The first tracked write records the stored value as old_value."""
        state.start_tracking()
        state.record_write("age", 1, 2)

        delta = state.get_change("age")
        assert delta is not None
        assert delta.old_value == 1
        assert delta.new_value == 2

    def test_later_writes_keep_old_value(self, state: AuditState) -> None:
        """Subsequent writes only replace new_value."""
        state.start_tracking()
        state.record_write("age", 1, 2)
        state.record_write("age", 2, 3)

        delta = state.get_change("age")
        assert delta is not None
        assert delta.as_tuple() == (1, 3)

    def test_new_value_updated_in_place(self, state: AuditState) -> None:
        """The same Delta object is updated by later writes."""
        state.start_tracking()
        state.record_write("age", 1, 2)
        delta = state.get_change("age")
        state.record_write("age", 2, 5)

        assert state.get_change("age") is delta
        assert delta is not None and delta.new_value == 5

    def test_none_baseline_is_kept(self, state: AuditState) -> None:
        """An unassigned (None) baseline is not overwritten by later writes."""
        state.start_tracking()
        state.record_write("name", None, "Rex")
        state.record_write("name", "Rex", "Max")

        delta = state.get_change("name")
        assert delta is not None
        assert delta.old_value is None
        assert delta.new_value == "Max"

    def test_writes_after_stop_are_ignored(self, state: AuditState) -> None:
        """Stopping tracking freezes the ledger."""
        state.start_tracking()
        state.record_write("age", 1, 2)
        state.stop_tracking()
        state.record_write("age", 2, 3)

        delta = state.get_change("age")
        assert delta is not None
        assert delta.as_tuple() == (1, 2)


class TestGetAllChanges:
    """Tests for get_all_changes filtering."""

    def test_reports_changed_properties(self, state: AuditState) -> None:
        """Properties with differing values are reported."""
        state.start_tracking()
        state.record_write("age", 1, 2)
        state.record_write("name", "Initial", "Changed")

        changes = state.get_all_changes()
        assert set(changes) == {"age", "name"}
        assert changes["name"].as_tuple() == ("Initial", "Changed")

    def test_omits_unchanged_values(self, state: AuditState) -> None:
        """Writing the same value is not reported in bulk."""
        state.start_tracking()
        state.record_write("age", 1, 1)

        assert state.get_all_changes() == {}

    def test_single_lookup_keeps_unchanged_entry(self, state: AuditState) -> None:
        """get_change still returns the equal-valued entry."""
        state.start_tracking()
        state.record_write("age", 1, 1)

        delta = state.get_change("age")
        assert delta is not None
        assert delta.old_value == delta.new_value == 1

    def test_compares_by_value(self, state: AuditState) -> None:
        """Distinct but equal objects count as unchanged."""
        state.start_tracking()
        state.record_write("tags", ["a"], ["a"])

        assert state.get_all_changes() == {}

    def test_reverted_property_is_omitted(self, state: AuditState) -> None:
        """A property written back to its baseline drops out of the bulk view."""
        state.start_tracking()
        state.record_write("age", 1, 2)
        state.record_write("age", 2, 1)

        assert "age" not in state.get_all_changes()
        assert state.get_change("age") is not None


class TestExcludeProperty:
    """Tests for exclude_property."""

    def test_excluded_writes_not_recorded(self, state: AuditState) -> None:
        """Writes to an excluded property never create an entry."""
        state.exclude_property("age")
        state.start_tracking()
        state.record_write("age", 0, 1)

        assert state.get_change("age") is None

    def test_exclusion_purges_existing_entry(self, state: AuditState) -> None:
        """Excluding drops an already recorded change."""
        state.start_tracking()
        state.record_write("age", 0, 1)
        state.exclude_property("age")

        assert state.get_change("age") is None
        assert state.get_all_changes() == {}

    def test_exclusion_is_idempotent(self, state: AuditState) -> None:
        """Re-excluding is a no-op."""
        state.exclude_property("age")
        state.exclude_property("age")
        assert state.excluded == frozenset({"age"})

    def test_other_properties_still_tracked(self, state: AuditState) -> None:
        """Exclusion applies to one property only."""
        state.exclude_property("age")
        state.start_tracking()
        state.record_write("name", "a", "b")

        assert state.get_change("name") is not None


class TestGetChangeTyped:
    """Tests for strongly typed change retrieval."""

    def test_returns_typed_delta(self, state: AuditState) -> None:
        """Values matching the type come back in a Delta[int]."""
        state.start_tracking()
        state.record_write("age", 1, 2)

        delta = state.get_change_typed("age", int)
        assert isinstance(delta, Delta)
        assert delta is not None
        assert delta.old_value == 1
        assert delta.new_value == 2

    def test_missing_property_returns_none(self, state: AuditState) -> None:
        """Absent entries stay absent."""
        assert state.get_change_typed("age", int) is None

    def test_mismatch_raises(self, state: AuditState) -> None:
        """A value of the wrong type raises TypeMismatchError."""
        state.start_tracking()
        state.record_write("age", 1, "two")

        with pytest.raises(TypeMismatchError) as exc_info:
            state.get_change_typed("age", int)
        assert exc_info.value.property_name == "age"
        assert exc_info.value.value == "two"

    def test_no_lax_coercion(self, state: AuditState) -> None:
        """Numeric strings are not coerced to int."""
        state.start_tracking()
        state.record_write("age", "1", "2")

        with pytest.raises(TypeMismatchError):
            state.get_change_typed("age", int)

    def test_none_passes_any_type(self, state: AuditState) -> None:
        """An unassigned baseline is valid for any type."""
        state.start_tracking()
        state.record_write("name", None, "Rex")

        delta = state.get_change_typed("name", str)
        assert delta is not None
        assert delta.old_value is None
        assert delta.new_value == "Rex"

    def test_plain_class_type(self, state: AuditState) -> None:
        """Arbitrary classes are checked by isinstance."""
        first, second = Pet(), Pet()
        state.start_tracking()
        state.record_write("friend", first, second)

        delta = state.get_change_typed("friend", Pet)
        assert delta is not None
        assert delta.new_value is second

        with pytest.raises(TypeMismatchError):
            state.get_change_typed("friend", str)

    def test_typed_delta_is_detached(self, state: AuditState) -> None:
        """The typed copy does not follow later writes."""
        state.start_tracking()
        state.record_write("age", 1, 2)
        typed = state.get_change_typed("age", int)
        state.record_write("age", 2, 3)

        assert typed is not None and typed.new_value == 2


class TestClear:
    """Tests for clear."""

    def test_clear_keeps_flag_and_exclusions(self, state: AuditState) -> None:
        """clear only drops ledger entries."""
        state.exclude_property("name")
        state.start_tracking()
        state.record_write("age", 1, 2)
        state.clear()

        assert state.get_all_changes() == {}
        assert state.is_tracking is True
        assert state.excluded == frozenset({"name"})

    def test_clear_resets_baseline(self, state: AuditState) -> None:
        """The next write after clear captures a new baseline."""
        state.start_tracking()
        state.record_write("age", 1, 2)
        state.clear()
        state.record_write("age", 2, 3)

        delta = state.get_change("age")
        assert delta is not None
        assert delta.as_tuple() == (2, 3)


class TestWriteLogging:
    """Tests for per-write debug logging."""

    def test_log_writes_does_not_affect_ledger(self) -> None:
        """Enabling write logging records the same entries."""
        state = AuditState(log_writes=True)
        state.start_tracking()
        state.record_write("age", 1, 2)

        delta = state.get_change("age")
        assert delta is not None
        assert delta.as_tuple() == (1, 2)
