"""
Unit tests for AvailabilityComputer

Tests facet filtering, AND narrowing, fail-open/fail-closed behavior and the
UI availability checks.
"""

from datetime import date

import pytest
from classmatch.schemas import ClassOffering, StudentSelection
from classmatch.services.availability import (
    AvailabilityComputer,
    get_availability_computer,
    is_course_available,
    is_level_available,
)


@pytest.fixture
def computer():
    return AvailabilityComputer()


class TestAllowedTimings:
    """Test timing availability (AND of level and course criteria)"""

    def test_level_selection_scenario(self, computer, branch_catalog):
        """Level-1 selected, no course: only C1's timing is offered"""
        selection = StudentSelection(branch_id="X", selected_levels=["Level-1"])

        assert computer.compute_allowed_timings(branch_catalog, selection) == ["Mon 9-11"]

    def test_both_criteria_narrow(self, computer, branch_catalog):
        """Level from C1 and course from C2 match no single class"""
        selection = StudentSelection(
            branch_id="X",
            selected_levels=["Level-1"],
            selected_courses=["Business English"],
        )

        assert computer.compute_allowed_timings(branch_catalog, selection) == []

    def test_course_only_selection(self, computer, branch_catalog):
        selection = StudentSelection(branch_id="X", selected_courses=["english"])

        timings = computer.compute_allowed_timings(branch_catalog, selection)
        assert set(timings) == {"Mon 9-11", "Tue 9-11"}

    def test_no_selection_returns_all_timings(self, computer, branch_catalog):
        selection = StudentSelection(branch_id="X")

        assert set(computer.compute_allowed_timings(branch_catalog, selection)) == {"Mon 9-11", "Tue 9-11"}

    def test_timings_deduplicated_and_blank_skipped(self, computer, branch_catalog):
        extra = [
            ClassOffering(id="c3", branch_id="X", levels=["Level 1"], courses=["IELTS"], timing="Mon 9-11"),
            ClassOffering(id="c4", branch_id="X", levels=["Level 1"], courses=["IELTS"], timing=None),
        ]
        selection = StudentSelection(branch_id="X", selected_levels=["Level-1"])

        assert computer.compute_allowed_timings(branch_catalog + extra, selection) == ["Mon 9-11"]

    def test_blank_selections_do_not_constrain(self, computer, branch_catalog):
        selection = StudentSelection(branch_id="X", selected_levels=["", "  "], selected_courses=[""])

        assert len(computer.compute_allowed_timings(branch_catalog, selection)) == 2


class TestAllowedCoursesAndLevels:
    """Test course and level facets"""

    def test_allowed_courses_follow_level_selection(self, computer, branch_catalog):
        selection = StudentSelection(branch_id="X", selected_levels=["Level-1"])

        assert computer.compute_allowed_courses(branch_catalog, selection) == ["General English"]

    def test_course_selection_does_not_disable_sibling_courses(self, computer, branch_catalog):
        selection = StudentSelection(branch_id="X", selected_courses=["General English"])

        allowed = computer.compute_allowed_courses(branch_catalog, selection)
        assert set(allowed) == {"General English", "Business English"}

    def test_allowed_levels_follow_course_selection(self, computer, branch_catalog):
        selection = StudentSelection(branch_id="X", selected_courses=["Business English"])

        assert computer.compute_allowed_levels(branch_catalog, selection) == ["Level-2"]
        assert computer.compute_allowed_level_keys(branch_catalog, selection) == ["level2"]

    def test_courses_are_trimmed(self, computer):
        classes = [ClassOffering(id="c", branch_id="X", courses=["  IELTS  ", "IELTS"], timing="Sat")]

        assert computer.compute_allowed_courses(classes, StudentSelection(branch_id="X")) == ["IELTS"]


class TestAllowedOptions:
    """Test the combined options object"""

    def test_fail_open_without_branch(self, computer, branch_catalog):
        """No branch: every discoverable option is available"""
        options = computer.compute_allowed_options(
            branch_catalog,
            StudentSelection(branch_id=None, selected_levels=["Level-1"]),
        )

        assert options.branch_selected is False
        assert set(options.allowed_timings) == {"Mon 9-11", "Tue 9-11"}
        assert set(options.allowed_courses) == {"General English", "Business English"}
        assert set(options.allowed_level_keys) == {"level1", "level2"}
        assert options.allowed_programs == ["English Program"]

    def test_fail_closed_for_branch_without_classes(self, computer, branch_catalog):
        """Branch set but nothing there: empty sets, not an error"""
        options = computer.compute_allowed_options(
            branch_catalog,
            StudentSelection(branch_id="Y"),
        )

        assert options.branch_selected is True
        assert options.allowed_timings == []
        assert options.allowed_courses == []
        assert options.allowed_levels == []
        assert options.allowed_level_keys == []
        # Catalog-wide options stay visible for display
        assert set(options.all_timings) == {"Mon 9-11", "Tue 9-11"}

    def test_inactive_and_other_branch_classes_ignored(self, computer, branch_catalog):
        classes = branch_catalog + [
            ClassOffering(id="c5", branch_id="X", status="completed", levels=["Level-1"], timing="Wed 9-11"),
            ClassOffering(id="c6", branch_id="Z", levels=["Level-1"], timing="Thu 9-11"),
        ]
        options = computer.compute_allowed_options(
            classes,
            StudentSelection(branch_id="X", selected_levels=["Level-1"]),
        )

        assert options.allowed_timings == ["Mon 9-11"]
        assert "Wed 9-11" not in options.all_timings

    def test_start_dates_sorted_for_eligible_classes(self, computer, branch_catalog):
        options = computer.compute_allowed_options(
            branch_catalog,
            StudentSelection(branch_id="X"),
        )

        assert options.allowed_start_dates == [date(2026, 1, 5), date(2026, 1, 10)]

    def test_separate_catalog_used_for_all_sets(self, computer, branch_catalog):
        other_branch = ClassOffering(id="c7", branch_id="Z", courses=["French"], timing="Fri 5-7")
        options = computer.compute_allowed_options(
            branch_catalog,
            StudentSelection(branch_id="X"),
            catalog=branch_catalog + [other_branch],
        )

        assert "French" in options.all_courses
        assert "French" not in options.allowed_courses


class TestUiAvailabilityChecks:
    """Test per-option enable/disable checks"""

    def test_level_checked_by_key(self, computer, branch_catalog):
        options = computer.compute_allowed_options(
            branch_catalog,
            StudentSelection(branch_id="X", selected_courses=["General English"]),
        )

        assert is_level_available("Level 1 مستوى أول", options) is True
        assert is_level_available("Level 10", options) is False
        assert is_level_available("Level-2", options) is False

    def test_named_level_checked_loosely(self, computer):
        classes = [ClassOffering(id="c", branch_id="X", levels=["Advanced (C1)"], timing="Sun")]
        options = computer.compute_allowed_options(classes, StudentSelection(branch_id="X"))

        assert is_level_available("advanced", options) is True
        assert is_level_available("Beginner", options) is False

    def test_course_checked_loosely(self, computer, branch_catalog):
        options = computer.compute_allowed_options(
            branch_catalog,
            StudentSelection(branch_id="X", selected_levels=["Level-2"]),
        )

        assert is_course_available("business english", options) is True
        assert is_course_available("General English", options) is False

    def test_everything_available_without_branch(self, computer):
        options = computer.compute_allowed_options([], StudentSelection())

        assert is_level_available("Level 7", options) is True
        assert is_course_available("Anything", options) is True

    def test_nothing_available_in_empty_branch(self, computer):
        options = computer.compute_allowed_options([], StudentSelection(branch_id="X"))

        assert is_level_available("Level 1", options) is False
        assert is_course_available("General English", options) is False


def test_global_computer_is_reused():
    assert get_availability_computer() is get_availability_computer()
