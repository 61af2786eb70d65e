"""
Unit tests for cursor derivation and advancement.
"""

import pytest

from conftest import make_log, make_template
from liftmeup.core.cursor import (
    advance_cursor,
    derive_cursor,
    exercise_status,
    is_finished,
    logged_counts,
)


class TestDeriveCursor:
    def test_empty_log_points_at_first_set(self):
        assert derive_cursor(make_template(sets=(3, 2)), []) == (0, 0)

    def test_partial_first_exercise(self):
        log = make_log("a", "2026-03-02", [("bench", 8, 100), ("bench", 8, 100)], complete=False)
        assert derive_cursor(make_template(sets=(3, 2)), log.set_entries) == (0, 2)

    def test_rolls_to_next_exercise_when_target_met(self):
        log = make_log("a", "2026-03-02", [("bench", 8, 100)] * 3, complete=False)
        assert derive_cursor(make_template(sets=(3, 2)), log.set_entries) == (1, 0)

    def test_first_unsatisfied_exercise_wins(self):
        """Sets logged for a later exercise do not skip an unfinished earlier one."""
        log = make_log(
            "a", "2026-03-02",
            [("row", 8, 100), ("row", 8, 100), ("bench", 8, 100)],
            complete=False,
        )
        assert derive_cursor(make_template(sets=(3, 2)), log.set_entries) == (0, 1)

    def test_past_the_end_when_all_done(self):
        log = make_log("a", "2026-03-02", [("bench", 8, 100)] * 3 + [("row", 8, 100)] * 2)
        assert derive_cursor(make_template(sets=(3, 2)), log.set_entries) == (2, 0)

    def test_unknown_exercises_ignored(self):
        log = make_log("a", "2026-03-02", [("deadlift", 5, 200)], complete=False)
        assert derive_cursor(make_template(sets=(3, 2)), log.set_entries) == (0, 0)


class TestAdvanceCursor:
    def test_within_exercise(self):
        assert advance_cursor(make_template(sets=(3, 2)), 0, 0) == (0, 1)

    def test_rollover_at_target(self):
        assert advance_cursor(make_template(sets=(3, 2)), 0, 2) == (1, 0)

    def test_last_set_goes_past_end(self):
        assert advance_cursor(make_template(sets=(3, 2)), 1, 1) == (2, 0)

    def test_past_end_stays(self):
        assert advance_cursor(make_template(sets=(3, 2)), 2, 0) == (2, 0)

    @pytest.mark.parametrize("sets", [(1,), (3, 2), (2, 4, 1)])
    def test_incremental_matches_derivation(self, sets):
        """Advancing set by set in template order agrees with derivation from scratch."""
        template = make_template(sets=sets)
        rows = []
        pos = (0, 0)
        while not is_finished(template, pos[0]):
            rows.append((template.exercises[pos[0]].exercise_id, 8, 100))
            log = make_log("a", "2026-03-02", rows, complete=False)
            pos = advance_cursor(template, *pos)
            assert pos == derive_cursor(template, log.set_entries)


class TestExerciseStatus:
    def test_statuses(self):
        template = make_template(sets=(3, 2))
        log = make_log("a", "2026-03-02", [("bench", 8, 100)] * 3 + [("row", 8, 100)])
        assert exercise_status(template, log.set_entries, 0) == "completed"
        assert exercise_status(template, log.set_entries, 1) == "in-progress"

    def test_not_started(self):
        template = make_template(sets=(3, 2))
        assert exercise_status(template, [], 1) == "not-started"

    def test_logged_counts(self):
        log = make_log("a", "2026-03-02", [("bench", 8, 100), ("row", 8, 100), ("bench", 5, 120)])
        assert logged_counts(log.set_entries) == {"bench": 2, "row": 1}
