"""Tests for user statistics, ranking and question summaries."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from builders import binary_question, category_question, choice_question, day, forecast, user
from econcast.scoring.leaderboard import (
    compute_leaderboard,
    compute_user_stats,
    is_correct,
    leaderboard,
    predicted_outcome,
    question_summary,
    user_stats,
)
from econcast.scoring.normalizer import normalize
from econcast.scoring.params import LeaderboardParams, ScoringParams


@pytest.fixture
def snapshot():
    """Three questions (two resolved) and two forecasters."""
    q1 = binary_question("q1")
    q2 = category_question("q2")
    q3 = binary_question("q3", resolved=False)
    forecasts = [
        forecast("q1", "alice", {"probability": 70}, day(0)),
        forecast("q2", "alice", {"increase": 30, "unchanged": 40, "decrease": 30}, day(0)),
        forecast("q3", "alice", {"probability": 10}, day(1)),
        forecast("q1", "bob", {"probability": 40}, day(0)),
    ]
    users = [user("alice"), user("bob")]
    return users, [q1, q2, q3], forecasts


class TestPredictedOutcome:
    """Tests for the outcome a forecast bets on."""

    def test_binary_above_threshold(self, bin_q):
        assert predicted_outcome(normalize({"probability": 51}, bin_q), bin_q) is True

    def test_binary_at_threshold_is_no(self, bin_q):
        """Exactly 50 does not predict YES."""
        assert predicted_outcome(normalize({"probability": 50}, bin_q), bin_q) is False

    def test_category_argmax(self, cat_q):
        value = normalize({"increase": 20, "unchanged": 30, "decrease": 50}, cat_q)
        assert predicted_outcome(value, cat_q) == "decrease"

    def test_tie_goes_to_first_key(self, cat_q):
        value = normalize({"increase": 40, "unchanged": 20, "decrease": 40}, cat_q)
        assert predicted_outcome(value, cat_q) == "increase"

    def test_choice_argmax(self, mc_q):
        value = normalize({"Healthcare": 60, "Energy": 40}, mc_q)
        assert predicted_outcome(value, mc_q) == "Healthcare"

    def test_custom_threshold(self, bin_q):
        params = ScoringParams.model_validate({"accuracy": {"binary_threshold": "60"}})
        assert predicted_outcome(normalize({"probability": 55}, bin_q), bin_q, params) is False


class TestIsCorrect:
    def test_label_resolution(self):
        q = category_question(resolution="Remain Unchanged")
        assert is_correct({"increase": 10, "unchanged": 80, "decrease": 10}, q)

    def test_binary_no(self):
        q = binary_question(resolution=False)
        assert is_correct({"probability": 20}, q)

    def test_missing_binary_resolution_never_correct(self):
        q = binary_question(resolution=None)
        assert not is_correct({"probability": 10}, q)
        assert not is_correct({"probability": 90}, q)


class TestUserStats:
    """Tests for per-user statistics."""

    def test_scores_and_counts(self, snapshot):
        _, questions, forecasts = snapshot
        stats = user_stats("alice", questions, forecasts)

        assert stats.questions_answered == 3
        assert stats.questions_scored == 2
        assert stats.brier_score == pytest.approx(0.36)  # mean(0.18, 0.54)
        assert stats.accuracy == 100.0

    def test_answered_includes_unresolved_but_accuracy_does_not(self, snapshot):
        """questions_answered and accuracy use different denominators."""
        _, questions, forecasts = snapshot
        forecasts = forecasts + [forecast("q3", "bob", {"probability": 99}, day(2))]
        stats = user_stats("bob", questions, forecasts)

        assert stats.questions_answered == 2
        assert stats.questions_scored == 1
        assert stats.accuracy == 0.0
        assert stats.brier_score == pytest.approx(0.72)

    def test_accuracy_uses_last_forecast(self, bin_q):
        forecasts = [
            forecast(bin_q.id, "u1", {"probability": 10}, day(0)),
            forecast(bin_q.id, "u1", {"probability": 90}, day(8)),
        ]
        assert user_stats("u1", [bin_q], forecasts).accuracy == 100.0

    def test_user_without_forecasts(self, snapshot):
        _, questions, forecasts = snapshot
        stats = user_stats("carol", questions, forecasts)
        assert stats.brier_score == 0.0
        assert stats.questions_answered == 0
        assert stats.questions_scored == 0
        assert stats.accuracy == 0.0

    def test_rounding_half_up(self):
        """0.0536 displays as 0.054."""
        q = choice_question(options=["A", "B", "C"], resolution="A")
        stats = user_stats("u1", [q], [forecast(q.id, "u1", {"A": 82, "B": 14, "C": 4})])
        assert stats.brier_score == 0.054

    def test_accuracy_rounded_to_one_place(self):
        questions = [binary_question(f"q{i}") for i in range(3)]
        forecasts = [
            forecast("q0", "u1", {"probability": 90}),
            forecast("q1", "u1", {"probability": 90}),
            forecast("q2", "u1", {"probability": 10}),
        ]
        assert user_stats("u1", questions, forecasts).accuracy == 66.7

    def test_idempotent(self, snapshot):
        _, questions, forecasts = snapshot
        first = compute_user_stats("alice", questions, forecasts)
        second = compute_user_stats("alice", questions, forecasts)
        assert first == second

    def test_accepts_raw_rows(self):
        questions = [{"id": 1, "type": "binary", "isResolved": True, "resolution": True, "resolvedDate": "2025-06-11"}]
        forecasts = [{"questionId": 1, "userId": 7, "forecast": {"probability": 70}, "createdAt": "2025-06-01T00:00:00Z"}]
        stats = user_stats(7, questions, forecasts)
        assert stats.brier_score == 0.18
        assert stats.questions_answered == 1

    def test_malformed_resolution_audited(self):
        q = category_question(resolution="sideways")
        audit = MagicMock()
        stats = user_stats("u1", [q], [forecast(q.id, "u1", {"increase": 30, "unchanged": 40, "decrease": 30})], audit=audit)

        assert stats.brier_score == 0.34
        audit.log_malformed_resolution.assert_called_once()
        assert audit.log_malformed_resolution.call_args.kwargs["question_id"] == q.id

    def test_binary_resolved_without_value(self):
        """Scored as NO, never counted correct, reported as malformed."""
        q = binary_question(resolution=None)
        audit = MagicMock()
        stats = user_stats("u1", [q], [forecast(q.id, "u1", {"probability": 10})], audit=audit)

        assert stats.brier_score == 0.02
        assert stats.accuracy == 0.0
        assert stats.questions_scored == 1
        audit.log_malformed_resolution.assert_called_once()


class TestLeaderboard:
    """Tests for ranking."""

    def test_lower_score_ranks_first(self, snapshot):
        users, questions, forecasts = snapshot
        entries = leaderboard(users, questions, forecasts)

        assert [e.user.id for e in entries] == ["alice", "bob"]
        assert [e.rank for e in entries] == [1, 2]
        assert entries[0].stats.brier_score < entries[1].stats.brier_score

    def test_unscored_user_ranks_first(self):
        """A user with no resolved answers carries 0 and ranks above 0.054."""
        q = choice_question(options=["A", "B", "C"], resolution="A")
        forecasts = [forecast(q.id, "scored", {"A": 82, "B": 14, "C": 4})]
        entries = compute_leaderboard([user("scored"), user("idle")], [q], forecasts)

        assert [e.user.id for e in entries] == ["idle", "scored"]
        assert entries[0].stats.brier_score == 0.0
        assert entries[1].stats.brier_score == 0.054

    def test_unscored_last_option(self):
        q = choice_question(options=["A", "B", "C"], resolution="A")
        forecasts = [forecast(q.id, "scored", {"A": 82, "B": 14, "C": 4})]
        params = ScoringParams(leaderboard=LeaderboardParams(unscored_last=True))
        entries = leaderboard([user("idle"), user("scored")], [q], forecasts, params=params)

        assert [e.user.id for e in entries] == ["scored", "idle"]

    def test_ties_keep_input_order(self, bin_q):
        forecasts = [
            forecast(bin_q.id, "b", {"probability": 80}),
            forecast(bin_q.id, "a", {"probability": 80}),
        ]
        entries = leaderboard([user("b"), user("a")], [bin_q], forecasts)
        assert [e.user.id for e in entries] == ["b", "a"]
        assert [e.rank for e in entries] == [1, 2]

    def test_strict_ordering_property(self):
        questions = [binary_question(f"q{i}") for i in range(4)]
        forecasts = [
            forecast(f"q{i}", f"u{j}", {"probability": 10 + 20 * j + 5 * i})
            for i in range(4)
            for j in range(4)
        ]
        users = [user(f"u{j}") for j in range(4)]
        entries = leaderboard(users, questions, forecasts)
        for earlier, later in zip(entries, entries[1:]):
            assert earlier.stats.brier_score <= later.stats.brier_score

    def test_audit_logs_ranking(self, snapshot):
        users, questions, forecasts = snapshot
        audit = MagicMock()
        leaderboard(users, questions, forecasts, audit=audit)

        audit.log_leaderboard_computed.assert_called_once()
        kwargs = audit.log_leaderboard_computed.call_args.kwargs
        assert kwargs["n_questions"] == 3
        assert kwargs["n_forecasts"] == 4

    def test_empty(self):
        assert leaderboard([], [], []) == []


class TestQuestionSummary:
    """Tests for per-question outcome summaries."""

    def test_resolved_binary(self, bin_q):
        forecasts = [
            forecast(bin_q.id, "alice", {"probability": 30}, day(0)),
            forecast(bin_q.id, "alice", {"probability": 80}, day(4)),
            forecast(bin_q.id, "bob", {"probability": 40}, day(1)),
            forecast(bin_q.id, "carol", {"probability": 95}, day(2)),
            forecast("other", "dave", {"probability": 95}, day(2)),
        ]
        summary = question_summary(bin_q, forecasts)

        assert summary.total == 3
        assert summary.correct == 2
        assert summary.incorrect == 1
        assert summary.top_user_id == "carol"
        assert summary.top_score == pytest.approx(0.005)

    def test_unresolved(self):
        q = binary_question(resolved=False)
        summary = question_summary(q, [forecast(q.id, "alice", {"probability": 30})])
        assert summary.total == 1
        assert summary.top_user_id is None

    def test_no_forecasts(self, cat_q):
        summary = question_summary(cat_q, [])
        assert summary.total == 0
        assert summary.top_score is None
