import pytest
from fastapi.testclient import TestClient

from rehearsal.main import app
from rehearsal.modules.analytics.service import (
    MAX_EVENTS,
    get_analytics_summary,
    reset_analytics,
    track_event,
)


def test_empty_summary() -> None:
    summary = get_analytics_summary()
    assert summary["total_events"] == 0
    assert summary["success_rate"] == 0.0
    assert summary["most_attempted_scenario"] is None
    assert summary["average_stats"] == {"empathy": 0.0, "trust": 0.0, "effectiveness": 0.0}
    assert summary["observations"] == []


def test_unknown_event_type_is_rejected() -> None:
    with pytest.raises(ValueError):
        track_event("page_view", {})


def test_summary_aggregates_events() -> None:
    for _ in range(3):
        track_event("scenario_selected", {"scenario": "friend-checkin", "difficulty": "beginner"})
    track_event("scenario_selected", {"scenario": "addiction-intervention", "difficulty": "advanced"})
    for value in (2, 3, -1, 2):
        track_event("choice_made", {"impact": {"empathy": value, "trust": 0}})
    track_event("session_complete", {"success": True, "stats": {"empathy": 9, "trust": 5, "effectiveness": 4}})
    track_event("session_complete", {"success": False, "stats": {"empathy": 1, "trust": 1, "effectiveness": 0}})

    summary = get_analytics_summary()
    assert summary["total_events"] == 10
    assert summary["scenarios_started"] == 4
    assert summary["completed_sessions"] == 2
    assert summary["success_rate"] == 0.5
    assert summary["average_stats"] == {"empathy": 5.0, "trust": 3.0, "effectiveness": 2.0}
    assert summary["average_impact"]["empathy"] == 1.5
    assert summary["average_impact"]["trust"] == 0.0
    assert summary["most_attempted_scenario"] == "friend-checkin"
    assert summary["difficulty_distribution"] == {"beginner": 3, "advanced": 1}
    assert summary["observations"] == [
        'You\'ve selected "friend-checkin" 3 times. Interesting pattern.',
        "Your choices lean toward empathy. Average impact: 1.50.",
    ]

    reset_analytics()
    assert get_analytics_summary()["total_events"] == 0


def test_summary_endpoint() -> None:
    track_event("breakthrough_achieved", {"scenario": "friend-checkin"})
    resp = TestClient(app).get("/api/analytics/summary")
    assert resp.status_code == 200
    assert resp.json()["data"]["event_counts"]["breakthrough_achieved"] == 1


def test_averages_only_keep_recent_window() -> None:
    for value in (-1, 2):
        for _ in range(MAX_EVENTS):
            track_event("choice_made", {"impact": {"empathy": value}})
    for empathy in (0, 10):
        for _ in range(MAX_EVENTS):
            track_event("session_complete", {"success": True, "stats": {"empathy": empathy}})

    summary = get_analytics_summary()
    assert summary["average_impact"]["empathy"] == 2.0
    assert summary["average_stats"]["empathy"] == 10.0
    assert summary["completed_sessions"] == 2 * MAX_EVENTS
    assert summary["event_counts"]["choice_made"] == 2 * MAX_EVENTS
