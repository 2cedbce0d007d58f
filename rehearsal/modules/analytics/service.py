from __future__ import annotations

from collections import Counter
from statistics import mean
from threading import Lock

from rehearsal.modules.scenarios.schemas import STAT_NAMES
from rehearsal.utils.time import utc_now_iso

MAX_EVENTS = 1000
EVENT_TYPES = ("scenario_selected", "choice_made", "breakthrough_achieved", "session_complete")


class _RehearsalAnalyticsStore:
    def __init__(self) -> None:
        self._lock = Lock()
        self._events: list[dict] = []
        self.event_counts: Counter[str] = Counter()
        self.scenario_selections: Counter[str] = Counter()
        self.difficulty_selections: Counter[str] = Counter()
        self.completed_sessions: int = 0
        self.successful_sessions: int = 0
        self._completed_stats: list[dict[str, int]] = []
        self._impacts: dict[str, list[int]] = {name: [] for name in STAT_NAMES}

    def reset(self) -> None:
        with self._lock:
            self._events = []
            self.event_counts = Counter()
            self.scenario_selections = Counter()
            self.difficulty_selections = Counter()
            self.completed_sessions = 0
            self.successful_sessions = 0
            self._completed_stats = []
            self._impacts = {name: [] for name in STAT_NAMES}

    def track(self, event_type: str, data: dict) -> None:
        if event_type not in EVENT_TYPES:
            raise ValueError(f"unknown analytics event: {event_type}")
        with self._lock:
            self._events.append({"type": event_type, "data": dict(data), "timestamp": utc_now_iso()})
            if len(self._events) > MAX_EVENTS:
                self._events = self._events[-MAX_EVENTS:]
            self.event_counts[event_type] += 1

            if event_type == "scenario_selected":
                self.scenario_selections[str(data.get("scenario"))] += 1
                if data.get("difficulty"):
                    self.difficulty_selections[str(data["difficulty"])] += 1
            elif event_type == "choice_made":
                for name, value in dict(data.get("impact") or {}).items():
                    if name in self._impacts and value:
                        self._impacts[name].append(int(value))
                        del self._impacts[name][:-MAX_EVENTS]
            elif event_type == "session_complete":
                self.completed_sessions += 1
                if data.get("success"):
                    self.successful_sessions += 1
                stats = dict(data.get("stats") or {})
                self._completed_stats.append({name: int(stats.get(name, 0)) for name in STAT_NAMES})
                del self._completed_stats[:-MAX_EVENTS]

    def _observations(self) -> list[str]:
        out: list[str] = []
        if sum(self.scenario_selections.values()) > 2:
            most, count = self.scenario_selections.most_common(1)[0]
            out.append(f'You\'ve selected "{most}" {count} times. Interesting pattern.')
        empathy = self._impacts["empathy"]
        if len(empathy) > 3:
            avg = mean(empathy)
            lean = "toward empathy" if avg > 0 else "toward analysis"
            out.append(f"Your choices lean {lean}. Average impact: {avg:.2f}.")
        return out

    def summary(self) -> dict:
        with self._lock:
            completed = int(self.completed_sessions)
            success_rate = 0.0 if completed <= 0 else float(self.successful_sessions) / float(completed)
            average_stats = {
                name: round(mean(item[name] for item in self._completed_stats), 3) if self._completed_stats else 0.0
                for name in STAT_NAMES
            }
            average_impact = {
                name: round(mean(values), 3) if values else 0.0 for name, values in self._impacts.items()
            }
            most_attempted = None
            if self.scenario_selections:
                most_attempted = self.scenario_selections.most_common(1)[0][0]

            return {
                "total_events": int(sum(self.event_counts.values())),
                "event_counts": {name: int(self.event_counts.get(name, 0)) for name in EVENT_TYPES},
                "scenarios_started": int(self.event_counts.get("scenario_selected", 0)),
                "completed_sessions": completed,
                "successful_sessions": int(self.successful_sessions),
                "success_rate": round(success_rate, 4),
                "average_stats": average_stats,
                "average_impact": average_impact,
                "most_attempted_scenario": most_attempted,
                "difficulty_distribution": dict(self.difficulty_selections),
                "observations": self._observations(),
            }


_analytics = _RehearsalAnalyticsStore()


def reset_analytics() -> None:
    _analytics.reset()


def track_event(event_type: str, data: dict) -> None:
    _analytics.track(event_type, data)


def get_analytics_summary() -> dict:
    return _analytics.summary()
