"""Tests for schedule.py: merging harvest and planting events."""

from farmops.models import Production
from farmops.schedule import CalendarEvent, merge_events, upcoming_events


def _event(event_id, day, kind="harvest"):
    return CalendarEvent(id=event_id, date=day, label="Tomatoes", kind=kind, status="planted")


class TestMergeEvents:
    def test_sorted_across_both_lists(self):
        harvests = [_event("h1", "2024-06-05"), _event("h2", "2024-06-01")]
        plantings = [_event("p1", "2024-06-03", kind="planting")]
        merged = merge_events(harvests, plantings, limit=5)
        assert [e.date for e in merged] == ["2024-06-01", "2024-06-03", "2024-06-05"]

    def test_ties_keep_concatenation_order(self):
        harvests = [_event("h1", "2024-06-03"), _event("h2", "2024-06-03")]
        plantings = [_event("p1", "2024-06-03", kind="planting"), _event("p2", "2024-06-01", kind="planting")]
        merged = merge_events(harvests, plantings)
        assert [e.id for e in merged] == ["p2", "h1", "h2", "p1"]

    def test_caps_at_limit(self):
        harvests = [_event(f"h{i}", f"2024-06-{10 + i:02d}") for i in range(4)]
        plantings = [_event(f"p{i}", f"2024-06-{i + 1:02d}", kind="planting") for i in range(4)]
        merged = merge_events(harvests, plantings, limit=5)
        assert [e.id for e in merged] == ["p0", "p1", "p2", "p3", "h0"]

    def test_empty(self):
        assert merge_events([], []) == []


class TestUpcomingEvents:
    def test_collects_both_kinds_in_window(self, productions, now):
        events = upcoming_events(productions, now)
        assert [(e.id, e.kind, e.date) for e in events] == [
            ("prod-4", "planting", "2024-06-20"),
            ("prod-2", "harvest", "2024-07-01"),
        ]

    def test_same_production_can_appear_twice(self, now):
        p = Production(id="p", land_id="l", commodity="Garlic", planting_date="2024-06-16", seed_count=1,
                       estimated_harvest_date="2024-07-10")
        events = upcoming_events([p], now)
        assert [e.kind for e in events] == ["planting", "harvest"]

    def test_nothing_upcoming(self, now):
        past = Production(id="p", land_id="l", commodity="Garlic", planting_date="2024-01-01", seed_count=1)
        assert upcoming_events([past], now) == []
