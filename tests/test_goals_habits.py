"""Goal and habit query tests."""

from datetime import date, datetime, timedelta, timezone

from models import HabitFrequency
from services.goals import goal_progress
from services.habits import calculate_streak, completion_rate

TODAY = date(2026, 10, 14)


def test_goal_progress():
    assert goal_progress(0, None) == 0
    assert goal_progress(5, 10) == 50
    assert goal_progress(15, 10) == 100
    assert goal_progress(-3, 10) == 0


class TestHabitStreak:
    def test_no_entries(self):
        assert calculate_streak([], HabitFrequency.DAILY, TODAY) == (0, 0)

    def test_daily_run_ending_today(self):
        days = [TODAY, TODAY - timedelta(days=1), TODAY - timedelta(days=2), TODAY - timedelta(days=5)]
        assert calculate_streak(days, HabitFrequency.DAILY, TODAY) == (3, 3)

    def test_lapsed_daily_habit(self):
        days = [TODAY - timedelta(days=3), TODAY - timedelta(days=4)]
        assert calculate_streak(days, HabitFrequency.DAILY, TODAY) == (0, 2)

    def test_weekly_allows_gap(self):
        days = [TODAY - timedelta(days=2), TODAY - timedelta(days=8), TODAY - timedelta(days=15)]
        assert calculate_streak(days, HabitFrequency.WEEKLY, TODAY) == (3, 3)

    def test_future_entries_ignored(self):
        assert calculate_streak([TODAY + timedelta(days=1)], HabitFrequency.DAILY, TODAY) == (0, 0)


def test_completion_rate():
    two_weeks = TODAY - timedelta(days=13)
    assert completion_rate({two_weeks: 1}, two_weeks, TODAY, HabitFrequency.WEEKLY, 1) == 50
    assert completion_rate({two_weeks: 1}, two_weeks, TODAY, HabitFrequency.WEEKLY, 2) == 0
    assert completion_rate({TODAY: 1}, TODAY, TODAY, HabitFrequency.DAILY, 1) == 100


class TestGoalEndpoints:
    def _create(self, client, headers, **body):
        r = client.post("/api/goals", json=body, headers=headers)
        assert r.status_code == 201
        return r.json()["goal"]

    def test_create_defaults(self, client, headers):
        goal = self._create(client, headers, title="Read 12 books", target_value=12, unit="books")
        assert goal["status"] == "ACTIVE"
        assert goal["current_value"] == 0
        assert goal["progress"] == 0
        assert goal["days_remaining"] is None

    def test_list_sort_and_paginate(self, client, headers):
        for title in ("Charlie", "Alpha", "Bravo"):
            self._create(client, headers, title=title)

        r = client.get("/api/goals", params={"sort_by": "title", "limit": 2, "page": 2}, headers=headers)
        assert r.status_code == 200
        body = r.json()
        assert body["total"] == 3
        assert body["total_pages"] == 2
        assert [g["title"] for g in body["goals"]] == ["Charlie"]

        r = client.get("/api/goals", params={"sort_by": "title", "order": "desc"}, headers=headers)
        assert [g["title"] for g in r.json()["goals"]] == ["Charlie", "Bravo", "Alpha"]

    def test_no_matches_is_empty(self, client, headers, other_headers):
        self._create(client, headers, title="Run a marathon")
        r = client.get("/api/goals", params={"search": "piano"}, headers=headers)
        assert r.status_code == 200
        assert r.json()["goals"] == []
        assert r.json()["total"] == 0

        r = client.get("/api/goals", params={"search": "MARATHON"}, headers=headers)
        assert r.json()["total"] == 1

        r = client.get("/api/goals", headers=other_headers)
        assert r.json()["total"] == 0

    def test_status_filter(self, client, headers):
        self._create(client, headers, title="Save money")
        r = client.get("/api/goals", params={"status": "COMPLETED"}, headers=headers)
        assert r.json() == {"goals": [], "total": 0, "page": 1, "limit": 50, "total_pages": 0}

    def test_invalid_sort_field(self, client, headers):
        r = client.get("/api/goals", params={"sort_by": "user_id"}, headers=headers)
        assert r.status_code == 400
        assert r.json()["error"] == "Invalid query parameters"

    def test_invalid_body(self, client, headers):
        r = client.post("/api/goals", json={"title": ""}, headers=headers)
        assert r.status_code == 400
        assert r.json()["error"] == "Invalid request body"

    def test_progress_completes_goal(self, client, headers, other_headers):
        goal = self._create(client, headers, title="Ship v1", target_value=10)
        r = client.post(f"/api/goals/{goal['id']}/progress", json={"increment": 4}, headers=headers)
        assert r.json()["goal"]["progress"] == 40
        assert r.json()["goal"]["status"] == "ACTIVE"

        r = client.post(f"/api/goals/{goal['id']}/progress", json={"set_value": 10}, headers=headers)
        assert r.json()["goal"]["status"] == "COMPLETED"
        assert r.json()["goal"]["progress"] == 100

        r = client.post(f"/api/goals/{goal['id']}/progress", json={"increment": 1}, headers=other_headers)
        assert r.status_code == 404

    def test_sort_by_progress(self, client, headers):
        low = self._create(client, headers, title="Low", target_value=10)
        high = self._create(client, headers, title="High", target_value=10)
        client.post(f"/api/goals/{low['id']}/progress", json={"increment": 1}, headers=headers)
        client.post(f"/api/goals/{high['id']}/progress", json={"increment": 9}, headers=headers)

        r = client.get("/api/goals", params={"sort_by": "progress", "order": "desc"}, headers=headers)
        assert [g["title"] for g in r.json()["goals"]] == ["High", "Low"]

    def test_search_treats_wildcards_literally(self, client, headers):
        self._create(client, headers, title="Run a marathon")
        for term in ("%", "_", "a%n"):
            r = client.get("/api/goals", params={"search": term}, headers=headers)
            assert r.json()["total"] == 0, term

        self._create(client, headers, title="Give 100% effort")
        r = client.get("/api/goals", params={"search": "100%"}, headers=headers)
        assert [g["title"] for g in r.json()["goals"]] == ["Give 100% effort"]

    def test_get_update_delete(self, client, headers, other_headers):
        goal = self._create(client, headers, title="Learn Spanish", target_value=100)
        url = f"/api/goals/{goal['id']}"

        r = client.get(url, headers=headers)
        assert r.status_code == 200
        assert r.json()["goal"]["title"] == "Learn Spanish"

        deadline = (datetime.now(timezone.utc) + timedelta(days=10)).isoformat()
        r = client.put(url, json={"title": "Learn Portuguese", "deadline": deadline}, headers=headers)
        assert r.status_code == 200
        updated = r.json()["goal"]
        assert updated["title"] == "Learn Portuguese"
        assert updated["target_value"] == 100
        assert updated["days_remaining"] == 10
        assert updated["is_overdue"] is False

        r = client.put(url, json={"description": None, "status": "PAUSED"}, headers=headers)
        assert r.json()["goal"]["status"] == "PAUSED"

        for method in ("get", "delete"):
            r = getattr(client, method)(url, headers=other_headers)
            assert r.status_code == 404
            assert r.json() == {"error": "Goal not found"}
        assert client.put(url, json={"title": "Mine"}, headers=other_headers).status_code == 404

        assert client.delete(url, headers=headers).json() == {"success": True}
        assert client.get(url, headers=headers).status_code == 404
        assert client.delete(url, headers=headers).status_code == 404

    def test_update_rejects_empty_or_null_required_fields(self, client, headers):
        goal = self._create(client, headers, title="Garden")
        for body in ({}, {"title": None}, {"status": None}):
            r = client.put(f"/api/goals/{goal['id']}", json=body, headers=headers)
            assert r.status_code == 400, body
            assert r.json()["error"] == "Invalid request body"

    def test_statistics(self, client, headers, other_headers):
        deadline = (datetime.now(timezone.utc) + timedelta(days=3)).isoformat()
        reading = self._create(client, headers, title="Reading", target_value=10, deadline=deadline)
        shipped = self._create(client, headers, title="Ship", target_value=4)
        paused = self._create(client, headers, title="Piano")
        dropped = self._create(client, headers, title="Chess")
        client.post(f"/api/goals/{reading['id']}/progress", json={"increment": 5}, headers=headers)
        client.post(f"/api/goals/{shipped['id']}/progress", json={"set_value": 4}, headers=headers)
        client.put(f"/api/goals/{paused['id']}", json={"status": "PAUSED"}, headers=headers)
        client.put(f"/api/goals/{dropped['id']}", json={"status": "ABANDONED"}, headers=headers)

        r = client.get("/api/goals/statistics", headers=headers)
        assert r.status_code == 200
        stats = r.json()["statistics"]
        assert stats["total_goals"] == 4
        assert stats["active_goals"] == 1
        assert stats["completed_goals"] == 1
        assert stats["paused_goals"] == 1
        assert stats["abandoned_goals"] == 1
        assert stats["overall_progress"] == 50
        assert stats["goals_completed_this_month"] == 1
        assert stats["goals_completed_this_year"] == 1
        assert [d["goal_title"] for d in stats["nearest_deadlines"]] == ["Reading"]
        assert stats["nearest_deadlines"][0]["days_remaining"] == 3
        assert stats["most_progressed"] == [{
            "goal_id": reading["id"],
            "goal_title": "Reading",
            "progress": 50,
            "current_value": 5,
            "target_value": 10,
        }]

        empty = client.get("/api/goals/statistics", headers=other_headers).json()["statistics"]
        assert empty["total_goals"] == 0
        assert empty["overall_progress"] == 0
        assert empty["nearest_deadlines"] == []


class TestHabitEndpoints:
    def _create(self, client, headers, **body):
        r = client.post("/api/habits", json=body, headers=headers)
        assert r.status_code == 201
        return r.json()["habit"]

    def test_create_defaults(self, client, headers):
        habit = self._create(client, headers, title="Meditate")
        assert habit["frequency"] == "daily"
        assert habit["target_count"] == 1
        assert habit["color"].startswith("#")
        assert habit["current_streak"] == 0
        assert habit["completed_today"] is False

    def test_bad_color_rejected(self, client, headers):
        r = client.post("/api/habits", json={"title": "Stretch", "color": "blue"}, headers=headers)
        assert r.status_code == 400

    def test_filters(self, client, headers):
        self._create(client, headers, title="Meditate")
        self._create(client, headers, title="Call parents", frequency="weekly")

        r = client.get("/api/habits", params={"frequency": "weekly"}, headers=headers)
        assert [h["title"] for h in r.json()["habits"]] == ["Call parents"]

        r = client.get("/api/habits", params={"frequency": "monthly"}, headers=headers)
        assert r.json()["habits"] == []
        assert r.json()["total"] == 0

        r = client.get("/api/habits", params={"is_archived": "true"}, headers=headers)
        assert r.json()["total"] == 0

    def test_toggle_today(self, client, headers, other_headers):
        habit = self._create(client, headers, title="Drink water")

        r = client.post(f"/api/habits/{habit['id']}/toggle", headers=headers)
        assert r.status_code == 200
        body = r.json()
        assert body["created"] is True
        assert body["habit"]["completed_today"] is True
        assert body["habit"]["current_streak"] == 1

        r = client.post(f"/api/habits/{habit['id']}/toggle", headers=headers)
        body = r.json()
        assert body["created"] is False
        assert body["entry"] is None
        assert body["habit"]["completed_today"] is False

        r = client.post(f"/api/habits/{habit['id']}/toggle", headers=other_headers)
        assert r.status_code == 404

    def test_toggle_multi_count_decrements(self, client, headers):
        habit = self._create(client, headers, title="Pushups", target_count=3)
        day = "2026-01-05"
        r = client.post(f"/api/habits/{habit['id']}/toggle", json={"day": day, "count": 2}, headers=headers)
        assert r.json()["entry"]["count"] == 2

        r = client.post(f"/api/habits/{habit['id']}/toggle", json={"day": day}, headers=headers)
        assert r.json()["created"] is False
        assert r.json()["entry"]["count"] == 1

    def test_search_treats_wildcards_literally(self, client, headers):
        self._create(client, headers, title="Read")
        for term in ("%", "_"):
            r = client.get("/api/habits", params={"search": term}, headers=headers)
            assert r.json()["total"] == 0, term

        self._create(client, headers, title="snake_case review")
        r = client.get("/api/habits", params={"search": "_"}, headers=headers)
        assert [h["title"] for h in r.json()["habits"]] == ["snake_case review"]

    def test_get_update_delete(self, client, headers, other_headers):
        habit = self._create(client, headers, title="Journal")
        url = f"/api/habits/{habit['id']}"
        client.post(f"{url}/toggle", headers=headers)

        r = client.get(url, headers=headers)
        assert r.status_code == 200
        assert r.json()["habit"]["completed_today"] is True

        r = client.put(url, json={"title": "Evening journal", "color": "#10B981"}, headers=headers)
        assert r.status_code == 200
        assert r.json()["habit"]["title"] == "Evening journal"
        assert r.json()["habit"]["current_streak"] == 1

        assert client.put(url, json={"color": "red"}, headers=headers).status_code == 400
        assert client.put(url, json={"frequency": None}, headers=headers).status_code == 400

        for method in ("get", "delete"):
            r = getattr(client, method)(url, headers=other_headers)
            assert r.status_code == 404
            assert r.json() == {"error": "Habit not found"}
        assert client.put(url, json={"title": "Mine"}, headers=other_headers).status_code == 404

        assert client.delete(url, headers=headers).json() == {"success": True}
        assert client.get(url, headers=headers).status_code == 404
        assert client.post(f"{url}/toggle", headers=headers).status_code == 404

    def test_archive_hides_from_default_list(self, client, headers):
        habit = self._create(client, headers, title="Floss")
        r = client.put(f"/api/habits/{habit['id']}", json={"is_archived": True}, headers=headers)
        assert r.json()["habit"]["is_archived"] is True

        assert client.get("/api/habits", headers=headers).json()["total"] == 0
        r = client.get("/api/habits", params={"is_archived": "true"}, headers=headers)
        assert [h["title"] for h in r.json()["habits"]] == ["Floss"]

    def test_statistics(self, client, headers, other_headers):
        walk = self._create(client, headers, title="Walk")
        self._create(client, headers, title="Stretch")
        archived = self._create(client, headers, title="Old habit")
        client.put(f"/api/habits/{archived['id']}", json={"is_archived": True}, headers=headers)
        client.post(f"/api/habits/{walk['id']}/toggle", headers=headers)

        r = client.get("/api/habits/statistics", headers=headers)
        assert r.status_code == 200
        stats = r.json()["statistics"]
        assert stats["total_habits"] == 2
        assert stats["active_habits"] == 2
        assert stats["completed_today"] == 1
        assert stats["current_streaks"] == [{"habit_id": walk["id"], "habit_title": "Walk", "streak": 1}]
        assert [s["streak"] for s in stats["longest_streaks"]] == [1, 0]
        assert stats["total_entries"] == 1
        assert stats["this_week_entries"] == 1
        assert stats["this_month_entries"] == 1
        # Walk met 1 of 31 days (3%), Stretch none
        assert stats["completion_rate"] == 2

        empty = client.get("/api/habits/statistics", headers=other_headers).json()["statistics"]
        assert empty["total_habits"] == 0
        assert empty["completion_rate"] == 0
