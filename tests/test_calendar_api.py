from __future__ import annotations

from uuid import UUID, uuid4


def _headers(user_id: UUID) -> dict:
    return {"X-User-Id": str(user_id)}


def test_month_view_marks_goal_days_and_task_counts(client):
    test_client, _ = client
    user_id = uuid4()
    goal = test_client.post(
        "/goals",
        json={
            "title": "Learn X",
            "color": "#888FFF",
            "impact": 3,
            "start_date": "2025-01-10",
            "end_date": "2025-01-12",
        },
        headers=_headers(user_id),
    ).json()["goal"]
    for title in ("One", "Two"):
        test_client.post("/tasks", json={"title": title, "date": "2025-01-11"}, headers=_headers(user_id))

    resp = test_client.get("/calendar/2025/1", headers=_headers(user_id))

    assert resp.status_code == 200
    month = resp.json()["month"]
    assert month["name"] == "January"
    assert month["weekdays"][0] == "Sun"
    cells = month["cells"]
    assert cells[:3] == [None, None, None]
    assert len(cells) == 3 + 31

    by_date = {cell["date"]: cell for cell in cells if cell}
    assert by_date["2025-01-09"]["color"] is None
    assert by_date["2025-01-10"]["color"] == "#888FFF"
    assert by_date["2025-01-12"]["goal_ids"] == [goal["id"]]
    assert by_date["2025-01-11"]["task_count"] == 2
    assert by_date["2025-01-11"]["completed_count"] == 0


def test_year_view_has_twelve_months(client):
    test_client, _ = client
    resp = test_client.get("/calendar/2024", headers=_headers(uuid4()))

    assert resp.status_code == 200
    months = resp.json()["months"]
    assert [month["month"] for month in months] == list(range(1, 13))
    february = months[1]
    assert len([cell for cell in february["cells"] if cell]) == 29


def test_invalid_month_is_rejected(client):
    test_client, _ = client
    resp = test_client.get("/calendar/2025/13", headers=_headers(uuid4()))

    assert resp.status_code == 422
    assert resp.json()["error"]["field"] == "month"
