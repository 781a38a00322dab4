from __future__ import annotations

from datetime import date, datetime, timedelta
from uuid import uuid4

import pytest

from yearpeer.core.config import settings
from yearpeer.services.entities import SubmitMode, TaskDraft, TaskRecord
from yearpeer.services.results import FieldError, NotFoundError, PersistenceError, QuotaExceededError
from yearpeer.services.task_rules import (
    count_tasks_on_date,
    delete_task,
    submit_task,
    toggle_completion,
    validate_task_fields,
    within_quota,
)

DAY = date(2025, 1, 5)


def _create(repo, user_id, day=DAY, title="Task"):
    draft = TaskDraft(title=title, date=day)
    return submit_task(repo, user_id, draft, repo.list_tasks_for_user_on_date(user_id, day))


def _record(day: date, **overrides) -> TaskRecord:
    fields = {"id": uuid4(), "user_id": uuid4(), "title": "Existing", "date": day, "completed": False}
    fields.update(overrides)
    return TaskRecord(**fields)


def test_task_title_rules() -> None:
    assert validate_task_fields(TaskDraft(title="Run", date=DAY)) is None
    assert validate_task_fields(TaskDraft(title="x" * 255, date=DAY)) is None
    assert validate_task_fields(TaskDraft(title="", date=DAY)).field == "title"
    assert validate_task_fields(TaskDraft(title="x" * 256, date=DAY)).message == "Title is too long"


def test_count_tasks_on_date_ignores_time_and_excluded_task() -> None:
    tasks = [_record(DAY), _record(DAY), _record(DAY + timedelta(days=1))]

    assert count_tasks_on_date(tasks, DAY) == 2
    assert count_tasks_on_date(tasks, datetime(2025, 1, 5, 23, 30)) == 2
    assert count_tasks_on_date(tasks, DAY, exclude_id=tasks[0].id) == 1
    assert count_tasks_on_date([], DAY) == 0


def test_within_quota_is_strictly_below_limit() -> None:
    four = [_record(DAY) for _ in range(4)]
    five = four + [_record(DAY)]

    assert within_quota(four, DAY)
    assert not within_quota(five, DAY)
    assert within_quota(five, DAY, exclude_id=five[0].id)
    assert within_quota(five, DAY, quota=6)


def test_within_quota_follows_configured_daily_limit(monkeypatch) -> None:
    monkeypatch.setattr(settings, "max_tasks_per_day", 3)
    three = [_record(DAY) for _ in range(3)]

    assert not within_quota(three, DAY)
    assert within_quota(three[:2], DAY)


def test_scenario_sixth_task_hits_quota_until_one_is_deleted(task_repo) -> None:
    user_id = uuid4()
    created = [_create(task_repo, user_id, title=f"Task {n}") for n in range(5)]
    assert all(result.ok for result in created)

    sixth = _create(task_repo, user_id, title="Task 6")
    assert isinstance(sixth.error, QuotaExceededError)
    assert sixth.error.limit == 5

    assert delete_task(task_repo, user_id, created[0].value.id).ok
    retry = _create(task_repo, user_id, title="Task 6")
    assert retry.ok
    assert count_tasks_on_date(task_repo.list_tasks_for_user_on_date(user_id, DAY), DAY) == 5


def test_quota_is_per_user(task_repo) -> None:
    alice, bob = uuid4(), uuid4()
    for _ in range(5):
        _create(task_repo, alice)

    assert _create(task_repo, bob).ok


def test_configured_quota_is_reported(task_repo) -> None:
    user_id = uuid4()
    _create(task_repo, user_id)
    draft = TaskDraft(title="Second", date=DAY)

    result = submit_task(task_repo, user_id, draft, task_repo.list_tasks_for_user_on_date(user_id, DAY), quota=1)

    assert result.error.limit == 1
    assert result.error.message == "Cannot exceed 1 tasks per day"


def test_update_on_same_day_skips_quota(task_repo) -> None:
    user_id = uuid4()
    tasks = [_create(task_repo, user_id).value for _ in range(5)]
    renamed = TaskDraft(title="Renamed", date=DAY)

    result = submit_task(
        task_repo,
        user_id,
        renamed,
        task_repo.list_tasks_for_user_on_date(user_id, DAY),
        mode=SubmitMode.UPDATE,
        exclude_id=tasks[0].id,
    )

    assert result.ok
    assert result.value.title == "Renamed"


def test_moving_task_checks_quota_on_target_day(task_repo) -> None:
    user_id = uuid4()
    other_day = DAY + timedelta(days=1)
    for _ in range(5):
        _create(task_repo, user_id, day=other_day)
    mover = _create(task_repo, user_id).value

    blocked = submit_task(
        task_repo,
        user_id,
        TaskDraft(title="Task", date=other_day),
        task_repo.list_tasks_for_user_on_date(user_id, other_day),
        mode=SubmitMode.UPDATE,
        exclude_id=mover.id,
    )
    assert isinstance(blocked.error, QuotaExceededError)
    assert task_repo.get_task(mover.id, user_id).date == DAY

    delete_task(task_repo, user_id, task_repo.list_tasks_for_user_on_date(user_id, other_day)[0].id)
    moved = submit_task(
        task_repo,
        user_id,
        TaskDraft(title="Task", date=other_day),
        task_repo.list_tasks_for_user_on_date(user_id, other_day),
        mode=SubmitMode.UPDATE,
        exclude_id=mover.id,
    )
    assert moved.ok
    assert moved.value.date == other_day


def test_daily_count_never_exceeds_quota_after_mixed_operations(task_repo) -> None:
    user_id = uuid4()
    days = [DAY + timedelta(days=offset) for offset in range(3)]
    for attempt in range(20):
        _create(task_repo, user_id, day=days[attempt % 3])
    for task in list(task_repo.tasks.values()):
        target = days[(days.index(task.date) + 1) % 3]
        submit_task(
            task_repo,
            user_id,
            TaskDraft(title=task.title, date=target),
            task_repo.list_tasks_for_user_on_date(user_id, target),
            mode=SubmitMode.UPDATE,
            exclude_id=task.id,
        )

    for day in days:
        assert count_tasks_on_date(task_repo.list_tasks_for_user_on_date(user_id, day), day) <= 5


def test_field_error_reported_before_quota(task_repo) -> None:
    user_id = uuid4()
    for _ in range(5):
        _create(task_repo, user_id)

    result = submit_task(task_repo, user_id, TaskDraft(title="", date=DAY), [])

    assert isinstance(result.error, FieldError)


def test_update_of_foreign_task_is_not_found(task_repo) -> None:
    owner = uuid4()
    task = _create(task_repo, owner).value

    result = submit_task(
        task_repo,
        uuid4(),
        TaskDraft(title="Hijack", date=DAY),
        [],
        mode=SubmitMode.UPDATE,
        exclude_id=task.id,
    )

    assert isinstance(result.error, NotFoundError)


def test_update_requires_task_id(task_repo) -> None:
    with pytest.raises(ValueError):
        submit_task(task_repo, uuid4(), TaskDraft(title="x", date=DAY), [], mode=SubmitMode.UPDATE)


def test_toggle_completion_is_idempotent(task_repo) -> None:
    user_id = uuid4()
    task = _create(task_repo, user_id).value

    first = toggle_completion(task_repo, user_id, task.id, True)
    second = toggle_completion(task_repo, user_id, task.id, True)
    undone = toggle_completion(task_repo, user_id, task.id, False)

    assert first.ok and first.value.completed is True
    assert second.ok and second.value.completed is True
    assert undone.ok and undone.value.completed is False


def test_toggle_completion_ignores_full_day(task_repo) -> None:
    user_id = uuid4()
    tasks = [_create(task_repo, user_id).value for _ in range(5)]

    assert toggle_completion(task_repo, user_id, tasks[-1].id, True).ok


def test_toggle_completion_of_foreign_task_is_not_found(task_repo) -> None:
    task = _create(task_repo, uuid4()).value

    result = toggle_completion(task_repo, uuid4(), task.id, True)

    assert isinstance(result.error, NotFoundError)


def test_persistence_failure_becomes_failure_result(broken_task_repo) -> None:
    result = submit_task(broken_task_repo, uuid4(), TaskDraft(title="x", date=DAY), [])

    assert isinstance(result.error, PersistenceError)
