from datetime import datetime, timedelta, timezone

import pytest

from taskflow.core.errors import NotFoundError, ValidationFailed
from taskflow.crud.tasks import count_tasks, create_task, delete_task, get_task, list_tasks, update_task
from taskflow.crud.users import create_user

T0 = datetime(2024, 5, 1, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture()
def owner(db_session):
    return create_user(db_session, {"email": "ada@example.com", "username": "ada", "password": "s3cret!"})


def test_created_task_appears_once_and_incomplete(db_session, owner):
    create_task(db_session, owner.id, {"title": "  Buy milk  "}, now=T0)
    tasks = list_tasks(db_session, owner.id)
    assert [(t.title, t.completed) for t in tasks] == [("Buy milk", False)]


def test_tasks_listed_newest_first(db_session, owner):
    for offset, title in enumerate(["first", "second", "third"]):
        create_task(db_session, owner.id, {"title": title}, now=T0 + timedelta(minutes=offset))
    assert [t.title for t in list_tasks(db_session, owner.id)] == ["third", "second", "first"]


def test_blank_title_is_rejected(db_session, owner):
    with pytest.raises(ValidationFailed) as excinfo:
        create_task(db_session, owner.id, {"title": "   "}, now=T0)
    assert excinfo.value.errors[0]["field"] == "title"
    assert list_tasks(db_session, owner.id) == []


def test_partial_update_only_touches_given_fields(db_session, owner):
    task = create_task(db_session, owner.id, {"title": "Write report"}, now=T0)
    updated = update_task(db_session, owner.id, task.id, {"completed": True}, now=T0)
    assert updated.completed is True
    assert updated.title == "Write report"

    renamed = update_task(db_session, owner.id, task.id, {"title": "Write final report"}, now=T0)
    assert renamed.title == "Write final report"
    assert renamed.completed is True

    with pytest.raises(ValidationFailed):
        update_task(db_session, owner.id, task.id, {"title": " "}, now=T0)
    assert get_task(db_session, owner.id, task.id).title == "Write final report"


def test_other_users_cannot_touch_tasks(db_session, owner):
    task = create_task(db_session, owner.id, {"title": "Private"}, now=T0)
    intruder = create_user(db_session, {"email": "eve@example.com", "username": "eve", "password": "123456"})
    with pytest.raises(NotFoundError):
        get_task(db_session, intruder.id, task.id)
    with pytest.raises(NotFoundError):
        update_task(db_session, intruder.id, task.id, {"completed": True}, now=T0)
    with pytest.raises(NotFoundError):
        delete_task(db_session, intruder.id, task.id)
    assert get_task(db_session, owner.id, task.id).completed is False


def test_delete_and_counts(db_session, owner):
    keep = create_task(db_session, owner.id, {"title": "Keep"}, now=T0)
    drop = create_task(db_session, owner.id, {"title": "Drop"}, now=T0)
    update_task(db_session, owner.id, keep.id, {"completed": True}, now=T0)
    create_task(db_session, owner.id, {"title": "Open"}, now=T0)
    delete_task(db_session, owner.id, drop.id)
    with pytest.raises(NotFoundError):
        get_task(db_session, owner.id, drop.id)
    assert count_tasks(db_session, owner.id) == (1, 1)
