import pytest

from taskflow.core.errors import ConflictError, Unauthorized, ValidationFailed
from taskflow.core.security import verify_password
from taskflow.crud.users import authenticate_user, create_user


def test_create_user_hashes_password(db_session):
    user = create_user(db_session, {"email": "Ada@Example.com", "username": " ada ", "password": "s3cret!"})
    assert user.username == "ada"
    assert user.password_hash != "s3cret!"
    assert verify_password("s3cret!", user.password_hash)
    assert not verify_password("wrong", user.password_hash)


def test_signup_validation_reports_each_field(db_session):
    with pytest.raises(ValidationFailed) as excinfo:
        create_user(db_session, {"email": "not-an-email", "username": "ab", "password": "abc"})
    fields = {error["field"]: error["message"] for error in excinfo.value.errors}
    assert set(fields) == {"email", "username", "password"}
    assert "6" in fields["password"]


def test_duplicate_username_and_email_conflict(db_session):
    create_user(db_session, {"email": "ada@example.com", "username": "ada", "password": "s3cret!"})
    with pytest.raises(ConflictError, match="Username"):
        create_user(db_session, {"email": "other@example.com", "username": "ada", "password": "s3cret!"})
    with pytest.raises(ConflictError, match="Email"):
        create_user(db_session, {"email": "ADA@example.com", "username": "ada2", "password": "s3cret!"})


def test_authenticate_user(db_session):
    create_user(db_session, {"email": "ada@example.com", "username": "ada", "password": "s3cret!"})
    assert authenticate_user(db_session, {"username": "ada", "password": "s3cret!"}).username == "ada"
    with pytest.raises(Unauthorized):
        authenticate_user(db_session, {"username": "ada", "password": "nope!!"})
    with pytest.raises(Unauthorized):
        authenticate_user(db_session, {"username": "ghost", "password": "s3cret!"})
    with pytest.raises(ValidationFailed):
        authenticate_user(db_session, {"username": "", "password": ""})
