# tests/test_store.py
import pytest
from sqlalchemy import exc

from auth_service.exceptions import CreateFailed, DuplicateEmail, UpdateFailed, UserNotFound
from auth_service.schemas import UserCreate, UserUpdate
from auth_service.utils import verify_password


def _create(store, email="ana@x.com", password="pw123", name="Ana"):
    return store.create(UserCreate(name=name, email=email, password=password))


def test_create_stores_hash_not_password(store):
    user = _create(store)
    assert user.id
    assert user.password_hash != "pw123"
    assert verify_password("pw123", user.password_hash)


def test_find_by_email_and_id(store):
    user = _create(store)
    assert store.find_by_email("ana@x.com").id == user.id
    assert store.find_by_id(user.id).email == "ana@x.com"
    assert store.find_by_email("missing@x.com") is None
    assert store.find_by_id("no-existe") is None


def test_ids_are_unique(store):
    first = _create(store, email="a@x.com")
    second = _create(store, email="b@x.com")
    assert first.id != second.id


def test_duplicate_email(store):
    _create(store)
    with pytest.raises(DuplicateEmail):
        _create(store, name="Otra")


def test_email_is_case_sensitive_as_stored(store):
    _create(store, email="ana@x.com")
    other = _create(store, email="Ana@x.com")
    assert store.find_by_email("Ana@x.com").id == other.id


@pytest.mark.parametrize("field", ["name", "email", "password"])
def test_required_fields(store, field):
    data = {"name": "Ana", "email": "ana@x.com", "password": "pw123"}
    data[field] = "  "
    with pytest.raises(CreateFailed) as exc_info:
        store.create(UserCreate(**data))
    assert field in exc_info.value.message
    assert store.find_by_email("ana@x.com") is None


def test_password_longer_than_bcrypt_limit(store):
    with pytest.raises(CreateFailed):
        _create(store, password="a" * 73)
    assert store.find_by_email("ana@x.com") is None


def test_password_at_bcrypt_limit(store):
    user = _create(store, password="ñ" * 36)
    assert verify_password("ñ" * 36, user.password_hash)


def test_database_failure_on_insert(store, monkeypatch):
    def broken_commit():
        raise exc.OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(store.db, "commit", broken_commit)
    with pytest.raises(CreateFailed):
        _create(store)


class TestUpdate:
    def test_name_only_keeps_hash(self, store):
        user = _create(store)
        original_hash = user.password_hash
        updated = store.update(user.id, UserUpdate(name="Ana María"))
        assert updated.name == "Ana María"
        assert updated.password_hash == original_hash

    def test_new_password_is_hashed(self, store):
        user = _create(store)
        updated = store.update(user.id, UserUpdate(password="nueva"))
        assert updated.password_hash != "nueva"
        assert verify_password("nueva", updated.password_hash)
        assert not verify_password("pw123", updated.password_hash)

    def test_stored_hash_is_not_hashed_twice(self, store):
        user = _create(store)
        original_hash = user.password_hash
        updated = store.update(user.id, UserUpdate(password=original_hash))
        assert updated.password_hash == original_hash
        assert verify_password("pw123", updated.password_hash)

    def test_email_collision(self, store):
        _create(store, email="a@x.com")
        user = _create(store, email="b@x.com")
        with pytest.raises(DuplicateEmail):
            store.update(user.id, UserUpdate(email="a@x.com"))
        assert store.find_by_id(user.id).email == "b@x.com"

    def test_unknown_user(self, store):
        with pytest.raises(UserNotFound):
            store.update("no-existe", UserUpdate(name="x"))

    @pytest.mark.parametrize("field", ["name", "email", "password"])
    @pytest.mark.parametrize("value", ["", "   "])
    def test_blank_fields_are_rejected(self, store, field, value):
        user = _create(store)
        original_hash = user.password_hash
        with pytest.raises(UpdateFailed) as exc_info:
            store.update(user.id, UserUpdate(**{field: value}))
        assert field in exc_info.value.message

        stored = store.find_by_id(user.id)
        assert stored.name == "Ana"
        assert stored.email == "ana@x.com"
        assert stored.password_hash == original_hash

    def test_password_longer_than_bcrypt_limit(self, store):
        user = _create(store)
        with pytest.raises(UpdateFailed):
            store.update(user.id, UserUpdate(password="a" * 73))
        assert verify_password("pw123", store.find_by_id(user.id).password_hash)

    def test_database_failure_on_update(self, store, monkeypatch):
        user = _create(store)

        def broken_commit():
            raise exc.OperationalError("UPDATE", {}, Exception("disk I/O error"))

        monkeypatch.setattr(store.db, "commit", broken_commit)
        with pytest.raises(UpdateFailed):
            store.update(user.id, UserUpdate(name="Ana María"))

        monkeypatch.undo()
        assert store.find_by_id(user.id).name == "Ana"
