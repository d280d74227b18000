"""Tests for the user stores (SQLite and in-memory)."""

import pytest

from src.infrastructure.database import Database
from src.modules.auth import DuplicateKeyError, InMemoryUserStore, SqliteUserStore, UserStore
from src.modules.auth.exceptions import InvalidFieldValueError, InvalidFilterError


@pytest.fixture(params=["sqlite", "memory"])
async def store(request: pytest.FixtureRequest, database: Database) -> UserStore:
    """Each store test runs against both implementations."""
    if request.param == "sqlite":
        return SqliteUserStore(database)
    return InMemoryUserStore()


def _doc(email: str = "test@example.com", **extra: object) -> dict[str, object]:
    return {"email": email, "password": "hashed", "username": "tester", **extra}


class TestCreate:
    """Tests for UserStore.create."""

    async def test_create_user(self, store: UserStore) -> None:
        """Should create a user with a generated id and profile fields."""
        user = await store.create(_doc(city="Lima"))

        assert user.id
        assert user.email == "test@example.com"
        assert user.username == "tester"
        assert user.profile == {"city": "Lima"}
        assert user.created_at == user.updated_at

    async def test_email_is_lowercased(self, store: UserStore) -> None:
        user = await store.create(_doc("Test@Example.COM"))
        assert user.email == "test@example.com"

    async def test_duplicate_email_fails(self, store: UserStore) -> None:
        """Should raise DuplicateKeyError and keep the first user."""
        first = await store.create(_doc())

        with pytest.raises(DuplicateKeyError) as exc_info:
            await store.create(_doc("TEST@example.com", password="other"))

        assert exc_info.value.field == "email"
        found = await store.find_one(email="test@example.com")
        assert found is not None
        assert found.id == first.id
        assert found.password == "hashed"

    async def test_null_email_is_rejected(self, store: UserStore) -> None:
        with pytest.raises(InvalidFieldValueError) as exc_info:
            await store.create(_doc(None))  # type: ignore[arg-type]

        assert exc_info.value.field == "email"
        assert await store.find_one(email="none") is None

    async def test_username_is_stored_as_text(self, store: UserStore) -> None:
        user = await store.create(_doc(username=5))

        assert user.username == "5"
        found = await store.find_one(id=user.id)
        assert found is not None
        assert found.username == "5"


class TestFindOne:
    """Tests for UserStore.find_one."""

    async def test_find_by_email(self, store: UserStore) -> None:
        created = await store.create(_doc())

        found = await store.find_one(email="TEST@example.com")

        assert found is not None
        assert found.id == created.id

    async def test_find_by_username(self, store: UserStore) -> None:
        await store.create(_doc())

        found = await store.find_one(username="tester")

        assert found is not None
        assert found.email == "test@example.com"

    async def test_find_by_id(self, store: UserStore) -> None:
        created = await store.create(_doc())

        found = await store.find_one(id=created.id)

        assert found is not None
        assert found.email == created.email

    async def test_find_by_profile_field(self, store: UserStore) -> None:
        await store.create(_doc("a@x.com", city="Lima"))
        await store.create(_doc("b@x.com", city="Quito"))

        found = await store.find_one(city="Quito")

        assert found is not None
        assert found.email == "b@x.com"

    async def test_find_with_several_filters(self, store: UserStore) -> None:
        await store.create(_doc("a@x.com", city="Lima"))

        assert await store.find_one(email="a@x.com", city="Lima") is not None
        assert await store.find_one(email="a@x.com", city="Quito") is None

    async def test_not_found(self, store: UserStore) -> None:
        assert await store.find_one(email="nobody@example.com") is None


class TestUpdateById:
    """Tests for UserStore.update_by_id."""

    async def test_update_merges_profile(self, store: UserStore) -> None:
        """Should set identity fields and merge the rest into the profile."""
        user = await store.create(_doc(city="Lima", team="red"))

        updated = await store.update_by_id(user.id, {"username": "renamed", "city": "Quito"})

        assert updated is not None
        assert updated.username == "renamed"
        assert updated.profile == {"city": "Quito", "team": "red"}
        assert updated.updated_at >= user.updated_at

        found = await store.find_one(id=user.id)
        assert found is not None
        assert found.username == "renamed"
        assert found.profile["city"] == "Quito"

    async def test_update_ignores_id(self, store: UserStore) -> None:
        user = await store.create(_doc())

        updated = await store.update_by_id(user.id, {"id": "other", "city": "Lima"})

        assert updated is not None
        assert updated.id == user.id

    async def test_update_unknown_id_returns_none(self, store: UserStore) -> None:
        """Should return None and leave existing users untouched."""
        user = await store.create(_doc())

        assert await store.update_by_id("missing", {"city": "Lima"}) is None

        found = await store.find_one(id=user.id)
        assert found is not None
        assert found.profile == {}

    async def test_update_to_taken_email_fails(self, store: UserStore) -> None:
        await store.create(_doc("a@x.com"))
        second = await store.create(_doc("b@x.com"))

        with pytest.raises(DuplicateKeyError):
            await store.update_by_id(second.id, {"email": "A@x.com"})

        found = await store.find_one(id=second.id)
        assert found is not None
        assert found.email == "b@x.com"

    async def test_update_to_null_email_fails(self, store: UserStore) -> None:
        """Should raise and leave the stored email untouched."""
        user = await store.create(_doc())

        with pytest.raises(InvalidFieldValueError):
            await store.update_by_id(user.id, {"email": None, "city": "Lima"})

        found = await store.find_one(id=user.id)
        assert found is not None
        assert found.email == "test@example.com"
        assert found.profile == {}

    async def test_update_coerces_username(self, store: UserStore) -> None:
        user = await store.create(_doc())

        updated = await store.update_by_id(user.id, {"username": 42})

        assert updated is not None
        assert updated.username == "42"
        assert await store.find_one(username="42") is not None


class TestSqliteUserStore:
    """Tests specific to the SQLite store."""

    async def test_rejects_unsafe_filter_names(self, sqlite_store: SqliteUserStore) -> None:
        with pytest.raises(InvalidFilterError):
            await sqlite_store.find_one(**{"email = email OR 1": "x"})

    async def test_rejects_unsafe_update_field(self, sqlite_store: SqliteUserStore) -> None:
        user = await sqlite_store.create(_doc())

        with pytest.raises(InvalidFilterError):
            await sqlite_store.update_by_id(user.id, {"a') OR 1 --": "x"})


class TestInMemoryUserStore:
    """Tests specific to the in-memory store."""

    async def test_counts_writes(self, memory_store: InMemoryUserStore) -> None:
        user = await memory_store.create(_doc())
        await memory_store.update_by_id(user.id, {"city": "Lima"})
        await memory_store.update_by_id("missing", {"city": "Lima"})

        assert memory_store.writes == 2
        assert len(memory_store) == 1

    async def test_returns_copies(self, memory_store: InMemoryUserStore) -> None:
        user = await memory_store.create(_doc())
        user.profile["city"] = "Lima"

        found = await memory_store.find_one(id=user.id)
        assert found is not None
        assert found.profile == {}
