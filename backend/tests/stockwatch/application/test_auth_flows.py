from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

import pytest

from stockwatch.application.auth.service import AuthApplicationService
from stockwatch.domain.auth.constants import ERROR_EMAIL_ALREADY_REGISTERED, EVENT_USER_CREATED
from stockwatch.domain.auth.schemas import SignUpData, User, UserCredentials


class FakeAuthRepository:
    def __init__(self) -> None:
        self._users: dict[int, UserCredentials] = {}
        self._email_index: dict[str, int] = {}
        self._next_id = 1

    async def create_user(self, *, email: str, email_normalized: str, password_hash: str, name: str, **profile) -> User:
        if email_normalized in self._email_index:
            raise ValueError(ERROR_EMAIL_ALREADY_REGISTERED)

        user_id = self._next_id
        self._next_id += 1
        now = datetime.now(tz=timezone.utc)
        record = UserCredentials(
            id=user_id,
            email=email,
            email_normalized=email_normalized,
            password_hash=password_hash,
            name=name,
            is_active=True,
            created_at=now,
            updated_at=now,
            **profile,
        )
        self._users[user_id] = record
        self._email_index[email_normalized] = user_id
        return self._to_user(record)

    async def get_user_by_email_normalized(self, *, email_normalized: str) -> UserCredentials | None:
        user_id = self._email_index.get(email_normalized)
        if user_id is None:
            return None
        return self._users[user_id]

    async def get_user_by_id(self, *, user_id: int) -> User | None:
        user = self._users.get(user_id)
        if user is None:
            return None
        return self._to_user(user)

    async def update_last_login(self, *, user_id: int) -> User | None:
        user = self._users.get(user_id)
        if user is None:
            return None
        user.last_login_at = datetime.now(tz=timezone.utc)
        return self._to_user(user)

    def deactivate(self, user_id: int) -> None:
        self._users[user_id].is_active = False

    @staticmethod
    def _to_user(user: UserCredentials) -> User:
        return User(**user.model_dump(exclude={"email_normalized", "password_hash"}))


class FakeUoW:
    def __init__(self, *, auth_repo: FakeAuthRepository) -> None:
        self.auth_repo = auth_repo
        self.users_repo = None
        self.watchlist_repo = None
        self.commits = 0
        self.rollbacks = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type:
            await self.rollback()
        return None

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


class RecordingEvents:
    def __init__(self, *, fail: bool = False) -> None:
        self.sent: list[tuple[str, dict[str, Any]]] = []
        self._fail = fail

    async def send(self, name: str, data: dict[str, Any]) -> None:
        if self._fail:
            raise ConnectionError("broker down")
        self.sent.append((name, data))


class MemoryRevocations:
    def __init__(self, *, fail: bool = False) -> None:
        self.revoked: dict[str, int] = {}
        self._fail = fail

    async def revoke(self, *, token_id: str, ttl_seconds: int) -> None:
        if self._fail:
            raise ConnectionError("redis down")
        self.revoked[token_id] = ttl_seconds

    async def is_revoked(self, *, token_id: str) -> bool:
        return token_id in self.revoked


def _sign_up_data(**overrides) -> SignUpData:
    data = {
        "email": "Trader@Example.com",
        "password": "strong-pass-123",
        "full_name": " Ada Lovelace ",
        "country": "UK",
        "investment_goals": "Growth",
        "risk_tolerance": "Medium",
        "preferred_industry": "Technology",
    }
    data.update(overrides)
    return SignUpData(**data)


def _service(*, events=None, revocations=None):
    repo = FakeAuthRepository()
    service = AuthApplicationService(
        uow=FakeUoW(auth_repo=repo),
        events=events,
        revocations=revocations if revocations is not None else MemoryRevocations(),
    )
    return service, repo


def test_sign_up_creates_user_and_dispatches_user_created_event() -> None:
    events = RecordingEvents()
    service, _ = _service(events=events)

    result = asyncio.run(service.sign_up(_sign_up_data()))

    assert result.success is True
    assert result.user is not None
    assert result.user.name == "Ada Lovelace"
    assert result.user.preferred_industry == "Technology"
    assert events.sent == [
        (
            EVENT_USER_CREATED,
            {
                "email": "Trader@Example.com",
                "name": "Ada Lovelace",
                "country": "UK",
                "investment_goals": "Growth",
                "risk_tolerance": "Medium",
                "preferred_industry": "Technology",
            },
        )
    ]


def test_sign_up_duplicate_email_fails_without_event() -> None:
    events = RecordingEvents()
    service, _ = _service(events=events)

    async def scenario():
        await service.sign_up(_sign_up_data())
        return await service.sign_up(_sign_up_data(email="trader@example.com"))

    result = asyncio.run(scenario())

    assert result.success is False
    assert result.error == ERROR_EMAIL_ALREADY_REGISTERED
    assert len(events.sent) == 1


def test_sign_up_with_invalid_email_reports_generic_failure() -> None:
    service, _ = _service()

    result = asyncio.run(service.sign_up(_sign_up_data(email="not-an-email")))

    assert result.success is False
    assert result.error == "Sign up failed"


def test_sign_up_succeeds_when_event_dispatch_fails() -> None:
    service, _ = _service(events=RecordingEvents(fail=True))

    result = asyncio.run(service.sign_up(_sign_up_data()))

    assert result.success is True


def test_sign_in_issues_token_usable_for_current_user() -> None:
    service, _ = _service()

    async def scenario():
        created = await service.sign_up(_sign_up_data())
        signed_in = await service.sign_in(email="trader@example.com", password="strong-pass-123")
        current = await service.get_current_user_from_token(token=signed_in.token.access_token)
        return created, signed_in, current

    created, signed_in, current = asyncio.run(scenario())

    assert signed_in.success is True
    assert signed_in.token.expires_in == 14 * 24 * 60 * 60
    assert current.id == created.user.id
    assert current.last_login_at is not None


def test_sign_in_with_wrong_password_is_generic_failure() -> None:
    service, _ = _service()

    async def scenario():
        await service.sign_up(_sign_up_data())
        return await service.sign_in(email="trader@example.com", password="wrong-password")

    result = asyncio.run(scenario())

    assert result.success is False
    assert result.error == "Sign in failed"
    assert result.token is None


def test_sign_out_revokes_token() -> None:
    revocations = MemoryRevocations()
    service, _ = _service(revocations=revocations)

    async def scenario():
        await service.sign_up(_sign_up_data())
        signed_in = await service.sign_in(email="trader@example.com", password="strong-pass-123")
        token = signed_in.token.access_token
        signed_out = await service.sign_out(token=token)
        with pytest.raises(ValueError, match="Invalid token"):
            await service.get_current_user_from_token(token=token)
        return signed_out

    signed_out = asyncio.run(scenario())

    assert signed_out.success is True
    [ttl] = revocations.revoked.values()
    assert 0 < ttl <= 14 * 24 * 60 * 60


def test_sign_out_failures_are_reported() -> None:
    service, _ = _service(revocations=MemoryRevocations(fail=True))

    async def scenario():
        await service.sign_up(_sign_up_data())
        signed_in = await service.sign_in(email="trader@example.com", password="strong-pass-123")
        return await service.sign_out(token=signed_in.token.access_token), await service.sign_out(token="garbage")

    revoked, garbage = asyncio.run(scenario())

    assert revoked.error == "Sign out failed"
    assert garbage.error == "Sign out failed"


def test_inactive_user_token_is_rejected() -> None:
    service, repo = _service()

    async def scenario():
        created = await service.sign_up(_sign_up_data())
        signed_in = await service.sign_in(email="trader@example.com", password="strong-pass-123")
        repo.deactivate(created.user.id)
        await service.get_current_user_from_token(token=signed_in.token.access_token)

    with pytest.raises(ValueError, match="Invalid token"):
        asyncio.run(scenario())
