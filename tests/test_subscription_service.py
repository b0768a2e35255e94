import asyncio

import pytest

from subsapi.errors import (
    InvalidInput,
    NotFound,
    OperationCancelled,
    PreconditionFailed,
    ServiceUnavailable,
    TransientPersistenceError,
)
from subsapi.repositories.subscription_repo import SubscriptionRepo
from subsapi.repositories.user_repo import UserRepo
from subsapi.services.auth_service import Identity
from subsapi.services.subscription_service import SubscriptionInput, SubscriptionService
from subsapi.utils.dates import as_utc

from tests.conftest import NOW, utc


class FlakyRepo(SubscriptionRepo):
    """Raises a transient error for the first ``failures`` list_by_user calls."""

    def __init__(self, s, failures):
        super().__init__(s)
        self.failures = failures
        self.calls = 0

    async def list_by_user(self, user_id):
        self.calls += 1
        if self.calls <= self.failures:
            raise TransientPersistenceError("connection reset")
        return await super().list_by_user(user_id)


@pytest.fixture
def svc(subs_repo, users_repo, executor):
    return SubscriptionService(subs_repo, users_repo, executor, clock=lambda: NOW)


def _premium(**kw):
    data = dict(start_date=utc(2024, 1, 1), end_date=utc(2024, 1, 31), subscription_type="premium")
    data.update(kw)
    return SubscriptionInput(**data)


async def test_create_forces_owner_and_computes_remaining_days(svc, user):
    ident = Identity(user_id=user.id, username=user.username)
    sub = await svc.create(ident, _premium(user_id=9999))
    assert sub.user_id == user.id
    assert await svc.remaining_days(sub.id) == 16


async def test_create_requires_body_and_identity(svc, user):
    with pytest.raises(InvalidInput):
        await svc.create(Identity(user.id, user.username), None)
    with pytest.raises(InvalidInput):
        await svc.create(None, _premium())
    with pytest.raises(InvalidInput):
        await svc.create(Identity(0, "ghost"), _premium())


async def test_create_rejects_inverted_window(svc, user):
    with pytest.raises(InvalidInput):
        await svc.create(
            Identity(user.id, user.username),
            _premium(start_date=utc(2024, 2, 1), end_date=utc(2024, 1, 1)),
        )


@pytest.mark.parametrize("bad", [-1, 0, None])
async def test_get_by_user_rejects_invalid_id(svc, bad):
    with pytest.raises(InvalidInput):
        await svc.get_by_user(bad)


async def test_get_by_user_and_active(svc, subs_repo, user):
    current = await svc.create(Identity(user.id, user.username), _premium())
    old = await svc.create(
        Identity(user.id, user.username),
        _premium(start_date=utc(2023, 1, 1), end_date=utc(2023, 12, 31)),
    )
    assert [s.id for s in await svc.get_by_user(user.id)] == [current.id, old.id]
    assert [s.id for s in await svc.get_active()] == [current.id]


async def test_remaining_days_rejects_inactive_when_others_active(svc, user):
    ident = Identity(user.id, user.username)
    await svc.create(ident, _premium())
    expired = await svc.create(ident, _premium(start_date=utc(2023, 1, 1), end_date=utc(2023, 1, 10)))
    with pytest.raises(PreconditionFailed):
        await svc.remaining_days(expired.id)


async def test_remaining_days_with_no_active_subscriptions(svc, user):
    ident = Identity(user.id, user.username)
    expired = await svc.create(ident, _premium(start_date=utc(2023, 1, 1), end_date=utc(2024, 1, 5)))
    # nothing is active, so the precondition passes and the count goes negative
    assert await svc.remaining_days(expired.id) == -10
    # existence is still checked
    with pytest.raises(InvalidInput, match="not found"):
        await svc.remaining_days(777)


async def test_remaining_days_rejects_non_positive_id(svc):
    with pytest.raises(InvalidInput):
        await svc.remaining_days(0)


async def test_update_replaces_fields(svc, subs_repo, users_repo, user):
    other = await users_repo.create(username="bob", password_hash="x", email="bob@example.com")
    sub = await svc.create(Identity(user.id, user.username), _premium())
    await svc.update(
        sub.id,
        SubscriptionInput(
            start_date=utc(2024, 5, 1),
            end_date=utc(2024, 5, 31),
            subscription_type="basic",
            user_id=other.id,
        ),
    )
    found = await subs_repo.get(sub.id)
    assert found.user_id == other.id
    assert as_utc(found.start_date) == utc(2024, 5, 1)
    assert as_utc(found.end_date) == utc(2024, 5, 31)
    assert found.subscription_type == "basic"


async def test_update_missing_is_not_found(svc, user, sleeps):
    with pytest.raises(NotFound):
        await svc.update(999, _premium(user_id=user.id))
    assert sleeps.delays == []


async def test_update_to_unknown_owner_is_rejected(svc, subs_repo, user, sleeps):
    sub = await svc.create(Identity(user.id, user.username), _premium())
    with pytest.raises(InvalidInput, match="User not found"):
        await svc.update(sub.id, _premium(user_id=4242))
    assert (await subs_repo.get(sub.id)).user_id == user.id
    assert sleeps.delays == []


async def test_update_validates_input(svc, user):
    with pytest.raises(InvalidInput):
        await svc.update(-5, _premium(user_id=user.id))
    with pytest.raises(InvalidInput):
        await svc.update(1, None)


async def test_delete_missing_is_not_found(svc, sleeps):
    with pytest.raises(NotFound):
        await svc.delete(999)
    assert sleeps.delays == []


async def test_repeated_delete_yields_not_found(svc, user):
    sub = await svc.create(Identity(user.id, user.username), _premium())
    await svc.delete(sub.id)
    for _ in range(3):
        with pytest.raises(NotFound):
            await svc.delete(sub.id)


async def test_transient_failures_recovered_within_budget(session, executor, sleeps, user):
    repo = FlakyRepo(session, failures=3)
    svc = SubscriptionService(repo, UserRepo(session), executor, clock=lambda: NOW)
    assert await svc.get_by_user(user.id) == []
    assert repo.calls == 4
    assert sleeps.delays == [2, 4, 8]


async def test_transient_failures_beyond_budget(session, executor, user):
    repo = FlakyRepo(session, failures=4)
    svc = SubscriptionService(repo, UserRepo(session), executor, clock=lambda: NOW)
    with pytest.raises(ServiceUnavailable):
        await svc.get_by_user(user.id)
    assert repo.calls == 4


async def test_cancel_event_surfaces_as_operation_cancelled(svc, user):
    cancel = asyncio.Event()
    cancel.set()
    with pytest.raises(OperationCancelled):
        await svc.get_by_user(user.id, cancel_event=cancel)
