import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, call

import httpx
import pytest
from pydantic import ValidationError

from app.core.errors import DataAccessError
from app.schemas.profile import Profile
from app.services.session_sync import SessionState, SessionSynchronizer


class FakeAuthRepo:
    """
    Auth repository double: fetch_profile returns queued results in order
    (a Profile, None, or an exception to raise).
    """

    def __init__(self, results, session=None):
        self.results = list(results)
        self.fetch_calls: list[str] = []
        self.session = session
        self.sign_out = AsyncMock()
        self.subscription = MagicMock()
        self.listener = None

    async def fetch_profile(self, user_id):
        self.fetch_calls.append(user_id)
        result = self.results.pop(0) if self.results else None
        if isinstance(result, Exception):
            raise result
        return result

    async def get_session(self):
        return self.session

    def on_auth_state_change(self, callback):
        self.listener = callback
        return self.subscription


def signed_in(user_id="user-1"):
    return SimpleNamespace(user=SimpleNamespace(id=user_id))


def make_sync(repo, **kwargs):
    sleep = AsyncMock()
    sync = SessionSynchronizer(repo, sleep=sleep, **kwargs)
    return sync, sleep


@pytest.mark.asyncio
async def test_initial_state_is_loading():
    sync, _ = make_sync(FakeAuthRepo([]))
    assert sync.state is SessionState.LOADING
    assert sync.loading


@pytest.mark.asyncio
async def test_start_without_session_is_unauthenticated():
    repo = FakeAuthRepo([])
    sync, _ = make_sync(repo)

    await sync.start()

    assert sync.state is SessionState.UNAUTHENTICATED
    assert repo.fetch_calls == []
    assert repo.listener is not None


@pytest.mark.asyncio
async def test_start_with_session_resolves_profile(profile):
    repo = FakeAuthRepo([profile], session=signed_in())
    sync, _ = make_sync(repo)

    await sync.start()

    assert sync.state is SessionState.AUTHENTICATED
    assert sync.profile == profile
    assert not sync.loading


@pytest.mark.asyncio
async def test_profile_found_on_third_attempt(profile):
    repo = FakeAuthRepo([None, None, profile])
    sync, sleep = make_sync(repo)

    await sync.on_session_established("user-1")

    assert sync.state is SessionState.AUTHENTICATED
    assert sync.profile == profile
    assert len(repo.fetch_calls) == 3
    assert sleep.await_args_list == [call(0.5), call(0.5)]
    repo.sign_out.assert_not_awaited()


@pytest.mark.asyncio
async def test_exhausted_retries_force_single_sign_out():
    repo = FakeAuthRepo([None, None, None])
    sync, _ = make_sync(repo)

    await sync.on_session_established("user-1")

    assert sync.state is SessionState.UNAUTHENTICATED
    assert sync.profile is None
    assert len(repo.fetch_calls) == 3
    repo.sign_out.assert_awaited_once()


@pytest.mark.asyncio
async def test_query_errors_are_retried_like_missing_rows(profile):
    repo = FakeAuthRepo([DataAccessError("fetch_profile", "timeout"), profile])
    sync, _ = make_sync(repo)

    await sync.on_session_established("user-1")

    assert sync.profile == profile
    assert len(repo.fetch_calls) == 2


@pytest.mark.asyncio
async def test_transport_errors_exhaust_retries_and_sign_out():
    repo = FakeAuthRepo([httpx.ConnectError("connection reset"), None, None])
    sync, _ = make_sync(repo)

    await sync.on_session_established("user-1")

    assert len(repo.fetch_calls) == 3
    assert sync.state is SessionState.UNAUTHENTICATED
    repo.sign_out.assert_awaited_once()


@pytest.mark.asyncio
async def test_malformed_profile_row_is_retried(profile):
    with pytest.raises(ValidationError) as bad_row:
        Profile.model_validate({"id": "user-1", "full_name": "Ada", "role": "admin"})
    repo = FakeAuthRepo([bad_row.value, profile])
    sync, _ = make_sync(repo)

    await sync.on_session_established("user-1")

    assert sync.profile == profile
    assert len(repo.fetch_calls) == 2


@pytest.mark.asyncio
async def test_linear_backoff(profile):
    repo = FakeAuthRepo([None, None, profile])
    sync, sleep = make_sync(repo, retry_delay=1.0, backoff="linear")

    await sync.on_session_established("user-1")

    assert sleep.await_args_list == [call(1.0), call(2.0)]


@pytest.mark.asyncio
async def test_sign_out_event_clears_profile(profile):
    repo = FakeAuthRepo([profile])
    sync, _ = make_sync(repo)
    await sync.on_session_established("user-1")

    await sync.handle_auth_event("SIGNED_OUT", None)

    assert sync.state is SessionState.UNAUTHENTICATED
    assert sync.profile is None
    assert len(repo.fetch_calls) == 1


@pytest.mark.asyncio
async def test_listener_schedules_profile_fetch(profile):
    repo = FakeAuthRepo([profile])
    sync, _ = make_sync(repo)
    await sync.start()

    repo.listener("SIGNED_IN", signed_in())
    await sync.settle()

    assert sync.is_authenticated
    assert sync.profile.full_name == "Ada Buyer"


@pytest.mark.asyncio
async def test_sign_out_during_fetch_wins(profile):
    release = asyncio.Event()

    class SlowRepo(FakeAuthRepo):
        async def fetch_profile(self, user_id):
            await release.wait()
            return profile

    repo = SlowRepo([])
    sync, _ = make_sync(repo)

    fetch = asyncio.create_task(sync.on_session_established("user-1"))
    await asyncio.sleep(0)
    await sync.handle_auth_event("SIGNED_OUT", None)
    release.set()
    await fetch

    assert sync.state is SessionState.UNAUTHENTICATED
    assert sync.profile is None


@pytest.mark.asyncio
async def test_role_switch_is_local_only(profile):
    repo = FakeAuthRepo([profile])
    sync, _ = make_sync(repo)
    await sync.on_session_established("user-1")

    sync.switch_to_seller()
    assert sync.profile.role == "seller"

    sync.switch_to_buyer()
    assert sync.profile.role == "buyer"
    assert len(repo.fetch_calls) == 1


def test_role_switch_without_profile_is_noop():
    sync = SessionSynchronizer(FakeAuthRepo([]))
    sync.switch_to_seller()
    assert sync.profile is None


@pytest.mark.asyncio
async def test_stop_unsubscribes():
    repo = FakeAuthRepo([])
    sync, _ = make_sync(repo)
    await sync.start()

    await sync.stop()

    repo.subscription.unsubscribe.assert_called_once()
