# app/services/session_sync.py
import asyncio
import enum
import logging
from typing import Any, Awaitable, Callable, Literal

import httpx
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
    wait_incrementing,
)

from app.core.errors import DataAccessError
from app.repositories.auth_repo import AuthRepository
from app.schemas.profile import Profile, Role, SessionRead

logger = logging.getLogger(__name__)

SIGNED_IN_EVENTS = {"SIGNED_IN", "INITIAL_SESSION", "USER_UPDATED"}
SIGNED_OUT_EVENTS = {"SIGNED_OUT"}


class SessionState(str, enum.Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class SessionSynchronizer:
    """
    Keep the local profile consistent with the Supabase auth session.

    States:
      loading -> unauthenticated | authenticated
      unauthenticated -> authenticated   (sign-in + profile resolved)
      authenticated -> unauthenticated   (sign-out)

    "Authenticated with no profile" is never exposed: if the profile cannot
    be resolved after the configured attempts, local state is cleared and the
    auth session is signed out.

    The profile row is created asynchronously by a database trigger after
    sign-up, so a missing row right after sign-in is expected and retried.
    """

    def __init__(
        self,
        auth_repo: AuthRepository,
        attempts: int = 3,
        retry_delay: float = 0.5,
        backoff: Literal["fixed", "linear"] = "fixed",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.auth_repo = auth_repo
        self.attempts = attempts
        self.retry_delay = retry_delay
        self.backoff = backoff
        self._sleep = sleep

        self.state = SessionState.LOADING
        self.profile: Profile | None = None

        # Bumped on every auth transition so a slow fetch cannot overwrite
        # the outcome of a newer event.
        self._generation = 0
        self._subscription: Any = None
        self._pending: set[asyncio.Task] = set()

    # ----- Read-only views -----

    @property
    def loading(self) -> bool:
        return self.state is SessionState.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    def snapshot(self) -> SessionRead:
        return SessionRead(
            status=self.state.value,
            loading=self.loading,
            is_authenticated=self.is_authenticated,
            profile=self.profile,
        )

    # ----- Lifecycle -----

    async def start(self) -> None:
        """
        Subscribe to auth events, then run the initial session check.

        Errors from the auth backend itself propagate to the caller.
        """
        self._subscription = self.auth_repo.on_auth_state_change(self._on_auth_event)

        session = await self.auth_repo.get_session()
        user = getattr(session, "user", None)
        if user is not None:
            await self.on_session_established(user.id)
        elif self.state is SessionState.LOADING:
            self.state = SessionState.UNAUTHENTICATED

    async def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        for task in list(self._pending):
            task.cancel()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def settle(self) -> None:
        """Wait until every scheduled auth event has been handled."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _on_auth_event(self, event: Any, session: Any) -> None:
        """
        Listener handed to the auth client. It is called synchronously,
        so the async handling is scheduled on the running loop.
        """
        task = asyncio.ensure_future(self.handle_auth_event(str(event), session))
        self._pending.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Auth event handling failed: %s", task.exception())

    async def handle_auth_event(self, event: str, session: Any) -> None:
        # Enum members stringify as "AuthChangeEvent.SIGNED_IN" on some clients
        name = event.rsplit(".", 1)[-1]
        user = getattr(session, "user", None)

        if name in SIGNED_IN_EVENTS and user is not None:
            await self.on_session_established(user.id)
        elif name in SIGNED_OUT_EVENTS:
            self.on_session_cleared()

    # ----- Transitions -----

    async def on_session_established(self, user_id: str) -> None:
        self._generation += 1
        generation = self._generation

        profile = await self._fetch_profile_with_retry(user_id)

        if generation != self._generation:
            logger.info("Discarding stale profile fetch for user %s", user_id)
            return

        if profile is None:
            logger.error(
                "Failed to fetch profile for user %s after %d attempts; signing out",
                user_id,
                self.attempts,
            )
            self._clear()
            await self.auth_repo.sign_out()
            return

        self.profile = profile
        self.state = SessionState.AUTHENTICATED

    def on_session_cleared(self) -> None:
        self._generation += 1
        self._clear()

    def _clear(self) -> None:
        self.profile = None
        self.state = SessionState.UNAUTHENTICATED

    async def sign_out(self) -> None:
        """User-initiated sign out: local state is cleared even if the call fails."""
        self.on_session_cleared()
        await self.auth_repo.sign_out()

    # ----- Profile fetch -----

    def _wait_strategy(self):
        if self.backoff == "linear":
            return wait_incrementing(start=self.retry_delay, increment=self.retry_delay)
        return wait_fixed(self.retry_delay)

    async def _fetch_once(self, user_id: str) -> Profile | None:
        try:
            return await self.auth_repo.fetch_profile(user_id)
        except (DataAccessError, httpx.HTTPError, ValidationError) as e:
            # Query, transport and row-shape errors are retried exactly like a missing row.
            logger.warning("Error fetching profile for %s: %s", user_id, e)
            return None

    async def _fetch_profile_with_retry(self, user_id: str) -> Profile | None:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.attempts),
            wait=self._wait_strategy(),
            retry=retry_if_result(lambda profile: profile is None),
            retry_error_callback=lambda retry_state: None,
            before_sleep=lambda rs: logger.warning(
                "Profile for %s not found (attempt %d), retrying",
                user_id,
                rs.attempt_number,
            ),
            sleep=self._sleep,
        )
        return await retrying(self._fetch_once, user_id)

    # ----- Optimistic role switch -----

    def _set_role(self, role: Role) -> None:
        if self.profile is None:
            return
        self.profile = self.profile.model_copy(update={"role": role})

    def switch_to_seller(self) -> None:
        """
        Reflect a seller role locally. Only call after the authoritative
        write succeeded; the next auth transition re-fetches the real value.
        """
        self._set_role("seller")

    def switch_to_buyer(self) -> None:
        self._set_role("buyer")
