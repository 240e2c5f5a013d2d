# app/repositories/auth_repo.py
import logging
from typing import Any, Callable

from supabase import AuthError

from app.core.errors import DataAccessError
from app.repositories.base import SupabaseRepository
from app.schemas.profile import Profile, Role

logger = logging.getLogger(__name__)


class AuthRepository(SupabaseRepository):
    """
    Data access for Supabase Auth and the profiles table.

    - No FastAPI, no session state: the SessionSynchronizer owns that.
    """

    # ----- Auth -----

    async def sign_up(self, email: str, password: str, full_name: str, role: Role) -> Any:
        """
        Create an auth user. full_name/role travel as user metadata so the
        database trigger can materialize the profiles row.
        """
        try:
            return await self.client.auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"data": {"full_name": full_name, "role": role}},
                }
            )
        except AuthError as e:
            raise DataAccessError("sign_up", e.message) from e

    async def sign_in(self, email: str, password: str) -> Any:
        try:
            return await self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as e:
            raise DataAccessError("sign_in", e.message) from e

    async def sign_out(self) -> None:
        try:
            await self.client.auth.sign_out()
        except AuthError as e:
            raise DataAccessError("sign_out", e.message) from e

    async def get_session(self) -> Any:
        """
        Return the current auth session, or None.

        Network failures are deliberately not caught here: they surface
        to whoever awaits the initial session check.
        """
        return await self.client.auth.get_session()

    def on_auth_state_change(self, callback: Callable[[str, Any], None]) -> Any:
        """Register an auth event listener; returns the subscription."""
        return self.client.auth.on_auth_state_change(callback)

    # ----- Profiles -----

    async def fetch_profile(self, user_id: str) -> Profile | None:
        """
        Return the profile row for user_id, or None if it does not exist (yet).

        Raises:
            DataAccessError: the query itself failed.
        """
        if not user_id:
            return None
        data = await self._execute(
            self.client.table("profiles").select("*").eq("id", user_id).maybe_single(),
            "fetch_profile",
        )
        if not data:
            return None
        return Profile.model_validate(data)

    async def update_role(self, user_id: str, role: Role) -> Profile:
        data = await self._execute(
            self.client.table("profiles").update({"role": role}).eq("id", user_id),
            "update_role",
        )
        if not data:
            raise DataAccessError("update_role", f"profile {user_id} not updated")
        return Profile.model_validate(data[0])
