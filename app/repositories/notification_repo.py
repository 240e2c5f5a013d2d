# app/repositories/notification_repo.py
from app.repositories.base import SupabaseRepository
from app.schemas.notification import NotificationRead


class NotificationRepository(SupabaseRepository):

    async def list_for_user(self, user_id: str) -> list[NotificationRead]:
        """Newest first."""
        data = await self._execute(
            self.client.table("notifications")
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True),
            "list_notifications",
        )
        return [
            NotificationRead(
                id=str(n["id"]),
                message=n["message"],
                date=n["created_at"],
                read=bool(n.get("is_read")),
                link=n.get("link"),
            )
            for n in data or []
        ]

    async def mark_read(self, notification_id: str) -> None:
        await self._execute(
            self.client.table("notifications")
            .update({"is_read": True})
            .eq("id", notification_id),
            "mark_notification_read",
        )
