# app/schemas/notification.py
from sqlmodel import SQLModel


class NotificationRead(SQLModel):
    id: str
    message: str
    date: str
    read: bool = False
    link: str | None = None
