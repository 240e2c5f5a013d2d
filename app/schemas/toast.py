# app/schemas/toast.py
from typing import Literal

from sqlmodel import SQLModel

Severity = Literal["success", "error", "info"]


class Toast(SQLModel):
    """
    A transient UI notification. id is the creation timestamp in ms.
    """

    id: int
    message: str
    type: Severity
