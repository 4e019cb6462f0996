from typing import Literal

from .base import RecordModel

ContactStatus = Literal["new", "in-progress", "resolved", "closed"]
ContactPriority = Literal["low", "medium", "high", "urgent"]


class Contact(RecordModel):
    """Message submitted through the contact form."""

    name: str = ""
    email: str = ""
    phone: str = ""
    subject: str = ""
    message: str = ""
    status: ContactStatus = "new"
    priority: ContactPriority = "medium"
    source: str = "website"
    is_read: bool = False
