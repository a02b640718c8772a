# This project was developed with assistance from AI tools.
"""Notification and issue schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class NotificationItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    job_id: int | None = None
    job_number: int | None = None
    client_number: int | None = None
    client_name: str | None = None
    snippet: str
    author_email: str | None = None
    author_name: str | None = None
    read: bool = False
    created_at: datetime


class NotificationListResponse(BaseModel):
    data: list[NotificationItem]
    unread_count: int


class IssueItem(BaseModel):
    """A comment tagging the caller that they have not resolved yet."""

    job_id: int
    job_number: int
    client_number: int | None = None
    client_name: str
    comment_id: int
    body: str
    author_email: str
    author_name: str | None = None
    created_at: datetime


class IssueListResponse(BaseModel):
    data: list[IssueItem]
    count: int
