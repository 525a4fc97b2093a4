"""Pydantic schemas for contact messages and push notifications."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator


class ContactCreate(BaseModel):
    name: str
    email: str
    subject: str
    message: str

    @field_validator("name", "subject", "message")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field must not be empty")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v


class ContactRead(BaseModel):
    id: int
    name: str
    email: str
    subject: str
    message: str
    is_read: bool
    created_at: datetime | None

    model_config = {"from_attributes": True}


class NotificationCreate(BaseModel):
    title: str
    message: str

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title must not be empty")
        if len(v) > 200:
            raise ValueError("Title must not exceed 200 characters")
        return v

    @field_validator("message")
    @classmethod
    def _message(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Message must not be empty")
        if len(v) > 500:
            raise ValueError("Message must not exceed 500 characters")
        return v


class NotificationRead(BaseModel):
    id: int
    title: str
    message: str
    sent_at: datetime | None
    sent_count: int
    status: str

    model_config = {"from_attributes": True}


class NotificationOverview(BaseModel):
    subscriber_count: int
    total_sent: int
    history: list[NotificationRead]
