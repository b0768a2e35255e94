# subsapi/web/schemas.py
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from subsapi.services.subscription_service import SubscriptionInput
from subsapi.utils.dates import as_utc


class _Camel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class SubscriptionOut(_Camel):
    id: int = Field(alias="subscriptionId")
    user_id: int = Field(alias="userId")
    start_date: datetime = Field(alias="startDate")
    end_date: datetime = Field(alias="endDate")
    subscription_type: str = Field(alias="subscriptionType")

    @field_validator("start_date", "end_date")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        # sqlite hands back naive values
        return as_utc(v)


class SubscriptionCreate(_Camel):
    """Owner is taken from the token; a client-supplied userId is ignored."""

    start_date: datetime = Field(alias="startDate")
    end_date: datetime = Field(alias="endDate")
    subscription_type: str = Field(alias="subscriptionType", min_length=1, max_length=255)
    user_id: int | None = Field(default=None, alias="userId")

    def to_input(self) -> SubscriptionInput:
        return SubscriptionInput(
            start_date=self.start_date,
            end_date=self.end_date,
            subscription_type=self.subscription_type,
        )


class SubscriptionUpdate(_Camel):
    user_id: int = Field(alias="userId")
    start_date: datetime = Field(alias="startDate")
    end_date: datetime = Field(alias="endDate")
    subscription_type: str = Field(alias="subscriptionType", min_length=1, max_length=255)

    def to_input(self) -> SubscriptionInput:
        return SubscriptionInput(
            start_date=self.start_date,
            end_date=self.end_date,
            subscription_type=self.subscription_type,
            user_id=self.user_id,
        )


class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=150)
    password: str = Field(min_length=1)
    email: EmailStr


class LoginIn(BaseModel):
    username: str
    password: str


class TokenOut(BaseModel):
    token: str


class Confirmation(BaseModel):
    ok: bool = True
    message: str
    id: int | None = None
