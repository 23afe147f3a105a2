from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequestDTO(BaseModel):
    # Shape only; the account rules live in the domain validator.
    username: str = Field(max_length=256)
    email: str = Field(max_length=512)
    password: str = Field(max_length=1024)


class LoginRequestDTO(BaseModel):
    username: str = Field(min_length=1, max_length=256)
    password: str = Field(min_length=1, max_length=1024)
    remember_me: bool = False


class AccountDTO(BaseModel):
    id: int
    username: str
    email: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AccountResponseDTO(BaseModel):
    account: AccountDTO


class LoginResponseDTO(BaseModel):
    account: AccountDTO
    token: str
    expires_in: int


class AuthSuccessDTO(BaseModel):
    ok: bool = True
