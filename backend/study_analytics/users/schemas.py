from pydantic import field_validator
from sqlmodel import SQLModel

from ..auth.utils import get_password_hash


class UserBase(SQLModel):
    name: str
    email: str


class UserCreate(UserBase):
    password: str

    @field_validator("password")
    def hash_password(cls, value: str) -> str:
        return get_password_hash(value)


class UserPublic(UserBase):
    id: int
