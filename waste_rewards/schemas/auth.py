from datetime import datetime

from fastapi import Form
from pydantic import BaseModel, ConfigDict


class SignInForm(BaseModel):
    email: str
    name: str

    @classmethod
    def as_form(
        cls,
        email: str = Form(...),
        name: str = Form("Anonymous User"),
    ):
        return cls(email=email, name=name)


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    role: str
    created_at: datetime
