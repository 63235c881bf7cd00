"""Auth Pydantic schemas — registration, sign-in, password reset."""

from pydantic import BaseModel, EmailStr


class RegisterIn(BaseModel):
    """Fields submitted on the registration form."""
    email: EmailStr
    codename: str
    password: str
    confirm_password: str


class LoginIn(BaseModel):
    email: EmailStr
    password: str


class EmailIn(BaseModel):
    email: EmailStr


class ResetPasswordIn(BaseModel):
    token: str
    password: str
    confirm_password: str


class MessageOut(BaseModel):
    message: str
