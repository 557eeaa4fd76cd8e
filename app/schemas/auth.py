from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class CamelModel(BaseModel):
    # wire format is camelCase, Python side stays snake_case
    model_config = ConfigDict(populate_by_name=True)


class SignupIn(CamelModel):
    email: EmailStr
    password: str   # strength checked by the credential verifier (400, not 422)


class LoginIn(CamelModel):
    # any string: an unknown or malformed email is a plain credential failure (401)
    email: str
    password: str


class RefreshIn(CamelModel):
    refresh_token: str = Field(..., alias="refreshToken", min_length=1)


class UserOut(CamelModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    email: EmailStr
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")
    has_2fa_enabled: bool = Field(False, alias="has2FAEnabled")


class AuthOut(CamelModel):
    access_token: str = Field(..., alias="accessToken")
    refresh_token: str = Field(..., alias="refreshToken")
    user: UserOut


class LoginOut(CamelModel):
    """Either a full token set, or the second-factor marker."""
    access_token: str | None = Field(None, alias="accessToken")
    refresh_token: str | None = Field(None, alias="refreshToken")
    user: UserOut | None = None
    requires_2fa: bool | None = Field(None, alias="requires2FA")
    user_id: str | None = Field(None, alias="userId")


class RefreshOut(CamelModel):
    access_token: str = Field(..., alias="accessToken")


# --- 2FA ---
class TwoFAEnableOut(CamelModel):
    secret: str
    provisioning_uri: str = Field(..., alias="provisioningURI")
    qr_code: str | None = Field(None, alias="qrCode")   # PNG data URL


class TwoFAVerifyIn(CamelModel):
    user_id: str = Field(..., alias="userId", min_length=1)
    token: str = Field(..., min_length=1)


class MessageOut(BaseModel):
    message: str
