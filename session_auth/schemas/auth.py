from pydantic import BaseModel, ConfigDict, EmailStr, Field


class CredentialsRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(CredentialsRequest):
    pass


class LoginRequest(CredentialsRequest):
    pass


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    # Length is checked by the service so short passwords get a readable 400
    password: str
    token: str


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class MessageResponse(BaseModel):
    message: str


class RegisterResponse(CamelModel):
    success: bool = True
    message: str
    user_id: int = Field(alias="userId")


class LogoutResponse(BaseModel):
    success: bool
    message: str


class AuthCheckResponse(CamelModel):
    logged_in: bool = Field(alias="loggedIn")
    user_id: int | None = Field(default=None, alias="userId")


class ForgotPasswordResponse(CamelModel):
    message: str
    # Only present in prototype mode (EXPOSE_RESET_TOKEN)
    reset_token: str | None = Field(default=None, alias="resetToken")
