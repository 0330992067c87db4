from pydantic import BaseModel

class LoginForm(BaseModel):
    email: str
    password: str

class RefreshForm(BaseModel):
    refresh_token: str

class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
