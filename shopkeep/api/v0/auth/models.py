from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    # Optional so that missing fields become a 400, not a schema error
    username: str | None = Field(None, max_length=256)
    password: str | None = Field(None, max_length=1024)


class LoginResponse(BaseModel):
    token: str
