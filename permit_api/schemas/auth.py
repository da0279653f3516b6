# This project was developed with assistance from AI tools.
"""Authentication and authorization schemas."""

from pydantic import BaseModel, ConfigDict, Field


class UserContext(BaseModel):
    """Injected by auth middleware into every authenticated request."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    name: str


class Actor(BaseModel):
    """The acting user as seen by the authorization guard."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    identity_verified: bool = False


class TokenPayload(BaseModel):
    """Decoded JWT token claims from Keycloak."""

    sub: str
    email: str = ""
    preferred_username: str = ""
    name: str = ""
    realm_access: dict = Field(default_factory=dict)
