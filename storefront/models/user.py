# storefront/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Local mirror of an identity issued by the external auth provider.

    Identity:
      - id: MUST match the JWT "sub" claim (UUID)

    Credentials live with the auth provider. We only keep what carts
    and orders need to reference an owner.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        primary_key=True,
        index=True,
        description="Matches the token subject",
    )

    email: str = Field(
        unique=True,
        index=True,
    )

    name: str = Field(max_length=50)

    # user | admin
    role: str = Field(default="user", index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
