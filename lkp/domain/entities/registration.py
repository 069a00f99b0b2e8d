"""Persisted name/token registrations, one table per namespace."""

from typing import ClassVar, Dict, Type

from sqlmodel import Column, Field, SQLModel, String

from lkp.domain.value_objects.namespace import Namespace


class ServiceTokenRegistration(SQLModel, table=True):
    """Binds a service name to its access token.

    Both columns are unique: a service has at most one token and a token
    belongs to at most one service. Rows are never updated or deleted.

    Attributes:
        token: The issued base62 token (primary key).
        service_name: The registered service name.
    """

    __tablename__ = "service_tokens"

    entity_name_field: ClassVar[str] = "service_name"

    token: str = Field(
        sa_column=Column(String, primary_key=True),
        description="Issued base62 token, unique among services.",
    )
    service_name: str = Field(
        sa_column=Column(String, unique=True, index=True, nullable=False),
        description="Registered service name.",
    )


class UserTokenRegistration(SQLModel, table=True):
    """Binds a user name to its access token.

    Attributes:
        token: The issued base62 token (primary key).
        user_name: The registered user name.
    """

    __tablename__ = "user_tokens"

    entity_name_field: ClassVar[str] = "user_name"

    token: str = Field(
        sa_column=Column(String, primary_key=True),
        description="Issued base62 token, unique among users.",
    )
    user_name: str = Field(
        sa_column=Column(String, unique=True, index=True, nullable=False),
        description="Registered user name.",
    )


REGISTRATION_MODELS: Dict[Namespace, Type[SQLModel]] = {
    Namespace.SERVICE: ServiceTokenRegistration,
    Namespace.USER: UserTokenRegistration,
}
