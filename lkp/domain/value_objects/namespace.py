"""Registration namespaces."""

from enum import Enum


class Namespace(str, Enum):
    """One of the two independent name/token universes.

    Each namespace has its own table and its own uniqueness constraints; a
    token issued to a service may also be issued to a user.

    Attributes:
        SERVICE: Tokens bound to service names.
        USER: Tokens bound to user names.
    """

    SERVICE = "service"
    USER = "user"
