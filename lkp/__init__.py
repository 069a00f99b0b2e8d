"""lkp: get-or-create access tokens for services and users."""

__version__ = "0.1.0"
