"""Shared helpers for the integration suite."""

import uuid
from collections.abc import Awaitable, Callable

from httpx import AsyncClient

SignIn = Callable[[str, str], Awaitable[AsyncClient]]


def unique(prefix: str) -> str:
    """Usernames and names are globally unique; never reuse one across runs."""
    return f"{prefix}{uuid.uuid4().hex[:10]}"
