# app/entrypoints/api/deps.py
from __future__ import annotations

from fastapi import Request

from ...adapters.clients.user_profile import UserProfileClient


def get_user_client(request: Request) -> UserProfileClient:
    client = getattr(request.app.state, "user_client", None)
    if client is None:
        client = UserProfileClient()
        request.app.state.user_client = client
    return client
