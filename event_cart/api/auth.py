from http import HTTPStatus
from typing import Annotated

from fastapi import Header, HTTPException


async def current_user_id(authorization: Annotated[str | None, Header()] = None) -> str:
    """Identify the cart owner from ``Authorization: Bearer <token>``.

    Token verification belongs to the auth service; the cart only needs a
    stable owner key, so the token itself is used as one.
    """
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(HTTPStatus.UNAUTHORIZED, "Authentication required")
    return token.strip()
