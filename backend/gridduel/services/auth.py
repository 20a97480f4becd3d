from typing import Optional

from flask import current_app
from flask_jwt_extended import create_access_token, decode_token


def issue_token(user) -> str:
    """Issue the socket credential for ``user``."""
    return create_access_token(identity=str(user.id))


def verify_credential(token) -> Optional[int]:
    """Return the user id carried by ``token`` or None if it is not valid."""
    if not token or not isinstance(token, str):
        return None
    try:
        claims = decode_token(token)
        return int(claims['sub'])
    except Exception as exc:
        current_app.logger.info(f"[auth-reject] error={exc}")
        return None
