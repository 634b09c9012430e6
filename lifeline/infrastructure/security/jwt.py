"""Bearer token verification for download requests.

Tokens are issued by the account service; this side only checks them. The
`sub` claim is the requester id that owns the "{requester_id}/" storage prefix.
"""

from jose import JWTError, jwt

from lifeline.core.config import get_settings

_DECODE_OPTIONS = {"require_exp": True, "require_sub": True}


def requester_from_token(token: str) -> str:
    """Return the requester id carried by a valid bearer token.

    Raises:
        ValueError: Bad signature, expired, or no usable sub claim.
    """
    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options=_DECODE_OPTIONS,
        )
    except JWTError as e:
        raise ValueError("Invalid bearer token") from e
    requester_id = claims.get("sub")
    if not isinstance(requester_id, str) or not requester_id:
        raise ValueError("Bearer token carries no requester id")
    return requester_id
