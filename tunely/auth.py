from fastapi import Header
from jose import JWTError, jwt

from tunely.config import JWT_ALGORITHMS, jwt_audience, jwt_secret
from tunely.errors import Unauthenticated


def verify_token(authorization: str | None = Header(None)) -> str:
    """Return the caller's user id taken from the bearer token's ``sub`` claim."""
    if not authorization:
        raise Unauthenticated("No authorization header")
    try:
        scheme, token = authorization.split()
    except ValueError:
        raise Unauthenticated()
    if scheme.lower() != "bearer":
        raise Unauthenticated()

    try:
        claims = jwt.decode(token, jwt_secret(), algorithms=JWT_ALGORITHMS, audience=jwt_audience())
    except JWTError:
        raise Unauthenticated()

    user_id = claims.get("sub")
    if not user_id:
        raise Unauthenticated()
    return user_id
