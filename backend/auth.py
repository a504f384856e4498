import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from config import Settings
from database import UserStore
from errors import InvalidCredentials, Unauthorized

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
BCRYPT_ROUNDS = 10
# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a password for storage (salted bcrypt)."""
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash."""
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("ascii"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def issue_token(user_id: str, secret: str, ttl: timedelta, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    claims = {"id": user_id, "iat": now, "exp": now + ttl}
    return jwt.encode(claims, secret, algorithm=JWT_ALGORITHM)


def decode_token(token: str, secret: str) -> str:
    """Return the user id embedded in a token, or raise Unauthorized."""
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "id"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise Unauthorized("Token expired") from e
    except jwt.PyJWTError as e:
        raise Unauthorized("Invalid token") from e

    user_id = claims["id"]
    if not isinstance(user_id, str) or not user_id:
        raise Unauthorized("Invalid token")
    return user_id


def get_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise Unauthorized("No token provided")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("No token provided")
    return token.strip()


class AuthService:
    """Registration, login and bearer-token verification. Tokens are stateless."""

    def __init__(self, users: UserStore, settings: Settings):
        self.users = users
        self.secret = settings.jwt_secret
        self.token_ttl = timedelta(days=settings.token_ttl_days)

    def register(self, name: str, email: str, password: str) -> str:
        """Store a new user and return its id. Raises DuplicateEmail if the email is taken."""
        user = self.users.create_user(name, email, hash_password(password))
        logger.info("auth event=registered user_id=%s", user.id)
        return user.id

    def login(self, email: str, password: str) -> str:
        user = self.users.find_user_by_email(email)
        if not user:
            logger.info("auth event=login_failed reason=unknown_email")
            raise InvalidCredentials("User not found")

        if not verify_password(password, user.password_hash):
            logger.info("auth event=login_failed reason=wrong_password user_id=%s", user.id)
            raise InvalidCredentials("Wrong password")

        return issue_token(user.id, self.secret, self.token_ttl)

    def authenticate(self, authorization: Optional[str]) -> str:
        """Check an Authorization header value and return the caller's user id."""
        return decode_token(get_bearer_token(authorization), self.secret)
