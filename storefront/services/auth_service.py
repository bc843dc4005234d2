import logging

import bcrypt
import jwt
from datetime import datetime, timedelta, timezone
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from storefront.models.database import Role, User
from storefront.services.exceptions import ConflictError, ServiceError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"


class AuthService:
    """Handles signup, login and token management."""

    def __init__(self, session, secret, expiry_minutes=60, rounds=10):
        self.session = session
        self.secret = secret
        self.expiry_minutes = expiry_minutes
        self.rounds = rounds

    @staticmethod
    def hash_password(password: str, rounds: int = 10) -> str:
        """Hash a password using bcrypt."""
        salt = bcrypt.gensalt(rounds=rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        """Verify a password against its hash."""
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            return False

    @staticmethod
    def decode_token(token: str, secret: str) -> dict:
        """Decode and validate a JWT token."""
        return jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])

    def generate_token(self, user: User) -> str:
        """Generate a JWT token for a user."""
        if not self.secret:
            raise ServiceError("Failed to create token")

        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "role": user.role.value,
            "iat": now,
            "exp": now + timedelta(minutes=self.expiry_minutes),
        }
        try:
            return jwt.encode(payload, self.secret, algorithm=JWT_ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError):
            logger.exception("Failed to create token for user %s", user.id)
            raise ServiceError("Failed to create token")

    def register_user(self, username: str, email: str, password: str, role: Role = Role.CUSTOMER) -> User:
        """Register a new user. Email is checked for duplicates before username."""
        if self.session.scalar(select(User.id).filter_by(email=email)) is not None:
            raise ConflictError("User with that email already exists")
        if self.session.scalar(select(User.id).filter_by(username=username)) is not None:
            raise ConflictError("User with that username already exists")

        try:
            hashed = self.hash_password(password, self.rounds)
        except (ValueError, TypeError):
            logger.exception("Failed to hash password")
            raise ServiceError("Failed to create user")

        user = User(username=username, email=email, password=hashed, role=role or Role.CUSTOMER)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email or username.
            self.session.rollback()
            raise ConflictError("User with that email or username already exists")
        return user

    def authenticate(self, email: str, password: str):
        """Check credentials and return ``(token, user)``.

        Unknown email and wrong password raise the same error so callers
        cannot tell which accounts exist.
        """
        user = self.session.scalar(select(User).filter_by(email=email))
        if not user or not self.verify_password(password, user.password):
            raise ValueError("Invalid email or password")

        return self.generate_token(user), user
