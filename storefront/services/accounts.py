"""Account service — signup, login, profile and logout"""
from typing import Tuple

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.errors import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from storefront.models.enums import Role
from storefront.models.user import User
from storefront.schemas.auth import LoginRequest, SignupRequest
from storefront.utils.jwt_utils import TokenCodec
from storefront.utils.logger import logger
from storefront.utils.passwords import dummy_verify, hash_password, verify_password
from storefront.utils.revocation import TokenRevocationRegistry

MIN_PASSWORD_LENGTH = 6


class AccountService:
    """Orchestrates the account lifecycle on top of the user table.

    Collaborators are passed in per request: the SQLAlchemy session plus the
    process-wide codec and revocation registry from ``app.state``.
    """

    def __init__(self, db: Session, codec: TokenCodec, registry: TokenRevocationRegistry):
        self.db = db
        self.codec = codec
        self.registry = registry

    def _issue_token(self, user: User) -> str:
        return self.codec.issue(
            subject=user.id,
            email=user.email,
            username=user.username,
            role=user.role,
        )

    def signup(self, request: SignupRequest) -> Tuple[User, str]:
        """Create an account and return it with a fresh token.

        Raises:
            ValidationError: missing field or password shorter than 6 characters.
            ConflictError:   email or username already taken.
        """
        email = request.email.strip()
        username = request.username.strip()

        if not email or not username or not request.password:
            raise ValidationError("Email, username, and password are required")

        if len(request.password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

        existing = self.db.query(User).filter(
            or_(User.email == email, User.username == username)
        ).first()
        if existing:
            raise ConflictError("User with this email or username already exists")

        role = request.role or Role.ADMIN
        user = User(
            email=email,
            username=username,
            password=hash_password(request.password),
            role=role.value,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email/username
            self.db.rollback()
            raise ConflictError("User with this email or username already exists")
        self.db.refresh(user)

        logger.info(f"Created user: {user.id}", extra={"user_id": user.id, "action": "signup"})
        return user, self._issue_token(user)

    def login(self, request: LoginRequest) -> Tuple[User, str]:
        """Check credentials and return the user with a fresh token.

        Unknown email and wrong password raise the same error.
        """
        if not request.email or not request.password:
            raise ValidationError("Email and password are required")

        user = self.db.query(User).filter(User.email == request.email.strip()).first()
        if not user:
            # Unknown email costs one bcrypt verify, like a wrong password
            dummy_verify()
        if not user or not verify_password(request.password, user.password):
            logger.warning("Failed login attempt", extra={"action": "login_failed"})
            raise InvalidCredentialsError()

        logger.info(f"User logged in: {user.id}", extra={"user_id": user.id, "action": "login"})
        return user, self._issue_token(user)

    def get_profile(self, user_id: str) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    def logout(self, token: str) -> None:
        """Revoke the caller's token. Safe to call more than once."""
        self.registry.revoke(token)
        logger.info("Token revoked", extra={"action": "logout"})
