from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import optional_gender, require_min_length, require_non_empty, require_position
from ..core.constants import DEFAULT_TOKEN_MAX_AGE_SECONDS
from ..core.enums import Position
from ..core.exceptions import AuthenticationError, AuthorizationError, UserNotFound, ValidationError
from ..fingerprints.repository import FingerprintRepository
from ..fingerprints.service import FingerprintService
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)

TOKEN_SALT = "fingerprint-attendance-auth"


@dataclass(frozen=True)
class AuthenticatedUser:
    """Người dùng đã đăng nhập + bearer token trả về cho client."""

    user_id: int
    username: str
    position: Position
    token: str

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "user": {"id": self.user_id, "username": self.username, "position": self.position.value},
        }


class TokenSigner:
    """Signed, time-limited bearer tokens carrying the user id and position."""

    def __init__(self, secret_key: str, *, max_age_seconds: int = DEFAULT_TOKEN_MAX_AGE_SECONDS):
        self._serializer = URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)
        self._max_age = int(max_age_seconds)

    def sign(self, user: User) -> str:
        return self._serializer.dumps({"uid": user.user_id, "pos": user.position.value})

    def load(self, token: str) -> dict:
        try:
            data = self._serializer.loads(token, max_age=self._max_age)
        except SignatureExpired:
            raise AuthenticationError("Token expired")
        except BadSignature:
            raise AuthenticationError("Invalid token")
        if not isinstance(data, dict) or "uid" not in data:
            raise AuthenticationError("Invalid token")
        return data


class AuthService:
    """Use case: authenticate user (login / register / fingerprint login)."""

    def __init__(
        self,
        users: UserRepository,
        fingerprints: FingerprintRepository,
        fingerprint_service: FingerprintService,
        signer: TokenSigner,
    ):
        self._users = users
        self._fingerprints = fingerprints
        self._fingerprint_service = fingerprint_service
        self._signer = signer

    def _issue(self, user: User) -> AuthenticatedUser:
        return AuthenticatedUser(
            user_id=user.user_id,
            username=user.username,
            position=user.position,
            token=self._signer.sign(user),
        )

    def login(self, username: str, password: str) -> AuthenticatedUser:
        user = self._users.get_by_username((username or "").strip())
        if not user:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder hashes like 'CHANGE_ME'
            ok = False

        if not ok:
            raise AuthenticationError("Invalid username or password")

        logger.info("User %s logged in", user.username)
        return self._issue(user)

    def register(
        self,
        *,
        username: str,
        password: str,
        position: Optional[str] = None,
        gender: Optional[str] = None,
        fingerprint_template: Optional[str] = None,
    ) -> User:
        username = require_non_empty(username, "Username")
        require_min_length(password, "Password", 6)
        pos = require_position(position)
        if pos == Position.ADMIN:
            raise ValidationError("Admin accounts cannot be self-registered")
        sex = optional_gender(gender)
        template = (fingerprint_template or "").strip() or None

        if self._users.get_by_username(username):
            raise ValidationError("Username already exists")

        user_id = self._users.create_user(
            username=username,
            password_hash=generate_password_hash(password),
            position=pos,
            gender=sex,
            fingerprint_template=template,
        )
        if template:
            self._fingerprints.upsert(user_id=user_id, template=template, finger_index=0, quality=None, capture_count=1)

        logger.info("Registered user %s (id=%s, fingerprint=%s)", username, user_id, bool(template))
        user = self._users.get_by_id(user_id)
        if not user:
            raise UserNotFound(user_id)
        return user

    def login_with_fingerprint(self, template: str) -> AuthenticatedUser:
        result = self._fingerprint_service.identify_user(template)
        if not result.success or not result.matched or result.user_id is None:
            raise AuthenticationError(result.message or "Fingerprint not recognized")
        user = self._users.get_by_id(result.user_id)
        if not user:
            raise UserNotFound(result.user_id)
        logger.info("User %s logged in by fingerprint (score=%.2f)", user.username, result.score)
        return self._issue(user)

    def user_from_token(self, token: str) -> User:
        data = self._signer.load(token)
        user = self._users.get_by_id(int(data["uid"]))
        if not user:
            raise AuthenticationError("User no longer exists")
        return user


class UserService:
    """Use case: manage users (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def list_users(self) -> list[User]:
        return list(self._users.list_all())

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise UserNotFound(user_id)
        return user

    def update_profile(
        self,
        user_id: int,
        *,
        current: User,
        username: Optional[str] = None,
        position: Optional[str] = None,
        gender: Optional[str] = None,
        password: Optional[str] = None,
    ) -> User:
        if current.user_id != user_id and not current.is_admin:
            raise AuthorizationError("You can only edit your own profile")
        user = self.get_user(user_id)

        new_position = None
        if position is not None:
            if not current.is_admin:
                raise AuthorizationError("Only an admin can change positions")
            new_position = require_position(position)

        new_username = None
        if username is not None:
            new_username = require_non_empty(username, "Username")
            other = self._users.get_by_username(new_username)
            if other and other.user_id != user.user_id:
                raise ValidationError("Username already exists")

        password_hash = None
        if password:
            require_min_length(password, "Password", 6)
            password_hash = generate_password_hash(password)

        self._users.update_profile(
            user_id,
            username=new_username,
            position=new_position,
            gender=optional_gender(gender),
            password_hash=password_hash,
        )
        return self.get_user(user_id)

    def delete_user(self, *, current: User, user_id: int) -> None:
        if not current.is_admin:
            raise AuthorizationError("Admin access required")

        user = self.get_user(user_id)
        if user.is_admin:
            raise ValidationError("Cannot delete an admin account")

        if not self._users.delete_by_id(user_id):
            raise ValidationError("Failed to delete user")
        logger.info("Deleted user %s (id=%s)", user.username, user_id)
