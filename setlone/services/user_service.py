from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from setlone.config.settings import settings
from setlone.errors import AllocationExhausted, NotFound, ValidationError
from setlone.models import User
from setlone.schemas.user import RegisterRequest
from setlone.services.uid_allocator import UIDAllocator
from setlone.utils.validators import (
    validate_birth_date,
    validate_email,
    validate_phone_number,
    validate_profile_image,
    validate_uid,
)

logger = logging.getLogger(__name__)

# Email delivery is not wired up yet; every account gets the same code
VERIFICATION_CODE = "123456"


class UserService:
    def __init__(
        self,
        session: Session,
        allocator_factory: Optional[Callable[[Callable[[str], bool]], UIDAllocator]] = None,
        max_registration_attempts: Optional[int] = None,
    ):
        self.session = session
        self.allocator_factory = allocator_factory or UIDAllocator
        self.max_registration_attempts = (
            settings.registration_max_attempts if max_registration_attempts is None else max_registration_attempts
        )

    def _active(self):
        return self.session.query(User).filter(User.deleted_at.is_(None))

    def uid_exists(self, uid: str) -> bool:
        # Soft-deleted rows still hold their UID in the unique index
        return self.session.query(User.id).filter(User.uid == uid).first() is not None

    def _exists(self, column, value: str, include_deleted: bool = False) -> bool:
        query = self.session.query(User.id).filter(column == value)
        if not include_deleted:
            query = query.filter(User.deleted_at.is_(None))
        return query.first() is not None

    def email_exists(self, email: str) -> bool:
        return self._exists(User.email, email)

    def username_exists(self, username: str) -> bool:
        return self._exists(User.username, username)

    def phone_number_exists(self, phone_number: str) -> bool:
        return self._exists(User.phone_number, phone_number)

    def _ensure_unique(self, data: RegisterRequest, include_deleted: bool = False):
        if self._exists(User.email, data.email, include_deleted):
            raise ValidationError("Email already exists")
        if self._exists(User.username, data.username, include_deleted):
            raise ValidationError("Username already exists")
        if self._exists(User.phone_number, data.phone_number, include_deleted):
            raise ValidationError("Phone number already exists")

    def register(self, data: RegisterRequest, password_hash: str) -> User:
        """Create a user with a freshly allocated UID.

        Allocation and insert are retried together when the insert loses a
        race on the UID unique index.
        """
        validate_email(data.email)
        validate_phone_number(data.phone_number)
        self._ensure_unique(data)
        validate_birth_date(data.birth_date)

        allocator = self.allocator_factory(self.uid_exists)
        for attempt in range(1, self.max_registration_attempts + 1):
            uid = allocator.allocate()
            user = User(
                uid=uid,
                email=data.email,
                username=data.username,
                password_hash=password_hash,
                real_name=data.real_name,
                birth_date=data.birth_date,
                phone_number=data.phone_number,
                email_verified=False,
                email_verification_code=VERIFICATION_CODE,
                email_verification_sent_at=datetime.now(timezone.utc),
            )
            self.session.add(user)
            try:
                self.session.commit()
            except IntegrityError:
                self.session.rollback()
                # A concurrent writer may have taken the email, username or phone instead of the UID
                self._ensure_unique(data, include_deleted=True)
                logger.warning("uid_insert_conflict", extra={"uid": uid, "attempt": attempt})
                continue

            self.session.refresh(user)
            logger.info("user_registered", extra={"user_id": user.id, "uid": user.uid})
            return user

        raise AllocationExhausted("UID insert kept conflicting", attempts=self.max_registration_attempts)

    def get_by_id(self, user_id: int) -> User:
        user = self._active().filter(User.id == user_id).first()
        if user is None:
            raise NotFound("User not found", context={"user_id": user_id})
        return user

    def get_by_uid(self, uid: str) -> User:
        user = self._active().filter(User.uid == uid).first()
        if user is None:
            raise NotFound("User not found", context={"uid": uid})
        return user

    def get_by_email(self, email: str) -> User:
        user = self._active().filter(User.email == email).first()
        if user is None:
            raise NotFound("User not found", context={"email": email})
        return user

    def update_uid(self, user_id: int, uid: str) -> User:
        """Change a user's UID. Accepts any 7 digits, including leading zeros."""
        validate_uid(uid)
        user = self.get_by_id(user_id)

        owner = self.session.query(User.id).filter(User.uid == uid).first()
        if owner is not None and owner.id != user.id:
            raise ValidationError("UID already exists")

        user.uid = uid
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ValidationError("UID already exists") from exc

        self.session.refresh(user)
        logger.info("user_uid_updated", extra={"user_id": user.id, "uid": uid})
        return user

    def update_profile(self, user_id: int, profile_image: Optional[str] = None, bio: Optional[str] = None) -> User:
        """Update the free-form profile fields. A field left as None is not touched."""
        if profile_image is not None:
            validate_profile_image(profile_image)
        user = self.get_by_id(user_id)

        if profile_image is not None:
            user.profile_image = profile_image
        if bio is not None:
            user.bio = bio
        self.session.commit()
        self.session.refresh(user)
        logger.info("user_profile_updated", extra={"user_id": user.id})
        return user

    def send_verification(self, email: str) -> str:
        """Record a fresh verification code for the account and return it."""
        user = self._active().filter(User.email == email).first()
        if user is None:
            raise ValidationError("User not found")

        user.email_verification_code = VERIFICATION_CODE
        user.email_verification_sent_at = datetime.now(timezone.utc)
        self.session.commit()
        logger.info("email_verification_sent", extra={"user_id": user.id})
        return VERIFICATION_CODE

    def verify_email(self, email: str, code: str) -> User:
        user = (
            self._active()
            .filter(User.email == email, User.email_verification_code.is_not(None))
            .first()
        )
        if user is None or user.email_verification_code != code:
            raise ValidationError("Invalid verification code")

        # A code is single use
        user.email_verified = True
        user.email_verification_code = None
        self.session.commit()
        self.session.refresh(user)
        logger.info("email_verified", extra={"user_id": user.id})
        return user
