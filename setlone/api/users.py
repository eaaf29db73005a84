from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from setlone.api.dependencies import get_password_hasher
from setlone.auth import PasswordHasher, Principal, require_principal
from setlone.database import get_db
from setlone.errors import PermissionDenied
from setlone.schemas.common import ErrorResponse, MessageResponse
from setlone.schemas.user import (
    EmailRequest,
    ProfilePayload,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    RegisteredUser,
    RegisterRequest,
    RegisterResponse,
    UIDPayload,
    UIDUpdateRequest,
    UIDUpdateResponse,
    UserEnvelope,
    UserResponse,
    VerifyEmailRequest,
)
from setlone.services.user_service import UserService
from setlone.utils.validators import validate_email, validate_uid

logger = logging.getLogger(__name__)
router = APIRouter()

AUTH_RESPONSES = {401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"}}
USER_RESPONSES = {
    **AUTH_RESPONSES,
    400: {"model": ErrorResponse, "description": "Invalid input"},
    404: {"model": ErrorResponse, "description": "User not found"},
}


@router.post(
    "/auth/register",
    response_model=RegisterResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["auth"],
)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    """Register a new user. A 7-digit UID is assigned automatically."""
    user = UserService(db).register(payload, password_hash=hasher(payload.password))
    return RegisterResponse(
        message="User registered successfully. Please verify your email.",
        data=RegisteredUser(userId=user.id, uid=user.uid, email=user.email, username=user.username),
    )


@router.post(
    "/auth/send-verification",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}},
    tags=["auth"],
)
def send_verification(payload: EmailRequest, db: Session = Depends(get_db)):
    """Issue a new email verification code. Delivery is not wired up; the code is fixed."""
    validate_email(payload.email)
    UserService(db).send_verification(payload.email)
    return MessageResponse(message="Verification code sent")


@router.post(
    "/auth/verify-email",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}},
    tags=["auth"],
)
def verify_email(payload: VerifyEmailRequest, db: Session = Depends(get_db)):
    UserService(db).verify_email(payload.email, payload.code)
    return MessageResponse(message="Email verified successfully")


@router.get("/auth/me", response_model=UserEnvelope, responses=USER_RESPONSES, tags=["auth"])
def me(principal: Principal = Depends(require_principal), db: Session = Depends(get_db)):
    user = UserService(db).get_by_id(principal.id)
    return UserEnvelope(data=UserResponse.model_validate(user))


@router.get("/users/uid/{uid}", response_model=UserEnvelope, responses=USER_RESPONSES, tags=["users"])
def get_user_by_uid(uid: str, db: Session = Depends(get_db)):
    validate_uid(uid)
    user = UserService(db).get_by_uid(uid)
    return UserEnvelope(data=UserResponse.model_validate(user))


@router.get("/users/email/{email}", response_model=UserEnvelope, responses=USER_RESPONSES, tags=["users"])
def get_user_by_email(email: str, db: Session = Depends(get_db)):
    validate_email(email)
    user = UserService(db).get_by_email(email)
    return UserEnvelope(data=UserResponse.model_validate(user))


@router.get("/users/{user_id}", response_model=UserEnvelope, responses=USER_RESPONSES, tags=["users"])
def get_user(
    user_id: int,
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
):
    user = UserService(db).get_by_id(user_id)
    return UserEnvelope(data=UserResponse.model_validate(user))


@router.put(
    "/users/{user_id}/uid",
    response_model=UIDUpdateResponse,
    responses={**USER_RESPONSES, 403: {"model": ErrorResponse}},
    tags=["users"],
)
def update_uid(
    user_id: int,
    payload: UIDUpdateRequest,
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
):
    """Change the caller's UID. Must be exactly 7 digits and unused."""
    if principal.id != user_id:
        raise PermissionDenied("You can only change your own UID")
    user = UserService(db).update_uid(user_id, payload.uid)
    return UIDUpdateResponse(message="UID updated successfully", data=UIDPayload(uid=user.uid))


@router.put(
    "/users/{user_id}/profile",
    response_model=ProfileUpdateResponse,
    responses={**USER_RESPONSES, 403: {"model": ErrorResponse}},
    tags=["users"],
)
def update_profile(
    user_id: int,
    payload: ProfileUpdateRequest,
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
):
    if principal.id != user_id:
        raise PermissionDenied("You can only update your own profile")
    user = UserService(db).update_profile(user_id, profile_image=payload.profile_image, bio=payload.bio)
    return ProfileUpdateResponse(
        message="Profile updated successfully",
        data=ProfilePayload(profile_image=user.profile_image, bio=user.bio),
    )
