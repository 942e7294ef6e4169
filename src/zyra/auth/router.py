"""Account API router: session login/logout and the current user."""

from fastapi import APIRouter, Depends, Response

from zyra.auth.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
    UserEnvelope,
    UserOut,
)
from zyra.common.config import get_settings
from zyra.common.schemas import MessageResponse
from zyra.common.security import COOKIE_NAME, create_session_cookie, require_user
from zyra.store.records import User

router = APIRouter()


def _get_service():
    from zyra.deps import get_auth_service
    return get_auth_service()


def _set_session(response: Response, user: User) -> None:
    settings = get_settings()
    response.set_cookie(
        COOKIE_NAME, create_session_cookie(user.id),
        max_age=settings.session_max_age,
        httponly=True, samesite="lax",
        secure=settings.environment == "production",
    )


def _envelope(user: User) -> UserEnvelope:
    return UserEnvelope(user=UserOut.model_validate(user))


@router.post("/register", response_model=UserEnvelope)
async def register(body: RegisterRequest, response: Response):
    user = await _get_service().register(body.email, body.password, body.full_name)
    _set_session(response, user)
    return _envelope(user)


@router.post("/login", response_model=UserEnvelope)
async def login(body: LoginRequest, response: Response):
    user = await _get_service().authenticate(body.email, body.password)
    _set_session(response, user)
    return _envelope(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    response.delete_cookie(COOKIE_NAME)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserEnvelope)
async def me(user: User = Depends(require_user)):
    return _envelope(user)


@router.patch("/me", response_model=UserEnvelope)
async def update_me(body: UpdateProfileRequest, user: User = Depends(require_user)):
    updated = await _get_service().update_profile(user, **body.model_dump(exclude_unset=True))
    return _envelope(updated)


@router.post("/me/password", response_model=MessageResponse)
async def change_password(body: ChangePasswordRequest, user: User = Depends(require_user)):
    await _get_service().change_password(user, body.current_password, body.new_password)
    return MessageResponse(message="Password updated")
