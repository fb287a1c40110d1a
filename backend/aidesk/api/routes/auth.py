from fastapi import APIRouter, Body, Depends, HTTPException, status
from typing import Any, Dict, Optional

from ...models.auth_models import (
    RegisterRequest, LoginRequest, SessionUserResponse, RegisterResponse,
    LoginResponse, SessionStatusResponse, ValidateSessionResponse, SignalAccepted,
    UserResponse
)
from ...models.session import SessionUser
from ...services.auth_service import AuthenticationService, get_auth_service

router = APIRouter(prefix="/auth", tags=["authentication"])


def _user_response(user: Optional[SessionUser]) -> Optional[SessionUserResponse]:
    if user is None:
        return None
    return SessionUserResponse(**user.model_dump())


@router.post("/register", response_model=RegisterResponse)
async def register_user(
    request: RegisterRequest,
    auth_service: AuthenticationService = Depends(get_auth_service)
):
    """Create a local account"""
    result = await auth_service.register(
        name=request.name,
        email=request.email,
        password=request.password
    )
    return RegisterResponse(
        success=result.success,
        user_id=result.user_id,
        reason=result.reason.value if result.reason else None,
        message=result.message
    )


@router.post("/login", response_model=LoginResponse)
async def login_user(
    request: LoginRequest,
    auth_service: AuthenticationService = Depends(get_auth_service)
):
    """Sign in; on success the shell navigates to the authenticated view"""
    result = await auth_service.login(email=request.email, password=request.password)
    return LoginResponse(
        success=result.success,
        user=_user_response(result.user),
        reason=result.reason.value if result.reason else None,
        message=result.message
    )


@router.get("/current-user", response_model=Optional[SessionUserResponse])
async def get_current_user(auth_service: AuthenticationService = Depends(get_auth_service)):
    """Signed-in user, or null (reading it also extends the session)"""
    return _user_response(await auth_service.get_current_user())


@router.get("/status", response_model=SessionStatusResponse)
async def session_status(auth_service: AuthenticationService = Depends(get_auth_service)):
    """Current authentication state for initial navigation"""
    user = await auth_service.get_current_user()
    return SessionStatusResponse(is_authenticated=user is not None, user=_user_response(user))


@router.get("/validate", response_model=ValidateSessionResponse)
async def validate_session(auth_service: AuthenticationService = Depends(get_auth_service)):
    """Explicit session check (used for idle detection)"""
    return ValidateSessionResponse(valid=await auth_service.validate_session())


@router.post("/logout")
async def logout_user(auth_service: AuthenticationService = Depends(get_auth_service)):
    """End current user session"""
    await auth_service.logout()
    return {"success": True, "message": "Logout successful"}


@router.post("/preferences", response_model=SignalAccepted, status_code=status.HTTP_202_ACCEPTED)
async def save_user_preferences(
    patch: Dict[str, Any] = Body(...),
    auth_service: AuthenticationService = Depends(get_auth_service)
):
    """Merge preferences into the current session (applied asynchronously)"""
    auth_service.save_user_preferences(patch)
    return SignalAccepted(signal="preferences")


@router.post("/activity", response_model=SignalAccepted, status_code=status.HTTP_202_ACCEPTED)
async def session_activity(auth_service: AuthenticationService = Depends(get_auth_service)):
    """Activity ping that slides the session expiry (applied asynchronously)"""
    auth_service.session_activity()
    return SignalAccepted(signal="activity")


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, auth_service: AuthenticationService = Depends(get_auth_service)):
    """Public identity of a registered user"""
    user = await auth_service.get_user(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found"
        )
    return UserResponse(**user)
