"""Authentication API routes.

Each route validates its body, calls one AuthService operation and turns
the AuthResult into either the success body or the uniform error body.
"""

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.api.rate_limit import get_rate_limit_string, limiter
from src.modules.auth.result import AuthErrorKind, AuthResult
from src.modules.auth.schemas import (
    AuthSession,
    ChangePasswordRequest,
    ErrorResponse,
    LoginUserRequest,
    RegisterUserRequest,
    UpdateUserRequest,
    UserEnvelope,
    VerifyUserRequest,
)
from src.modules.auth.service import AuthService

logger = structlog.get_logger()

router = APIRouter(prefix="/auth", tags=["authentication"])

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {400: {"model": ErrorResponse}}


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get the auth service instance configured at startup."""
    if _auth_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service not configured",
        )
    return _auth_service


def set_auth_service(service: AuthService | None) -> None:
    """Set the auth service instance (None unconfigures it)."""
    global _auth_service
    _auth_service = service


def _respond(result: AuthResult[Any]) -> BaseModel | JSONResponse:
    error = result.error
    if error is None:
        return result.unwrap()
    return JSONResponse(status_code=error.status, content=error.to_dict())


async def validation_exception_handler(
    _request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Report request validation errors in the uniform error shape."""
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        message = str(err.get("msg", "Invalid value")).removeprefix("Value error, ")
        messages.append(f"{location}: {message}" if location else message)
    logger.info("request_validation_failed", errors=len(messages))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "status": status.HTTP_400_BAD_REQUEST,
            "message": "; ".join(messages),
            "kind": str(AuthErrorKind.VALIDATION_FAILED),
        },
    )


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


@router.post(
    "/register",
    response_model=AuthSession,
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
    summary="Register a new user",
)
@limiter.limit(get_rate_limit_string)
async def register(
    request: Request,  # noqa: ARG001 - required by the rate limiter
    data: RegisterUserRequest,
    auth_service: AuthServiceDep,
) -> Any:
    """Create a user and return it with a token."""
    result = await auth_service.register_user(
        data.email,
        data.password,
        username=data.username,
        **data.profile_fields(),
    )
    return _respond(result)


@router.post(
    "/login",
    response_model=AuthSession,
    responses=_ERROR_RESPONSES,
    summary="Login with email and password",
)
@limiter.limit(get_rate_limit_string)
async def login(
    request: Request,  # noqa: ARG001 - required by the rate limiter
    data: LoginUserRequest,
    auth_service: AuthServiceDep,
) -> Any:
    """Authenticate and return the user with a token."""
    return _respond(await auth_service.login_user(data.email, data.password))


@router.post(
    "/verify",
    response_model=AuthSession,
    responses=_ERROR_RESPONSES,
    summary="Verify a token and renew it",
)
async def verify(data: VerifyUserRequest, auth_service: AuthServiceDep) -> Any:
    """Return the token's identity together with a renewed token."""
    return _respond(await auth_service.verify_user(data.token))


@router.post(
    "/change-password",
    response_model=UserEnvelope,
    responses=_ERROR_RESPONSES,
    summary="Change the password of the token's user",
)
async def change_password(data: ChangePasswordRequest, auth_service: AuthServiceDep) -> Any:
    """Replace the password after checking the current one."""
    result = await auth_service.change_password(
        data.token,
        data.password,
        data.new_password,
        data.repeat_new_password,
    )
    return _respond(result)


@router.patch(
    "/users",
    response_model=UserEnvelope,
    responses=_ERROR_RESPONSES,
    summary="Update profile fields of a user",
)
async def update_user(data: UpdateUserRequest, auth_service: AuthServiceDep) -> Any:
    """Apply the submitted fields to the user with the given id."""
    return _respond(await auth_service.update_user(data.id, **data.update_fields()))
