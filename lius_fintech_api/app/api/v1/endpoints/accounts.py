"""
Account endpoints.

Registration, login and balance lookup, plus password and PIN changes.
Authentication is a plain username/password match; no token is issued
and clients identify the account by the id returned at login.
"""

from fastapi import APIRouter, Path, status

from lius_fintech_api.app.schemas.common import Envelope, ErrorResponse
from lius_fintech_api.app.schemas.user import (
    BalanceResponse,
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    PinResponse,
    RegisterRequest,
    RegisterResponse,
    SetPinRequest,
)
from lius_fintech_api.app.services.account_service import AccountService


router = APIRouter()


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def register(body: RegisterRequest) -> RegisterResponse:
    """Create an account with the starting balance."""
    user_id = await AccountService.register(body.username, body.password)
    return RegisterResponse(message="User registered successfully", userId=user_id)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def login(body: LoginRequest) -> LoginResponse:
    """Check credentials and return the account's id, username and balance."""
    user = await AccountService.login(body.username, body.password)
    return LoginResponse(message="Login successful", user=user)


@router.get(
    "/balance/{user_id}",
    response_model=BalanceResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_balance(user_id: str = Path(..., description="Account id")) -> BalanceResponse:
    user = await AccountService.get_balance(user_id)
    return BalanceResponse(balance=user.balance, username=user.username)


@router.post(
    "/users/{user_id}/password",
    response_model=Envelope,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def change_password(body: ChangePasswordRequest, user_id: str = Path(...)) -> Envelope:
    await AccountService.change_password(user_id, body.currentPassword, body.newPassword)
    return Envelope(message="Password updated")


@router.post(
    "/users/{user_id}/pin",
    response_model=PinResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def set_pin(body: SetPinRequest, user_id: str = Path(...)) -> PinResponse:
    """Set or clear the PIN required for outgoing transfers."""
    has_pin = await AccountService.set_pin(user_id, body.password, body.pin)
    return PinResponse(message="PIN updated" if has_pin else "PIN removed", hasPin=has_pin)
