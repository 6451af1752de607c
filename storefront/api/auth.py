"""Authentication endpoints: signup, login, profile, logout"""
from fastapi import APIRouter, Depends, status

from storefront.api.deps import (
    CurrentUser,
    get_account_service,
    get_current_user,
    get_revocation_registry,
)
from storefront.middleware.monitoring import record_revocation_registry_size
from storefront.schemas.auth import AuthData, LoginRequest, ProfileData, SignupRequest, UserResponse
from storefront.schemas.common import ApiResponse, format_response
from storefront.services.accounts import AccountService
from storefront.utils.revocation import TokenRevocationRegistry

router = APIRouter(prefix="/api/auth", tags=["authentication"])


@router.post(
    "/signup",
    response_model=ApiResponse[AuthData],
    response_model_exclude_unset=True,
    status_code=status.HTTP_201_CREATED,
)
def signup(
    request: SignupRequest,
    accounts: AccountService = Depends(get_account_service),
):
    """
    Create a user account and return it with an access token.

    ``role`` defaults to ADMIN. Returns 409 if the email or username is taken.
    """
    user, token = accounts.signup(request)
    return format_response(
        True,
        "User created successfully",
        AuthData(user=UserResponse.model_validate(user), token=token),
    )


@router.post("/login", response_model=ApiResponse[AuthData], response_model_exclude_unset=True)
def login(
    request: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
):
    """
    Exchange email + password for an access token.

    The same 401 is returned for an unknown email and a wrong password.
    """
    user, token = accounts.login(request)
    return format_response(
        True,
        "Login successful",
        AuthData(user=UserResponse.model_validate(user), token=token),
    )


@router.get("/profile", response_model=ApiResponse[ProfileData], response_model_exclude_unset=True)
def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
):
    """Return the account behind the bearer token."""
    user = accounts.get_profile(current_user.id)
    return format_response(
        True,
        "Profile retrieved successfully",
        ProfileData(user=UserResponse.model_validate(user)),
    )


@router.post("/logout", response_model=ApiResponse[None], response_model_exclude_unset=True)
def logout(
    current_user: CurrentUser = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
    registry: TokenRevocationRegistry = Depends(get_revocation_registry),
):
    """
    Revoke the bearer token used for this request.

    Any later request presenting the same token gets 401.
    """
    accounts.logout(current_user.token)
    record_revocation_registry_size(len(registry))
    return format_response(True, "Logout successful")
