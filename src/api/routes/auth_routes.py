"""
Authentication API routes.
"""
from fastapi import APIRouter, Depends, status
from src.core.dependencies import get_user_repository
from src.core.exceptions import UnauthorizedException
from src.models.actor import Role
from src.models.dto.auth_dto import LoginRequest, LoginResponse
from src.repositories.user_repository import UserRepository
from src.services.auth_service import authenticate_user, create_access_token

router = APIRouter(prefix="/v1/api/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
async def login(
    request: LoginRequest,
    user_repository: UserRepository = Depends(get_user_repository)
):
    """
    Authenticate user and return JWT access token.

    - **username**: User's username
    - **password**: User's password

    Returns a JWT carrying the user's id and role.
    """
    user = authenticate_user(request.username, request.password, user_repository)

    if not user:
        raise UnauthorizedException("Invalid username or password")

    try:
        role = Role(user.get('role', Role.USER.value))
    except ValueError:
        role = Role.USER

    access_token = create_access_token(user['username'], role)

    return LoginResponse(
        access_token=access_token,
        token_type="bearer",
        username=user['username'],
        role=role
    )
