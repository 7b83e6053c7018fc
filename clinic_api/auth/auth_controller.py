# clinic_api/auth/auth_controller.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.auth.dependencies import get_current_user
from clinic_api.common.database.database import get_db_session
from clinic_api.auth import auth_service, schemas
from clinic_api.models.models import User, UserRole

router = APIRouter(prefix="/auth", tags=["auth"])


def user_to_response(user: User) -> schemas.UserResponse:
    """Convert User model to UserResponse schema."""
    return schemas.UserResponse(
        id=str(user.id),
        name=user.name,
        email=user.email,
        role=user.role,
        contact_number=user.contact_number
    )


@router.post("/register", response_model=schemas.RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    register_data: schemas.RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
):
    """
    Register a new account.

    - **name**: Full name
    - **email**: Email address
    - **password**: Password (minimum 8 characters)
    - **password_confirm**: Password confirmation (must match)
    - **role**: patient or admin
    """
    user, access_token = await auth_service.register_user(
        name=register_data.name,
        email=register_data.email,
        password=register_data.password,
        role=UserRole(register_data.role.value),
        db=db,
        contact_number=register_data.contact_number
    )

    return schemas.RegisterResponse(access_token=access_token, user=user_to_response(user))


@router.post("/login", response_model=schemas.LoginResponse)
async def login(
    credentials: schemas.LoginRequest,
    db: AsyncSession = Depends(get_db_session)
):
    """
    Authenticate a user and return an access token.

    - **email**: User's email address
    - **password**: User's password
    """
    user, access_token = await auth_service.login_user(
        email=credentials.email,
        password=credentials.password,
        db=db
    )

    return schemas.LoginResponse(
        access_token=access_token,
        user=user_to_response(user)
    )


@router.get("/me", response_model=schemas.UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get the current authenticated user's information."""
    return user_to_response(current_user)
