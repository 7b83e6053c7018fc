# clinic_api/auth/auth_service.py

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from fastapi import HTTPException, status
import jwt
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from passlib.context import CryptContext

from clinic_api.common.config import settings
from clinic_api.models.models import User, UserRole, Patient

logger = logging.getLogger(__name__)

# Initialize the password context (bcrypt)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify that the provided password matches the hashed password."""
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: timedelta = None) -> str:
    """Create a JWT token including an expiration date."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta if expires_delta else timedelta(minutes=15))
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return encoded_jwt


def issue_token_for(user: User) -> str:
    """Issue an access token for the given user with the configured lifetime."""
    return create_access_token(
        data={"sub": str(user.id), "role": user.role.value},
        expires_delta=timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)
    )


async def create_user(
    name: str,
    email: str,
    password: str,
    role: UserRole,
    db: AsyncSession,
    contact_number: Optional[str] = None
) -> User:
    """Create a new user in the database without committing."""
    # Check if user with provided email already exists
    result = await db.execute(select(User).where(User.email == email))
    existing_user = result.scalars().first()

    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A user with this email already exists!"
        )

    new_user = User(
        name=name.strip(),
        email=email,
        password_hash=hash_password(password),
        role=role,
        contact_number=contact_number
    )
    db.add(new_user)
    await db.flush()  # Get the user ID without committing

    return new_user


async def register_user(
    name: str,
    email: str,
    password: str,
    role: UserRole,
    db: AsyncSession,
    contact_number: Optional[str] = None
) -> Tuple[User, str]:
    """
    Register a new account and return it with an access token.

    - Patient role: Creates User + empty Patient profile
    - Admin role: Creates User only
    """
    new_user = await create_user(name, email, password, role, db, contact_number)

    if role == UserRole.PATIENT:
        db.add(Patient(user_id=new_user.id))

    await db.commit()
    await db.refresh(new_user)
    logger.info("Registered %s account %s", role.value, new_user.id)

    return new_user, issue_token_for(new_user)


async def authenticate_user(email: str, password: str, db: AsyncSession) -> User:
    """Attempt to retrieve the user by email and verify the password."""
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalars().first()

    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="This account has been deactivated.",
        )
    return user


async def login_user(email: str, password: str, db: AsyncSession) -> Tuple[User, str]:
    """Authenticate a user and return user with JWT access token."""
    user = await authenticate_user(email, password, db)

    # Update last_login timestamp
    user.last_login = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(user)

    return user, issue_token_for(user)
