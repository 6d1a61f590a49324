from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from api.models import ApiResponse, UserResponse
from auth import service
from auth.models import LoginRequest, RegisterRequest
from db.session import get_db

router = APIRouter()


@router.post(
    "/register",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED
)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new local account.

    Returns the created user (never the password hash). Fails with 400 if
    the email is taken or the password is too short.
    """
    user = service.register(db, request.email, request.password, request.name)
    return ApiResponse[UserResponse].created(
        "User registered successfully", UserResponse.from_user(user)
    )


@router.post("/login", response_model=ApiResponse[UserResponse])
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """
    Check email/password and return the user.

    No session token is issued; protected routes take the same
    credentials as HTTP Basic auth on every request.
    """
    user = service.login(db, request.email, request.password)
    return ApiResponse[UserResponse].ok("Login successful", UserResponse.from_user(user))
