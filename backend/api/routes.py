from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.models import ApiResponse, UserResponse
from auth.dependencies import get_current_user
from auth.errors import NotFoundError
from db.session import get_db
from db.user_service import get_user_by_id, list_users
from models.user import User

users_router = APIRouter()
profile_router = APIRouter()
admin_router = APIRouter()


@users_router.get("", response_model=ApiResponse[list[UserResponse]])
def get_all_users(db: Session = Depends(get_db)):
    """List every user (authenticated)"""
    users = [UserResponse.from_user(user) for user in list_users(db)]
    return ApiResponse[list[UserResponse]].ok("Users retrieved successfully", users)


@users_router.get("/{user_id}", response_model=ApiResponse[UserResponse])
def get_user(user_id: int, db: Session = Depends(get_db)):
    """Get one user by id (authenticated)"""
    user = get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError(f"User not found with id: {user_id}")
    return ApiResponse[UserResponse].ok("User retrieved successfully", UserResponse.from_user(user))


@profile_router.get("", response_model=ApiResponse[UserResponse])
def get_profile(current_user: User = Depends(get_current_user)):
    """
    Get current user information (protected endpoint)

    Requires HTTP Basic credentials:
        Authorization: Basic base64(email:password)
    """
    return ApiResponse[UserResponse].ok("Profile retrieved successfully", UserResponse.from_user(current_user))


@admin_router.get("/users", response_model=ApiResponse[list[UserResponse]])
def admin_list_users(db: Session = Depends(get_db)):
    """List every user (ADMIN role)"""
    users = [UserResponse.from_user(user) for user in list_users(db)]
    return ApiResponse[list[UserResponse]].ok("Users retrieved successfully", users)
