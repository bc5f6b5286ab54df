from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from fastapi.security import OAuth2PasswordRequestForm

from shopledger.database import get_db
from shopledger.models.users import User
from shopledger.schemas.user import (
    PasswordUpdate,
    TokenResponse,
    UserCreate,
    UserResponse,
)
from shopledger.core.auth import get_current_user, get_owner_user
from shopledger.core.jwt import create_access_token
from shopledger.core.rate_limiter import limiter
from shopledger.services import users as user_service

router = APIRouter(prefix="/auth", tags=["Authentication"])


# ---------------- LOGIN (TOKEN-BASED) ----------------
@router.post("/login", response_model=TokenResponse)
@limiter.limit("5/minute")
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    user = user_service.authenticate(db, form_data.username, form_data.password)

    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(user)

    return {
        "access_token": token,
        "token_type": "bearer",
        "user": user,
    }


# ---------------- REGISTER (OWNER ONLY) ----------------
@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def register(
    request: Request,
    user_data: UserCreate,
    db: Session = Depends(get_db),
    owner: User = Depends(get_owner_user),
):
    return user_service.register_user(
        db,
        username=user_data.username,
        password=user_data.password,
        role=user_data.role,
    )


# ---------------- CURRENT USER ----------------
@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/password")
def change_password(
    password_data: PasswordUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user_service.change_password(
        db,
        current_user,
        password_data.current_password,
        password_data.new_password,
    )

    return {"message": "Password updated successfully"}


# ---------------- USER MANAGEMENT ----------------
@router.get("/users", response_model=list[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    owner: User = Depends(get_owner_user),
):
    return user_service.list_users(db)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    owner: User = Depends(get_owner_user),
):
    user_service.delete_user(db, user_id, acting_user_id=owner.id)

    return None
