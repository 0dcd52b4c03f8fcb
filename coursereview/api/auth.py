import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from coursereview.config import settings
from coursereview.crud import user as user_crud
from coursereview.database import get_db
from coursereview.models.user import User
from coursereview.schemas.auth import LoginRequest, Token, UserRegister
from coursereview.schemas.user import User as UserSchema
from coursereview.utils.security import (
    authenticate_user,
    create_access_token,
    create_admin_token,
    get_current_user,
    get_password_hash,
    is_allowed_email,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


# ===== REGISTER ENDPOINT =====

@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, db: Session = Depends(get_db)):
    """Register a student account with a university email address"""
    normalized_email = user_data.email.strip().lower()
    if not is_allowed_email(normalized_email):
        raise HTTPException(
            status_code=400,
            detail=f"Only {', '.join('@' + d for d in settings.ALLOWED_EMAIL_DOMAINS)} email addresses are allowed",
        )

    if user_crud.get_user_by_email(db, normalized_email):
        raise HTTPException(status_code=400, detail="Email already registered")

    try:
        user = user_crud.create_user(
            db,
            name=user_data.name,
            email=normalized_email,
            password_hash=get_password_hash(user_data.password),
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Registration failed for %s", normalized_email)
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"message": "Registration successful", "user_id": user.id}


# ===== LOGIN ENDPOINTS =====

@router.post("/login", response_model=Token)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Verify credentials and return access token"""
    user = authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is disabled")

    access_token = create_access_token(data={"sub": user.email, "role": user.role})

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "role": user.role,
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }


@router.post("/admin/login", response_model=Token)
def admin_login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Issue a short-lived admin-scoped token. Admin accounts only."""
    user = authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid admin credentials")

    if (user.role or "").lower() != "admin" or not user.is_active:
        raise HTTPException(status_code=403, detail="Admin access only")

    logger.info("Admin token issued to user %s", user.id)
    return {
        "access_token": create_admin_token(user),
        "token_type": "bearer",
        "role": user.role,
        "scope": "admin",
        "expires_in": settings.ADMIN_TOKEN_EXPIRE_MINUTES * 60,
    }


@router.get("/me", response_model=UserSchema)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user
