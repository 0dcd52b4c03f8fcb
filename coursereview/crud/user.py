# coursereview/crud/user.py
from typing import Optional

from sqlalchemy.orm import Session

from coursereview.models.user import User


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def create_user(db: Session, name: str, email: str, password_hash: str, role: str = "student") -> User:
    user = User(
        name=name.strip(),
        email=email.strip().lower(),
        password_hash=password_hash,
        role=role,
        is_active=True,
    )
    db.add(user)
    db.flush()
    return user
