# backend/routes/users.py
from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from models.stock import Transaction
from models.users import User
from utils.hashing import get_password_hash
from utils.tokenJWT import get_current_user, role_required
from utils.audit import write_log, client_ip
from utils.images import read_image
from utils.response import respond_success
from schemas.common import ApiResponse
from schemas.user import UserCreate, UserPatch, UserResponse

router = APIRouter(prefix="/users", tags=["Users"])


def _normalize_email(email: str) -> str:
    return email.strip().lower()


# Case- and whitespace-insensitive uniqueness check
def _email_taken(db: Session, email: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(User).filter(func.lower(func.trim(User.email)) == _normalize_email(email))
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


def _get_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("", response_model=ApiResponse[List[UserResponse]])
def list_users(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    users = db.query(User).order_by(User.id.asc()).all()
    return respond_success([UserResponse.model_validate(u) for u in users], "Users fetched successfully")


@router.get("/detail/{user_id}", response_model=ApiResponse[UserResponse])
def get_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return respond_success(UserResponse.model_validate(_get_or_404(db, user_id)), "User fetched successfully")


# Create a user account (Admin only)
@router.post("/create", response_model=ApiResponse[UserResponse])
def create_user(
    payload: UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    if _email_taken(db, payload.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"{payload.email} is already registered")

    new_user = User(
        email=_normalize_email(payload.email),
        password_hash=get_password_hash(payload.password),
        name=payload.name,
        phone=payload.phone,
        role=payload.role,
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    write_log(db, user_id=current_user.id, action="USER_CREATE", resource="users",
              status="SUCCESS", ip=client_ip(request), meta={"id": new_user.id, "email": new_user.email})
    return respond_success(UserResponse.model_validate(new_user), "User created successfully")


# Update profile fields; users may edit themselves, admins anyone
@router.put("/update/{user_id}", response_model=ApiResponse[UserResponse])
def update_user(
    user_id: int,
    request: Request,
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if (current_user.role or "").lower() != "admin" and current_user.id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    user = _get_or_404(db, user_id)

    try:
        patch = UserPatch(
            email=(email or "").strip() or None,
            password=password or None,
            name=(name or "").strip() or None,
            phone=(phone or "").strip() or None,
            avatar=read_image(avatar),
        )
    except ValidationError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email address")

    changes = patch.model_dump(exclude_none=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    if patch.email is not None:
        if _email_taken(db, patch.email, exclude_id=user.id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                                detail=f"{patch.email} is already registered by another user")
        changes["email"] = _normalize_email(patch.email)

    if "password" in changes:
        changes["password_hash"] = get_password_hash(changes.pop("password"))

    for key, value in changes.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)

    write_log(db, user_id=current_user.id, action="USER_UPDATE", resource="users",
              status="SUCCESS", ip=client_ip(request),
              meta={"id": user.id, "fields": sorted(k for k in changes if k != "password_hash")})
    return respond_success(UserResponse.model_validate(user), "User updated successfully")


# Delete a user account (Admin only)
@router.delete("/delete/{user_id}", response_model=ApiResponse[dict])
def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    user = _get_or_404(db, user_id)

    if user.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")

    # Movement records reference their acting user
    if db.query(Transaction.id).filter(Transaction.user_id == user.id).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Cannot delete user with recorded transactions")

    db.delete(user)
    db.commit()

    write_log(db, user_id=current_user.id, action="USER_DELETE", resource="users",
              status="SUCCESS", ip=client_ip(request), meta={"id": user_id})
    return respond_success({"id": user_id}, "User deleted successfully")
