# backend/routes/auth.py
import logging
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from utils.hashing import verify_password
from utils.tokenJWT import create_access_token, get_current_user
from utils.audit import write_log, client_ip
from utils.response import respond_success
from models.users import User
from schemas import user as schemas
from schemas.common import ApiResponse
from database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


# Authenticate user and issue JWT token
@router.post("/login", response_model=ApiResponse[schemas.Token])
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(User.email == payload.email).first()

    # Same answer for unknown email and wrong password
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": payload.email})
        logger.info("Login failed for %s", payload.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    access_token = create_access_token(db_user.id, role=db_user.role)

    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"email": db_user.email})

    return respond_success({"token": access_token, "token_type": "bearer"}, "Login successful")


# Retrieve current authenticated user details
@router.get("/me", response_model=ApiResponse[schemas.UserResponse])
def me(current_user: User = Depends(get_current_user)):
    return respond_success(schemas.UserResponse.model_validate(current_user), "User fetched successfully")
