# backend/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from models import users as models
from schemas import user as schemas
from utils.audit import client_ip, write_log
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import create_access_token, get_current_user

router = APIRouter(prefix="/api/auth", tags=["Auth"])

def _auth_response(user: models.User) -> dict:
    token = create_access_token(data={"sub": user.email, "role": user.role})
    return {"user": user, "token": token, "token_type": "bearer"}

# Register a new farmer or buyer account
@router.post("/register/", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
def register(user: schemas.UserCreate, request: Request, db: Session = Depends(get_db)):
    normalized_email = user.email.strip().lower()

    if user.confirmPassword is not None and user.confirmPassword != user.password:
        raise HTTPException(status_code=400, detail="Passwords do not match")

    # Check for existing user
    db_user = db.query(models.User).filter(func.lower(models.User.email) == normalized_email).first()
    if db_user:
        write_log(
            db,
            user_id=None,
            action="REGISTER",
            resource="auth",
            status="FAIL",
            ip=client_ip(request),
            meta={"email": normalized_email, "reason": "Email exists"},
        )
        raise HTTPException(status_code=400, detail="Email already registered")

    new_user = models.User(
        email=normalized_email,
        password_hash=get_password_hash(user.password),
        role=user.userType,
        name=user.name.strip(),
        phone=user.phone,
        region=user.region,
        profile_photo=user.profilePhoto or None,
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    write_log(
        db,
        user_id=new_user.id,
        action="REGISTER",
        resource="auth",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"email": new_user.email, "role": new_user.role},
    )

    return _auth_response(new_user)


# Authenticate user and issue JWT token
@router.post("/login/", response_model=schemas.AuthResponse)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    db_user = db.query(models.User).filter(func.lower(models.User.email) == email).first()

    # Validate credentials and log failure on error
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": email})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"email": db_user.email})

    return _auth_response(db_user)


# Retrieve current authenticated user details
@router.get("/me/", response_model=schemas.UserResponse)
def me(current_user: models.User = Depends(get_current_user)):
    return current_user
