"""Authentication routes (cookie session)."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..dependencies import get_current_user
from ..rate_limit import limiter
from .models import User
from .schemas import LoginRequest, RegisterRequest, UserResponse
from .service import authenticate_user, create_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register")
@limiter.limit(settings.rate_limit_auth)
def register(request: Request, body: RegisterRequest, db: Session = Depends(get_db)):
    user = create_user(db, body.email, body.password)
    if user is None:
        return JSONResponse({"success": False, "message": "Email already registered"}, status_code=409)
    db.commit()
    request.session["user_id"] = str(user.id)
    return JSONResponse({"success": True, "data": UserResponse.from_user(user).model_dump()}, status_code=201)


@router.post("/login")
@limiter.limit(settings.rate_limit_auth)
def login(request: Request, body: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate_user(db, body.email, body.password)
    if not user:
        logger.info("Failed login for %s", body.email)
        return JSONResponse({"success": False, "message": "Invalid credentials"}, status_code=401)
    request.session["user_id"] = str(user.id)
    return JSONResponse({"success": True, "data": UserResponse.from_user(user).model_dump()})


@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return JSONResponse({"success": True, "message": "Logged out"})


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return JSONResponse({"success": True, "data": UserResponse.from_user(user).model_dump()})
