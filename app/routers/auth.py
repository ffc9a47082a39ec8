import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, status

from app.core.deps import get_current_user_id, get_user_store
from app.core.errors import Conflict, NotFound, Unauthenticated, ValidationError
from app.core.security import get_password_hash, issue_token, verify_password
from app.core.validation import validate_signin, validate_signup
from app.db.dynamo import UserStore
from app.models.user import TokenResponse, UserCreate, UserInDB, UserLogin, UserPublic

router = APIRouter()
logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(user: Optional[UserCreate] = Body(None), users: UserStore = Depends(get_user_store)):
    user = user or UserCreate()
    if not user.name or not user.email or not user.password:
        raise ValidationError("Name, email and password are required")

    result = validate_signup(user.model_dump())
    if not result.ok:
        raise ValidationError(result.message)

    if users.get_by_email(user.email):
        raise Conflict("Email already registered")

    user_db = UserInDB(
        name=user.name,
        email=user.email,
        password_hash=get_password_hash(user.password),
    )
    users.create(user_db)
    logger.info(f"User created: {user_db.user_id}")
    return {"message": "User created successfully"}


@router.post("/signin", response_model=TokenResponse)
def signin(login_data: Optional[UserLogin] = Body(None), users: UserStore = Depends(get_user_store)):
    login_data = login_data or UserLogin()
    if not login_data.email or not login_data.password:
        raise ValidationError("Email and password are required")

    result = validate_signin(login_data.model_dump())
    if not result.ok:
        raise ValidationError(result.message)

    user = users.get_by_email(login_data.email)
    if not user or not verify_password(login_data.password, user["password_hash"]):
        logger.warning("Failed signin attempt")
        raise Unauthenticated(INVALID_CREDENTIALS)

    logger.info(f"Signin successful for user: {user['user_id']}")
    return TokenResponse(token=issue_token(user["user_id"]))


@router.get("/me", response_model=UserPublic)
def get_current_user(user_id: str = Depends(get_current_user_id), users: UserStore = Depends(get_user_store)):
    """Get current user profile"""
    user = users.get_by_id(user_id)
    if not user:
        raise NotFound("User not found")
    return UserPublic(**user)
