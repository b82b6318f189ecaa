import logging

from fastapi import APIRouter, Depends, Request, status

from .dependencies import get_current_user
from .models import User as UserModel
from .schema import CredentialsSchema, TokenSchema, UserSchema
from .security import create_access_token, hash_password, verify_password
from ..exceptions import UnauthorizedException
from ..storage import Storage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=TokenSchema, status_code=status.HTTP_201_CREATED, summary="Register")
async def register(
    credentials: CredentialsSchema,
    request: Request,
    storage: Storage = Depends(get_storage),
):
    """
    Creates an account and returns a bearer token for it.
    A taken username is reported as 409.
    """
    user = await storage.create_user(
        username=credentials.username,
        password_hash=hash_password(credentials.password)
    )
    token = create_access_token(user.id, request.app.state.settings)
    return TokenSchema(access_token=token, user=UserSchema.model_validate(user))


@router.post("/login", response_model=TokenSchema, summary="Log In")
async def login(
    credentials: CredentialsSchema,
    request: Request,
    storage: Storage = Depends(get_storage),
):
    user = await storage.get_user_by_username(credentials.username)
    if user is None or not verify_password(credentials.password, user.password):
        logger.info(f"Failed login for '{credentials.username}'")
        raise UnauthorizedException()

    token = create_access_token(user.id, request.app.state.settings)
    return TokenSchema(access_token=token, user=UserSchema.model_validate(user))


@router.get("/user", response_model=UserSchema, summary="Get Current User")
async def read_current_user(current_user: UserModel = Depends(get_current_user)):
    return current_user
