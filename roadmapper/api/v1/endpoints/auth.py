import logging

from fastapi import APIRouter, Depends

from roadmapper.api.deps import get_user_repository
from roadmapper.schemas.user import (
    FederatedProfile,
    FederatedSignInResponse,
    PublicUser,
    RegisterRequest,
    SignInRequest,
)
from roadmapper.services.auth_service import (
    authorize_credentials,
    handle_federated_sign_in,
    register_user,
)
from roadmapper.services.user_service import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=PublicUser, status_code=201)
async def register(request: RegisterRequest, users: UserRepository = Depends(get_user_repository)):
    return await register_user(
        users,
        email=request.email,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
    )


@router.post("/login", response_model=PublicUser)
async def login(request: SignInRequest, users: UserRepository = Depends(get_user_repository)):
    return await authorize_credentials(users, request.email, request.password, request.role)


@router.post("/federated", response_model=FederatedSignInResponse)
async def federated_sign_in(profile: FederatedProfile, users: UserRepository = Depends(get_user_repository)):
    """Called by the front end after an external provider confirmed the identity."""
    allowed = await handle_federated_sign_in(users, profile)
    return FederatedSignInResponse(allowed=allowed)
