"""Registration and login."""
import logging
from fastapi import APIRouter, Depends, status

from planpact.dependencies import get_store
from planpact.schemas.user import AuthResponse, LoginRequest, RegisterRequest
from planpact.services import auth_service
from planpact.storage.base import PactStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, store: PactStore = Depends(get_store)):
    user, token = auth_service.register_user(store, payload.name, payload.email, payload.password)
    return {"token": token, "user": user}


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, store: PactStore = Depends(get_store)):
    user, token = auth_service.authenticate(store, payload.email, payload.password)
    return {"token": token, "user": user}
