"""Profile routes for the authenticated identity."""
from fastapi import APIRouter, Depends

from planpact.dependencies import get_current_user, get_store
from planpact.schemas.pact import MessageOut
from planpact.schemas.user import PasswordChange, UserOut, UserStats, UserUpdate
from planpact.services import auth_service
from planpact.storage.base import PactStore

router = APIRouter()


@router.get("/me", response_model=UserOut)
def read_me(user=Depends(get_current_user)):
    return user


@router.patch("/me", response_model=UserOut)
def update_me(
    payload: UserUpdate,
    user=Depends(get_current_user),
    store: PactStore = Depends(get_store),
):
    return auth_service.update_profile(store, user, payload.model_dump(exclude_unset=True))


@router.put("/me/password", response_model=MessageOut)
def change_password(
    payload: PasswordChange,
    user=Depends(get_current_user),
    store: PactStore = Depends(get_store),
):
    auth_service.change_password(store, user, payload.current_password, payload.new_password)
    return {"message": "Password updated successfully"}


@router.delete("/me", response_model=MessageOut)
def delete_me(user=Depends(get_current_user), store: PactStore = Depends(get_store)):
    """Deactivate the account; existing tokens stop working."""
    auth_service.deactivate_user(store, user)
    return {"message": "Account deactivated"}


@router.get("/me/stats", response_model=UserStats)
def my_stats(user=Depends(get_current_user), store: PactStore = Depends(get_store)):
    return auth_service.user_stats(store, user)
