"""Identity store operations: registration, login, profile management."""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from planpact.auth.passwords import MAX_PASSWORD_BYTES, hash_password, password_too_long, verify_password
from planpact.auth.tokens import create_access_token, decode_access_token
from planpact.errors import AuthError, ConflictError, ValidationError
from planpact.models.guest import RSVPStatus
from planpact.models.pact import PactStatus
from planpact.storage.base import PactStore

logger = logging.getLogger(__name__)

_INVALID_CREDENTIALS = "Invalid email or password"


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def register_user(store: PactStore, name: str, email: str, password: str) -> tuple[Any, str]:
    """Create an identity and return it with a fresh access token."""
    name = (name or "").strip()
    email = normalize_email(email)
    if not name or not email or not password:
        raise ValidationError("Name, email and password are required")
    if password_too_long(password):
        raise ValidationError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")

    with store.transaction():
        if store.get_user_by_email(email) is not None:
            raise ConflictError("User with this email already exists", status_code=400)
        user = store.add_user(name=name, email=email, password_hash=hash_password(password))

    logger.info("Registered user %s", user.user_id)
    return user, create_access_token(user.user_id)


def authenticate(store: PactStore, email: str, password: str) -> tuple[Any, str]:
    """Check credentials; any mismatch yields the same ``AuthError``."""
    user = store.get_user_by_email(normalize_email(email))
    if user is None or not user.is_active:
        raise AuthError(_INVALID_CREDENTIALS)
    if not verify_password(password or "", user.password_hash):
        raise AuthError(_INVALID_CREDENTIALS)

    with store.transaction():
        user.last_login = datetime.now(timezone.utc)
    logger.info("User %s logged in", user.user_id)
    return user, create_access_token(user.user_id)


def resolve_identity(store: PactStore, token: str) -> Any:
    """Map a bearer token to an active identity."""
    user_id = decode_access_token(token)
    user = store.get_user(user_id)
    if user is None or not user.is_active:
        raise AuthError("Invalid or expired token")
    return user


def update_profile(store: PactStore, user: Any, updates: dict[str, Any]) -> Any:
    """Edit name and/or email of the calling identity."""
    name = updates.get("name")
    email = updates.get("email")
    if name is None and email is None:
        raise ValidationError("No valid fields to update")
    if name is not None and not name.strip():
        raise ValidationError("Name cannot be empty")

    with store.transaction():
        if email is not None:
            email = normalize_email(email)
            if not email:
                raise ValidationError("Email cannot be empty")
            other = store.get_user_by_email(email)
            if other is not None and other.user_id != user.user_id:
                raise ConflictError("User with this email already exists", status_code=400)
            if email != user.email:
                user.email = email
                user.email_verified = False
        if name is not None:
            user.name = name.strip()
        user.updated_at = datetime.now(timezone.utc)

    logger.info("Updated profile of user %s", user.user_id)
    return user


def change_password(store: PactStore, user: Any, current_password: str, new_password: str) -> None:
    if not verify_password(current_password or "", user.password_hash):
        raise AuthError("Current password is incorrect")
    if not new_password:
        raise ValidationError("New password is required")
    if password_too_long(new_password):
        raise ValidationError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
    with store.transaction():
        user.password_hash = hash_password(new_password)
        user.updated_at = datetime.now(timezone.utc)
    logger.info("Changed password of user %s", user.user_id)


def deactivate_user(store: PactStore, user: Any) -> None:
    """Soft-delete: the record stays, its tokens stop resolving."""
    with store.transaction():
        user.is_active = False
        user.updated_at = datetime.now(timezone.utc)
    logger.info("Deactivated user %s", user.user_id)


def user_stats(store: PactStore, user: Any) -> dict[str, int]:
    """Hosted active pacts, active invitations and confirmed RSVPs of a user."""
    hosted = invitations = confirmed = 0
    for pact in store.list_pacts_for_identity(user.user_id, user.email):
        if pact.status != PactStatus.active:
            continue
        if pact.host_id == user.user_id:
            hosted += 1
            continue
        guest = store.find_guest(pact.pact_id, user.email)
        if guest is None:
            guest = store.find_guest_by_user(pact.pact_id, user.user_id)
        if guest is None:
            continue
        invitations += 1
        rsvp = store.get_rsvp_for_guest(guest.guest_id)
        if rsvp is not None and rsvp.status == RSVPStatus.confirmed:
            confirmed += 1
    return {
        "hosted_pacts": hosted,
        "total_invitations": invitations,
        "confirmed_rsvps": confirmed,
    }
