import logging
from typing import Optional

from src.services.errors import AlreadyRegistered, NotFound
from src.services.ids import new_id, utc_now_iso
from src.services.schemas import SignInIn, SignUpIn, parse
from src.services.storage import get_backend


logger = logging.getLogger("session_service")

# Slot holding the single signed-in user
CURRENT_USER_SLOT = "user"


def _find_user(email: str) -> Optional[dict]:
    rows = get_backend().select("users", eq={"email": email})
    return rows[0] if rows else None


def _activate(user: dict) -> dict:
    get_backend().set_slot(CURRENT_USER_SLOT, user)
    return user


def sign_up(email: str, password: str | None, clinic_name: str) -> dict:
    """Register a clinic user and sign it in. The password is never stored."""
    fields = parse(SignUpIn, {"email": email, "password": password, "clinic_name": clinic_name})

    if _find_user(fields["email"]):
        logger.info(f"[sign_up] Rejected duplicate email={fields['email']}")
        raise AlreadyRegistered()

    user = get_backend().insert(
        "users",
        {
            "id": new_id("local"),
            "email": fields["email"],
            "clinic_name": fields["clinic_name"],
            "created_at": utc_now_iso(),
        },
    )
    logger.info(f"[sign_up] Registered user={user['id']} clinic={user['clinic_name']!r}")
    return _activate(user)


def sign_in(email: str, password: str | None = None) -> dict:
    """Look the email up and make it the active user; any password is accepted."""
    fields = parse(SignInIn, {"email": email, "password": password})

    user = _find_user(fields["email"])
    if user is None:
        raise NotFound("User not found. Please register first.")

    logger.info(f"[sign_in] user={user['id']}")
    return _activate(user)


def sign_out() -> None:
    user = current_user()
    get_backend().set_slot(CURRENT_USER_SLOT, None)
    if user:
        logger.info(f"[sign_out] user={user['id']}")


def current_user() -> Optional[dict]:
    return get_backend().get_slot(CURRENT_USER_SLOT)
