# Overview: Service-layer operations for shop accounts; registration and profile edits.

"""
Shop account service.

Registering creates the UserCredential row through the mutation executor
and logs the new user in, as the counter app does on first launch.
The synced payload never includes the PIN hash.
"""

import re

from ..models import UserCredential
from ..validation import ConflictError, ValidationError
from . import store_service, mutation_service, session_service


PROFILE_FIELDS = {"store_name", "address", "phone"}


def normalize_pin(pin) -> str:
    """JSON clients may send the PIN as a number; login and registration both accept it."""
    if pin is None or isinstance(pin, bool):
        return ""
    return str(pin).strip()


def validate_pin(pin: str) -> None:
    """PINs are 4-12 digits."""
    if not isinstance(pin, str) or not re.fullmatch(r"\d{4,12}", pin):
        raise ValidationError("PIN must be 4 to 12 digits")


def _clean(value) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def register_user(
    store_name: str,
    username: str,
    pin: str,
    address: str | None = None,
    phone: str | None = None,
) -> UserCredential:
    """
    Create the shop account and start a session for it.

    Raises ValidationError if a required field is blank or the PIN is
    malformed, ConflictError if the username is taken.
    """
    store_name = _clean(store_name)
    username = _clean(username)
    pin = normalize_pin(pin)
    if not store_name or not username or not pin:
        raise ValidationError("Store name, username and PIN are required")
    validate_pin(pin)

    record = {
        "username": username,
        "pin_hash": session_service.hash_pin(pin),
        "store_name": store_name,
        "address": _clean(address),
        "phone": _clean(phone),
    }

    def _write():
        if store_service.find("users", username) is not None:
            raise ConflictError(f"Username {username!r} already exists")
        return store_service.put("users", record)

    user = mutation_service.execute("users", "create", None, _write)
    session_service.login(username, pin)
    return user


def update_profile(patch: dict) -> UserCredential:
    """Edit the logged-in user's store profile, optionally changing the PIN."""
    user = session_service.current_user()
    if user is None:
        raise ValidationError("Not logged in")

    unknown = set(patch) - PROFILE_FIELDS - {"pin"}
    if unknown:
        raise ValidationError(f"Field not allowed: {', '.join(sorted(unknown))}")

    changes = {"username": user.username}
    for key in PROFILE_FIELDS & set(patch):
        changes[key] = _clean(patch[key])
    if "store_name" in changes and not changes["store_name"]:
        raise ValidationError("store_name cannot be blank")
    if "pin" in patch:
        pin = normalize_pin(patch["pin"])
        validate_pin(pin)
        changes["pin_hash"] = session_service.hash_pin(pin)

    return mutation_service.execute(
        "users", "update", None, lambda: store_service.put("users", changes)
    )
