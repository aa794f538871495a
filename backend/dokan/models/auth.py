from __future__ import annotations

from ..extensions import db
from dokan.time_utils import to_utc_z


class UserCredential(db.Model):
    """
    Shop owner account and store profile.

    Whether someone is logged in is process-local session state
    (see services/session_service.py), never a column here.
    """
    __tablename__ = "users"

    username = db.Column(db.String(64), primary_key=True)

    # Bcrypt hashed PIN
    pin_hash = db.Column(db.String(255), nullable=False)

    # Store profile (printed on receipts)
    store_name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    WRITABLE_FIELDS = {"username", "pin_hash", "store_name", "address", "phone"}

    @classmethod
    def from_dict(cls, data: dict) -> "UserCredential":
        user = cls(username=data["username"])
        user.apply(data)
        return user

    def apply(self, data: dict) -> None:
        for key, value in data.items():
            if key in self.WRITABLE_FIELDS and key != "username":
                setattr(self, key, value)

    def to_dict(self) -> dict:
        # pin_hash never leaves the store
        return {
            "username": self.username,
            "store_name": self.store_name,
            "address": self.address,
            "phone": self.phone,
            "created_at": to_utc_z(self.created_at),
        }
