"""
User Module - Principal
========================
The signed-in staff member as seen by the admin console.

Accounts live in the storefront's auth provider; the console only receives the
token claims. An absent principal (None) is an anonymous guest.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Principal:
    id: str
    email: Optional[str] = None
    role: Optional[str] = None  # role id or role name, matched case-sensitively

    @classmethod
    def from_claims(cls, claims: dict) -> Optional["Principal"]:
        """Build a principal from JWT claims. Returns None when there is no subject."""
        sub = claims.get("sub")
        if not sub:
            return None
        role = claims.get("role")
        if not role:
            role = (claims.get("user_metadata") or {}).get("role")
        return cls(id=str(sub), email=claims.get("email"), role=role or None)

    def __repr__(self):
        return f"<Principal {self.id} ({self.role or 'no role'})>"
