"""Verified identity of the caller, produced once per request."""
from pydantic import BaseModel, ConfigDict


class Principal(BaseModel):
    """
    Subject id and role set taken from a verified access token.

    Frozen: the service layer reads it but never changes it.
    """

    model_config = ConfigDict(frozen=True)

    subject_id: str
    roles: frozenset[str] = frozenset()
    admin_role: str = "ROLE_ADMIN"

    @property
    def is_admin(self) -> bool:
        """Whether the principal carries the admin role."""
        return self.admin_role in self.roles
