from typing import Dict

from pydantic import BaseModel, Field


class CurrentUser(BaseModel):
    """Lightweight representation of the authenticated staff member for RBAC checks.
    finance_authorized is granted by the authorization collaborator (OTP/staff desk).
    """

    staff_id: str
    name: str
    role: str
    permissions: Dict[str, Dict[str, bool]] = Field(default_factory=dict)
    finance_authorized: bool = False
