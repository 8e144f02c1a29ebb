"""
Authorization capability for the payment terminal.
The ledger only needs a resolved actor; how staff prove who they are (OTP, PIN, SSO)
lives behind this interface.
"""

from abc import ABC, abstractmethod

from jose import JWTError, jwt

from feeledger.auth.schemas import CurrentUser
from feeledger.core.exceptions import AuthorizationError
from feeledger.ledger.schemas import ActorIdentity


class InvalidCredentials(Exception):
    pass


class Authorizer(ABC):
    @abstractmethod
    def authenticate(self, credentials: str) -> CurrentUser:
        """Resolve credentials or raise InvalidCredentials."""

    def authorize(self, credentials: str) -> ActorIdentity:
        """Resolve credentials to a finance-authorized actor or raise AuthorizationError."""
        user = self.authenticate(credentials)
        if not user.finance_authorized:
            raise AuthorizationError()
        return ActorIdentity(staff_id=user.staff_id, staff_name=user.name)


class JWTAuthorizer(Authorizer):
    def __init__(self, secret_key: str, algorithm: str = "HS256") -> None:
        self.secret_key = secret_key
        self.algorithm = algorithm

    def authenticate(self, credentials: str) -> CurrentUser:
        try:
            payload = jwt.decode(credentials, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            raise InvalidCredentials()

        staff_id = payload.get("sub")
        name = payload.get("name")
        role = payload.get("role")
        if not staff_id or not name or not role:
            raise InvalidCredentials()

        permissions = payload.get("permissions") or {}
        if not isinstance(permissions, dict):
            permissions = {}
        return CurrentUser(
            staff_id=str(staff_id),
            name=str(name),
            role=str(role),
            permissions=permissions,
            finance_authorized=bool(payload.get("finance_authorized", False)),
        )
