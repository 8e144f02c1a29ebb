from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from feeledger.auth.authorizer import Authorizer, InvalidCredentials, JWTAuthorizer
from feeledger.auth.schemas import CurrentUser
from feeledger.core.config import settings
from feeledger.core.exceptions import AuthorizationError
from feeledger.ledger.schemas import ActorIdentity


# Tokens are issued by the staff authorization desk (OTP/PIN), outside this service.
bearer_scheme = HTTPBearer()


def get_authorizer(request: Request) -> Authorizer:
    authorizer = getattr(request.app.state, "authorizer", None)
    if authorizer is None:
        authorizer = JWTAuthorizer(settings.jwt_secret_key, settings.jwt_algorithm)
    return authorizer


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    authorizer: Authorizer = Depends(get_authorizer),
) -> CurrentUser:
    """Resolve the authenticated staff member and their permissions from the access token."""
    try:
        return authorizer.authenticate(credentials.credentials)
    except InvalidCredentials:
        raise _credentials_exception()


async def get_finance_actor(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    authorizer: Authorizer = Depends(get_authorizer),
) -> ActorIdentity:
    """Dependency: the staff member cleared to process payments at the terminal."""
    try:
        return authorizer.authorize(credentials.credentials)
    except InvalidCredentials:
        raise _credentials_exception()
    except AuthorizationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
