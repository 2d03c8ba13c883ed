"""Session endpoints."""

from fastapi import APIRouter, Depends

from portfolio_client.api.deps import get_auth_service
from portfolio_client.api.schemas import Credentials, SessionResponse
from portfolio_client.remote import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/sign-in", response_model=SessionResponse)
def sign_in(data: Credentials, auth: AuthService = Depends(get_auth_service)):
    """Sign in with email and password."""
    return auth.sign_in(data.email, data.password)


@router.post("/sign-up", response_model=SessionResponse)
def sign_up(data: Credentials, auth: AuthService = Depends(get_auth_service)):
    """Register; the session is only active once the backend issues one."""
    return auth.sign_up(data.email, data.password)


@router.get("/session", response_model=SessionResponse)
def restore_session(auth: AuthService = Depends(get_auth_service)):
    """Restore the stored session, clearing it if the token is no longer valid."""
    return auth.restore_session()


@router.post("/sign-out", status_code=204)
def sign_out(auth: AuthService = Depends(get_auth_service)) -> None:
    auth.sign_out()
