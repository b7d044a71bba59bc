import logging
import os
from fastapi import APIRouter, Request, Depends, HTTPException, status
from fastapi.responses import RedirectResponse
from sqlmodel import Session
from expense_manager.db import get_session
from expense_manager import schemas
from expense_manager.routes.workspace import handle_errors
from expense_manager.services import credential_service
from expense_manager.services.errors import InvalidResetTokenError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

# With no mail transport the reset token can only reach the user through this
# response. Anyone who knows a username can then reset that password, so
# deployments with another delivery channel should set this to false.
RETURN_RESET_TOKEN = os.environ.get("RETURN_RESET_TOKEN", "true").lower() in ("1", "true", "yes")


@router.post("/signup", response_model=schemas.UserRead, status_code=status.HTTP_201_CREATED)
def signup(credentials: schemas.Credentials, s: Session = Depends(get_session)):
    with handle_errors("Error signing up", s):
        return credential_service.create_user(s, credentials.username, credentials.password)


@router.post("/login")
def login(request: Request, credentials: schemas.Credentials, s: Session = Depends(get_session)):
    with handle_errors("Error logging in", s):
        user = credential_service.authenticate(s, credentials.username, credentials.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")
    request.session['user'] = {"id": user.id, "username": user.username}
    logger.info("user %s logged in", user.username)
    return RedirectResponse(url="/dashboard", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/logout", response_model=schemas.Message)
def logout(request: Request):
    request.session.pop('user', None)
    return {"message": "Logged out"}


@router.post("/forgotpassword", response_model=schemas.ForgotPasswordResponse)
def forgot_password(body: schemas.ForgotPasswordRequest, s: Session = Depends(get_session)):
    with handle_errors("Error issuing reset token", s):
        user = credential_service.issue_reset_token(s, body.username)
        if not RETURN_RESET_TOKEN:
            return {"message": "Password reset token issued"}
        return {
            "message": "Password reset token issued",
            "reset_token": user.reset_token,
            "reset_token_expiry": user.reset_token_expiry,
        }


@router.post("/resetpassword", response_model=schemas.Message)
def reset_password(body: schemas.ResetPasswordRequest, s: Session = Depends(get_session)):
    with handle_errors("Error resetting password", s):
        try:
            credential_service.reset_password(s, body.token, body.new_password)
        except InvalidResetTokenError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return {"message": "Password has been reset successfully"}
