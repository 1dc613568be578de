from fastapi import APIRouter, Depends, Response
from sqlalchemy.engine import Connection

from database import get_db
from logger import get_logger
from schemas import LoginRequest, Token
from security import clear_session_cookie, set_session_cookie, token_for_user
from services.users import login_user

router = APIRouter(tags=["auth"])
logger = get_logger(__name__)


@router.post("/login", response_model=Token)
def login(credentials: LoginRequest, response: Response, conn: Connection = Depends(get_db)):
    user = login_user(conn, credentials.email, credentials.password)
    access_token = token_for_user(user)
    set_session_cookie(response, access_token)
    logger.info(f"User {user['id']} logged in")
    return Token(accessToken=access_token)


@router.post("/logout")
def logout(response: Response):
    clear_session_cookie(response)
    return {"message": "Logout successful"}
