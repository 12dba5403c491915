import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import AuthUser
from ..security import (
	InvalidSession,
	check_operator_credentials,
	close_session,
	create_operator,
	open_session,
	resolve_session,
)

router = APIRouter(prefix="/auth", tags=["auth"])

logger = logging.getLogger(__name__)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


class Token(BaseModel):
	access_token: str
	token_type: str = "bearer"


class User(BaseModel):
	username: str


class RegisterRequest(BaseModel):
	username: str
	password: str
	email: str


@router.post("/token", response_model=Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
	if not check_operator_credentials(db, form_data.username, form_data.password):
		logger.warning("Failed login for %s", form_data.username)
		raise HTTPException(status_code=401, detail="Incorrect username or password")
	try:
		token = open_session(db, form_data.username)
	except SQLAlchemyError:
		db.rollback()
		logger.exception("Could not persist session for %s", form_data.username)
		raise HTTPException(status_code=500, detail="could not create session")
	return Token(access_token=token)


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
	try:
		return User(username=resolve_session(db, token))
	except InvalidSession as e:
		logger.info("Rejected token: %s", e)
	except SQLAlchemyError:
		# Fail closed when the session table is unavailable
		db.rollback()
		logger.exception("Session lookup failed")
	raise HTTPException(status_code=401, detail="Could not validate credentials")


@router.get("/me", response_model=User)
async def me(user: User = Depends(get_current_user)):
	return user


@router.post("/logout")
async def logout(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)):
	try:
		closed = close_session(db, token)
	except InvalidSession:
		raise HTTPException(status_code=401, detail="Could not validate credentials")
	return {"ok": closed}


@router.post("/register", status_code=201)
async def register(req: RegisterRequest, db: Session = Depends(get_db)):
	username = req.username.strip()
	email = req.email.strip()
	if not username or not req.password:
		raise HTTPException(status_code=400, detail="username and password are required")
	if not email:
		raise HTTPException(status_code=400, detail="email is required")
	if not 3 <= len(username) <= 128:
		raise HTTPException(status_code=400, detail="username must be 3-128 characters")
	if db.get(AuthUser, username) is not None:
		raise HTTPException(status_code=409, detail="username already exists")
	create_operator(db, username, req.password, email)
	logger.info("Registered operator %s", username)
	return {"ok": True}
