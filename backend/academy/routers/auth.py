from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import uuid

from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import OAuth2PasswordRequestForm, OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ConfigDict, Field

from ..settings import settings
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from ..db import get_db
from ..logger import get_logger
from ..models import AuthUser, AuthSession, utcnow

router = APIRouter(prefix="/auth", tags=["auth"])

log = get_logger("auth")
logging.getLogger('passlib').setLevel(logging.ERROR)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")

# bcrypt ignores everything past 72 bytes
_BCRYPT_MAX_BYTES = 72


class Token(BaseModel):
	access_token: str
	token_type: str = "bearer"


class User(BaseModel):
	username: str


class RegisterRequest(BaseModel):
	model_config = ConfigDict(str_strip_whitespace=True)

	username: str = Field(min_length=3, max_length=128)
	password: str = Field(min_length=8)
	email: str = Field(min_length=3, max_length=256)
	phone: str = Field(min_length=1, max_length=32)


def hash_password(password: str) -> str:
	clipped = password.encode('utf-8')[:_BCRYPT_MAX_BYTES].decode('utf-8', errors='ignore')
	return pwd_context.hash(clipped)


def verify_password(plain_password: str, hashed_password: str) -> bool:
	return pwd_context.verify(plain_password, hashed_password)


def seed_staff_user(db: Session) -> bool:
	"""Create the configured bootstrap account if it does not exist yet."""
	username = settings.seed_username
	password = settings.seed_password_plain
	if not username or not password:
		return False
	if db.get(AuthUser, username) is not None:
		return False
	db.add(AuthUser(username=username, password_hash=hash_password(password)))
	db.commit()
	log.info("Seeded staff account %s", username)
	return True


def authenticate_user(db: Session, username: str, password: str) -> Optional[User]:
	row = db.get(AuthUser, username)
	if row is None or not verify_password(password, row.password_hash):
		return None
	return User(username=row.username)


def _resolve_expiry(expires_delta: Optional[timedelta]) -> datetime:
	if expires_delta is None:
		minutes = settings.access_token_expire_minutes
		expires_delta = timedelta(minutes=minutes) if minutes > 0 else timedelta(days=1)
	return datetime.now(timezone.utc) + expires_delta


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
	claims = {**data, "exp": _resolve_expiry(expires_delta)}
	return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _decode_claims(token: str) -> dict:
	credentials_exception = HTTPException(status_code=401, detail="Could not validate credentials")
	try:
		payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
	except JWTError:
		raise credentials_exception
	if not payload.get("sub") or not payload.get("jti"):
		raise credentials_exception
	return payload


@router.post("/token", response_model=Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
	user = authenticate_user(db, form_data.username, form_data.password)
	if not user:
		log.warning("Failed login for %r", form_data.username)
		raise HTTPException(status_code=401, detail="Incorrect username or password")
	# One server-side session per login; its id is the token's jti
	session_id = uuid.uuid4().hex
	try:
		db.add(AuthSession(session_id=session_id, username=user.username))
		db.commit()
	except SQLAlchemyError:
		db.rollback()
		log.exception("Failed to store session for %s", user.username)
		raise HTTPException(status_code=500, detail="could not start a session")
	return Token(access_token=create_access_token({"sub": user.username, "jti": session_id}))


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
	payload = _decode_claims(token)
	username, jti = payload["sub"], payload["jti"]
	# Deleting the session row revokes the token
	try:
		row = db.get(AuthSession, jti)
		if row is None or row.username != username:
			raise HTTPException(status_code=401, detail="Session has ended")
		row.last_activity_at = utcnow()
		db.commit()
	except SQLAlchemyError:
		db.rollback()
		log.exception("Session lookup failed for %s", username)
		raise HTTPException(status_code=401, detail="Could not validate credentials")
	return User(username=username)


@router.get("/me", response_model=User)
async def me(user: User = Depends(get_current_user)):
	return user


@router.post("/logout", status_code=204)
def logout(token: str = Depends(oauth2_scheme), user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	jti = _decode_claims(token)["jti"]
	db.query(AuthSession).filter(AuthSession.session_id == jti).delete()
	db.commit()


@router.post("/register", status_code=201)
async def register(req: RegisterRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	# Only signed-in staff can add accounts
	if db.get(AuthUser, req.username) is not None:
		raise HTTPException(status_code=409, detail="username already exists")
	db.add(AuthUser(username=req.username, password_hash=hash_password(req.password), email=req.email, phone=req.phone))
	try:
		db.commit()
	except SQLAlchemyError:
		db.rollback()
		log.exception("Failed to create staff account %s", req.username)
		raise HTTPException(status_code=500, detail="could not save the record, please try again")
	log.info("Staff account %s created by %s", req.username, user.username)
	return {"ok": True, "username": req.username}
