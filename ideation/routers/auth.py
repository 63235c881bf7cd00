"""
Authentication router — email/password sign-up and sign-in + JWT cookie.

Endpoints:
    POST /auth/register          → create an account (allow-listed emails only)
    POST /auth/login             → check credentials, set JWT cookie
    GET  /auth/verify-email      → confirm an email address from the emailed link
    POST /auth/verify-email/resend → send the verification email again
    POST /auth/forgot-password   → email a password-reset link
    POST /auth/reset-password    → set a new password from the emailed token
    POST /auth/logout            → clear JWT cookie
"""

import hashlib
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, Response, status
from jose import JWTError, jwt
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ideation.config import settings
from ideation.database import get_db, get_session_factory
from ideation.models.invite import InvitedPlayer
from ideation.models.player import Player, PlayerDetails
from ideation.schemas.auth import EmailIn, LoginIn, MessageOut, RegisterIn, ResetPasswordIn
from ideation.schemas.records import PlayerRecord, to_record
from ideation.services.audit import record_audit
from ideation.services.notifications import send_password_reset_email, send_verification_email
from ideation.services.store import is_admin
from ideation.session import AuthIsReady, AuthState, auth_reducer
from ideation.utils.timeutil import utcnow

router = APIRouter(prefix="/auth", tags=["auth"])

COOKIE_KEY = "access_token"

VERIFY_PURPOSE = "verify-email"
RESET_PURPOSE = "reset-password"


# ═══════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def password_problem(password: str, confirm_password: str) -> Optional[str]:
    """Return the first policy violation, or None when the password is acceptable."""
    if password != confirm_password:
        return "Passwords do not match!"
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        return f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long."
    if not re.search(r"[A-Za-z]", password) or not re.search(r"\d", password):
        return "Password must contain at least one letter and one number."
    return None


def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    """Create a signed JWT with an expiry claim."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def password_fingerprint(password_hash: Optional[str]) -> str:
    """Short digest of the stored hash; it changes whenever the password does."""
    return hashlib.sha256((password_hash or "").encode("utf-8")).hexdigest()[:16]


def create_email_token(email: str, purpose: str, fingerprint: Optional[str] = None) -> str:
    claims = {"sub": email, "purpose": purpose}
    if fingerprint:
        claims["pwd"] = fingerprint
    return create_access_token(
        claims,
        expires_minutes=settings.EMAIL_TOKEN_EXPIRE_MINUTES,
    )


def decode_email_claims(token: str, purpose: str) -> Optional[dict]:
    """Return the token's claims, or None if invalid/expired or issued for another purpose."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if payload.get("purpose") != purpose:
        return None
    return payload


def decode_email_token(token: str, purpose: str) -> Optional[str]:
    """Return the email the token was issued for, or None if invalid/expired."""
    claims = decode_email_claims(token, purpose)
    return claims.get("sub") if claims else None


def _set_auth_cookie(response: Response, user_id: str) -> Response:
    """Attach the JWT cookie to a response."""
    token = create_access_token({"sub": user_id})
    response.set_cookie(
        key=COOKIE_KEY,
        value=token,
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="lax",
    )
    return response


def _link(path: str, token: str) -> str:
    return f"{settings.PLATFORM_URL.rstrip('/')}{path}?token={token}"


async def _player_by_email(db: AsyncSession, email: str) -> Optional[Player]:
    result = await db.execute(select(Player).where(func.lower(Player.email) == email.lower()))
    return result.scalar_one_or_none()


async def get_current_player(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[Player]:
    """
    Extract the JWT from the cookie, decode it, and return the Player.
    Returns None when no valid token is present (allows public pages).
    """
    token = request.cookies.get(COOKIE_KEY)
    if not token:
        return None
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        return None
    user_id = payload.get("sub")
    if not user_id or payload.get("purpose"):
        return None

    return await db.get(Player, user_id)


async def require_player(
    current_player: Optional[Player] = Depends(get_current_player),
) -> Player:
    if not current_player:
        raise HTTPException(status_code=401, detail="Login required")
    return current_player


async def get_auth_state(
    current_player: Optional[Player] = Depends(get_current_player),
    db: AsyncSession = Depends(get_db),
) -> AuthState:
    """The request's session state, handed explicitly to the handlers that need it."""
    if current_player is None:
        return auth_reducer(AuthState(), AuthIsReady())
    return auth_reducer(
        AuthState(),
        AuthIsReady(
            player=to_record(PlayerRecord, current_player),
            is_admin=await is_admin(db, current_player.user_id),
        ),
    )


async def require_admin(state: AuthState = Depends(get_auth_state)) -> AuthState:
    if not state.is_authenticated:
        raise HTTPException(status_code=401, detail="Login required")
    if not state.is_admin:
        raise HTTPException(status_code=403, detail="You are not authorized to view this page.")
    return state


# ═══════════════════════════════════════════════════════════════
#  Registration
# ═══════════════════════════════════════════════════════════════

@router.post("/register", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterIn,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Create an unverified account and send the verification email."""
    email = payload.email.lower()
    codename = payload.codename.strip()

    problem = password_problem(payload.password, payload.confirm_password)
    if not problem and not codename:
        problem = "Please choose a codename."
    if problem:
        await record_audit(session_factory, "registration_invalid", email, problem)
        raise HTTPException(status_code=400, detail=problem)

    invited = await db.execute(
        select(InvitedPlayer).where(func.lower(InvitedPlayer.email) == email)
    )
    if invited.scalar_one_or_none() is None:
        await record_audit(session_factory, "registration_not_invited", email, "Email not on the invite list")
        raise HTTPException(status_code=403, detail="This email address has not been invited to the platform.")

    if await _player_by_email(db, email):
        await record_audit(session_factory, "registration_duplicate", email, "Account already exists")
        raise HTTPException(status_code=400, detail="An account with this email already exists.")

    player = Player(
        email=email,
        display_name=codename,
        password_hash=hash_password(payload.password),
        email_verified=False,
        profile_pic=settings.DEFAULT_PROFILE_PIC_URL,
    )
    db.add(player)
    await db.flush()
    db.add(PlayerDetails(user_id=player.user_id, is_admin=False))
    await db.commit()

    link = _link("/auth/verify-email", create_email_token(email, VERIFY_PURPOSE))
    background_tasks.add_task(send_verification_email, email, codename, link)

    return {
        "message": "Registration successful! A verification email has been sent to your "
                   "email address. Please verify to log in."
    }


@router.get("/verify-email", response_model=MessageOut)
async def verify_email(token: str, db: AsyncSession = Depends(get_db)):
    email = decode_email_token(token, VERIFY_PURPOSE)
    if not email:
        raise HTTPException(status_code=400, detail="Invalid or expired verification link.")
    player = await _player_by_email(db, email)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")
    player.email_verified = True
    await db.commit()
    return {"message": "Email verified. You can now log in."}


@router.post("/verify-email/resend", response_model=MessageOut)
async def resend_verification(
    payload: EmailIn,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    player = await _player_by_email(db, payload.email)
    if player and not player.email_verified:
        link = _link("/auth/verify-email", create_email_token(player.email, VERIFY_PURPOSE))
        background_tasks.add_task(send_verification_email, player.email, player.display_name, link)
    return {"message": "If the account exists and is unverified, a new email is on its way."}


# ═══════════════════════════════════════════════════════════════
#  Sign-in
# ═══════════════════════════════════════════════════════════════

@router.post("/login", response_model=PlayerRecord)
async def login(
    payload: LoginIn,
    response: Response,
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Check credentials, record the login and set the session cookie."""
    player = await _player_by_email(db, payload.email)
    if not player or not verify_password(payload.password, player.password_hash):
        await record_audit(session_factory, "login_failed", payload.email.lower(), "Wrong email or password")
        raise HTTPException(status_code=401, detail="Invalid email or password.")

    if not player.email_verified:
        await record_audit(session_factory, "login_unverified", player.email, "Email not verified")
        raise HTTPException(status_code=403, detail="Please verify your email before logging in.")

    player.login_count = (player.login_count or 0) + 1
    player.last_login = utcnow()
    await db.commit()

    _set_auth_cookie(response, player.user_id)
    return to_record(PlayerRecord, player)


@router.post("/logout", response_model=MessageOut)
async def logout(response: Response):
    """Clear the auth cookie."""
    response.delete_cookie(key=COOKIE_KEY)
    return {"message": "Logged out successfully"}


# ═══════════════════════════════════════════════════════════════
#  Password reset
# ═══════════════════════════════════════════════════════════════

@router.post("/forgot-password", response_model=MessageOut)
async def forgot_password(
    payload: EmailIn,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    """Email a reset link. The answer does not reveal whether the account exists."""
    player = await _player_by_email(db, payload.email)
    if player:
        link = _link(
            "/auth/reset-password",
            create_email_token(player.email, RESET_PURPOSE, password_fingerprint(player.password_hash)),
        )
        background_tasks.add_task(send_password_reset_email, player.email, link)
    return {"message": "If an account exists for this email, a reset link has been sent."}


@router.post("/reset-password", response_model=MessageOut)
async def reset_password(
    payload: ResetPasswordIn,
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    claims = decode_email_claims(payload.token, RESET_PURPOSE)
    email = claims.get("sub") if claims else None
    if not email:
        raise HTTPException(status_code=400, detail="Invalid or expired reset link.")

    problem = password_problem(payload.password, payload.confirm_password)
    if problem:
        await record_audit(session_factory, "password_reset_invalid", email, problem)
        raise HTTPException(status_code=400, detail=problem)

    player = await _player_by_email(db, email)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")
    # The fingerprint no longer matches once the password has changed
    if claims.get("pwd") != password_fingerprint(player.password_hash):
        await record_audit(session_factory, "password_reset_stale_token", email)
        raise HTTPException(status_code=400, detail="Invalid or expired reset link.")
    player.password_hash = hash_password(payload.password)
    await db.commit()
    return {"message": "Your password has been reset."}
