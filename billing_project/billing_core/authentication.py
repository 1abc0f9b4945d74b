"""
Bearer-token authentication.

Passwords are hashed by Django's auth framework; access tokens are JWTs
whose "sub" claim is the user's primary key.
"""
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Optional

from django.conf import settings
from django.contrib.auth import authenticate, get_user_model
from django.db import IntegrityError, transaction
from jose import JWTError, jwt

from .exceptions import AuthenticationFailed, NumberConflict

User = get_user_model()


def _jwt_settings():
    return settings.BILLING_JWT


def create_access_token(user, expires_delta: Optional[timedelta] = None) -> str:
    conf = _jwt_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=conf["ACCESS_TOKEN_EXPIRE_MINUTES"])
    expire = datetime.now(timezone.utc) + expires_delta
    claims = {"sub": str(user.pk), "exp": expire}
    return jwt.encode(claims, conf["SECRET_KEY"], algorithm=conf["ALGORITHM"])


def user_from_token(token: str):
    conf = _jwt_settings()
    try:
        payload = jwt.decode(token, conf["SECRET_KEY"], algorithms=[conf["ALGORITHM"]])
    except JWTError:
        raise AuthenticationFailed("Invalid or expired token")
    user_id = payload.get("sub")
    if user_id is None:
        raise AuthenticationFailed("Invalid or expired token")
    user = User.objects.filter(pk=user_id, is_active=True).first()
    if user is None:
        raise AuthenticationFailed("Invalid or expired token")
    return user


def register_user(name: str, email: str, password: str):
    """Create an account keyed by e-mail address."""
    email = email.strip().lower()
    if User.objects.filter(username=email).exists():
        raise NumberConflict("email", email)
    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=email, email=email, password=password, first_name=name)
    except IntegrityError:
        raise NumberConflict("email", email)
    return user


def login_user(email: str, password: str):
    user = authenticate(username=email.strip().lower(), password=password)
    if user is None:
        raise AuthenticationFailed("Invalid email or password")
    return user


def profile(user):
    return {
        "id": user.pk,
        "name": user.first_name,
        "email": user.email,
        "role": "admin" if user.is_staff else "user",
    }


def login_required_json(view):
    """Reject anonymous callers with AuthenticationFailed (→ 401)."""

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            raise AuthenticationFailed("Authentication credentials were not provided")
        return view(request, *args, **kwargs)

    return wrapper
