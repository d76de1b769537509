from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

pwd_context = CryptContext(schemes=['bcrypt'], deprecated='auto', bcrypt__rounds=10)

DEFAULT_REDIRECT = '/'
REDIRECTABLE_PATHS = ('/', '/vehicles', '/drivers', '/account')


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify_password() -> None:
    """Burn the same time as a real check when there is no hash to compare against."""
    pwd_context.dummy_verify()


def create_access_token(data: dict, secret_key: str, algorithm: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({'exp': expire})
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def decode_access_token(token: str, secret_key: str, algorithm: str) -> dict:
    try:
        return jwt.decode(token, secret_key, algorithms=[algorithm])
    except JWTError:
        return {}


def parse_redirect_url(url: Optional[str]) -> str:
    """
    Only internal paths under a known section are followed after login;
    anything else, including protocol-relative '//host' urls, goes to '/'.
    """
    if not url or not isinstance(url, str):
        return DEFAULT_REDIRECT
    if not url.startswith('/') or url.startswith('//') or '\\' in url:
        return DEFAULT_REDIRECT

    path = url.split('?', 1)[0].split('#', 1)[0]
    for allowed in REDIRECTABLE_PATHS:
        if path == allowed or (allowed != '/' and path.startswith(allowed + '/')):
            return url
    return DEFAULT_REDIRECT
