from datetime import timedelta
from typing import Mapping, Optional

from fastapi import Response

from roadblock.config import Settings
from roadblock.utils import create_access_token, decode_access_token


class SessionManager:
    """
    Stateless sessions: the user id travels in a signed JWT inside an
    HttpOnly cookie. Nothing is stored server side, so a session ends when
    the token expires or the cookie is cleared.
    """

    def __init__(self, settings: Settings):
        self.secret_key = settings.SECRET_KEY
        self.algorithm = settings.ALGORITHM
        self.cookie_name = settings.COOKIE_NAME
        self.cookie_secure = settings.COOKIE_SECURE
        self.session_lifetime = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        self.remember_lifetime = timedelta(days=settings.REMEMBER_ME_DAYS)

    def create_session(self, response: Response, user_id: int, remember: bool = False) -> Response:
        lifetime = self.remember_lifetime if remember else self.session_lifetime
        token = create_access_token(
            data={'sub': str(user_id)},
            secret_key=self.secret_key,
            algorithm=self.algorithm,
            expires_delta=lifetime,
        )

        # without max_age the browser drops the cookie when it closes
        max_age = int(lifetime.total_seconds()) if remember else None
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            httponly=True,
            max_age=max_age,
            path='/',
            secure=self.cookie_secure,
            samesite='strict',
        )
        return response

    def read_session(self, cookies: Mapping[str, str]) -> Optional[int]:
        token = cookies.get(self.cookie_name)
        if not token:
            return None

        payload = decode_access_token(token, self.secret_key, self.algorithm)
        try:
            user_id = int(payload.get('sub'))
        except (TypeError, ValueError):
            return None
        return user_id if user_id > 0 else None

    def destroy_session(self, response: Response) -> Response:
        response.delete_cookie(
            key=self.cookie_name,
            path='/',
            secure=self.cookie_secure,
            httponly=True,
            samesite='strict',
        )
        return response
