from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from roadblock.config import Settings
from roadblock.credentials import CredentialStore
from roadblock.errors import AuthenticationRequired
from roadblock.models import User
from roadblock.sessions import SessionManager


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_credential_store(db: Session = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db)


async def get_form_fields(request: Request) -> dict:
    form = await request.form()
    return {key: value for key, value in form.items()}


def get_current_user_id(
    request: Request,
    sessions: SessionManager = Depends(get_session_manager),
) -> Optional[int]:
    return sessions.read_session(request.cookies)


def get_current_user(
    request: Request,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: CredentialStore = Depends(get_credential_store),
) -> User:
    user = store.find_by_id(user_id) if user_id else None
    if user is None:
        # only a page load can be replayed after login
        redirect_to = '/'
        if request.method in ('GET', 'HEAD'):
            redirect_to = request.url.path
            if request.url.query:
                redirect_to = f'{redirect_to}?{request.url.query}'
        raise AuthenticationRequired(redirect_to=redirect_to)
    return user
