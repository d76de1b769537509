import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from roadblock.credentials import CredentialStore
from roadblock.dependencies import (
    get_credential_store,
    get_current_user,
    get_current_user_id,
    get_form_fields,
    get_session_manager,
)
from roadblock.errors import DuplicateUsername
from roadblock.models import User
from roadblock.schemas import ChangePasswordForm, ChangeUsernameForm, CreateAccountForm, LoginForm, UserRead
from roadblock.sessions import SessionManager
from roadblock.utils import parse_redirect_url
from roadblock.validation import ValidationFailure, bad_request, validate_form

logger = logging.getLogger(__name__)

router = APIRouter(tags=['Authentication'])

INCORRECT_CREDENTIALS = 'Incorrect credentials'
USERNAME_TAKEN = 'A user already exists with this username'


@router.get('/login')
def login_page(message: str = '', redirect_to: str = '/', user_id: Optional[int] = Depends(get_current_user_id)):
    if user_id:
        return RedirectResponse('/', status_code=status.HTTP_303_SEE_OTHER)
    return {'message': message, 'redirect_to': parse_redirect_url(redirect_to)}


@router.post('/login')
def login(
    fields: dict = Depends(get_form_fields),
    store: CredentialStore = Depends(get_credential_store),
    sessions: SessionManager = Depends(get_session_manager),
):
    form = validate_form(LoginForm, fields)
    if isinstance(form, ValidationFailure):
        return form.to_response()

    user = store.verify(form.username, form.password)
    if user is None:
        logger.info('Failed login for %s', form.username)
        return bad_request(fields, form_error=INCORRECT_CREDENTIALS)

    response = RedirectResponse(parse_redirect_url(form.redirect_to), status_code=status.HTTP_303_SEE_OTHER)
    return sessions.create_session(response, user.id, remember=form.remember)


@router.get('/join')
def join_page(user_id: Optional[int] = Depends(get_current_user_id)):
    if user_id:
        return RedirectResponse('/', status_code=status.HTTP_303_SEE_OTHER)
    return {}


@router.post('/join')
def create_account(
    fields: dict = Depends(get_form_fields),
    store: CredentialStore = Depends(get_credential_store),
    sessions: SessionManager = Depends(get_session_manager),
):
    form = validate_form(CreateAccountForm, fields)
    if isinstance(form, ValidationFailure):
        return form.to_response()

    try:
        user = store.create(form.username, form.password)
    except DuplicateUsername:
        return bad_request(fields, field_errors={'username': [USERNAME_TAKEN]})

    response = RedirectResponse(parse_redirect_url(form.redirect_to), status_code=status.HTTP_303_SEE_OTHER)
    return sessions.create_session(response, user.id)


@router.post('/logout')
def logout(sessions: SessionManager = Depends(get_session_manager)):
    response = RedirectResponse('/login', status_code=status.HTTP_303_SEE_OTHER)
    return sessions.destroy_session(response)


@router.get('/account', response_model=UserRead)
def account(user: User = Depends(get_current_user)):
    return user


@router.post('/account/username')
def change_username(
    fields: dict = Depends(get_form_fields),
    user: User = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
):
    form = validate_form(ChangeUsernameForm, fields)
    if isinstance(form, ValidationFailure):
        return form.to_response()

    try:
        store.update_username(user.id, form.username)
    except DuplicateUsername:
        return bad_request(fields, field_errors={'username': [USERNAME_TAKEN]})
    return RedirectResponse('/account', status_code=status.HTTP_303_SEE_OTHER)


@router.post('/account/password')
def change_password(
    fields: dict = Depends(get_form_fields),
    user: User = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
):
    form = validate_form(ChangePasswordForm, fields)
    if isinstance(form, ValidationFailure):
        return form.to_response()

    if store.verify_by_id(user.id, form.current_password) is None:
        return bad_request(fields, form_error='Incorrect current password')

    store.update_password(user.id, form.new_password)
    return RedirectResponse('/account', status_code=status.HTTP_303_SEE_OTHER)
