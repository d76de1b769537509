import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from roadblock.errors import DuplicateUsername, NotFound
from roadblock.models import User
from roadblock.utils import dummy_verify_password, get_password_hash, verify_password

logger = logging.getLogger(__name__)


def normalize_username(username: str) -> str:
    return username.strip().lower()


class CredentialStore:
    """User accounts and their bcrypt password hashes."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == normalize_username(username)).first()

    def find_by_id(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def create(self, username: str, password: str) -> User:
        username = normalize_username(username)
        if self.find_by_username(username):
            raise DuplicateUsername(username)

        user = User(username=username, hashed_password=get_password_hash(password))
        self.db.add(user)
        self._commit_unique(username)
        self.db.refresh(user)
        logger.info('Created user %s', username)
        return user

    def verify(self, username: str, password: str) -> Optional[User]:
        user = self.find_by_username(username)
        if user is None:
            dummy_verify_password()
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    def verify_by_id(self, user_id: int, password: str) -> Optional[User]:
        user = self.find_by_id(user_id)
        if user is None:
            dummy_verify_password()
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    def update_password(self, user_id: int, new_password: str) -> User:
        # callers must have checked the current password with verify_by_id
        user = self._get(user_id)
        user.hashed_password = get_password_hash(new_password)
        self.db.commit()
        logger.info('Changed password for user %s', user.id)
        return user

    def update_username(self, user_id: int, new_username: str) -> User:
        new_username = normalize_username(new_username)
        user = self._get(user_id)
        if user.username == new_username:
            return user

        existing = self.find_by_username(new_username)
        if existing is not None:
            raise DuplicateUsername(new_username)

        user.username = new_username
        self._commit_unique(new_username)
        logger.info('Changed username for user %s', user.id)
        return user

    def delete_by_username(self, username: str) -> None:
        user = self.find_by_username(username)
        if user is None:
            raise NotFound('User record not found')
        username = user.username
        self.db.delete(user)
        self.db.commit()
        logger.info('Deleted user %s', username)

    def _get(self, user_id: int) -> User:
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFound('User record not found')
        return user

    def _commit_unique(self, username: str) -> None:
        # the unique index settles races between concurrent signups
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateUsername(username)
