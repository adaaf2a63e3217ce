from __future__ import annotations

from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from noteserver.core.errors import CredentialMismatchError, UsernameTakenError, ValidationError
from noteserver.core.security import get_password_hash, verify_password
from .models import User
from .repository import UsersRepository


USERNAME_TAKEN = "This username is already taken."


def require_credentials(username: Any, password: Any) -> tuple[str, str]:
    if not isinstance(username, str) or not isinstance(password, str):
        raise ValidationError("Please enter a username and a password.")
    if not username or not password:
        raise ValidationError("Please enter a username and a password.")
    return username, password


class UsersService:
    def __init__(self, db: Session, hash_rounds: int | None = None):
        self.db = db
        self.repo = UsersRepository(db)
        self.hash_rounds = hash_rounds

    def register_user(self, username: str, password: str) -> User:
        username, password = require_credentials(username, password)
        if self.repo.get_by_username(username):
            raise UsernameTakenError(USERNAME_TAKEN)
        user = User(username=username, password_hash=get_password_hash(password, self.hash_rounds))
        try:
            return self.repo.create(user)
        except IntegrityError as exc:
            # A concurrent signup claimed the name between the lookup and the insert
            self.db.rollback()
            raise UsernameTakenError(USERNAME_TAKEN) from exc

    def authenticate(self, username: str, password: str) -> User:
        try:
            username, password = require_credentials(username, password)
        except ValidationError as exc:
            raise CredentialMismatchError("Incorrect username or password.") from exc
        user = self.repo.get_by_username(username)
        if not user or not verify_password(password, user.password_hash):
            raise CredentialMismatchError("Incorrect username or password.")
        return user
