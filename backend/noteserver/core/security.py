from __future__ import annotations

from functools import lru_cache

from passlib.context import CryptContext

from .config import settings


@lru_cache(maxsize=None)
def password_context(rounds: int) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


pwd_context = password_context(settings.PASSWORD_HASH_ROUNDS)


def get_password_hash(password: str, rounds: int | None = None) -> str:
    context = password_context(rounds) if rounds else pwd_context
    return context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    # bcrypt hashes carry their own cost, so any configured context can verify them
    return pwd_context.verify(plain_password, hashed_password)
