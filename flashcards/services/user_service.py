"""
User service for business logic related to user accounts.
"""
import logging
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from flashcards.core.exceptions import AuthenticationError, ConflictError
from flashcards.models import User

logger = logging.getLogger(__name__)


def register_user(session: Session, email: str, password: str) -> User:
    """
    Create an account.

    Raises:
        ConflictError: If the email is already registered
    """
    email = email.lower()
    existing = session.exec(select(User).where(User.email == email)).first()
    if existing:
        raise ConflictError("Email already registered")

    user = User(email=email, password=User.hash_password(password))
    session.add(user)
    try:
        session.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent registration
        session.rollback()
        raise ConflictError("Email already registered") from e
    session.refresh(user)

    logger.info(f"Registered user {user.id}")
    return user


def authenticate_user(session: Session, email: str, password: str) -> User:
    """
    Raises:
        AuthenticationError: Unknown email or wrong password (same message for both)
    """
    user = session.exec(select(User).where(User.email == email.lower())).first()
    if not user or not user.verify_password(password):
        raise AuthenticationError("Incorrect credentials")
    return user
