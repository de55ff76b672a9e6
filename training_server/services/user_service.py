#!/usr/bin/env python3
"""
Local user accounts.

Students, trainers and admins log in with a local username/password. Student
provisioning credentials live on the Student row, not here.
"""

import logging
from typing import Optional, Tuple

from training_server.models import ROLES, User, db

logger = logging.getLogger(__name__)


def get_user_by_username(username: str) -> Optional[User]:
    """Get user by username."""
    return User.query.filter_by(username=username).first()


def create_local_user(username: str, password: str, role: str = 'student') -> Tuple[Optional[User], str]:
    """Create a new local user.

    Returns: (user, message/error)
    """
    if not username:
        return None, "Username is required"

    if not password:
        return None, "Password is required"

    if role not in ROLES:
        return None, f"Invalid role. Must be one of: {', '.join(ROLES)}"

    existing = User.query.filter_by(username=username).first()
    if existing:
        return None, "Username already exists"

    user = User(username=username, role=role)
    user.set_password(password)

    try:
        db.session.add(user)
        db.session.commit()
        logger.info("Created local user: %s with role %s", username, role)
        return user, f"User {username} created successfully"
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to create user %s: %s", username, e)
        return None, f"Failed to create user: {str(e)}"


def authenticate_local_user(username: str, password: str) -> Optional[User]:
    """Authenticate a local user by username and password."""
    user = User.query.filter_by(username=username).first()
    if user and user.check_password(password):
        return user
    return None
