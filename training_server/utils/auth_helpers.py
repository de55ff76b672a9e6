#!/usr/bin/env python3
"""
Authentication helper utilities.

Shared authentication functions used across routes.
"""

from typing import Optional

from flask import session

from training_server.models import User
from training_server.services.user_service import get_user_by_username


def get_current_user() -> Optional[User]:
    """
    Get current logged-in user from session.

    Returns:
        User object if found, None otherwise
    """
    username = session.get('user')
    if not username:
        return None
    return get_user_by_username(username)
