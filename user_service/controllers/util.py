"""Helpers shared by the user service controllers."""

from typing import Tuple

from flask import current_app

from freshbonds import domain
from freshbonds.auth import issue_token

ResponseData = Tuple[dict, int, dict]


def user_data(user: domain.User) -> dict:
    """Render a user for a response body."""
    return domain.to_dict(user)


def new_token(user: domain.User) -> str:
    """Issue a session token for ``user`` with the configured lifetime."""
    return issue_token(user, current_app.config['JWT_SECRET'],
                       int(current_app.config['TOKEN_DURATION']))
