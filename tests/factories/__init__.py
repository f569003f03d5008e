from __future__ import annotations

"""Re-export factory functions for generating fake test data."""

# flake8: noqa: F401 – re-export

from .oauth import (
    create_fake_facebook_me,
    create_fake_instagram_me,
    create_fake_people_me,
    create_fake_token_response,
)
from .user import create_fake_link, create_fake_profile, create_fake_user, fake_birthday
