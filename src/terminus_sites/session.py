"""Loading of the persisted login session.

The session file is JSON written by the login command::

    {"session": "<token>", "user_uuid": "<id>", "expires_at": 1735689600}

The current user's id is read from here and handed explicitly to whatever
needs it (owner filter resolution, site list retrieval).
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from terminus_sites.errors import AuthenticationError
from terminus_sites.schemas.session import Session

if TYPE_CHECKING:
    from pathlib import Path

logger = structlog.get_logger(__name__)

LOGIN_REQUIRED_MESSAGE = "Please login first with `terminus auth login`"


def load_session(path: Path) -> Session:
    """Load and validate the session stored at ``path``.

    Args:
        path: Session file location.

    Returns:
        The current, unexpired Session.

    Raises:
        AuthenticationError: If the file is missing, malformed or expired.
    """
    if not path.is_file():
        logger.debug("session_missing", path=str(path))
        raise AuthenticationError(LOGIN_REQUIRED_MESSAGE)

    try:
        data = json.loads(path.read_text())
        session = Session.model_validate(data)
    except (OSError, ValueError, ValidationError) as e:
        logger.warning("session_unreadable", path=str(path), error_type=type(e).__name__)
        raise AuthenticationError(LOGIN_REQUIRED_MESSAGE) from e

    if session.is_expired():
        logger.info("session_expired", user_uuid=session.user_uuid)
        raise AuthenticationError(f"Your session has expired. {LOGIN_REQUIRED_MESSAGE}")

    return session


__all__: list[str] = ["LOGIN_REQUIRED_MESSAGE", "load_session"]
