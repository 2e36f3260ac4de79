import secrets
import uuid

import structlog

from src.services.edit_session import EditSession

logger = structlog.get_logger()

_sessions: dict[str, EditSession] = {}


def generate_session_id() -> str:
    return f"{uuid.uuid4().hex}-{secrets.token_urlsafe(8)}"


def create_session() -> EditSession:
    session = EditSession(generate_session_id())
    _sessions[session.session_id] = session
    logger.info("session_created", session_id=session.session_id)
    return session


def get_session(session_id: str) -> EditSession | None:
    return _sessions.get(session_id)


def delete_session(session_id: str) -> bool:
    session = _sessions.pop(session_id, None)
    if session is None:
        return False
    logger.info("session_deleted", session_id=session_id)
    return True


def clear_sessions() -> int:
    count = len(_sessions)
    _sessions.clear()
    return count
