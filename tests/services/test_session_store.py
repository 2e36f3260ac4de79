from src.services import session_store
from src.services.edit_session import EditSession


class TestCreateSession:
    def test_registers_session(self) -> None:
        session = session_store.create_session()
        assert isinstance(session, EditSession)
        assert session_store.get_session(session.session_id) is session

    def test_ids_are_unique(self) -> None:
        ids = {session_store.create_session().session_id for _ in range(50)}
        assert len(ids) == 50


class TestGetSession:
    def test_unknown_returns_none(self) -> None:
        assert session_store.get_session("no-such-session") is None


class TestDeleteSession:
    def test_delete_existing(self) -> None:
        session = session_store.create_session()
        assert session_store.delete_session(session.session_id) is True
        assert session_store.get_session(session.session_id) is None

    def test_delete_unknown(self) -> None:
        assert session_store.delete_session("no-such-session") is False


class TestClearSessions:
    def test_clear_returns_count(self) -> None:
        session_store.create_session()
        session_store.create_session()
        assert session_store.clear_sessions() == 2
        assert session_store.clear_sessions() == 0


class TestGenerateSessionId:
    def test_format(self) -> None:
        session_id = session_store.generate_session_id()
        assert "-" in session_id
        assert len(session_id) > 20
        assert "/" not in session_id
