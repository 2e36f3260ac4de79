class AppError(Exception):
    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


class EditorError(Exception):
    """Base class for failures of a single edit cycle.

    None of these are fatal: the session stays usable and the user may
    resubmit straight away.
    """


class ValidationError(EditorError):
    pass


class MalformedEncodingError(EditorError):
    pass


class ServiceError(EditorError):
    pass


class SessionBusyError(EditorError):
    pass


class NoResultError(EditorError):
    pass


class StaleResponseError(EditorError):
    pass
