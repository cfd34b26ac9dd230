# enhance_relay/errors.py
# Errors raised by the relay; the API turns them into {"error": ...} bodies


class RelayError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class MissingInput(RelayError):
    status_code = 400


class JobNotFound(RelayError):
    status_code = 404


# Only ever recorded on the job by the background task, never rendered over HTTP
class ProviderError(RelayError):
    pass
