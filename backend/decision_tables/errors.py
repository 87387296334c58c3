"""
Error taxonomy shared by the codec, the editing layer and the remote client.
Every error carries the HTTP status the blueprints answer with.
"""
from typing import List, Optional


class DecisionTableError(Exception):
    status_code = 500
    title = 'Internal Server Error'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'error': self.title, 'message': self.message}


class FormatError(DecisionTableError):
    """A required structural marker is missing from the sheet."""
    status_code = 400
    title = 'Excel Format Error'


class CodecError(DecisionTableError):
    """The bytes are not a readable .xlsx container."""
    status_code = 400
    title = 'Excel Processing Error'


class ValidationError(DecisionTableError):
    status_code = 400
    title = 'Validation Error'

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or [message]

    def to_dict(self):
        return {'error': self.title, 'message': self.message, 'details': self.errors}


class RemoteError(DecisionTableError):
    status_code = 502
    title = 'Remote Repository Error'


class NotFoundError(RemoteError):
    status_code = 404
    title = 'Not Found'


class ConflictError(RemoteError):
    status_code = 409
    title = 'Conflict'
