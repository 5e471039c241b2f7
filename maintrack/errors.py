class MaintrackError(Exception):
    """Base class for errors surfaced to the client with a fixed HTTP status."""
    status_code = 500
    default_message = 'Internal error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailure(MaintrackError):
    status_code = 400
    default_message = 'Invalid request'


class InvalidCredentials(MaintrackError):
    status_code = 401
    default_message = 'Incorrect password'


class Forbidden(MaintrackError):
    status_code = 403
    default_message = 'Access denied'


class NotFound(MaintrackError):
    status_code = 404
    default_message = 'Not found'


class DuplicateKey(MaintrackError):
    status_code = 409
    default_message = 'Record already exists'


class DuplicateEmail(DuplicateKey):
    default_message = 'Email already registered'
