FALLBACK_ERROR_MESSAGE = 'Something went wrong, please try again.'


class RoadblockError(Exception):
    pass


class AuthenticationRequired(RoadblockError):
    """No valid session; the client must sign in and come back to `redirect_to`."""

    def __init__(self, redirect_to: str = '/'):
        super().__init__('Authentication required')
        self.redirect_to = redirect_to


class NotFound(RoadblockError):
    def __init__(self, message: str = 'Record not found'):
        super().__init__(message)
        self.message = message


class BadRequest(RoadblockError):
    """Malformed request that is not a form validation problem, e.g. a bad path id."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DuplicateUsername(RoadblockError):
    def __init__(self, username: str):
        super().__init__(f'Username already taken: {username}')
        self.username = username
