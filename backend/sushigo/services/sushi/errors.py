"""Errors raised by the match engine.

Everything deriving from MatchError is a rejected client intent and is
reported back to the caller as an `error` event. InsufficientCardsError
signals broken bookkeeping inside the engine and is never reported as a
user-facing error.
"""


class MatchError(Exception):
    kind = 'error'
    default_message = 'Request could not be completed'

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'message': self.message, 'kind': self.kind}


class NotFound(MatchError):
    kind = 'not_found'
    default_message = 'Match not found'


class Forbidden(MatchError):
    kind = 'forbidden'
    default_message = 'Only the host may do that'


class InvalidState(MatchError):
    kind = 'invalid_state'
    default_message = 'Not allowed at this point in the match'


class InvalidInput(MatchError):
    kind = 'invalid_input'
    default_message = 'Invalid request'


class Conflict(MatchError):
    kind = 'conflict'
    default_message = 'That seat is already taken'


class InsufficientCardsError(RuntimeError):
    pass
