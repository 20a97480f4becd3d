class SessionError(Exception):
    """A session request that cannot be honoured; ``message`` is user facing."""

    message = 'Game error'

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class SessionNotFound(SessionError):
    message = 'Game not found'


class SessionFull(SessionError):
    message = 'Game is full'


class SelfJoin(SessionError):
    message = 'You cannot join your own game'


class WrongPhase(SessionError):
    message = 'This game is not waiting for players'


class AlreadySeated(SessionError):
    message = 'You are already in a game'
