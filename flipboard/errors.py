"""Domain errors raised by the room state machine.

Every error is reported back to the connection that caused it as an
``error`` event; none of them is fatal to the server.
"""


class FlipBoardError(Exception):
    """Base class for all room/session errors."""

    code = 'FLIPBOARD_ERROR'
    default_message = 'Something went wrong.'

    def __init__(self, message=None, **details):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self):
        return {'message': self.message, 'code': self.code}


class RoomNotFound(FlipBoardError):
    code = 'ROOM_NOT_FOUND'

    def __init__(self, room_code=None):
        self.room_code = room_code
        message = f"Room {room_code} does not exist." if room_code else 'A room code is required.'
        super().__init__(message, room_code=room_code)


class RoomFull(FlipBoardError):
    code = 'ROOM_FULL'
    default_message = 'The room is full.'


class NotEnoughPlayers(FlipBoardError):
    code = 'NOT_ENOUGH_PLAYERS'

    def __init__(self, capacity):
        super().__init__(f"All {capacity} players must join first.", capacity=capacity)


class AlreadyStarted(FlipBoardError):
    code = 'ALREADY_STARTED'
    default_message = 'The game has already started.'


class RematchRequired(FlipBoardError):
    code = 'REMATCH_REQUIRED'
    default_message = 'The round is over; request a rematch to play again.'


class InvalidCapacity(FlipBoardError):
    code = 'INVALID_CAPACITY'

    def __init__(self, capacity):
        super().__init__(
            f"Capacity must be a whole number of players (2 or more) that divides 36, got {capacity!r}.",
            capacity=capacity,
        )


class AlreadyInRoom(FlipBoardError):
    code = 'ALREADY_IN_ROOM'
    default_message = 'This connection is already in a room.'
