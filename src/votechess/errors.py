"""Typed failures raised by the turn engine and the transport gate."""


class VoteChessError(Exception):
    """Base class for recoverable game errors."""

    code = "error"


class GameOverError(VoteChessError):
    """The game has ended; only reset is accepted."""

    code = "game_over"

    def __init__(self, message: str = "game is over"):
        super().__init__(message)


class NotJoinedError(VoteChessError):
    code = "not_joined"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"user {user_id!r} has not joined a team")


class InvalidMoveError(VoteChessError):
    code = "invalid_move"

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"invalid move: {text!r}")


class WrongTurnError(VoteChessError):
    """Raised by the transport when a user acts outside their team's turn.

    The engine itself stores off-turn votes as dormant proposals.
    """

    code = "wrong_turn"

    def __init__(self, user_id: str, team: str):
        self.user_id = user_id
        self.team = team
        super().__init__(f"it is not the {team} team's turn")
