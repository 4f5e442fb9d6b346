from enum import IntEnum, StrEnum

class Side(IntEnum):
    EMPTY = 0
    HUMAN = 1
    COMPUTER = 2

    def opponent(self) -> "Side":
        if self == Side.HUMAN:
            return Side.COMPUTER
        if self == Side.COMPUTER:
            return Side.HUMAN
        return Side.EMPTY

class GameStatus(StrEnum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    DRAW = "DRAW"
