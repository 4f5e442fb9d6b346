from backend.app.engine.board import Board, BOARD_SIZE

def empty_matrix():
    return [[0] * BOARD_SIZE for _ in range(BOARD_SIZE)]

def board_with(human=(), computer=()):
    """Board with the given (row, col) stones for each side."""
    matrix = empty_matrix()
    for r, c in human:
        matrix[r][c] = 1
    for r, c in computer:
        matrix[r][c] = 2
    return Board.from_matrix(matrix)

def drawn_matrix():
    """
    Full board with no five anywhere: pairs of equal stones along each row,
    alternating every row, so no line holds more than 2 in a row.
    """
    return [[1 if ((c // 2) + r) % 2 == 0 else 2 for c in range(BOARD_SIZE)] for r in range(BOARD_SIZE)]
