import asyncio

from backend.app.engine.board import InvalidMove
from backend.app.models.enums import GameStatus, Side
from backend.app.services.game_service import GameService

async def play_one_game(service: GameService, session_id: int):
    session = service.get_session(session_id)
    print(session.board.get_visual_board())

    while not session.is_over:
        # --- Human Turn ---
        try:
            user_input = input("\nYour Move (row col): ")
            row, col = (int(v, 16) for v in user_input.split())
        except ValueError:
            print("Please enter two coordinates, e.g. '7 7' or '7 a'.")
            continue

        # --- AI Turn runs inside process_human_move ---
        try:
            print("\nAI is thinking...")
            await service.process_human_move(None, session_id, row, col)
        except InvalidMove as e:
            print(f"Invalid move: {e}")
            continue

        last = session.history[-1]
        if last.player == Side.COMPUTER:
            print(f"AI plays: {last.row} {last.col:x}")

        # Show Board
        print("\n" + session.board.get_visual_board())

    # --- End Game ---
    if session.status == GameStatus.COMPLETED:
        winner_name = "Human" if session.winner == Side.HUMAN else "AI"
        print(f"\nGame Over! Winner: {winner_name}")
    else:
        print("\nGame Over! It's a Draw.")

async def main():
    print("=======================================")
    print("   GOMOKU: Human vs Adaptive AI")
    print("=======================================")

    service = GameService()
    session = await service.create_session(None, "console")

    while True:
        ratings = session.ratings()
        print(f"\nYou {ratings.human_rating} vs AI {ratings.computer_rating} "
              f"| difficulty {ratings.difficulty:.2f}")
        await play_one_game(service, session.session_id)
        if input("\nPlay again? [y/N] ").strip().lower() != "y":
            break
        service.new_game(session.session_id)

if __name__ == "__main__":
    asyncio.run(main())
