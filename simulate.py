"""
Simple matchmaking simulation script.

Start the API first (python main.py), then run this script.
"""

import requests
import random
import time
import sys


def main():
    BASE_URL = "http://localhost:8000/api/v1/matchmaking"
    NUM_PLAYERS = 12
    GAME_MODE = "classic"
    SESSION_TYPE = "ranked"
    MAX_POLLS = 20

    print("=== Matchmaking Simulation ===\n")

    # Join the queue
    print(f"Joining {NUM_PLAYERS} players to {GAME_MODE}-{SESSION_TYPE}...")
    players = []
    for i in range(NUM_PLAYERS):
        player_id = f"player_{i}_{int(time.time())}"
        response = requests.post(
            f"{BASE_URL}/join",
            json={
                "player_id": player_id,
                "player_snapshot": {"display_name": f"Player {i + 1}"},
                "game_mode": GAME_MODE,
                "session_type": SESSION_TYPE,
                "preferences": {
                    "max_wait_time_ms": 120000,
                    "skill_tolerance": random.choice(["strict", "balanced", "loose"]),
                },
                "skill_rating": {
                    "rating": random.randint(900, 1600),
                    "games_played": random.randint(0, 50),
                },
            }
        )
        if response.status_code == 200:
            players.append(player_id)
            data = response.json()
            print(f"  {player_id} queued, estimated wait {data['estimated_wait_time_ms'] / 1000:.0f}s")
        else:
            print(f"  Failed to join {player_id}: {response.text}")

    if len(players) < 2:
        print("X Need at least 2 players")
        sys.exit(1)

    # Poll for matches
    print("\nPolling for matches...")
    waiting = list(players)
    matches = []
    for poll in range(MAX_POLLS):
        if len(waiting) < 2:
            break
        for player_id in list(waiting):
            if player_id not in waiting:
                continue
            response = requests.post(
                f"{BASE_URL}/find-match",
                json={"player_id": player_id, "game_mode": GAME_MODE, "session_type": SESSION_TYPE}
            )
            if response.status_code != 200:
                print(f"find-match failed: {response.text}")
                continue

            result = response.json()
            if result["matched"]:
                first, second = result["players"]
                ratings = [p["skill_rating"]["rating"] for p in result["players"]]
                print(
                    f"  Poll {poll + 1}: {first['player_id']} ({ratings[0]:.0f}) vs "
                    f"{second['player_id']} ({ratings[1]:.0f})"
                )
                matches.append((first["player_id"], second["player_id"]))
                waiting.remove(first["player_id"])
                waiting.remove(second["player_id"])
        time.sleep(1)

    # Players still waiting give up
    for player_id in waiting:
        requests.post(
            f"{BASE_URL}/leave",
            json={"player_id": player_id, "game_mode": GAME_MODE, "session_type": SESSION_TYPE}
        )

    print("\n=== Results ===\n")
    print(f"Matches made: {len(matches)}")
    print(f"Players left unmatched: {len(waiting)}")

    response = requests.get(f"{BASE_URL}/stats")
    if response.status_code == 200:
        stats = response.json()
        print(f"Successful matches (server): {stats['successful_matches']}")
        print(f"Still searching: {stats['total_searching']}")

    print("\n Simulation complete!")


if __name__ == "__main__":
    main()
