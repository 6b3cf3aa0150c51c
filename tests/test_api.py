import pytest

BASE = "api/v1/matchmaking"


def join_payload(player_id, rating=None, tolerance="balanced", session_type="quick", **preferences):
    preferences.setdefault("max_wait_time_ms", 300000)
    payload = {
        "player_id": player_id,
        "player_snapshot": {"display_name": player_id.upper(), "avatar_url": f"/avatars/{player_id}.png"},
        "game_mode": "classic",
        "session_type": session_type,
        "preferences": {"skill_tolerance": tolerance, **preferences},
    }
    if rating is not None:
        payload["skill_rating"] = {"rating": rating, "games_played": 25}
    return payload


def queue_ref(player_id, session_type="quick"):
    return {"player_id": player_id, "game_mode": "classic", "session_type": session_type}


class TestMatchmakingAPI:

    def test_join(self, client):
        response = client.post(f"{BASE}/join", json=join_payload("x", rating=1200))
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["entry_id"].startswith("x-")
        assert data["queue_key"] == "classic-quick"
        assert data["estimated_wait_time_ms"] == 35000

    def test_join_rejects_non_positive_max_wait(self, client):
        response = client.post(f"{BASE}/join", json=join_payload("x", max_wait_time_ms=0))
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_join_rejects_unknown_session_type(self, client):
        response = client.post(f"{BASE}/join", json=join_payload("x", session_type="casual"))
        assert response.status_code == 422

    def test_join_rejects_blank_player(self, client):
        response = client.post(f"{BASE}/join", json=join_payload("   "))
        assert response.status_code == 422

    def test_join_requires_session_type(self, client):
        payload = join_payload("x", rating=1200)
        del payload["session_type"]

        response = client.post(f"{BASE}/join", json=payload)
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        assert client.get(f"{BASE}/stats").json()["total_searching"] == 0

    @pytest.mark.parametrize("method, path", [
        ("post", "leave"),
        ("post", "find-match"),
        ("get", "status"),
    ])
    def test_queue_lookups_require_session_type(self, client, method, path):
        client.post(f"{BASE}/join", json=join_payload("x"))
        ref = {"player_id": "x", "game_mode": "classic"}

        if method == "get":
            response = client.get(f"{BASE}/{path}", params=ref)
        else:
            response = client.post(f"{BASE}/{path}", json=ref)
        assert response.status_code == 422
        assert client.get(f"{BASE}/status", params=queue_ref("x")).status_code == 200

    def test_find_match(self, client):
        client.post(f"{BASE}/join", json=join_payload("x", rating=1200))
        client.post(f"{BASE}/join", json=join_payload("y", rating=1250))

        response = client.post(f"{BASE}/find-match", json=queue_ref("x"))
        assert response.status_code == 200
        data = response.json()
        assert data["matched"] is True
        assert [p["player_id"] for p in data["players"]] == ["x", "y"]
        assert data["players"][1]["player_snapshot"]["display_name"] == "Y"
        assert data["players"][0]["skill_rating"]["rating"] == 1200

        status = client.get(f"{BASE}/status", params=queue_ref("y"))
        assert status.status_code == 404

    def test_find_match_without_opponent(self, client):
        client.post(f"{BASE}/join", json=join_payload("x", rating=1200, tolerance="strict"))
        client.post(f"{BASE}/join", json=join_payload("y", rating=1500, tolerance="strict"))

        response = client.post(f"{BASE}/find-match", json=queue_ref("x"))
        assert response.status_code == 200
        assert response.json() == {"matched": False, "players": []}

    def test_status(self, client):
        client.post(f"{BASE}/join", json=join_payload("x", rating=1000))
        client.post(f"{BASE}/join", json=join_payload("y", session_type="ranked"))
        client.post(f"{BASE}/join", json=join_payload("z", rating=1400))

        response = client.get(f"{BASE}/status", params=queue_ref("z"))
        assert response.status_code == 200
        data = response.json()
        assert data["queue_length"] == 2
        assert data["position"] == 2
        assert data["average_skill_level"] == pytest.approx(1200)
        assert data["estimated_wait_time_ms"] == 40000
        assert data["priority"] == 100

    def test_status_not_in_queue(self, client, engine):
        response = client.get(f"{BASE}/status", params=queue_ref("ghost"))
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_IN_QUEUE"

        for mode in ("mode-1", "mode-2", "mode-3"):
            params = {"player_id": "ghost", "game_mode": mode, "session_type": "quick"}
            assert client.get(f"{BASE}/status", params=params).status_code == 404
        assert engine.store.keys() == []

    def test_leave(self, client):
        client.post(f"{BASE}/join", json=join_payload("x"))

        response = client.post(f"{BASE}/leave", json=queue_ref("x"))
        assert response.json() == {"success": True, "message": "Left matchmaking queue"}

        response = client.post(f"{BASE}/leave", json=queue_ref("x"))
        assert response.status_code == 200
        assert response.json()["success"] is False

    def test_cleanup_and_stats(self, client, clock):
        client.post(f"{BASE}/join", json=join_payload("x"))
        client.post(f"{BASE}/join", json=join_payload("y", session_type="ranked"))
        clock.advance(301000)
        client.post(f"{BASE}/join", json=join_payload("z"))

        response = client.post(f"{BASE}/cleanup")
        assert response.json() == {"evicted": 2}

        stats = client.get(f"{BASE}/stats").json()
        assert stats["total_searching"] == 1
        assert stats["evicted_entries"] == 2
        assert stats["successful_matches"] == 0
        assert stats["queue_breakdown"]["classic-quick"]["count"] == 1
