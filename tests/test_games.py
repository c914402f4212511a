from httpx import AsyncClient


# ---- helpers ----------------------------------------------------------------

async def create_game(client: AsyncClient, name: str = "Test Game", **overrides) -> dict:
    body = {"name": name, "player_name": "Tester", "bot_count": 3, "seed": 1234}
    body.update(overrides)
    resp = await client.post("/games", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def list_empires(client: AsyncClient, game_id: int) -> list[dict]:
    resp = await client.get(f"/games/{game_id}/empires")
    assert resp.status_code == 200, resp.text
    return resp.json()


# ---- health -----------------------------------------------------------------

class TestHealth:
    async def test_health(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


# ---- game creation ----------------------------------------------------------

class TestCreateGame:
    async def test_create_game_success(self, db_client: AsyncClient):
        game = await create_game(db_client)
        assert game["name"] == "Test Game"
        assert game["status"] == "active"
        assert game["current_turn"] == 1
        assert game["seed"] == 1234
        assert game["empire_count"] == 4  # player + 3 bots

    async def test_create_game_defaults(self, db_client: AsyncClient):
        resp = await db_client.post("/games", json={"name": "Defaults", "bot_count": 2})
        assert resp.status_code == 201
        game = resp.json()
        assert game["turn_limit"] == 200
        assert game["protection_turns"] == 20

    async def test_create_game_invalid_bot_count_too_low(self, db_client: AsyncClient):
        resp = await db_client.post("/games", json={"name": "Bad Game", "bot_count": 0})
        assert resp.status_code == 422

    async def test_create_game_invalid_bot_count_too_high(self, db_client: AsyncClient):
        resp = await db_client.post("/games", json={"name": "Bad Game", "bot_count": 101})
        assert resp.status_code == 422

    async def test_create_game_invalid_turn_limit(self, db_client: AsyncClient):
        resp = await db_client.post("/games", json={"name": "Bad Game", "turn_limit": 0})
        assert resp.status_code == 422


# ---- game details -----------------------------------------------------------

class TestGetGame:
    async def test_get_game(self, db_client: AsyncClient):
        game = await create_game(db_client)
        resp = await db_client.get(f"/games/{game['id']}")
        assert resp.status_code == 200
        assert resp.json()["id"] == game["id"]

    async def test_get_game_not_found(self, db_client: AsyncClient):
        resp = await db_client.get("/games/9999")
        assert resp.status_code == 404

    async def test_list_empires(self, db_client: AsyncClient):
        game = await create_game(db_client)
        empires = await list_empires(db_client, game["id"])
        assert len(empires) == 4
        assert empires[0]["name"] == "Tester"
        assert empires[0]["type"] == "player"
        assert all(e["type"] == "bot" for e in empires[1:])
        for empire in empires:
            assert empire["sector_count"] == 5
            assert empire["credits"] == 100000
            assert empire["civil_status"] == "content"

    async def test_list_empires_not_found(self, db_client: AsyncClient):
        resp = await db_client.get("/games/9999/empires")
        assert resp.status_code == 404


# ---- turns ------------------------------------------------------------------

class TestAdvanceTurn:
    async def test_advance(self, db_client: AsyncClient):
        game = await create_game(db_client)
        resp = await db_client.post(f"/games/{game['id']}/turns/advance")
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["turn"] == 1
        assert data["next_turn"] == 2
        assert len(data["empires"]) == 4
        assert data["game_over"] is False

        game_resp = await db_client.get(f"/games/{game['id']}")
        assert game_resp.json()["current_turn"] == 2

    async def test_advance_unknown_game(self, db_client: AsyncClient):
        resp = await db_client.post("/games/9999/turns/advance")
        assert resp.status_code == 404
        assert resp.json()["detail"]["code"] == "GameNotFoundError"

    async def test_advance_finished_game(self, db_client: AsyncClient):
        game = await create_game(db_client, turn_limit=1)
        first = await db_client.post(f"/games/{game['id']}/turns/advance")
        assert first.json()["game_over"] is True
        assert first.json()["victory"]["victory_type"] == "survival"

        resp = await db_client.post(f"/games/{game['id']}/turns/advance")
        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "GameNotActiveError"


# ---- builds -----------------------------------------------------------------

class TestBuilds:
    async def test_queue_build(self, db_client: AsyncClient):
        game = await create_game(db_client)
        player = (await list_empires(db_client, game["id"]))[0]
        resp = await db_client.post(
            f"/games/{game['id']}/builds",
            json={"empire_id": player["id"], "unit_type": "fighters", "quantity": 10},
        )
        assert resp.status_code == 201, resp.text
        item = resp.json()
        assert item["total_cost"] == 2000
        assert item["turns_remaining"] == 1

        player = (await list_empires(db_client, game["id"]))[0]
        assert player["credits"] == 98000

    async def test_build_delivered_next_turn(self, db_client: AsyncClient):
        game = await create_game(db_client)
        player = (await list_empires(db_client, game["id"]))[0]
        await db_client.post(
            f"/games/{game['id']}/builds",
            json={"empire_id": player["id"], "unit_type": "fighters", "quantity": 10},
        )
        await db_client.post(f"/games/{game['id']}/turns/advance")
        player = (await list_empires(db_client, game["id"]))[0]
        assert player["fighters"] == 10

    async def test_unknown_unit_type(self, db_client: AsyncClient):
        game = await create_game(db_client)
        resp = await db_client.post(
            f"/games/{game['id']}/builds",
            json={"empire_id": 1, "unit_type": "dreadnoughts", "quantity": 1},
        )
        assert resp.status_code == 422

    async def test_insufficient_credits(self, db_client: AsyncClient):
        game = await create_game(db_client)
        player = (await list_empires(db_client, game["id"]))[0]
        resp = await db_client.post(
            f"/games/{game['id']}/builds",
            json={"empire_id": player["id"], "unit_type": "stations", "quantity": 100},
        )
        assert resp.status_code == 400
        assert "Insufficient credits" in resp.json()["detail"]

    async def test_queue_full(self, db_client: AsyncClient):
        game = await create_game(db_client)
        player = (await list_empires(db_client, game["id"]))[0]
        for _ in range(10):
            resp = await db_client.post(
                f"/games/{game['id']}/builds",
                json={"empire_id": player["id"], "unit_type": "soldiers", "quantity": 1},
            )
            assert resp.status_code == 201
        resp = await db_client.post(
            f"/games/{game['id']}/builds",
            json={"empire_id": player["id"], "unit_type": "soldiers", "quantity": 1},
        )
        assert resp.status_code == 400
        assert "full" in resp.json()["detail"]

    async def test_unknown_empire(self, db_client: AsyncClient):
        game = await create_game(db_client)
        resp = await db_client.post(
            f"/games/{game['id']}/builds",
            json={"empire_id": 9999, "unit_type": "soldiers", "quantity": 1},
        )
        assert resp.status_code == 404


# ---- attacks ----------------------------------------------------------------

class TestAttacks:
    async def test_attack_during_protection(self, db_client: AsyncClient):
        game = await create_game(db_client)
        empires = await list_empires(db_client, game["id"])
        resp = await db_client.post(
            f"/games/{game['id']}/attacks",
            json={"attacker_id": empires[0]["id"], "defender_id": empires[1]["id"], "forces": {"soldiers": 10}},
        )
        assert resp.status_code == 400
        assert "protection" in resp.json()["detail"]

    async def test_queue_attack(self, db_client: AsyncClient):
        game = await create_game(db_client, protection_turns=0)
        empires = await list_empires(db_client, game["id"])
        resp = await db_client.post(
            f"/games/{game['id']}/attacks",
            json={"attacker_id": empires[0]["id"], "defender_id": empires[1]["id"], "forces": {"soldiers": 10}},
        )
        assert resp.status_code == 201, resp.text
        order = resp.json()
        assert order["status"] == "pending"
        assert order["turn"] == 1

        advance = await db_client.post(f"/games/{game['id']}/turns/advance")
        assert advance.status_code == 200

    async def test_attack_self(self, db_client: AsyncClient):
        game = await create_game(db_client, protection_turns=0)
        empire = (await list_empires(db_client, game["id"]))[0]
        resp = await db_client.post(
            f"/games/{game['id']}/attacks",
            json={"attacker_id": empire["id"], "defender_id": empire["id"], "forces": {"soldiers": 10}},
        )
        assert resp.status_code == 400

    async def test_stations_cannot_attack(self, db_client: AsyncClient):
        game = await create_game(db_client, protection_turns=0)
        empires = await list_empires(db_client, game["id"])
        resp = await db_client.post(
            f"/games/{game['id']}/attacks",
            json={"attacker_id": empires[0]["id"], "defender_id": empires[1]["id"], "forces": {"stations": 1}},
        )
        assert resp.status_code == 400

    async def test_more_units_than_owned(self, db_client: AsyncClient):
        game = await create_game(db_client, protection_turns=0)
        empires = await list_empires(db_client, game["id"])
        resp = await db_client.post(
            f"/games/{game['id']}/attacks",
            json={"attacker_id": empires[0]["id"], "defender_id": empires[1]["id"], "forces": {"soldiers": 101}},
        )
        assert resp.status_code == 400
        assert "Insufficient soldiers" in resp.json()["detail"]


# ---- galaxy -----------------------------------------------------------------

class TestGalaxy:
    async def test_galaxy_map(self, db_client: AsyncClient):
        game = await create_game(db_client)
        resp = await db_client.get(f"/games/{game['id']}/galaxy")
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["regions"]) >= 4
        assert sum(1 for r in data["regions"] if r["region_type"] == "core") == 1
        assert data["connections"]

    async def test_galaxy_not_found(self, db_client: AsyncClient):
        resp = await db_client.get("/games/9999/galaxy")
        assert resp.status_code == 404

    async def test_influence(self, db_client: AsyncClient):
        game = await create_game(db_client)
        empires = await list_empires(db_client, game["id"])
        resp = await db_client.get(f"/games/{game['id']}/empires/{empires[0]['id']}/influence")
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["empire_id"] == empires[0]["id"]
        assert data["radius"] == 3

        others = {e["id"] for e in empires[1:]}
        seen = [n["empire_id"] for n in data["direct"] + data["extended"]] + data["unreachable"]
        assert sorted(seen) == sorted(others)

    async def test_influence_unknown_empire(self, db_client: AsyncClient):
        game = await create_game(db_client)
        resp = await db_client.get(f"/games/{game['id']}/empires/9999/influence")
        assert resp.status_code == 404

    async def test_construct_unknown_region(self, db_client: AsyncClient):
        game = await create_game(db_client)
        player = (await list_empires(db_client, game["id"]))[0]
        resp = await db_client.post(
            f"/games/{game['id']}/wormholes/construct",
            json={"empire_id": player["id"], "to_region_id": 9999},
        )
        assert resp.status_code == 400

    async def test_stabilize_unknown_wormhole(self, db_client: AsyncClient):
        game = await create_game(db_client)
        player = (await list_empires(db_client, game["id"]))[0]
        resp = await db_client.post(
            f"/games/{game['id']}/wormholes/9999/stabilize",
            json={"empire_id": player["id"]},
        )
        assert resp.status_code == 400


# ---- snapshots --------------------------------------------------------------

class TestSnapshots:
    async def test_no_snapshot_before_first_turn(self, db_client: AsyncClient):
        game = await create_game(db_client)
        resp = await db_client.get(f"/games/{game['id']}/snapshot")
        assert resp.status_code == 404

    async def test_snapshot_after_turn(self, db_client: AsyncClient):
        game = await create_game(db_client)
        await db_client.post(f"/games/{game['id']}/turns/advance")
        resp = await db_client.get(f"/games/{game['id']}/snapshot")
        assert resp.status_code == 200
        data = resp.json()
        assert data["turn"] == 2
        assert data["version"] == 1
        assert data["empire_count"] == 4

    async def test_restore(self, db_client: AsyncClient):
        game = await create_game(db_client)
        await db_client.post(f"/games/{game['id']}/turns/advance")
        player = (await list_empires(db_client, game["id"]))[0]
        await db_client.post(
            f"/games/{game['id']}/builds",
            json={"empire_id": player["id"], "unit_type": "fighters", "quantity": 10},
        )

        resp = await db_client.post(f"/games/{game['id']}/snapshot/restore")
        assert resp.status_code == 200, resp.text
        assert resp.json()["restored_turn"] == 2

        restored = (await list_empires(db_client, game["id"]))[0]
        assert restored["credits"] == player["credits"]

    async def test_restore_without_snapshot(self, db_client: AsyncClient):
        game = await create_game(db_client)
        resp = await db_client.post(f"/games/{game['id']}/snapshot/restore")
        assert resp.status_code == 404
