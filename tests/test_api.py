"""Tests for the player, team and account API."""
import pytest

from arena.models import Account
from web.auth import create_access_token


@pytest.mark.asyncio
async def test_health(client):
    """Health endpoint returns ok."""
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_list_players_empty(client):
    """List players returns empty list initially."""
    r = await client.get("/players")
    assert r.status_code == 200
    assert r.json() == {"code": 0, "data": []}


@pytest.mark.asyncio
async def test_add_player(client, player_body):
    """Add player returns the stored record with derived score."""
    r = await client.post("/players/add", json=player_body("alex", email="Alex@Arena.test"))
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["nickname"] == "alex"
    assert data["email"] == "alex@arena.test"
    assert data["kills"] == 0
    assert data["deaths"] == 0
    assert data["score"] == 0
    assert data["headsetId"] is None
    assert data["TeamName"] is None
    assert len(data["createdAt"]) == len("YYYY-MM-DD HH:mm:ss")


@pytest.mark.asyncio
async def test_add_player_duplicate_nickname(client, player_body):
    """Second registration of a nickname is a 409."""
    r = await client.post("/players/add", json=player_body("alex"))
    assert r.status_code == 201
    r = await client.post("/players/add", json=player_body("alex", email="second@arena.test"))
    assert r.status_code == 409
    assert r.json() == {"code": 2, "msg": "Nickname already exists"}
    r = await client.get("/players")
    assert len(r.json()["data"]) == 1


@pytest.mark.asyncio
async def test_add_player_duplicate_email(client, player_body):
    await client.post("/players/add", json=player_body("alex", email="shared@arena.test"))
    r = await client.post("/players/add", json=player_body("sam", email="SHARED@arena.test"))
    assert r.status_code == 409
    assert r.json()["msg"] == "Email already exists"


@pytest.mark.asyncio
async def test_add_player_missing_field(client, player_body):
    body = player_body("alex")
    del body["region"]
    r = await client.post("/players/add", json=body)
    assert r.status_code == 400
    assert r.json() == {"code": 1, "msg": "Missing required field: region"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides, fragment",
    [
        ({"nickname": "bad name!"}, "letters, numbers and underscores"),
        ({"nickname": "x" * 21}, "Nickname too long"),
        ({"age": 12}, "at least 13"),
        ({"age": 101}, "Age must be reasonable"),
        ({"phone": "1234"}, "8-15 digits"),
        ({"email": "not-an-email"}, "Invalid email format"),
    ],
)
async def test_add_player_invalid_fields(client, player_body, overrides, fragment):
    r = await client.post("/players/add", json={**player_body("alex"), **overrides})
    assert r.status_code == 400
    assert fragment in r.json()["msg"]


@pytest.mark.asyncio
async def test_add_player_numeric_phone(client, player_body):
    r = await client.post("/players/add", json=player_body("alex", phone=612345678))
    assert r.status_code == 201
    assert r.json()["data"]["phone"] == "612345678"


@pytest.mark.asyncio
async def test_get_player_by_nickname(client, register):
    await register("alex")
    r = await client.get("/players/nickname/alex")
    assert r.status_code == 200
    assert r.json()["data"]["nickname"] == "alex"
    r = await client.get("/players/nickname/ghost")
    assert r.status_code == 404
    assert r.json() == {"code": 1, "msg": "Player not found"}


@pytest.mark.asyncio
async def test_nicknames(client, register):
    await register("bob", "alex")
    r = await client.get("/players/nicknames")
    assert r.json() == {"code": 0, "data": ["alex", "bob"]}


@pytest.mark.asyncio
async def test_stats_flow(client, register):
    """Kills and deaths increment one at a time; score follows."""
    await register("alex")
    for _ in range(10):
        r = await client.post("/players/alex/increment-kills")
        assert r.status_code == 200
    assert r.json() == {"code": 0, "kills": 10, "msg": "kills incremented successfully"}

    r = await client.get("/players/alex/score")
    assert r.json() == {"code": 0, "score": 10}

    for _ in range(4):
        r = await client.post("/players/alex/increment-deaths")
    assert r.json()["deaths"] == 4

    r = await client.get("/players/alex/score")
    assert r.json()["score"] == 2.5
    r = await client.get("/players/alex/deaths")
    assert r.json() == {"code": 0, "deaths": 4}
    r = await client.get("/players/alex/performance")
    assert r.json()["data"]["kdRatio"] == 2.5

    r = await client.get("/players/nickname/alex")
    assert r.json()["data"]["score"] == 2.5


@pytest.mark.asyncio
async def test_stats_unknown_player(client):
    r = await client.post("/players/ghost/increment-kills")
    assert r.status_code == 404
    r = await client.get("/players/ghost/score")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_players_by_date(client, register):
    await register("alex")
    r = await client.get("/players/by-date", params={"from": "2000-01-01", "to": "2999-12-31"})
    assert r.status_code == 200
    assert [p["nickname"] for p in r.json()["data"]] == ["alex"]
    r = await client.get("/players/by-date", params={"from": "2000-01-01", "to": "2000-01-02"})
    assert r.json()["data"] == []
    r = await client.get("/players/by-date", params={"from": "2000-01-01"})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_assign_nickname(client, register):
    """Headset assignment binds the team and updates the player."""
    await register("alex")
    body = {"headsetId": "HS-1", "nickname": "alex", "TeamName": "Red"}
    r = await client.post("/teams/assign-nickname", json=body)
    assert r.status_code == 200
    assert r.json() == {"code": 0, "data": {"headsetId": "HS-1", "TeamName": "Red", "nickname": "alex"}}

    r = await client.get("/players/by-headset/HS-1")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["nickname"] == "alex"
    assert data["TeamName"] == "Red"


@pytest.mark.asyncio
async def test_assign_nickname_twice_keeps_one_binding(client, register):
    await register("alex")
    body = {"headsetId": "HS-1", "nickname": "alex", "TeamName": "Red"}
    await client.post("/teams/assign-nickname", json=body)
    first = (await client.get("/teams")).json()["data"]
    await client.post("/teams/assign-nickname", json=body)
    second = (await client.get("/teams")).json()["data"]
    assert len(first) == len(second) == 1
    assert second[0]["lastUpdated"] >= first[0]["lastUpdated"]


@pytest.mark.asyncio
async def test_assign_nickname_unknown_and_missing(client):
    r = await client.post("/teams/assign-nickname", json={"headsetId": "HS-1", "nickname": "ghost", "TeamName": "Red"})
    assert r.status_code == 404
    assert r.json() == {"code": 2, "msg": "Nickname not found"}
    r = await client.post("/teams/assign-nickname", json={"headsetId": "HS-1", "nickname": "ghost"})
    assert r.status_code == 400
    assert r.json()["msg"] == "Missing required field: TeamName"
    assert (await client.get("/teams")).json()["data"] == []


@pytest.mark.asyncio
async def test_update_by_headset(client, register):
    await register("alex")
    await client.post("/teams/assign-nickname", json={"headsetId": "HS-9", "nickname": "alex", "TeamName": "Red"})
    r = await client.post("/players/update-by-headset", json={"headsetId": "HS-9", "nickname": "alex_v2"})
    assert r.status_code == 200
    assert r.json()["data"] == {"headsetId": "HS-9", "nickname": "alex_v2"}
    r = await client.post("/players/update-by-headset", json={"headsetId": "HS-0", "nickname": "x"})
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_auth_login(client):
    """Login with initial admin bootstrap."""
    r = await client.post("/account/login", json={"rUsername": "admin", "rPassword": "testpass123"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert "access_token" in data
    assert data["Username"] == "admin"
    assert data["role"] == "admin"


@pytest.mark.asyncio
async def test_auth_login_invalid(client, auth_headers):
    """Wrong password is 401, unknown account is 404, both in the code/msg envelope."""
    r = await client.post("/account/login", json={"rUsername": "admin", "rPassword": "wrong"})
    assert r.status_code == 401
    assert r.json() == {"code": 1, "msg": "Invalid credentials"}

    r = await client.post("/account/login", json={"rUsername": "nobody", "rPassword": "Secret123"})
    assert r.status_code == 404
    assert r.json() == {"code": 2, "msg": "Account not found"}

    r = await client.post("/account/login", json={"rUsername": " ", "rPassword": ""})
    assert r.status_code == 400
    assert r.json() == {"code": 1, "msg": "Username and password are required"}


@pytest.mark.asyncio
async def test_account_create_and_login(client):
    r = await client.post("/account/create", json={"rUsername": "op", "rPassword": "Secret123"})
    assert r.status_code == 400
    assert r.json()["msg"] == "Invalid Credentials"

    r = await client.post("/account/create", json={"rUsername": "operator", "rPassword": "weak"})
    assert r.status_code == 400
    assert r.json()["msg"] == "Password Not Secure"

    r = await client.post("/account/create", json={"rUsername": "operator", "rPassword": "Secret123"})
    assert r.status_code == 201
    r = await client.post("/account/create", json={"rUsername": "operator", "rPassword": "Secret123"})
    assert r.status_code == 409

    r = await client.post("/account/login", json={"rUsername": "operator", "rPassword": "Secret123"})
    assert r.status_code == 200
    token = r.json()["data"]["access_token"]
    r = await client.get("/account/me", headers={"Authorization": f"Bearer {token}"})
    assert r.json()["data"] == {"Username": "operator", "role": "user"}


@pytest.mark.asyncio
async def test_account_me_requires_auth(client):
    r = await client.get("/account/me")
    assert r.status_code == 401
    assert r.json() == {"code": 1, "msg": "Not authenticated"}


@pytest.mark.asyncio
async def test_account_me_rejects_bad_tokens(client):
    r = await client.get("/account/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json() == {"code": 1, "msg": "Invalid token"}

    # Only the Authorization header is read
    r = await client.get("/account/me", headers={"X-Auth-Token": "anything"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_account_me_token_for_unknown_account(client):
    """A well-signed token naming an account that does not exist is rejected."""
    token = create_access_token(Account(username="ghost", role="user"))
    r = await client.get("/account/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["msg"] == "Not authenticated"
