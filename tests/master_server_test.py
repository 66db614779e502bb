from fastapi.testclient import TestClient

from digest_cracker.cracker.digest import hex_digest
from digest_cracker.errors import NodeConnectionError
from digest_cracker.master_server import create_app
from digest_cracker.models.models import SearchResult
from digest_cracker.session import SessionCoordinator


class StaticNode:
    def __init__(self, address, result=None, unreachable=False):
        self.address = address
        self.result = result or SearchResult.not_found(address, 3)
        self.unreachable = unreachable

    async def is_alive(self):
        if self.unreachable:
            raise NodeConnectionError(self.address, "unreachable (ConnectError)")
        return True

    async def get_node_name(self):
        return self.address

    async def start_search(self, config):
        return self.result

    async def stop_search(self):
        return None


def master_with(nodes):
    coordinator = SessionCoordinator(client_factory=lambda address: nodes[address])
    return TestClient(create_app(coordinator))


def crack_body(**overrides):
    body = {"hash": hex_digest("cat"), "length": 3, "nodes": ["n0", "n1"],
            "workers_per_node": 2, "charset": "alnum_lower"}
    body.update(overrides)
    return body


def test_crack_returns_winning_result():
    winner = SearchResult(found=True, candidate="cat", node_id="n1", worker_id=0, elapsed_millis=4)
    client = master_with({"n0": StaticNode("n0"), "n1": StaticNode("n1", result=winner)})

    response = client.post("/crack", json=crack_body())
    assert response.status_code == 200
    assert SearchResult.model_validate(response.json()) == winner

    status = client.get("/status").json()
    assert status["state"] == "found"
    assert status["last_result"]["candidate"] == "cat"


def test_crack_not_found():
    client = master_with({"n0": StaticNode("n0"), "n1": StaticNode("n1")})
    body = client.post("/crack", json=crack_body()).json()
    assert body["found"] is False
    assert client.get("/status").json()["state"] == "exhausted"


def test_status_before_any_session():
    client = master_with({})
    assert client.get("/status").json() == {"state": "idle", "last_result": None,
                                            "last_elapsed_millis": None}


def test_invalid_request_is_400():
    client = master_with({"n0": StaticNode("n0"), "n1": StaticNode("n1")})
    assert client.post("/crack", json=crack_body(hash="abc")).status_code == 400
    assert client.post("/crack", json=crack_body(length=7)).status_code == 400


def test_connection_failure_is_502():
    client = master_with({"n0": StaticNode("n0"), "n1": StaticNode("n1", unreachable=True)})
    response = client.post("/crack", json=crack_body())
    assert response.status_code == 502
    assert "n1" in response.json()["detail"]
    assert client.get("/status").json()["state"] == "connection_failed"
