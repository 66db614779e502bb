import asyncio

import pytest

from digest_cracker.cracker.digest import hex_digest
from digest_cracker.errors import InputValidationError, NodeConnectionError, SessionBusyError
from digest_cracker.events import RecordingEventSink
from digest_cracker.models.models import SearchResult, SessionState
from digest_cracker.node.service import NodeService
from digest_cracker.session import SessionCoordinator, build_configs

CAT = hex_digest("cat")


class FakeNode:
    """Node client double; `block` makes start_search wait for a stop."""

    def __init__(self, address, result=None, block=False, delay=0.0,
                 unreachable=False, fail_search=False):
        self.address = address
        self.result = result
        self.block = block
        self.delay = delay
        self.unreachable = unreachable
        self.fail_search = fail_search
        self.configs = []
        self.stop_calls = 0
        self._stopped = None

    def _event(self):
        if self._stopped is None:
            self._stopped = asyncio.Event()
        return self._stopped

    async def is_alive(self):
        if self.unreachable:
            raise NodeConnectionError(self.address, "unreachable (ConnectError)")
        return True

    async def get_node_name(self):
        return f"name-of-{self.address}"

    async def start_search(self, config):
        self.configs.append(config)
        stopped = self._event()
        if self.fail_search:
            await asyncio.sleep(self.delay)
            raise NodeConnectionError(self.address, "timed out (ReadTimeout)")
        if self.block:
            await stopped.wait()
            return SearchResult.not_found(self.address, 1)
        await asyncio.sleep(self.delay)
        return self.result or SearchResult.not_found(self.address, 1)

    async def stop_search(self):
        self.stop_calls += 1
        self._event().set()


def found(node_id, candidate="cat", worker_id=1):
    return SearchResult(found=True, candidate=candidate, node_id=node_id,
                        worker_id=worker_id, elapsed_millis=5)


def run_with(nodes, **kwargs):
    """Run a session against fake nodes keyed by address."""
    coordinator = SessionCoordinator(client_factory=lambda address: nodes[address])
    params = dict(target_digest=CAT, length=3, node_addresses=list(nodes),
                  workers_per_node=2, charset="alnum_lower")
    params.update(kwargs)
    result = asyncio.run(coordinator.run_session(**params))
    return coordinator, result


def test_build_configs_one_per_node():
    configs = build_configs(CAT, 3, 3, 4)
    assert [c.this_node_index for c in configs] == [0, 1, 2]
    assert {c.total_nodes for c in configs} == {3}


def test_first_found_result_wins_and_siblings_are_stopped():
    winner = found("node-1")
    nodes = {"n0": FakeNode("n0", block=True), "n1": FakeNode("n1", result=winner)}
    coordinator, result = run_with(nodes)

    assert result == winner
    assert nodes["n0"].stop_calls == 1
    assert nodes["n1"].stop_calls == 0
    assert [c.this_node_index for c in nodes["n0"].configs] == [0]
    assert [c.this_node_index for c in nodes["n1"].configs] == [1]
    assert coordinator.state is SessionState.IDLE
    assert coordinator.last_state is SessionState.FOUND
    assert coordinator.last_result == winner


def test_results_are_consumed_in_completion_order():
    nodes = {
        "slow": FakeNode("slow", result=found("slow", "aaa"), delay=0.5),
        "fast": FakeNode("fast", result=found("fast", "cat"), delay=0.01),
    }
    _, result = run_with(nodes)
    assert result.node_id == "fast"
    assert nodes["slow"].stop_calls == 1


def test_all_nodes_exhausted():
    nodes = {f"n{i}": FakeNode(f"n{i}", delay=0.01 * i) for i in range(3)}
    coordinator, result = run_with(nodes)
    assert not result.found
    assert result.node_id == "session"
    assert coordinator.last_state is SessionState.EXHAUSTED
    assert coordinator.last_elapsed_millis >= result.elapsed_millis
    assert all(node.stop_calls == 0 for node in nodes.values())


def test_unreachable_node_fails_before_any_search():
    nodes = {"n0": FakeNode("n0"), "n1": FakeNode("n1", unreachable=True)}
    coordinator = SessionCoordinator(client_factory=lambda address: nodes[address])
    previous = found("earlier")
    coordinator.last_result = previous

    with pytest.raises(NodeConnectionError) as exc_info:
        asyncio.run(coordinator.run_session(CAT, 3, ["n0", "n1"], 2, charset="alnum_lower"))

    assert exc_info.value.address == "n1"
    assert nodes["n0"].configs == []
    assert coordinator.state is SessionState.IDLE
    assert coordinator.last_state is SessionState.CONNECTION_FAILED
    assert coordinator.last_result is previous


def test_node_failing_mid_search_is_a_connection_failure():
    nodes = {"n0": FakeNode("n0", block=True), "n1": FakeNode("n1", fail_search=True, delay=0.01)}
    coordinator = SessionCoordinator(client_factory=lambda address: nodes[address])

    with pytest.raises(NodeConnectionError):
        asyncio.run(coordinator.run_session(CAT, 3, ["n0", "n1"], 2, charset="alnum_lower"))

    assert nodes["n0"].stop_calls == 1
    assert coordinator.last_state is SessionState.CONNECTION_FAILED
    assert coordinator.last_result is None


@pytest.mark.parametrize("kwargs", [
    {"target_digest": "zz" * 16},
    {"target_digest": CAT[:-2]},
    {"length": 0},
    {"length": 99},
    {"workers_per_node": 0},
    {"node_addresses": []},
    {"node_addresses": ["n0", "n0"]},
    {"node_addresses": ["http://h:8001", "http://h:8001/"]},
    {"charset": "klingon"},
    {"algorithm": "no-such-hash"},
])
def test_invalid_input_is_rejected_before_dispatch(kwargs):
    created = []

    def factory(address):
        created.append(address)
        return FakeNode(address)

    coordinator = SessionCoordinator(client_factory=factory)
    params = dict(target_digest=CAT, length=3, node_addresses=["n0", "n1"],
                  workers_per_node=2, charset="alnum_lower")
    params.update(kwargs)
    with pytest.raises(InputValidationError):
        asyncio.run(coordinator.run_session(**params))
    assert created == []
    assert coordinator.state is SessionState.IDLE
    assert coordinator.last_state is None


def test_busy_coordinator_refuses_a_second_session():
    coordinator = SessionCoordinator(client_factory=FakeNode)
    coordinator.state = SessionState.AWAITING_RESULTS
    with pytest.raises(SessionBusyError):
        asyncio.run(coordinator.run_session(CAT, 3, ["n0"], 2, charset="alnum_lower"))


class InProcessNode:
    """Talks to a NodeService directly, searching on a worker thread."""

    def __init__(self, address, service):
        self.address = address
        self.service = service

    async def is_alive(self):
        return self.service.is_alive()

    async def get_node_name(self):
        return self.service.get_node_name()

    async def start_search(self, config):
        return await asyncio.to_thread(self.service.start_search, config)

    async def stop_search(self):
        self.service.stop_search()


def test_session_over_real_node_services():
    services = {f"n{i}": NodeService(f"node-{i}", events=RecordingEventSink()) for i in range(2)}
    coordinator = SessionCoordinator(
        client_factory=lambda address: InProcessNode(address, services[address]))

    # "zip" sits in the upper half of the keyspace, owned by node-1
    result = asyncio.run(coordinator.run_session(
        hex_digest("zip"), 3, ["n0", "n1"], 3, charset="alnum_lower"))

    assert result.found
    assert result.candidate == "zip"
    assert result.node_id == "node-1"
    assert not any(service.is_searching for service in services.values())
