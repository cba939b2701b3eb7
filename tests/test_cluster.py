from pathlib import Path

import pytest

from api_resource_resolver.config import InitMode, ResolverConfig
from api_resource_resolver.parser.swagger import parse_openapi
from api_resource_resolver.resource.actions import HttpVerb, RestCallAction
from api_resource_resolver.resource.cluster import ResourceCluster
from api_resource_resolver.resource.creation import ResourceStatus
from api_resource_resolver.resource.randomness import SeededRandomness

FIXTURES = Path(__file__).parent / "fixtures"


def _cluster(**config) -> ResourceCluster:
    return ResourceCluster.from_endpoints(parse_openapi(FIXTURES / "shop.yaml"), ResolverConfig(**config))


class TestResourceCluster:
    def test_one_node_per_path(self):
        cluster = _cluster()
        assert [n.get_name() for n in cluster.nodes] == [
            "/health",
            "/shops",
            "/shops/{shopId}",
            "/shops/{shopId}/items",
            "/shops/{shopId}/items/{itemId}",
        ]

    def test_get_node_normalizes_path(self):
        cluster = _cluster()
        assert cluster.get_node("shops/{shopId}/").get_name() == "/shops/{shopId}"
        assert cluster.get_node("/unknown") is None

    def test_find_action(self):
        cluster = _cluster()
        assert cluster.find_action("get /shops").get_name() == "GET:/shops"
        assert cluster.find_action("POST:/shops").get_name() == "POST:/shops"
        with pytest.raises(ValueError):
            cluster.find_action("PUT /shops")

    def test_health_is_independent(self):
        node = _cluster().get_node("/health")
        assert node.is_independent()
        assert node.get_templates()["GET"].independent

    def test_word_split_follows_init_mode(self):
        actions = [RestCallAction(verb=HttpVerb.GET, path="/shopItems")]
        split = ResourceCluster(ResolverConfig())
        split.init_resources(actions)
        whole = ResourceCluster(ResolverConfig(init_mode=InitMode.WITH_DEPENDENCY))
        whole.init_resources(actions)

        assert split.get_node("/shopItems").get_flat_view_of_tokens() == ["shop", "items"]
        assert whole.get_node("/shopItems").get_flat_view_of_tokens() == ["shopitems"]


class TestSampleCalls:
    def test_sequence_for_nested_item(self):
        status, sequence = _cluster().sample_calls("GET /shops/{shopId}/items/{itemId}", SeededRandomness(1))
        assert status == ResourceStatus.CREATED
        assert [a.get_name() for a in sequence] == [
            "POST:/shops",
            "POST:/shops/{shopId}/items",
            "GET:/shops/{shopId}/items/{itemId}",
        ]
        assert sequence[-1].location_id == "items"

    def test_catalog_actions_are_not_modified(self):
        cluster = _cluster()
        cluster.sample_calls("GET /shops/{shopId}", SeededRandomness(1))
        for node in cluster.nodes:
            for action in node.actions:
                assert action.save_location is False
                assert action.location_id is None

    def test_max_size_from_config(self):
        status, sequence = _cluster(max_test_size=1).sample_calls("GET /shops/{shopId}", SeededRandomness(1))
        assert status == ResourceStatus.NOT_ENOUGH_LENGTH
        assert len(sequence) == 1

    def test_independent_target(self):
        status, sequence = _cluster().sample_calls("GET /health", SeededRandomness(1))
        assert status == ResourceStatus.NOT_FOUND
        assert [a.get_name() for a in sequence] == ["GET:/health"]


class FirstChoice:
    def __init__(self):
        self.calls = 0

    def choose(self, candidates):
        self.calls += 1
        return list(candidates)[0]


class TestSelectTemplate:
    def test_less_visited_by_default(self):
        cluster = _cluster()
        picks = [cluster.select_template("/shops", SeededRandomness(1)).template for _ in range(3)]
        assert picks == ["POST", "GET", "POST-GET"]

    def test_random_choice_when_disabled(self):
        cluster = _cluster(choose_less_visit=False)
        randomness = FirstChoice()
        picks = [cluster.select_template("/shops", randomness).template for _ in range(2)]
        assert picks == ["POST", "POST"]
        assert randomness.calls == 2

    def test_predicate(self):
        cluster = _cluster()
        template = cluster.select_template("/shops", SeededRandomness(1), lambda t: not t.independent)
        assert template.template == "POST-GET"

    def test_unknown_resource(self):
        with pytest.raises(ValueError):
            _cluster().select_template("/nowhere", SeededRandomness(1))


class TestSeededRandomness:
    def test_same_seed_same_choices(self):
        items = list(range(20))
        first = SeededRandomness(7)
        second = SeededRandomness(7)
        assert [first.choose(items) for _ in range(5)] == [second.choose(items) for _ in range(5)]

    def test_empty(self):
        with pytest.raises(ValueError):
            SeededRandomness().choose([])
