"""Resource cluster: one node per distinct path of the endpoint catalog."""

import logging
from typing import Callable

from api_resource_resolver.config import ResolverConfig
from api_resource_resolver.parser.base import ApiEndpoint
from .actions import HttpVerb, RestCallAction
from .creation import ResourceStatus
from .node import RestResourceNode
from .path import RestPath
from .randomness import Randomness
from .templates import CallsTemplate

logger = logging.getLogger(__name__)


class ResourceCluster:
    """Builds and holds the resource nodes of an API.

    Construction happens in three passes: nodes, then ancestors (closest
    first, computed once), then node initialization.
    """

    def __init__(self, config: ResolverConfig | None = None):
        self.config = config or ResolverConfig()
        self._nodes: dict[str, RestResourceNode] = {}

    @classmethod
    def from_endpoints(cls, endpoints: list[ApiEndpoint], config: ResolverConfig | None = None) -> "ResourceCluster":
        cluster = cls(config)
        cluster.init_resources([RestCallAction.from_endpoint(ep) for ep in endpoints])
        return cluster

    def init_resources(self, actions: list[RestCallAction]) -> None:
        grouped: dict[str, list[RestCallAction]] = {}
        for a in actions:
            grouped.setdefault(str(a.rest_path), []).append(a)

        self._nodes = {
            path: RestResourceNode(RestPath(path), group, self.config.init_mode)
            for path, group in grouped.items()
        }

        nodes = list(self._nodes.values())
        for node in nodes:
            node.init_ancestors(nodes)
        for node in nodes:
            node.init(self.config.with_db)
            if self.config.tables:
                node.derive_related_tables(self.config.tables)
            node.update_template_size()

        logger.info("initialized %d resources from %d actions", len(nodes), len(actions))

    @property
    def nodes(self) -> list[RestResourceNode]:
        return list(self._nodes.values())

    def get_node(self, path: str | RestPath) -> RestResourceNode | None:
        return self._nodes.get(str(RestPath(str(path))))

    def find_node_for(self, action: RestCallAction) -> RestResourceNode | None:
        return self.get_node(action.rest_path)

    def find_action(self, name: str) -> RestCallAction:
        """Look up an action by ``"VERB /path"`` (or ``"VERB:/path"``)."""
        verb, _, path = name.strip().partition(" " if " " in name.strip() else ":")
        node = self.get_node(path.strip())
        if node is not None:
            action = node.get_action_by_http_verb(HttpVerb(verb.strip().upper()))
            if action is not None:
                return action
        raise ValueError(f"no action {name!r} in the catalog")

    def sample_calls(
        self,
        target_name: str,
        randomness: Randomness,
        max_test_size: int | None = None,
    ) -> tuple[ResourceStatus, list[RestCallAction]]:
        """Build a call sequence ending with the target action.

        The creators the target depends on are prepended by its node.
        """
        target = self.find_action(target_name).copy_action()
        node = self.find_node_for(target)
        sequence = [target]
        size = max_test_size or self.config.max_test_size
        status = node.create_resources_for(target, sequence, size, randomness, for_check_size=False)
        if status != ResourceStatus.CREATED:
            logger.warning("resources for %s: %s", target.get_name(), status.value)
        return status, sequence

    def select_template(
        self,
        path: str,
        randomness: Randomness,
        predicate: Callable[[CallsTemplate], bool] | None = None,
    ) -> CallsTemplate | None:
        """Pick a call template of the resource at ``path``.

        With ``choose_less_visit`` configured, the least visited template wins.
        """
        node = self.get_node(path)
        if node is None:
            raise ValueError(f"no resource {path!r} in the catalog")
        return node.select_template(
            predicate or (lambda t: True),
            randomness,
            choose_less_visit=self.config.choose_less_visit,
        )
