"""Resource node: every action sharing one API path, plus what is known
about creating an instance of that resource.

Nodes are built in three passes by the cluster: construction (tokens and
segments), ancestor wiring, then ``init`` (verb inventory, templates,
creation chains and parameter info). Creation chains and parameter info
keep changing afterwards as new combinations of actions are observed.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from api_resource_resolver.config import InitMode
from api_resource_resolver.parser.base import Param
from .actions import DbAction, HttpVerb, RestCallAction
from .creation import (
    CompositeCreationChain,
    CreationChain,
    DBCreationChain,
    PostCreationChain,
    ResourceStatus,
    signature_of,
)
from .params import ParamInfo, param_key
from .path import RestPath
from .randomness import Randomness
from .tables import ResourceToTable, match_tables
from .templates import (
    HANDLED_VERBS,
    POST_INDEX,
    CallsTemplate,
    index_of_verb,
    init_sample_space,
    inventory_size,
    parse_template,
)
from .tokens import PathToken, build_segments, parse_path_tokens, segment_at

logger = logging.getLogger(__name__)


@dataclass
class ResourceInstance:
    """A concrete instance of a resource, identified by bound parameters."""

    node: "RestResourceNode"
    params: list[Param]


def needs_dependency(path: RestPath) -> bool:
    """Whether a POST on ``path`` needs another resource to exist first."""
    return (
        path.has_variable_path_parameters() and not path.is_last_element_a_parameter()
    ) or len(path.get_variable_names()) >= 2


class RestResourceNode:
    def __init__(
        self,
        path: RestPath | str,
        actions: list[RestCallAction] | None = None,
        init_mode: InitMode = InitMode.WITH_TOKEN,
    ):
        self.path = RestPath(path) if isinstance(path, str) else path
        self.actions: list[RestCallAction] = list(actions or [])
        self.init_mode = init_mode

        # keyed by original token text
        self._tokens: dict[str, PathToken] = {}
        # raw segments, flattened segments
        self._segments: tuple[list[str], list[str]] = ([], [])
        if init_mode.uses_tokens():
            self._tokens = parse_path_tokens(self.path, init_mode.splits_words())
            self._segments = build_segments(self._tokens, self.path)

        # closest first
        self.ancestors: list["RestResourceNode"] = []
        # (variant, signature) -> chain, in registration order
        self._creations: dict[tuple[str, str], CreationChain] = {}
        # key of the POST chain whose status was settled last
        self._post_chain_key: tuple[str, str] | None = None
        self.params_info: dict[str, ParamInfo] = {}
        self.resource_to_table = ResourceToTable(str(self.path))
        # one slot per handled verb, last slot: POST available here or in ancestry
        self._verbs = [False] * inventory_size()
        self._templates: dict[str, CallsTemplate] = {}

    def init(self, with_db: bool = False) -> None:
        """Initialize once actions and ancestors are set up."""
        self._init_verbs(with_db)
        self._init_creation_points()
        if self.init_mode.uses_tokens():
            self._init_param_info()

    def init_ancestors(self, resources: list["RestResourceNode"]) -> None:
        found = [
            r for r in resources
            if not r.path.is_equivalent(self.path) and r.path.is_ancestor_of(self.path)
        ]
        self.ancestors = sorted(found, key=lambda r: r.path.levels(), reverse=True)

    def _init_verbs(self, with_db: bool) -> None:
        for a in self.actions:
            index = index_of_verb(a.verb)
            if index == -1:
                raise ValueError(f"cannot handle the action with {a.verb.value} on {self.path}")
            self._verbs[index] = True

        self._verbs[-1] = self._verbs[POST_INDEX] or any(
            a.verb == HttpVerb.POST for anc in self.ancestors for a in anc.actions
        )

        init_sample_space(
            self._verbs, self._templates, self.path.has_variable_path_parameters(), with_db
        )
        if not self._templates:
            raise ValueError(f"no call template can be built for {self.path}")

    def is_independent(self) -> bool:
        """Only independent templates, and nothing to prepare data from."""
        return all(t.independent for t in self._templates.values()) and (
            not any(c.is_complete() for c in self._creations.values())
            or not self.resource_to_table.param_to_table
        )

    def has_independent_action(self) -> bool:
        # a node with POST only has no independent action
        return any(self._verbs[1:-1])

    def verb_inventory(self) -> dict[str, bool]:
        inventory = {v.value: self._verbs[i] for i, v in enumerate(HANDLED_VERBS)}
        inventory["POST_IN_ANCESTRY"] = self._verbs[-1]
        return inventory

    # -- creation management --------------------------------------------------

    def get_sql_creation_points(self) -> list[str]:
        if self.resource_to_table.confirmed_set:
            return list(self.resource_to_table.confirmed_set)
        return list(self.resource_to_table.derived_map)

    def has_post_creation(self) -> bool:
        """Whether a POST, here or in the ancestry, can create the resource."""
        return any(
            isinstance(c, PostCreationChain) and c.actions for c in self._creations.values()
        ) or self._verbs[POST_INDEX]

    def _register(self, chain: CreationChain) -> CreationChain:
        key = (chain.variant, chain.signature())
        existing = self._creations.get(key)
        if existing is not None and existing.is_failed():
            chain = existing
        else:
            self._creations[key] = chain
        if isinstance(chain, PostCreationChain):
            self._post_chain_key = key
        return chain

    def _init_creation_points(self) -> None:
        chain = PostCreationChain()
        posts = [a for a in self.actions if a.verb == HttpVerb.POST]
        if not posts:
            post = self.choose_closest_ancestor_by_path(self.path, [HttpVerb.POST])
        elif len(posts) == 1:
            post = posts[0]
        else:
            logger.warning("%s owns %d POST actions, creation is left unresolved", self.path, len(posts))
            post = None

        if post is None:
            if self.path.has_variable_path_parameters():
                chain.confirm_incomplete(str(self.path))
            else:
                chain.confirm_complete()
            self._register(chain)
            return

        chain.actions.insert(0, post)
        current = post
        # each step moves to a strictly shallower ancestor
        for _ in range(len(self.ancestors) + 1):
            if not needs_dependency(current.rest_path):
                chain.confirm_complete()
                break
            creator = self.choose_closest_ancestor_by_path(current.rest_path, [HttpVerb.POST])
            if creator is None:
                chain.confirm_incomplete(current.path)
                break
            chain.actions.insert(0, creator)
            current = creator
        else:
            chain.confirm_incomplete(current.path)

        logger.debug("post creation for %s: %r", self.path, chain)
        self._register(chain)

    def check_difference_or_init(
        self,
        db_actions: list[DbAction] | None = None,
        post_actions: list[RestCallAction] | None = None,
    ) -> tuple[bool, CreationChain]:
        """Find the chain made of exactly these actions, or register a new one.

        Returns ``(changed, chain)``: ``changed`` is False when an existing
        chain with the same participants was found.
        """
        db_actions = db_actions or []
        post_actions = post_actions or []

        if db_actions and post_actions:
            names = {a.table for a in db_actions} | {p.get_name() for p in post_actions}
            variant, build = CompositeCreationChain.variant, lambda: CompositeCreationChain(db_actions + post_actions)
        elif db_actions:
            names = {a.table for a in db_actions}
            variant, build = DBCreationChain.variant, lambda: DBCreationChain(db_actions)
        elif post_actions:
            names = {p.get_name() for p in post_actions}
            variant, build = PostCreationChain.variant, lambda: PostCreationChain(post_actions)
        else:
            raise ValueError("cannot manipulate creations with the inputs")

        existing = self._creations.get((variant, signature_of(names)))
        if existing is not None:
            return False, existing

        chain = build()
        chain.confirm_complete()
        return True, self._register(chain)

    def get_creation(self, predicate: Callable[[CreationChain], bool]) -> CreationChain | None:
        return next((c for c in self._creations.values() if predicate(c)), None)

    def get_creations(self) -> list[CreationChain]:
        return list(self._creations.values())

    def get_post_chain(self) -> PostCreationChain | None:
        """The POST chain whose status was settled most recently."""
        if self._post_chain_key is None:
            return None
        return self._creations[self._post_chain_key]

    def confirm_failure_creation_by_post(self, calls: list[RestCallAction]) -> CreationChain | None:
        """Mark the POST chain made of exactly the POST calls in ``calls`` as failed."""
        names = {a.get_name() for a in calls if a.verb == HttpVerb.POST}
        if not names:
            return None
        key = (PostCreationChain.variant, signature_of(names))
        chain = self._creations.get(key)
        if chain is None:
            return None
        chain.confirm_failure()
        self._post_chain_key = key
        return chain

    # -- templates ------------------------------------------------------------

    def update_template_size(self) -> None:
        chain = self.get_post_chain()
        if chain is None or not chain.actions or not chain.is_complete():
            return
        dif = len(chain.actions) - (1 if self._verbs[POST_INDEX] else 0)
        for t in self._templates.values():
            if t.contains(HttpVerb.POST) and not t.size_assured:
                t.size += dif
                t.size_assured = True

    def num_of_dep_templates(self) -> int:
        return sum(1 for t in self._templates.values() if not t.independent)

    def num_of_templates(self) -> int:
        return len(self._templates)

    def get_templates(self) -> dict[str, CallsTemplate]:
        return dict(self._templates)

    def select_template(
        self,
        predicate: Callable[[CallsTemplate], bool],
        randomness: Randomness,
        chosen: dict[str, CallsTemplate] | None = None,
        choose_less_visit: bool = False,
    ) -> CallsTemplate | None:
        if chosen is not None:
            unknown = set(chosen) - set(self._templates)
            if unknown:
                raise ValueError(f"{self.path} has no template {', '.join(sorted(unknown))}")
        pool = chosen if chosen is not None else self._templates
        candidates = [t for t in pool.values() if predicate(t)]
        if not candidates:
            return None
        if choose_less_visit:
            template = min(candidates, key=lambda t: t.times)
        else:
            template = randomness.choose(candidates)
        self._templates[template.template].times += 1
        return template

    # -- actions --------------------------------------------------------------

    def sample_one_available_action(self, verb: HttpVerb | None, randomness: Randomness) -> RestCallAction:
        action = self.get_action_by_http_verb(verb) if verb is not None else None
        if action is None:
            action = randomness.choose(self.actions)
        return action.copy_action()

    def get_action_by_http_verb(
        self, verb: HttpVerb, actions: list[RestCallAction] | None = None
    ) -> RestCallAction | None:
        pool = self.actions if actions is None else actions
        return next((a for a in pool if a.verb == verb), None)

    def _find_node(self, path: RestPath) -> "RestResourceNode | None":
        if str(path) == str(self.path):
            return self
        return next((a for a in self.ancestors if str(a.path) == str(path)), None)

    @staticmethod
    def choose_longest_path(actions: list[RestCallAction], randomness: Randomness | None = None) -> RestCallAction:
        """Pick the action on the deepest path; ties go to ``randomness`` when given."""
        if not actions:
            raise ValueError("Cannot choose from an empty collection")
        deepest = max(a.rest_path.levels() for a in actions)
        candidates = [a for a in actions if a.rest_path.levels() == deepest]
        if randomness is None:
            return candidates[0]
        return randomness.choose(candidates).copy_action()

    def same_or_ancestor_endpoints(self, target: RestCallAction) -> list[RestCallAction]:
        node = self._find_node(target.rest_path)
        if node is None:
            return []
        return [a for anc in node.ancestors for a in anc.actions] + node.actions

    def choose_closest_ancestor(
        self, target: RestCallAction, verbs: list[HttpVerb], randomness: Randomness | None = None
    ) -> RestCallAction | None:
        """Closest action with one of ``verbs`` on the target's path or its ancestry."""
        others = [
            a for a in self.same_or_ancestor_endpoints(target)
            if a.verb in verbs and a.get_name() != target.get_name()
        ]
        if not others:
            return None
        return self.choose_longest_path(others, randomness)

    def choose_closest_ancestor_by_path(self, path: RestPath, verbs: list[HttpVerb]) -> RestCallAction | None:
        """Closest action with one of ``verbs`` strictly above ``path``."""
        node = self._find_node(path)
        if node is None:
            return None
        others = [a for anc in node.ancestors for a in anc.actions if a.verb in verbs]
        if not others:
            return None
        return self.choose_longest_path(others)

    def create_action_for(self, template: RestCallAction, target: RestCallAction) -> RestCallAction:
        action = template.copy_action()
        action.save_location = False
        action.location_id = None
        action.bind_to_same_path_resolution(target.parameters)
        return action

    def create_resources_for(
        self,
        target: RestCallAction,
        test: list[RestCallAction],
        max_test_size: int,
        randomness: Randomness,
        for_check_size: bool = False,
    ) -> ResourceStatus:
        """Prepend to ``test`` the POST calls that create the resource ``target`` works on."""
        return self._create_resources_for(
            target, test, max_test_size, randomness, for_check_size, len(self.ancestors) + 1
        )

    def _create_resources_for(self, target, test, max_test_size, randomness, for_check_size, remaining):
        if not for_check_size and len(test) >= max_test_size:
            return ResourceStatus.NOT_ENOUGH_LENGTH

        template = self.choose_closest_ancestor(target, [HttpVerb.POST], randomness)
        if template is None:
            return ResourceStatus.CREATED if target.verb == HttpVerb.POST else ResourceStatus.NOT_FOUND

        post = self.create_action_for(template, target)
        test.insert(0, post)

        # the POST may itself depend on an intermediate resource
        if needs_dependency(post.rest_path):
            if remaining <= 1:
                return ResourceStatus.NOT_FOUND_DEPENDENT
            created = self._create_resources_for(
                post, test, max_test_size, randomness, for_check_size, remaining - 1
            )
            if created != ResourceStatus.CREATED:
                logger.debug("could not create the dependency of %s for %s", post.get_name(), target.get_name())
                return ResourceStatus.NOT_FOUND_DEPENDENT

        if not post.rest_path.is_equivalent(target.rest_path):
            # POST /x then GET /x/{id}
            post.save_location = True
            target.location_id = post.rest_path.last_element()
        else:
            # POST /x, POST /x/{id}/y then GET /x/{id}/y: reuse the location of the outer POST
            post.save_location = False
            target.location_id = post.location_id

        return ResourceStatus.CREATED

    def create_resource_instance(
        self, result: list[RestCallAction], randomness: Randomness, skip_bind: list[RestCallAction]
    ) -> ResourceInstance:
        chosen = self.choose_longest_path(result, randomness)
        skip_bind.append(chosen)
        return ResourceInstance(self, chosen.parameters)

    # -- tokens and tables ----------------------------------------------------

    def is_part_of_static_tokens(self, text: str) -> bool:
        return any(not t.is_parameter and t.original_text.lower() == text.lower() for t in self._tokens.values())

    def get_derived_tables(self) -> set[str]:
        return {m.target_matched for infos in self.resource_to_table.derived_map.values() for m in infos}

    def derive_related_tables(self, tables: list[str]) -> None:
        """Guess the tables this resource is stored in from its literal tokens."""
        words = self.get_flat_view_of_tokens()
        for matched in match_tables(words, tables):
            self.resource_to_table.derive(matched.target_matched, matched)
            indicator = matched.input_indicator.lower()
            for info in self.params_info.values():
                if indicator in info.pre_segment.replace("@", ""):
                    self.resource_to_table.relate_param(info.key, matched.target_matched)

    def confirm_related_table(self, table: str) -> None:
        self.resource_to_table.confirm(table)

    def is_any_action(self) -> bool:
        return any(self._verbs)

    def get_name(self) -> str:
        return str(self.path)

    def get_token_map(self) -> dict[str, PathToken]:
        return dict(self._tokens)

    def get_flat_view_of_tokens(self, exclude_star: bool = True) -> list[str]:
        return [
            word
            for t in self._tokens.values()
            if not t.is_parameter and not (exclude_star and t.is_star())
            for word in t.flat_keys()
        ]

    def get_all_segments(self, flatten: bool) -> list[str]:
        return list(self._segments[1] if flatten else self._segments[0])

    # -- parameters -----------------------------------------------------------

    def get_param_id(self, params: list[Param], param: Param) -> str:
        return param_key(param, self._get_segment(True, params, param))

    def _get_param_level(self, params: list[Param], param: Param) -> int:
        if not param.is_path():
            return self.path.levels()
        found = [
            t for t in self._tokens.values()
            if t.is_parameter and t.original_text.lower() == param.name.lower()
        ]
        if not found:
            return self.path.levels()
        if len(found) == 1:
            return found[0].level
        same_name = [p for p in params if p.name == param.name]
        index = next(i for i, p in enumerate(same_name) if p is param)
        return found[min(index, len(found) - 1)].level

    def _get_segment(self, flatten: bool, params: list[Param], param: Param) -> str:
        return segment_at(self._tokens, self._get_param_level(params, param), flatten)

    def _init_param_info(self) -> None:
        self.params_info.clear()
        # a path parameter in the middle of the path has to be bound to an
        # existing resource; the trailing one can come from the node's own POST
        if not self._tokens:
            return
        for a in self.actions:
            for p in a.parameters:
                self._param_info_for(a.verb, a.parameters, p)

    def _param_info_for(self, verb: HttpVerb, params: list[Param], param: Param) -> ParamInfo:
        key = self.get_param_id(params, param)
        segment = self._get_segment(True, params, param)
        flat = self.get_all_segments(True)
        level = flat.index(segment) if segment in flat else -1
        missing = param.is_path() and (
            not self._verbs[POST_INDEX] or self._get_param_level(params, param) < self.path.levels() - 1
        )
        info = self.params_info.get(key)
        if info is None:
            info = ParamInfo(param.name, key, segment, level, param, missing)
            self.params_info[key] = info
        info.involved_action.add(verb)
        return info

    def _find_action(self, action: RestCallAction) -> RestCallAction:
        found = next((a for a in self.actions if a.get_name() == action.get_name()), None)
        if found is None:
            raise ValueError(f"cannot find the action {action.get_name()} in the resource {self.get_name()}")
        return found

    def any_parameter_changed(self, action: RestCallAction) -> bool:
        return len(action.parameters) != len(self._find_action(action).parameters)

    def update_additional_params(self, action: RestCallAction) -> dict[str, ParamInfo] | None:
        """Register parameters of ``action`` that are not known yet."""
        self._find_action(action)
        additional = [p for p in action.parameters if self.get_param_id(action.parameters, p) not in self.params_info]
        if not additional:
            return None
        added = {}
        for p in additional:
            info = self._param_info_for(action.verb, action.parameters, p)
            info.from_addition_info = True
            added[info.key] = info
        return added

    def update_additional_param(self, action: RestCallAction, param: Param) -> ParamInfo:
        info = self._param_info_for(action.verb, action.parameters, param)
        info.from_addition_info = True
        return info

    def get_missing_params(self, action_template: str) -> list[ParamInfo]:
        verbs = parse_template(action_template)
        lead = verbs[0]
        infos = list(self.params_info.values())

        if lead == HttpVerb.POST:
            missing = [i for i in infos if i.missing]
            # POST-POST
            return missing or infos
        if lead in (HttpVerb.PATCH, HttpVerb.PUT):
            return [i for i in infos if lead in i.involved_action and (i.is_path_param() or i.refers_to_id())]
        if lead in (HttpVerb.GET, HttpVerb.DELETE):
            return [i for i in infos if lead in i.involved_action]
        return []

    def get_ref_types(self) -> set[str]:
        return {
            i.refer_param.ref_type
            for i in self.params_info.values()
            if i.refer_param.is_body() and i.refer_param.ref_type
        }

    def __repr__(self) -> str:
        return f"RestResourceNode({self.get_name()!r}, {len(self.actions)} actions)"
