"""Call templates: combinations of verbs sampled together on a resource.

A template is written as its verbs joined by ``-``, e.g. ``POST-GET``.
The verb inventory of a node is a list of booleans indexed like
HANDLED_VERBS, followed by one slot telling whether a POST is available
on the node or in its ancestry.
"""

from dataclasses import dataclass

from .actions import HttpVerb

SEPARATOR = "-"

HANDLED_VERBS = (HttpVerb.POST, HttpVerb.GET, HttpVerb.PUT, HttpVerb.PATCH, HttpVerb.DELETE)

POST_INDEX = 0


@dataclass
class CallsTemplate:
    template: str
    independent: bool
    size: int
    times: int = 0
    size_assured: bool = False

    def verbs(self) -> list[HttpVerb]:
        return parse_template(self.template)

    def contains(self, verb: HttpVerb) -> bool:
        return verb in self.verbs()


def index_of_verb(verb: HttpVerb) -> int:
    try:
        return HANDLED_VERBS.index(verb)
    except ValueError:
        return -1


def inventory_size() -> int:
    return len(HANDLED_VERBS) + 1


def parse_template(template: str) -> list[HttpVerb]:
    return [HttpVerb(v) for v in template.split(SEPARATOR)]


def format_template(verbs) -> str:
    return SEPARATOR.join(HttpVerb(v).value for v in verbs)


def is_not_single_action(template: str) -> bool:
    return SEPARATOR in template


def init_sample_space(
    inventory: list[bool],
    templates: dict[str, CallsTemplate],
    has_variables: bool,
    with_db: bool = False,
) -> None:
    """Fill ``templates`` with every meaningful combination for ``inventory``.

    Single-verb templates are independent only on paths without variables.
    POST-prefixed templates are added when something can create the
    resource: an owned POST, or (for variable paths) a POST in the
    ancestry or direct table insertion.
    """
    templates.clear()

    owns_post = inventory[POST_INDEX]
    creatable = owns_post or (has_variables and (inventory[-1] or with_db))

    def add(verbs, independent):
        key = format_template(verbs)
        templates.setdefault(key, CallsTemplate(key, independent, len(verbs)))

    if owns_post:
        add([HttpVerb.POST], not has_variables)
        if has_variables and creatable:
            add([HttpVerb.POST, HttpVerb.POST], False)

    owned = [HANDLED_VERBS[i] for i in range(1, len(HANDLED_VERBS)) if inventory[i]]
    for verb in owned:
        add([verb], not has_variables)
        if creatable:
            add([HttpVerb.POST, verb], False)

    if creatable and HttpVerb.DELETE in owned:
        for update in (HttpVerb.PUT, HttpVerb.PATCH):
            if update in owned:
                add([HttpVerb.POST, update, HttpVerb.DELETE], False)
