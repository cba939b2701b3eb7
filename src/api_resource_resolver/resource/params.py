"""Per-parameter metadata collected by a resource node."""

from dataclasses import dataclass, field

from api_resource_resolver.parser.base import Param
from .actions import HttpVerb
from .tokens import SEGMENT_SEPARATOR


@dataclass
class ParamInfo:
    """What a node knows about one parameter.

    ``missing`` marks a parameter that has to be bound to an existing
    resource (a created POST or a table row) instead of being generated.
    """

    name: str
    key: str
    pre_segment: str  # flattened segment the parameter belongs to
    segment_level: int
    refer_param: Param
    missing: bool
    involved_action: set[HttpVerb] = field(default_factory=set)
    from_addition_info: bool = False

    def is_path_param(self) -> bool:
        return self.refer_param.is_path()

    def refers_to_id(self) -> bool:
        return "id" in self.name.lower()


def param_key(param: Param, segment: str) -> str:
    if segment:
        return f"{param.location}:{segment}{SEGMENT_SEPARATOR}{param.name}"
    return f"{param.location}:{param.name}"
