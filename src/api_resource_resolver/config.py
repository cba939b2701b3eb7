"""Resolver configuration, loaded from a YAML file."""

from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError


class InitMode(str, Enum):
    NONE = "none"
    WITH_TOKEN = "with_token"
    # subsumes WITH_TOKEN
    WITH_DERIVED_DEPENDENCY = "with_derived_dependency"
    WITH_DEPENDENCY = "with_dependency"

    def uses_tokens(self) -> bool:
        return self is not InitMode.NONE

    def splits_words(self) -> bool:
        return self is not InitMode.WITH_DEPENDENCY


class ResolverConfig(BaseModel):
    init_mode: InitMode = InitMode.WITH_TOKEN
    with_db: bool = False
    max_test_size: int = Field(default=10, ge=1)
    seed: int | None = None
    choose_less_visit: bool = True
    tables: list[str] = []


class ConfigError(ValueError):
    pass


def load_config(path: str | Path) -> ResolverConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if raw is None:
        return ResolverConfig()
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a YAML mapping")

    try:
        return ResolverConfig(**raw)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"Invalid config {config_path}: {problems}") from e
