"""Generator configuration consumed by the engine."""

from __future__ import annotations

from dataclasses import dataclass

# Largest value of the u16 counter the generated struct layout is sized by
DEFAULT_MAX_FIELD_COUNT = 0xFFFF

# Longest extends/mixes-in chain accepted
DEFAULT_MAX_INHERITANCE_DEPTH = 256

# Largest source unit accepted (5MB)
DEFAULT_MAX_SOURCE_BYTES = 5 * 1024 * 1024


@dataclass
class GeneratorConfig:
    """Naming conventions and resource limits for one generation run.

    `method_prefix` is prepended to the names of methods copied from an
    ancestor or mixin; the default keeps copied names unchanged so that a
    copy stays overridable further down the chain.
    """
    getter_prefix: str = "get_"
    setter_prefix: str = "set_"
    method_prefix: str = ""
    max_field_count: int = DEFAULT_MAX_FIELD_COUNT
    max_inheritance_depth: int = DEFAULT_MAX_INHERITANCE_DEPTH
    max_source_bytes: int = DEFAULT_MAX_SOURCE_BYTES
    jobs: int = 1

    def __post_init__(self):
        for name in ("getter_prefix", "setter_prefix", "method_prefix"):
            value = getattr(self, name)
            if value and not (value[0].isalpha() or value[0] == "_"):
                raise ValueError(f"{name} must start with a letter or '_', got {value!r}")
            if not all(ch.isalnum() or ch == "_" for ch in value):
                raise ValueError(f"{name} must be an identifier fragment, got {value!r}")
        if self.getter_prefix == self.setter_prefix:
            raise ValueError("getter_prefix and setter_prefix must differ")
        if self.max_field_count < 0:
            raise ValueError("max_field_count must be non-negative")
        if self.max_inheritance_depth < 1:
            raise ValueError("max_inheritance_depth must be at least 1")
        if self.jobs < 1:
            raise ValueError("jobs must be at least 1")
