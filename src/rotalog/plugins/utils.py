"""
Plugin configuration parsing.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel

M = TypeVar("M", bound=BaseModel)


def parse_plugin_config(
    model: type[M],
    config: M | dict[str, Any] | None = None,
    **kwargs: Any,
) -> M:
    """Build a plugin config from a model instance, a dict, or kwargs.

    Keyword arguments override keys of a dict config. A ready model instance
    is returned as-is when no kwargs are given.

    Raises:
        pydantic.ValidationError: if the merged values are invalid.
    """
    if isinstance(config, model):
        if not kwargs:
            return config
        return model(**{**config.model_dump(), **kwargs})
    if isinstance(config, dict):
        raw = config.get("config", config)
        return model(**{**raw, **kwargs})
    if config is None:
        return model(**kwargs)
    raise TypeError(
        f"config must be {model.__name__}, dict or None, got {type(config).__name__}"
    )

