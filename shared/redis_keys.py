"""
Centralized Redis key builder utility.

This module provides a standardized way to generate Redis keys across the
application, ensuring consistency and preventing typos.
"""


class RedisKeys:
    """Centralized Redis key builder for consistent key naming."""

    # Resolution cache
    @staticmethod
    def resolved_component(configuration_id: str, component_type: str) -> str:
        """Effective component of one type for a configuration."""
        return f"resolution:configuration:{configuration_id}:{component_type}"

    @staticmethod
    def resolved_model_default(model_id: str, component_type: str) -> str:
        """Effective component of one type for a bare model (no trim level)."""
        return f"resolution:model:{model_id}:{component_type}"
