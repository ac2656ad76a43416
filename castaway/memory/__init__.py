"""World memory built up from the agent's partial views."""

from .world import HOME_POS, VIEW_DIST, WorldModel

__all__ = [
    "HOME_POS",
    "VIEW_DIST",
    "WorldModel",
]
