from .core import Network
from .router import (
    FunctionRouter, ModelRouter, Router, RouterArgs, create_default_routing_agent, default_router,
)
from .run import NetworkRun

__all__ = [
    "FunctionRouter",
    "ModelRouter",
    "Network",
    "NetworkRun",
    "Router",
    "RouterArgs",
    "create_default_routing_agent",
    "default_router",
]
