from .api import register_flow_tools

__all__ = ["register_flow_tools"]
