"""Business logic services module."""

import importlib as _importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .session import SessionState as SessionState
    from .transport import AiohttpTransport as AiohttpTransport
    from .transport import Transport as Transport
    from .workflow import WorkflowEngine as WorkflowEngine

_LAZY_MODULE_MAP = {
    "AiohttpTransport": ("ivac_bot.services.transport.aiohttp_transport", "AiohttpTransport"),
    "SessionState": ("ivac_bot.services.session.session_state", "SessionState"),
    "Transport": ("ivac_bot.services.transport.base", "Transport"),
    "WorkflowEngine": ("ivac_bot.services.workflow.engine", "WorkflowEngine"),
}

__all__ = list(_LAZY_MODULE_MAP.keys())


def __getattr__(name: str):
    """Lazy import with explicit mapping - importlib based."""
    if name in _LAZY_MODULE_MAP:
        module_path, attr_name = _LAZY_MODULE_MAP[name]
        module = _importlib.import_module(module_path)
        attr = getattr(module, attr_name)
        globals()[name] = attr
        return attr
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
