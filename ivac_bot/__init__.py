"""IVAC Bot - session workflow engine for the IVAC Bangladesh payment portal."""

import importlib as _importlib
from typing import TYPE_CHECKING, Any

__version__ = "1.0.0"
__license__ = "MIT"

if TYPE_CHECKING:
    from .core.config.config_loader import load_config as load_config
    from .core.config.config_models import RunConfig as RunConfig
    from .core.logger import setup_structured_logging as setup_structured_logging
    from .services.transport.aiohttp_transport import AiohttpTransport as AiohttpTransport
    from .services.workflow.engine import WorkflowEngine as WorkflowEngine
    from .services.workflow.engine import WorkflowResult as WorkflowResult

# Explicit lazy-loading map: name -> (module_path, attribute_name)
_LAZY_MODULE_MAP = {
    # Core
    "load_config": ("ivac_bot.core.config.config_loader", "load_config"),
    "RunConfig": ("ivac_bot.core.config.config_models", "RunConfig"),
    "setup_structured_logging": ("ivac_bot.core.logger", "setup_structured_logging"),
    # Services
    "AiohttpTransport": ("ivac_bot.services.transport.aiohttp_transport", "AiohttpTransport"),
    "WorkflowEngine": ("ivac_bot.services.workflow.engine", "WorkflowEngine"),
    "WorkflowResult": ("ivac_bot.services.workflow.engine", "WorkflowResult"),
}

# Auto-derive __all__ from _LAZY_MODULE_MAP to prevent manual sync issues
__all__ = list(_LAZY_MODULE_MAP.keys())


def __getattr__(name: str) -> Any:
    """Lazy import with explicit mapping - importlib based."""
    if name in _LAZY_MODULE_MAP:
        module_path, attr_name = _LAZY_MODULE_MAP[name]
        module = _importlib.import_module(module_path)
        attr = getattr(module, attr_name)
        # Cache in module globals to avoid repeated imports
        globals()[name] = attr
        return attr
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
