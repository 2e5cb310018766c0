"""Configuration package - run models, process settings and YAML loading."""

from .config_loader import load_config, load_config_dict, substitute_env_vars
from .config_models import (
    ApplicationRequest,
    FamilyMember,
    LoginCredentials,
    PaymentMethod,
    PersonalInfo,
    RunConfig,
    WorkflowSettings,
)
from .settings import IvacSettings, get_settings, reset_settings

__all__ = [
    "load_config",
    "load_config_dict",
    "substitute_env_vars",
    "ApplicationRequest",
    "FamilyMember",
    "LoginCredentials",
    "PaymentMethod",
    "PersonalInfo",
    "RunConfig",
    "WorkflowSettings",
    "IvacSettings",
    "get_settings",
    "reset_settings",
]
