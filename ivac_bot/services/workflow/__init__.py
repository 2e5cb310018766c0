"""Workflow engine for booking runs."""

from .engine import SuspendHook, WorkflowEngine, WorkflowResult, workflow_step

__all__ = ["SuspendHook", "WorkflowEngine", "WorkflowResult", "workflow_step"]
