"""Operator workflow — state machine, command menu and revalidation."""

from plcconsole.workflow.engine import WorkflowEngine
from plcconsole.workflow.states import WorkflowContext, WorkflowState

__all__ = ["WorkflowContext", "WorkflowEngine", "WorkflowState"]
