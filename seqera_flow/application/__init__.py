"""Flow adapters built on the platform client."""

from .datalinks import DataLinkAdd, DataLinkList, list_data_link
from .datasets import DatasetCreate
from .launch import resolve_launch_body, resolve_launchpad
from .monitoring import LaunchMonitor, WorkflowMonitor
from .polling import DataLinkPoller, WorkflowPoller
from .studios import StudioCreate, StudiosMonitor
from .workflows import WorkflowLaunch, WorkflowStatusCheck

__all__ = [
    "DataLinkAdd",
    "DataLinkList",
    "DataLinkPoller",
    "DatasetCreate",
    "LaunchMonitor",
    "StudioCreate",
    "StudiosMonitor",
    "WorkflowLaunch",
    "WorkflowMonitor",
    "WorkflowPoller",
    "WorkflowStatusCheck",
    "list_data_link",
    "resolve_launch_body",
    "resolve_launchpad",
]
