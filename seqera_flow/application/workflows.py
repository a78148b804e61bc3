"""One-shot workflow adapters: launch a workflow, or look up its status once."""
from __future__ import annotations

import logging
from typing import Any

from seqera_flow.application.base import Adapter
from seqera_flow.application.launch import resolve_launch_body
from seqera_flow.core.launch import build_resume_launch, split_profiles
from seqera_flow.core.schema import WorkflowLaunchSettings, WorkflowStatusSettings
from seqera_flow.core.settings import Connection, PlatformConfig
from seqera_flow.core.status import classify
from seqera_flow.domain import ConfigurationError, InputEvent, ResolutionError, SeqeraError
from seqera_flow.infrastructure.host import Host
from seqera_flow.infrastructure.platform import ClientFactory, SeqeraClient, mask_headers

logger = logging.getLogger(__name__)


class WorkflowLaunch(Adapter):
    """Submit a launch and emit the platform response without monitoring it."""

    def __init__(
        self,
        host: Host,
        settings: WorkflowLaunchSettings | None = None,
        *,
        shared: PlatformConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        super().__init__(host, settings or WorkflowLaunchSettings(), shared=shared, client_factory=client_factory)
        host.on_input(self.handle_input)

    async def handle_input(self, event: InputEvent) -> None:
        settings: WorkflowLaunchSettings = self.settings  # type: ignore[assignment]
        self.show("blue", "ring", "launching")

        connection = self.connection_for(event.overrides())
        client = self.client_for(connection)
        resume_id = (event.resume_workflow_id or settings.resume_workflow_id or "").strip()
        run_name = (event.run_name or settings.run_name or "").strip()
        named = {param.name: param.value for param in settings.params if param.name.strip()}

        try:
            body = await resolve_launch_body(
                client,
                body=event.body if event.body is not None else event.payload,
                launchpad_name=event.launchpad_name or settings.launchpad_name,
                workspace_id=connection.workspace_id,
                params=event.params,
                named_params=named,
                require_launch=not resume_id,
            )
            if run_name:
                body.setdefault("launch", {})["runName"] = run_name

            profiles = split_profiles(
                event.config_profiles if event.config_profiles is not None else settings.config_profiles
            )
            if profiles:
                body.setdefault("launch", {})["configProfiles"] = profiles

            if resume_id:
                body["launch"] = await self._resume_launch(client, resume_id, connection, body, run_name)

            try:
                submission = await client.submit_launch(body, connection.workspace_id, connection.source_workspace_id)
            except SeqeraError as exc:
                exc.stage = exc.stage or "launch"
                raise
        except SeqeraError as exc:
            self.show_error()
            self.host.report_error(f"Seqera launch failed ({exc.stage}): {exc}", event.passthrough())
            raise
        finally:
            await client.aclose()

        message: dict[str, Any] = {
            **event.passthrough(),
            "payload": submission.raw,
            "workflowId": submission.workflow_id,
            "request": {
                "method": "POST",
                "url": client.url("workflow/launch"),
                "headers": mask_headers(client.headers({"Content-Type": "application/json"})),
                "body": body,
            },
        }
        logger.info("Launched workflow %s", submission.workflow_id)
        self.show("green", "dot", "launched")
        self.host.emit(0, message)

    async def _resume_launch(
        self,
        client: SeqeraClient,
        workflow_id: str,
        connection: Connection,
        body: dict[str, Any],
        run_name: str,
    ) -> dict[str, Any]:
        try:
            data = await client.fetch_workflow(workflow_id, connection.workspace_id)
            workflow = data.get("workflow")
            if not workflow:
                raise ResolutionError(f"Invalid workflow response for '{workflow_id}'")
            workflow_launch = await client.fetch_workflow_launch(workflow_id, connection.workspace_id)
        except SeqeraError as exc:
            exc.stage = exc.stage or "resume"
            raise

        return build_resume_launch(
            workflow,
            workflow_launch,
            params_text=(body.get("launch") or {}).get("paramsText"),
            run_name=run_name,
        )


class WorkflowStatusCheck(Adapter):
    """Fetch a workflow once; channel 0 while active, channel 1 once final."""

    def __init__(
        self,
        host: Host,
        settings: WorkflowStatusSettings | None = None,
        *,
        shared: PlatformConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        super().__init__(host, settings or WorkflowStatusSettings(), shared=shared, client_factory=client_factory)
        host.on_input(self.handle_input)

    async def handle_input(self, event: InputEvent) -> None:
        if not event.workflow_id:
            self.show_error()
            raise ConfigurationError("workflowId not provided", stage="status")

        connection = self.connection_for(event.overrides())
        client = self.client_for(connection)
        try:
            result = await client.fetch_status(event.workflow_id, connection.workspace_id)
        except SeqeraError as exc:
            self.show_error()
            self.host.report_error(f"Seqera API request failed: {exc}", event.passthrough())
            raise
        finally:
            await client.aclose()

        classification = classify(result.status)
        self.show(classification.color, classification.shape, classification.status)
        message = {**event.passthrough(), "payload": result.raw, "workflowId": result.workflow_id}
        self.host.emit(0 if classification.category.is_active else 1, message)


__all__ = ["WorkflowLaunch", "WorkflowStatusCheck"]
