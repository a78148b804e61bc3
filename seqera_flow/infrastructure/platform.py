"""Async client for the Seqera Platform REST API."""
from __future__ import annotations

import logging
from typing import Any, Callable
from urllib.parse import quote

import httpx

from seqera_flow.core.settings import DEFAULT_BASE_URL, Connection
from seqera_flow.domain import (
    ApiError,
    ResolutionError,
    StudioStatus,
    Submission,
    TransportError,
    WorkflowStatus,
    WorkflowSummary,
)

logger = logging.getLogger(__name__)

MASKED_TOKEN = "Bearer ***MASKED***"


def mask_headers(headers: dict[str, str]) -> dict[str, str]:
    """Copy ``headers`` with the bearer credential hidden."""

    masked = dict(headers)
    for key in list(masked):
        if key.lower() == "authorization":
            masked[key] = MASKED_TOKEN
    return masked


class SeqeraClient:
    """Thin wrapper over :class:`httpx.AsyncClient` speaking the platform API."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: str | None = None,
        *,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url must not be empty")

        self._base_url = base_url.rstrip("/")
        self._token = token
        self._client = http_client or httpx.AsyncClient(timeout=timeout, transport=transport)
        self._owns_client = http_client is None

    @classmethod
    def from_connection(cls, connection: Connection, **kwargs: Any) -> "SeqeraClient":
        return cls(connection.base_url, connection.token, **kwargs)

    @property
    def base_url(self) -> str:
        return self._base_url

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if extra:
            headers.update(extra)
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    @staticmethod
    def _clean_params(params: dict[str, Any] | None) -> dict[str, Any]:
        if not params:
            return {}
        return {key: value for key, value in params.items() if value is not None and value != ""}

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return response.text

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        files: dict[str, Any] | None = None,
    ) -> Any:
        url = self.url(path)
        headers = self.headers()
        query = self._clean_params(params)
        try:
            response = await self._client.request(
                method,
                url,
                params=query,
                json=json,
                files=files,
                headers=headers,
            )
        except httpx.RequestError as exc:
            logger.warning(
                "Seqera API %s call to %s failed: %s (headers=%s)",
                method.upper(),
                url,
                exc,
                mask_headers(headers),
            )
            raise TransportError(f"{method.upper()} {url} failed: {exc}") from exc

        if not response.is_success:
            body = self._decode(response)
            logger.warning(
                "Seqera API %s call to %s returned %s (headers=%s)",
                method.upper(),
                url,
                response.status_code,
                mask_headers(headers),
            )
            raise ApiError(
                f"{method.upper()} {url} returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=body,
            )

        return self._decode(response)

    # ------------------------------------------------------------------
    # workflows
    # ------------------------------------------------------------------
    async def submit_launch(
        self,
        body: dict[str, Any],
        workspace_id: str | None,
        source_workspace_id: str | None = None,
    ) -> Submission:
        data = await self.request(
            "POST",
            "workflow/launch",
            params={"workspaceId": workspace_id, "sourceWorkspaceId": source_workspace_id},
            json=body,
        )
        data = data if isinstance(data, dict) else {}
        workflow_id = data.get("workflowId") or (data.get("workflow") or {}).get("id")
        return Submission(workflow_id=workflow_id, raw=data)

    async def fetch_workflow(self, workflow_id: str, workspace_id: str | None = None) -> dict[str, Any]:
        data = await self.request("GET", f"workflow/{workflow_id}", params={"workspaceId": workspace_id})
        return data if isinstance(data, dict) else {}

    async def fetch_status(self, workflow_id: str, workspace_id: str | None = None) -> WorkflowStatus:
        data = await self.fetch_workflow(workflow_id, workspace_id)
        workflow = data.get("workflow") or {}
        return WorkflowStatus(
            workflow_id=workflow.get("id") or workflow_id,
            status=workflow.get("status") or "unknown",
            raw=data,
        )

    async def fetch_workflow_launch(self, workflow_id: str, workspace_id: str | None = None) -> dict[str, Any]:
        data = await self.request("GET", f"workflow/{workflow_id}/launch", params={"workspaceId": workspace_id})
        launch = data.get("launch") if isinstance(data, dict) else None
        if not launch:
            raise ResolutionError(f"invalid launch config response for workflow '{workflow_id}'")
        return launch

    async def list_workflows(
        self,
        workspace_id: str | None,
        *,
        max_results: int = 50,
        search: str | None = None,
    ) -> list[WorkflowSummary]:
        data = await self.request(
            "GET",
            "workflow",
            params={
                "attributes": "minimal",
                "workspaceId": workspace_id,
                "max": max_results,
                "search": search.strip() if search else None,
            },
        )
        entries = data.get("workflows") if isinstance(data, dict) else None
        summaries: list[WorkflowSummary] = []
        for entry in entries or []:
            workflow = entry.get("workflow") or {}
            if not workflow.get("id"):
                continue
            summaries.append(WorkflowSummary(workflow_id=workflow["id"], status=workflow.get("status"), raw=entry))
        return summaries

    # ------------------------------------------------------------------
    # pipelines (launchpad)
    # ------------------------------------------------------------------
    async def list_pipelines(
        self,
        workspace_id: str | None,
        *,
        search: str = "",
        max_results: int = 50,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        data = await self.request(
            "GET",
            "pipelines",
            params={
                "workspaceId": workspace_id,
                "max": max_results,
                "offset": offset,
                "search": search,
                "visibility": "all",
            },
        )
        return list((data.get("pipelines") if isinstance(data, dict) else None) or [])

    async def find_pipeline(self, name: str, workspace_id: str | None) -> dict[str, Any]:
        pipelines = await self.list_pipelines(workspace_id, search=name)
        if not pipelines:
            raise ResolutionError(f"No pipeline found for launchpad name '{name}'")
        match = next((pipeline for pipeline in pipelines if pipeline.get("name") == name), None)
        if match is None:
            match = pipelines[0]
            logger.warning(
                "No exact launchpad match for %r; falling back to first result %r",
                name,
                match.get("name"),
            )
        return match

    async def fetch_launch_config(self, pipeline_id: Any, workspace_id: str | None) -> dict[str, Any]:
        data = await self.request("GET", f"pipelines/{pipeline_id}/launch", params={"workspaceId": workspace_id})
        launch = data.get("launch") if isinstance(data, dict) else None
        if not launch:
            raise ResolutionError(f"invalid launch config response for pipeline '{pipeline_id}'")
        return dict(launch)

    # ------------------------------------------------------------------
    # datasets
    # ------------------------------------------------------------------
    async def create_dataset(
        self,
        name: str,
        workspace_id: str | None,
        *,
        description: str | None = None,
    ) -> tuple[str | None, dict[str, Any]]:
        body: dict[str, Any] = {"name": name}
        if description:
            body["description"] = description
        data = await self.request("POST", "datasets", params={"workspaceId": workspace_id}, json=body)
        data = data if isinstance(data, dict) else {}
        dataset_id = (data.get("dataset") or {}).get("id") or data.get("datasetId") or data.get("id")
        return dataset_id, data

    async def upload_dataset(
        self,
        dataset_id: str,
        content: bytes,
        *,
        filename: str,
        mime_type: str,
        workspace_id: str | None,
        has_header: bool = False,
    ) -> Any:
        return await self.request(
            "POST",
            f"datasets/{dataset_id}/upload",
            params={"workspaceId": workspace_id, "header": "true" if has_header else None},
            files={"file": (filename, content, mime_type)},
        )

    # ------------------------------------------------------------------
    # data links
    # ------------------------------------------------------------------
    async def search_data_links(self, name: str, workspace_id: str | None) -> list[dict[str, Any]]:
        data = await self.request(
            "GET",
            "data-links/",
            params={"workspaceId": workspace_id, "pageSize": 2, "search": name},
        )
        return list((data.get("dataLinks") if isinstance(data, dict) else None) or [])

    async def browse_data_link(
        self,
        data_link_id: str,
        path: str,
        workspace_id: str | None,
        *,
        search: str | None = None,
        credentials_id: str | None = None,
        next_page: str | None = None,
    ) -> dict[str, Any]:
        encoded = "/".join(quote(part, safe="") for part in path.split("/") if part)
        data = await self.request(
            "GET",
            f"data-links/{quote(str(data_link_id), safe='')}/browse/{encoded}",
            params={
                "workspaceId": workspace_id,
                "search": search,
                "credentialsId": credentials_id,
                "nextPageToken": next_page,
            },
        )
        return data if isinstance(data, dict) else {}

    async def create_data_link(self, body: dict[str, Any], workspace_id: str | None) -> tuple[str | None, dict[str, Any]]:
        data = await self.request("POST", "data-links", params={"workspaceId": workspace_id}, json=body)
        data = data if isinstance(data, dict) else {}
        data_link_id = (data.get("dataLink") or {}).get("id") or data.get("id")
        return data_link_id, data

    async def list_credentials(self, workspace_id: str | None) -> list[dict[str, Any]]:
        data = await self.request("GET", "credentials", params={"workspaceId": workspace_id})
        return list((data.get("credentials") if isinstance(data, dict) else None) or [])

    # ------------------------------------------------------------------
    # studios
    # ------------------------------------------------------------------
    async def fetch_studio(self, studio_id: str, workspace_id: str | None = None) -> StudioStatus:
        data = await self.request("GET", f"studios/{studio_id}", params={"workspaceId": workspace_id})
        data = data if isinstance(data, dict) else {}
        return StudioStatus(
            studio_id=data.get("sessionId") or studio_id,
            status=(data.get("statusInfo") or {}).get("status") or "unknown",
            raw=data,
        )

    async def create_studio(
        self,
        body: dict[str, Any],
        workspace_id: str | None,
        *,
        auto_start: bool | None = None,
    ) -> tuple[str | None, dict[str, Any]]:
        params: dict[str, Any] = {"workspaceId": workspace_id}
        if auto_start is not None:
            params["autoStart"] = "true" if auto_start else "false"
        data = await self.request("POST", "studios", params=params, json=body)
        data = data if isinstance(data, dict) else {}
        studio_id = (data.get("studio") or {}).get("sessionId") or data.get("sessionId")
        return studio_id, data

    # ------------------------------------------------------------------
    # account
    # ------------------------------------------------------------------
    async def user_info(self) -> dict[str, Any]:
        data = await self.request("GET", "user-info")
        return data if isinstance(data, dict) else {}

    async def list_organizations(self) -> list[dict[str, Any]]:
        data = await self.request("GET", "orgs")
        organizations = data.get("organizations") if isinstance(data, dict) else None
        if organizations is None:
            raise ResolutionError("Invalid organizations response")
        return list(organizations)

    async def list_org_workspaces(self, org_id: Any) -> list[dict[str, Any]]:
        data = await self.request("GET", f"orgs/{org_id}/workspaces")
        return list((data.get("workspaces") if isinstance(data, dict) else None) or [])

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


ClientFactory = Callable[[Connection], SeqeraClient]

_client_factory: ClientFactory = SeqeraClient.from_connection


def configure_client_factory(factory: ClientFactory) -> None:
    """Install the factory adapters use to build clients per invocation."""

    global _client_factory
    _client_factory = factory


def get_client_factory() -> ClientFactory:
    return _client_factory


def reset_client_factory() -> None:
    configure_client_factory(SeqeraClient.from_connection)


__all__ = [
    "MASKED_TOKEN",
    "ClientFactory",
    "SeqeraClient",
    "configure_client_factory",
    "get_client_factory",
    "mask_headers",
    "reset_client_factory",
]
