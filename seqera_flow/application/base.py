from __future__ import annotations

from seqera_flow.core.schema import AdapterSettings
from seqera_flow.core.settings import Connection, ConnectionOverrides, PlatformConfig, resolve_connection
from seqera_flow.infrastructure.host import Host, NodeStatus
from seqera_flow.infrastructure.platform import ClientFactory, SeqeraClient, get_client_factory


class Adapter:
    """Plumbing shared by every adapter: host, settings and connection layers."""

    def __init__(
        self,
        host: Host,
        settings: AdapterSettings,
        *,
        shared: PlatformConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self.host = host
        self.settings = settings
        self.shared = shared or PlatformConfig()
        self._client_factory = client_factory

    def connection_for(self, overrides: ConnectionOverrides | None = None) -> Connection:
        return resolve_connection(
            overrides,
            self.settings.overrides(),
            shared=self.shared,
            legacy_token=self.settings.legacy_token,
        )

    def client_for(self, connection: Connection) -> SeqeraClient:
        factory = self._client_factory or get_client_factory()
        return factory(connection)

    def show(self, fill: str, shape: str, text: str) -> None:
        self.host.set_status(NodeStatus(fill, shape, text))

    def show_error(self) -> None:
        self.host.set_status(NodeStatus.error())


__all__ = ["Adapter"]
