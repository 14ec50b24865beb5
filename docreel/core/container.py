"""Dependency Injection Container.

This module provides a centralized DI container using dependency-injector.
Lifecycles:
- Singleton: One instance for the whole process (HTTP client, registries)
- Factory: New instance per call (one session stack per opened script)

Usage:
    from docreel.core.container import container, EditorScope

    async with EditorScope(script) as editor:
        editor.session.update(lambda s: approval.approve(s, "s1", Channel.VISUAL))
        await editor.scheduler.wait_idle()

    # In tests
    with container.infrastructure.renderer.override(mock_renderer):
        ...
"""

from types import TracebackType

from dependency_injector import containers, providers

from docreel.core.config import Config, get_config
from docreel.core.config_loader import load_defaults
from docreel.core.logging import bind_script, unbind_script
from docreel.models.script import Script


class InfrastructureContainer(containers.DeclarativeContainer):
    """Infrastructure layer dependencies (backend HTTP clients)."""

    global_config = providers.Dependency(instance_of=Config)

    # ============================================
    # HTTP Client
    # ============================================

    http_client = providers.Singleton(
        "docreel.infrastructure.http_client.HTTPClient",
        base_url=global_config.provided.api_base_url,
        token=global_config.provided.api_access_token,
    )

    # ============================================
    # Backend Services
    # ============================================

    renderer = providers.Singleton(
        "docreel.infrastructure.renderer.RenderServiceClient",
        http_client=http_client,
        timeout=global_config.provided.render_timeout_seconds,
    )

    script_storage = providers.Singleton(
        "docreel.infrastructure.storage.ScriptStorageClient",
        http_client=http_client,
        timeout=global_config.provided.storage_timeout_seconds,
    )

    distribution = providers.Singleton(
        "docreel.infrastructure.distribution.DistributionClient",
        http_client=http_client,
        timeout=global_config.provided.distribution_timeout_seconds,
    )


class ConfigContainer(containers.DeclarativeContainer):
    """Component configuration loaded from config/defaults.yaml."""

    global_config = providers.Dependency(instance_of=Config)

    defaults = providers.Singleton(
        load_defaults,
        path=global_config.provided.defaults_path,
    )

    media_config = providers.Singleton(lambda d: d.media, d=defaults)
    assembly_config = providers.Singleton(lambda d: d.assembly, d=defaults)
    auto_assembly_config = providers.Singleton(lambda d: d.auto_assembly, d=defaults)
    export_config = providers.Singleton(lambda d: d.export, d=defaults)


class ServiceContainer(containers.DeclarativeContainer):
    """Service layer dependencies.

    Process-wide services are Singletons. The session stack is built per
    script with Factory providers; callers pass ``script=`` or ``session=``.
    """

    global_config = providers.Dependency(instance_of=Config)
    infrastructure = providers.DependenciesContainer()
    configs = providers.DependenciesContainer()

    # ============================================
    # Media
    # ============================================

    handle_registry = providers.Singleton(
        "docreel.services.media.handles.HandleRegistry",
    )

    media_resolver = providers.Singleton(
        "docreel.services.media.resolver.MediaSourceResolver",
        config=configs.media_config,
    )

    # ============================================
    # Stateless services
    # ============================================

    approval_service = providers.Singleton(
        "docreel.services.approval.service.SegmentApprovalService",
        resolver=media_resolver,
    )

    request_builder = providers.Singleton(
        "docreel.services.assembly.builder.AssemblyRequestBuilder",
        resolver=media_resolver,
        config=configs.assembly_config,
    )

    persistence_codec = providers.Singleton(
        "docreel.services.persistence.codec.PersistenceCodec",
        handles=handle_registry,
        resolver=media_resolver,
    )

    download_target = providers.Singleton(
        "docreel.services.export.targets.LocalDownloadTarget",
        export_dir=global_config.provided.export_dir,
    )

    distribution_target = providers.Factory(
        "docreel.services.export.targets.DistributionTarget",
        client=infrastructure.distribution,
    )

    # ============================================
    # Per-script session stack
    # ============================================

    script_session = providers.Factory(
        "docreel.services.session.ScriptSession",
        handles=handle_registry,
        resolver=media_resolver,
        config=configs.assembly_config,
    )

    assembly_coordinator = providers.Factory(
        "docreel.services.assembly.coordinator.AssemblyCoordinator",
        builder=request_builder,
        renderer=infrastructure.renderer,
    )

    auto_assembly_scheduler = providers.Factory(
        "docreel.services.assembly.scheduler.AutoAssemblyScheduler",
        config=configs.auto_assembly_config,
    )

    export_gate = providers.Factory(
        "docreel.services.export.gate.ExportGate",
        default_target=download_target,
        config=configs.export_config,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Root container wiring config, infrastructure and services."""

    config = providers.Singleton(get_config)

    # Sub-containers
    infrastructure = providers.Container(
        InfrastructureContainer,
        global_config=config,
    )

    configs = providers.Container(
        ConfigContainer,
        global_config=config,
    )

    services = providers.Container(
        ServiceContainer,
        global_config=config,
        infrastructure=infrastructure,
        configs=configs,
    )

    # ============================================
    # Convenience accessors (shortcuts)
    # ============================================

    http_client = providers.Singleton(
        lambda client: client,
        client=infrastructure.http_client,
    )

    codec = providers.Singleton(
        lambda svc: svc,
        svc=services.persistence_codec,
    )

    approval = providers.Singleton(
        lambda svc: svc,
        svc=services.approval_service,
    )


def create_container() -> ApplicationContainer:
    """Create and configure the application container.

    Returns:
        Configured ApplicationContainer instance
    """
    return ApplicationContainer()


# Global container instance
container = create_container()


def get_container() -> ApplicationContainer:
    """Get the global container."""
    return container


# ============================================
# Editor Scope
# ============================================


class EditorScope:
    """Async context manager for one open script.

    Builds the session, coordinator, auto-assembly scheduler and export
    gate for a script, starts the scheduler on enter and stops it on exit.

    Usage:
        async with EditorScope(script) as editor:
            await editor.coordinator.preview()
    """

    def __init__(self, script: Script, app: ApplicationContainer | None = None) -> None:
        services = (app or container).services
        self.session = services.script_session(script=script)
        self.coordinator = services.assembly_coordinator(session=self.session)
        self.scheduler = services.auto_assembly_scheduler(
            session=self.session, coordinator=self.coordinator
        )
        self.gate = services.export_gate(session=self.session)
        self._script_id = script.id

    async def __aenter__(self) -> "EditorScope":
        bind_script(self._script_id)
        self.scheduler.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.scheduler.stop()
        # Renders already started finish; only the pending timer is dropped
        try:
            await self.scheduler.wait_idle()
        finally:
            unbind_script()


# ============================================
# Testing Utilities
# ============================================


def override_renderer(mock_renderer: object):
    """Context manager to override the renderer for testing.

    Usage:
        with override_renderer(mock_renderer):
            # Every coordinator built from the container uses mock_renderer
            ...
    """
    return container.infrastructure.renderer.override(mock_renderer)


def override_http_client(mock_client: object):
    """Context manager to override the backend HTTP client for testing."""
    return container.infrastructure.http_client.override(mock_client)


__all__ = [
    "ApplicationContainer",
    "ConfigContainer",
    "EditorScope",
    "InfrastructureContainer",
    "ServiceContainer",
    "container",
    "create_container",
    "get_config",
    "get_container",
    "override_http_client",
    "override_renderer",
]
