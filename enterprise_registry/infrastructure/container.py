"""
Dependency Injection Container - Owns the registry's connection pool and repositories.

The container is constructed explicitly and passed to whoever needs it; there
is no process-wide instance. start() opens the pool, shutdown() closes it.

Usage:
    async with RegistryContainer(ContainerConfig.from_env()) as container:
        repository = container.get(IEnterpriseRepository)
        page = await repository.list_enterprises(take=10)
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar, cast

from enterprise_registry.application.interfaces.exceptions import FactoryError, RepositoryError
from enterprise_registry.application.interfaces.repositories import (
    IEnterpriseRepository,
    IEstablishmentRepository,
)
from enterprise_registry.infrastructure.config import LoggingConfig
from enterprise_registry.infrastructure.database.adapter import PostgreSQLAdapter
from enterprise_registry.infrastructure.database.connection import (
    DatabaseConfig,
    DatabaseConnection,
)
from enterprise_registry.infrastructure.monitoring.logging import setup_structured_logging
from enterprise_registry.infrastructure.repositories import (
    PostgreSQLEnterpriseRepository,
    PostgreSQLEstablishmentRepository,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ContainerConfig:
    """Configuration for the DI container."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Install structured logging handlers on start()
    configure_logging: bool = False

    @classmethod
    def from_env(cls) -> "ContainerConfig":
        """Load database and logging config from environment variables"""
        return cls(
            database=DatabaseConfig.from_env(),
            logging=LoggingConfig.from_env(),
            configure_logging=True,
        )


class RegistryContainer:
    """
    Dependency Injection Container for the enterprise registry.

    Manages the connection pool lifecycle and the wiring of the adapter and
    repositories built on it.
    """

    def __init__(
        self,
        config: ContainerConfig | None = None,
        connection: DatabaseConnection | None = None,
    ) -> None:
        """
        Initialize the container with configuration.

        Args:
            config: Container configuration
            connection: Pre-built connection manager, built from config if omitted
        """
        self.config = config or ContainerConfig()
        self.connection = connection or DatabaseConnection(self.config.database)
        self._singletons: dict[type[Any], Any] = {}
        self._factories: dict[type[Any], Callable[[], Any]] = {}
        self._started = False

    @property
    def is_started(self) -> bool:
        return self._started

    async def start(self) -> "RegistryContainer":
        """
        Open the connection pool and register the repositories.

        Raises:
            AuthenticationError: If the database rejects the credentials
            ConnectionError: If the database stays unreachable
        """
        if self._started:
            return self

        if self.config.configure_logging:
            setup_structured_logging(
                level=self.config.logging.level,
                format_type=self.config.logging.format_type,
                log_file=self.config.logging.log_file,
            )

        pool = await self.connection.connect()
        self._register_infrastructure(PostgreSQLAdapter(pool))
        self._started = True

        await self._log_diagnostics()
        logger.info("Registry container started")
        return self

    def _register_infrastructure(self, adapter: PostgreSQLAdapter) -> None:
        """Register infrastructure components."""
        self.register(PostgreSQLAdapter, adapter)

        self._register_singleton(
            IEstablishmentRepository,  # type: ignore[type-abstract]
            lambda: PostgreSQLEstablishmentRepository(self.get(PostgreSQLAdapter)),
        )
        self._register_singleton(
            IEnterpriseRepository,  # type: ignore[type-abstract]
            lambda: PostgreSQLEnterpriseRepository(
                self.get(PostgreSQLAdapter),
                establishments=self.get(IEstablishmentRepository),  # type: ignore[type-abstract]
                schema=self.config.database.schema,
            ),
        )

    async def _log_diagnostics(self) -> None:
        """Log the tables visible in the configured schema."""
        repository = self.get(IEnterpriseRepository)  # type: ignore[type-abstract]
        try:
            tables = await repository.list_tables()
        except RepositoryError as e:
            logger.warning(f"Could not list tables of schema {self.config.database.schema}: {e}")
            return
        logger.info(f"Tables in schema {self.config.database.schema}: {', '.join(tables) or '<none>'}")

    def _register_singleton(self, cls: type[T], factory: Callable[[], T]) -> None:
        """Register a lazily created singleton."""
        self._factories[cls] = factory

    def register(self, cls: type[T], instance: T) -> None:
        """
        Register a pre-created instance.

        Args:
            cls: The class type
            instance: The instance to register
        """
        self._singletons[cls] = instance
        self._factories[cls] = lambda: instance

    def has(self, cls: type[T]) -> bool:
        """Check if a component is registered."""
        return cls in self._factories

    def get(self, cls: type[T]) -> T:
        """
        Get a component instance.

        Args:
            cls: The class type to retrieve

        Returns:
            The component instance

        Raises:
            FactoryError: If the container is not started or nothing is registered
        """
        if cls in self._singletons:
            return cast(T, self._singletons[cls])

        if not self._started and cls not in self._factories:
            raise FactoryError(cls.__name__, "container is not started")

        if cls not in self._factories:
            raise FactoryError(cls.__name__, "no registration found")

        instance = self._factories[cls]()
        self._singletons[cls] = instance
        return cast(T, instance)

    @property
    def enterprises(self) -> IEnterpriseRepository:
        return self.get(IEnterpriseRepository)  # type: ignore[type-abstract]

    @property
    def establishments(self) -> IEstablishmentRepository:
        return self.get(IEstablishmentRepository)  # type: ignore[type-abstract]

    async def shutdown(self) -> None:
        """Close the connection pool and drop every registered component."""
        await self.connection.disconnect()
        self._singletons.clear()
        self._factories.clear()
        self._started = False
        logger.info("Registry container shut down")

    async def __aenter__(self) -> "RegistryContainer":
        return await self.start()

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.shutdown()
