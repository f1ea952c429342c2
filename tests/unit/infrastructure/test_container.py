"""
Unit tests for the registry DI container.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from enterprise_registry.application.interfaces.exceptions import FactoryError, RepositoryError
from enterprise_registry.application.interfaces.repositories import (
    IEnterpriseRepository,
    IEstablishmentRepository,
)
from enterprise_registry.infrastructure.config import LoggingConfig
from enterprise_registry.infrastructure.container import ContainerConfig, RegistryContainer
from enterprise_registry.infrastructure.database.adapter import PostgreSQLAdapter
from enterprise_registry.infrastructure.database.connection import (
    DatabaseConfig,
    DatabaseConnection,
)
from enterprise_registry.infrastructure.repositories import (
    PostgreSQLEnterpriseRepository,
    PostgreSQLEstablishmentRepository,
)

LIST_TABLES = (
    "enterprise_registry.infrastructure.repositories.enterprise_repository."
    "PostgreSQLEnterpriseRepository.list_tables"
)


@pytest.fixture
def mock_connection():
    connection = AsyncMock(spec=DatabaseConnection)
    connection.connect.return_value = MagicMock()
    return connection


@pytest.fixture
def container(mock_connection):
    config = ContainerConfig(database=DatabaseConfig(schema="registry"))
    return RegistryContainer(config, connection=mock_connection)


@pytest.mark.unit
class TestContainerConfig:
    """Test container configuration."""

    def test_defaults(self):
        config = ContainerConfig()

        assert isinstance(config.database, DatabaseConfig)
        assert isinstance(config.logging, LoggingConfig)
        assert config.configure_logging is False

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "text")
        monkeypatch.setenv("DATABASE_SCHEMA", "kbo")

        config = ContainerConfig.from_env()

        assert config.logging.format_type == "text"
        assert config.database.schema == "kbo"
        assert config.configure_logging is True


@pytest.mark.unit
class TestRegistryContainer:
    """Test container lifecycle and wiring."""

    def test_get_before_start(self, container):
        with pytest.raises(FactoryError, match="not started"):
            container.get(IEnterpriseRepository)

    async def test_start_wires_repositories(self, container, mock_connection):
        with patch(LIST_TABLES, AsyncMock(return_value=["enterprise"])):
            await container.start()

        mock_connection.connect.assert_awaited_once()
        assert container.is_started
        enterprises = container.get(IEnterpriseRepository)
        assert isinstance(enterprises, PostgreSQLEnterpriseRepository)
        assert isinstance(container.get(PostgreSQLAdapter), PostgreSQLAdapter)
        assert container.get(IEstablishmentRepository) is enterprises.establishments
        assert isinstance(container.establishments, PostgreSQLEstablishmentRepository)
        assert enterprises.schema == "registry"
        assert container.enterprises is enterprises

    async def test_start_is_idempotent(self, container, mock_connection):
        with patch(LIST_TABLES, AsyncMock(return_value=[])):
            await container.start()
            await container.start()

        mock_connection.connect.assert_awaited_once()

    async def test_diagnostics_failure_does_not_block_start(self, container):
        with patch(LIST_TABLES, AsyncMock(side_effect=RepositoryError("denied"))):
            await container.start()

        assert container.is_started

    async def test_connect_failure_propagates(self, container, mock_connection):
        mock_connection.connect.side_effect = RepositoryError("unreachable")

        with pytest.raises(RepositoryError):
            await container.start()

        assert not container.is_started

    async def test_async_context_shuts_down(self, container, mock_connection):
        with patch(LIST_TABLES, AsyncMock(return_value=[])):
            async with container as started:
                assert started is container

        mock_connection.disconnect.assert_awaited_once()
        assert not container.is_started
        with pytest.raises(FactoryError):
            container.get(IEnterpriseRepository)

    async def test_unregistered_component(self, container):
        with patch(LIST_TABLES, AsyncMock(return_value=[])):
            await container.start()

        with pytest.raises(FactoryError, match="no registration"):
            container.get(dict)
