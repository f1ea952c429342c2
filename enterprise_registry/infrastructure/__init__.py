"""Infrastructure Layer for the Enterprise Registry.

This package provides concrete implementations of the application layer interfaces:

- database: PostgreSQL connection pool, adapter, query builder and schema
- repositories: enterprise and establishment repositories and the consistency
  procedures they run
- monitoring: structured logging
- resilience: start-up retry with exponential backoff
- container: wiring and lifecycle of the above

Example usage:
    from enterprise_registry.infrastructure.container import ContainerConfig, RegistryContainer

    async with RegistryContainer(ContainerConfig.from_env()) as container:
        result = await container.enterprises.create_enterprise({"enterprisenumber": "0123.456.789"})
"""
