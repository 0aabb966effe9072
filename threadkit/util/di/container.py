"""Dependency injection container."""

from dishka import AsyncContainer, make_async_container

from threadkit.config import Settings
from threadkit.util.di import PROVIDERS, get_provider
from threadkit.util.logging import setup_logging
from threadkit.util.observability import configure_logfire


def create_container(settings: Settings | None = None) -> AsyncContainer:
    """Build production container (all prod implementations).

    Loads settings from the environment unless given, configures logging
    and Logfire, and wires the SQL comment store.

    Args:
        settings: Settings to use instead of the environment

    Returns:
        Configured DI container with production providers
    """
    settings = settings or Settings()
    setup_logging(settings)
    configure_logfire(settings)

    provider_instances = [get_provider(base, use_mock=False)() for base in PROVIDERS]
    return make_async_container(*provider_instances, context={Settings: settings})
