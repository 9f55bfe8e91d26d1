from .fixtures.app import (
    api_app,
    api_client,
    authenticated_api_client,
    files_repository,
    test_config,
)

__all__ = [
    "api_app",
    "api_client",
    "authenticated_api_client",
    "files_repository",
    "test_config",
]
