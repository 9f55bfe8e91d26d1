# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

from unittest.mock import call, MagicMock

from fastapi import FastAPI
import pytest
import uvicorn

from uploadapiserver.app import App, MiddlewareHandler, ServerConfig


class TestMiddlewareHandler:
    def test_getters(self):
        mock_class = MagicMock()
        handler = MiddlewareHandler(mock_class, arg1="value1")
        assert handler.get_middleware() == mock_class
        assert handler.get_kwargs() == {"arg1": "value1"}


class TestServerConfig:
    def test_defaults(self):
        config = ServerConfig()
        assert config.host == "0.0.0.0"
        assert config.port == 8081
        assert config.timeout_graceful_shutdown == 5


@pytest.fixture
def fake_server_config():
    return ServerConfig(host="127.0.0.1", port=9000)


@pytest.fixture
def mock_fastapi(monkeypatch):
    # Mock FastAPI so to check the calls to the contructor
    mock_app = MagicMock(spec=FastAPI)
    mock_app.router = MagicMock()
    mock_fastapi_class = MagicMock(return_value=mock_app)
    monkeypatch.setattr("uploadapiserver.app.FastAPI", mock_fastapi_class)
    return mock_fastapi_class, mock_app


@pytest.fixture
def mock_uvicorn(monkeypatch):
    # Mock Uvicorn Config and Server so to check the calls to the contructors
    mock_config = MagicMock(spec=uvicorn.Config)
    mock_server = MagicMock(spec=uvicorn.Server)
    mock_config_class = MagicMock(return_value=mock_config)
    mock_server_class = MagicMock(return_value=mock_server)

    monkeypatch.setattr(
        "uploadapiserver.app.uvicorn.Config", mock_config_class
    )
    monkeypatch.setattr(
        "uploadapiserver.app.uvicorn.Server", mock_server_class
    )

    return mock_config_class, mock_server_class, mock_config, mock_server


class TestApp:
    def test_prepare_app_registers_api(
        self, mock_fastapi, mock_uvicorn, fake_server_config
    ):
        mock_fastapi_class, mock_app = mock_fastapi
        mock_api = MagicMock()

        App(
            app_title="My App",
            app_name="test_app",
            api=[mock_api],
            middlewares=[],
            server_config=fake_server_config,
        )

        mock_fastapi_class.assert_called_once()
        mock_api.register.assert_called_once_with(mock_app.router)

    def test_middlewares_added_innermost_first(
        self, mock_fastapi, mock_uvicorn, fake_server_config
    ):
        _, mock_app = mock_fastapi
        outer = MiddlewareHandler(MagicMock(name="outer"), option=1)
        middle = MiddlewareHandler(MagicMock(name="middle"))
        inner = MiddlewareHandler(MagicMock(name="inner"), option=3)

        App(
            app_title="My App",
            app_name="test_app",
            api=[],
            middlewares=[outer, middle, inner],
            server_config=fake_server_config,
        )

        # Starlette puts the last added middleware outermost.
        assert mock_app.add_middleware.call_args_list == [
            call(inner.get_middleware(), option=3),
            call(middle.get_middleware()),
            call(outer.get_middleware(), option=1),
        ]

    def test_prepare_server_configuration(
        self, mock_fastapi, mock_uvicorn, fake_server_config
    ):
        _, mock_app = mock_fastapi
        mock_config_class, mock_server_class, mock_config, mock_server = (
            mock_uvicorn
        )

        App(
            app_title="My App",
            app_name="test_app",
            api=[],
            middlewares=[],
            server_config=fake_server_config,
        )

        mock_config_class.assert_called_once_with(
            mock_app,
            loop="asyncio",
            proxy_headers=True,
            host=fake_server_config.host,
            port=fake_server_config.port,
            timeout_graceful_shutdown=fake_server_config.timeout_graceful_shutdown,
            log_config=None,
        )
        mock_server_class.assert_called_once_with(mock_config)

    def test_get_app_and_get_server(
        self, mock_fastapi, mock_uvicorn, fake_server_config
    ):
        _, mock_app = mock_fastapi
        _, _, _, mock_server = mock_uvicorn

        app = App(
            app_title="TestApp",
            app_name="example",
            api=[],
            middlewares=[],
            server_config=fake_server_config,
        )

        assert app.fastapi_app == mock_app
        assert app.server == mock_server
