"""Unit tests for container configuration and bootstrap."""

import json
import json.decoder
import logging

import pytest
import structlog

from reflex_di import ContainerSettings, DIContainer, bootstrap
from reflex_di.domain import InvalidDefinitionError
from reflex_di.infrastructure.logging import configure_logging


class Transport:
    pass


class Client:
    def __init__(self, transport: Transport, timeout=5):
        self.transport = transport
        self.timeout = timeout


TRANSPORT_PATH = f"{__name__}.Transport"
CLIENT_PATH = f"{__name__}.Client"


class TestContainerSettings:
    """Test configuration loading and validation."""

    def test_defaults(self, monkeypatch):
        """Test configuration defaults."""
        for name in ("DEFINITIONS", "IMPLEMENTATIONS", "SHARED", "DETECT_CYCLES", "STRICT_UNTYPED"):
            monkeypatch.delenv(f"REFLEX_DI_{name}", raising=False)

        settings = ContainerSettings()

        assert settings.definitions == {}
        assert settings.implementations == {}
        assert settings.shared == []
        assert settings.detect_cycles is True
        assert settings.strict_untyped is False

    def test_values_from_environment(self, monkeypatch):
        """Test that nested values are read from JSON environment variables."""
        monkeypatch.setenv("REFLEX_DI_SHARED", json.dumps([CLIENT_PATH]))
        monkeypatch.setenv("REFLEX_DI_DEFINITIONS", json.dumps({CLIENT_PATH: {":timeout": 30}}))
        monkeypatch.setenv("REFLEX_DI_STRICT_UNTYPED", "true")

        settings = ContainerSettings()

        assert settings.shared == [CLIENT_PATH]
        assert settings.definitions == {CLIENT_PATH: {":timeout": 30}}
        assert settings.strict_untyped is True


class TestBootstrap:
    """Test applying settings to a container."""

    def test_bootstrap_applies_all_tables(self):
        """Test that definitions, implementations and shares are registered."""
        settings = ContainerSettings(
            definitions={CLIENT_PATH: {":timeout": 30}},
            implementations={"app.ports.Transport": TRANSPORT_PATH},
            shared=[CLIENT_PATH],
        )

        container = bootstrap(settings)

        assert container.is_defined(CLIENT_PATH)
        assert container.get_implementation("APP.PORTS.TRANSPORT") == TRANSPORT_PATH
        assert container.is_shared(CLIENT_PATH)

        client = container.make(CLIENT_PATH)
        assert client.timeout == 30
        assert isinstance(client.transport, Transport)
        assert container.make(Client) is client

    def test_bootstrap_short_names_reach_classes_registered_later(self):
        """Test that settings keyed by short name apply once the classes are registered."""
        container = bootstrap(
            ContainerSettings(
                definitions={"Client": {":timeout": 9}},
                shared=["Client"],
            )
        )
        container.introspector.register_all([Client, Transport])

        client = container.make(Client)
        assert client.timeout == 9
        assert container.is_shared(Client) is True
        assert container.make("client") is client

    def test_bootstrap_reexported_path_matches_class(self):
        """Test that a re-exported dotted path addresses the class where it is defined."""
        container = bootstrap(
            ContainerSettings(
                definitions={"json.JSONDecoder": {":strict": False}},
                shared=["json:JSONDecoder"],
            )
        )

        decoder = container.make(json.decoder.JSONDecoder)
        assert decoder.strict is False
        assert container.is_shared("json.decoder.JSONDecoder") is True

    def test_bootstrap_honours_flags(self):
        """Test that a new container is created with the configured flags."""
        container = bootstrap(ContainerSettings(detect_cycles=False, strict_untyped=True))

        assert container._detect_cycles is False
        assert container._strict_untyped is True

    def test_bootstrap_existing_container(self):
        """Test that an existing container is configured in place."""
        container = DIContainer()
        assert bootstrap(ContainerSettings(shared=[TRANSPORT_PATH]), container) is container
        assert container.is_shared(Transport)

    def test_bootstrap_rejects_invalid_definition(self):
        """Test that invalid definitions surface at bootstrap time."""
        with pytest.raises(InvalidDefinitionError):
            bootstrap(ContainerSettings(definitions={CLIENT_PATH: {"timeout": 30}}))


class TestConfigureLogging:
    """Test the structlog setup helper."""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        yield
        structlog.reset_defaults()
        logging.getLogger("reflex_di").handlers.clear()

    def test_configure_logging_attaches_handler(self):
        """Test that the library logger gets a single stdout handler at the configured level."""
        configure_logging(ContainerSettings(log_level="debug", log_format="json"))
        configure_logging(ContainerSettings(log_level="debug", log_format="json"))

        library_logger = logging.getLogger("reflex_di")
        assert len(library_logger.handlers) == 1
        assert library_logger.level == logging.DEBUG

    def test_container_events_reach_library_logger(self, caplog):
        """Test that container events are emitted through stdlib logging once configured."""
        configure_logging(ContainerSettings(log_level="debug"))

        with caplog.at_level(logging.DEBUG, logger="reflex_di"):
            DIContainer().define(Client, {":timeout": 1})

        assert any("definition_stored" in record.getMessage() for record in caplog.records)
