"""Unit tests for the testing utilities."""

from typing import Protocol
from unittest.mock import MagicMock

import pytest

from reflex_di import DIContainer, TypeKind
from reflex_di.domain import BadImplementationError, ITypeIntrospector, TypeNotFoundError, UnresolvableTypeError
from reflex_di.infrastructure.testing import (
    FixedTypeIntrospector,
    TestContainer,
    create_mock_container,
    fixed_parameter,
)


class Mailer(Protocol):
    def send(self, to: str) -> None: ...


class SmtpMailer(Mailer):
    def send(self, to: str) -> None:
        pass


class SignupService:
    def __init__(self, mailer: Mailer, sender="noreply"):
        self.mailer = mailer
        self.sender = sender


@pytest.fixture
def fixed_introspector():
    introspector = FixedTypeIntrospector()
    introspector.add_class("Logger", kind=TypeKind.INTERFACE)
    introspector.add_class("FileLogger", supertypes=["Logger"])
    introspector.add_class("Printer")
    introspector.add_class(
        "Service",
        parameters=[
            fixed_parameter("logger", "Logger"),
            fixed_parameter("message", default="hi"),
            fixed_parameter("retries", keyword_only=True, default=3),
        ],
    )
    return introspector


class TestFixedTypeIntrospector:
    """Test cases for the table-backed introspector."""

    def test_implements_interface(self):
        """Test that FixedTypeIntrospector implements ITypeIntrospector."""
        assert isinstance(FixedTypeIntrospector(), ITypeIntrospector)

    def test_parameters_are_stamped_with_owner_and_position(self, fixed_introspector):
        """Test that add_class numbers parameters from one."""
        parameters = fixed_introspector.describe_constructor("Service")

        assert [parameter.position for parameter in parameters] == [1, 2, 3]
        assert {parameter.owner for parameter in parameters} == {"service"}

    def test_class_without_parameters_has_no_constructor(self, fixed_introspector):
        """Test that classes added without parameters report no constructor."""
        assert fixed_introspector.describe_constructor("Printer") is None

    def test_unknown_type_raises(self, fixed_introspector):
        """Test that names outside the table are not found."""
        with pytest.raises(TypeNotFoundError):
            fixed_introspector.describe_class("Missing")

    def test_declared_type(self, fixed_introspector):
        """Test that declared types are the normalized annotation."""
        logger, message, _ = fixed_introspector.describe_constructor("Service")

        assert fixed_introspector.declared_type(logger) == "logger"
        assert fixed_introspector.declared_type(message) is None

    def test_container_resolves_from_table(self, fixed_introspector):
        """Test a full resolution without any real class."""
        container = DIContainer(fixed_introspector)
        container.implement("Logger", "FileLogger")

        service = container.make("Service", {":message": "yo"})

        assert type(service).__name__ == "Service"
        assert type(service.logger).__name__ == "FileLogger"
        assert service.message == "yo"
        assert service.retries == 3

    def test_container_reports_unbound_interface(self, fixed_introspector):
        """Test the unbound interface error with a table-backed type."""
        container = DIContainer(fixed_introspector)

        with pytest.raises(UnresolvableTypeError) as exc_info:
            container.make("service")

        assert exc_info.value.type_name == "Logger"
        assert exc_info.value.position == 1

    def test_container_detects_bad_implementation(self, fixed_introspector):
        """Test that supertypes drive the implementation check."""
        container = DIContainer(fixed_introspector)
        container.implement("Logger", "Printer")

        with pytest.raises(BadImplementationError):
            container.make("Service")

    def test_explicit_factory(self):
        """Test that a custom factory is used for construction."""
        introspector = FixedTypeIntrospector()
        sentinel = object()
        introspector.add_class("Clock", lambda: sentinel)

        assert DIContainer(introspector).make("Clock") is sentinel


class TestTestContainer:
    """Test cases for TestContainer."""

    def test_copies_parent_registrations(self):
        """Test that definitions and bindings are inherited."""
        parent = DIContainer()
        parent.implement(Mailer, SmtpMailer)
        parent.define(SignupService, {":sender": "team"})

        test_container = TestContainer(parent)
        service = test_container.make(SignupService)

        assert isinstance(service.mailer, SmtpMailer)
        assert service.sender == "team"

    def test_changes_do_not_leak_into_parent(self):
        """Test that the parent tables are not modified."""
        parent = DIContainer()
        test_container = TestContainer(parent)
        test_container.implement(Mailer, SmtpMailer)

        assert parent.is_implemented(Mailer) is False

    def test_mock_interface_parameter(self):
        """Test that a mocked interface is injected without a binding."""
        mock_mailer = MagicMock()

        with TestContainer() as test_container:
            test_container.mock(Mailer, mock_mailer)
            service = test_container.make(SignupService)

            assert service.mailer is mock_mailer
            assert test_container.make(Mailer) is mock_mailer

    def test_reset_overrides_restores_parent(self):
        """Test that mocks are removed and parent registrations come back."""
        parent = DIContainer()
        parent.implement(Mailer, SmtpMailer)
        test_container = TestContainer(parent)
        test_container.mock(Mailer, MagicMock())
        test_container.clear_all_implementations()

        test_container.reset_overrides()

        assert isinstance(test_container.make(SignupService).mailer, SmtpMailer)

    def test_context_manager_resets_on_exit(self):
        """Test that leaving the context removes the mocks."""
        test_container = TestContainer()
        with test_container:
            test_container.mock(SignupService, MagicMock())

        assert test_container.is_shared(SignupService) is False

    def test_create_mock_container(self):
        """Test the convenience constructor."""
        mock_mailer = MagicMock()
        test_container = create_mock_container((Mailer, mock_mailer))

        assert test_container.make(SignupService).mailer is mock_mailer
