from typing import Optional

import structlog

from reflex_di.application import DIContainer
from reflex_di.infrastructure.config.settings import ContainerSettings

logger = structlog.get_logger(__name__)


def bootstrap(settings: Optional[ContainerSettings] = None, container: Optional[DIContainer] = None) -> DIContainer:
    """Apply static wiring to a container.

    Args:
        settings: Wiring to apply; read from the environment when omitted.
        container: Container to configure. A new one honoring the settings'
            ``detect_cycles`` and ``strict_untyped`` flags is created when omitted.

    Returns:
        The configured container.

    Raises:
        InvalidDefinitionError: If a configured definition is invalid.

    Example:
        >>> container = bootstrap(ContainerSettings(
        ...     implementations={"app.ports.Mailer": "app.mail.SmtpMailer"},
        ...     shared=["app.mail.SmtpMailer"],
        ... ))
    """
    settings = settings if settings is not None else ContainerSettings()
    if container is None:
        container = DIContainer(detect_cycles=settings.detect_cycles, strict_untyped=settings.strict_untyped)

    definitions = container.define_all(settings.definitions)
    implementations = container.implement_all(settings.implementations)
    container.share_all(settings.shared)

    logger.info(
        "container_bootstrapped",
        definitions=definitions,
        implementations=implementations,
        shared=len(settings.shared),
    )
    return container
