"""Logging subsystem for localcert.

Public API::

    from localcert.logging import configure_logging

    configure_logging(settings.logging)
"""

from localcert.logging.setup import configure_logging

__all__ = ["configure_logging"]
