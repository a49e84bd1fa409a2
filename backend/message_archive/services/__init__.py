"""Service layer.

Use-cases live in subpackages and are imported from there directly:

- :mod:`message_archive.services.messages` (:class:`MessageService`)
- :mod:`message_archive.services.tokens` (:class:`TokenService`)
- :mod:`message_archive.services.auth` (:class:`AuthGate`)

Shared primitives (:class:`BaseService`, :class:`ServiceContext`, the domain
error taxonomy) live in :mod:`message_archive.services._shared`. This module
deliberately imports nothing so that repositories can depend on
``services._shared.errors`` without import cycles.
"""
