"""
core.domain — Shared domain utilities for cross-app service layers.

Modules
-------
exceptions         Domain-specific exceptions carrying an ``error_kind``.
exception_handler  DRF handler turning those exceptions into failure envelopes.
results            ``OperationResult`` envelope + ``run_operation`` wrapper.
transactions       Conditional (compare-and-set) updates and ``F()`` increments.
notifications      After-commit, best-effort notification + push dispatch.
push               Pluggable push delivery backends (Expo, console, locmem).

Usage from any app::

    from core.domain.exceptions import DomainError, InvalidTransition
    from core.domain.notifications import NotificationService
    from core.domain.transactions import conditional_update
    from core.domain.results import run_operation
"""
