"""Typed errors raised by the versioning and release services."""

from __future__ import annotations


class InspectionDeskError(Exception):
    """Base class for errors surfaced to the manager verbatim."""


class NotFoundError(InspectionDeskError):
    """A canonical record, working copy, release or history version is missing."""


class AuthorizationError(InspectionDeskError):
    """The document store denied access to a container or document."""


class ValidationError(InspectionDeskError):
    """Caller input violates a business rule (e.g. empty release notes)."""


class DeliveryConflictError(InspectionDeskError):
    """Another release of the same inspection is already delivered."""
