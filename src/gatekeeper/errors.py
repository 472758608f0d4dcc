"""
Error taxonomy shared by the catalog store, the capability issuer and the routes.

Routes translate these into HTTP responses:
- NotFound -> 404
- StoreUnavailable / IssuerUnavailable -> 500

The exception text is for server-side logs only and is never sent to clients.
"""

from __future__ import annotations


class GatekeeperError(Exception):
    """Base class for all gatekeeper failures."""


class StoreUnavailable(GatekeeperError):
    """The catalog database could not be reached or a query failed."""


class NotFound(GatekeeperError):
    """The requested song, album or relation does not exist."""


class IssuerUnavailable(GatekeeperError):
    """The object-store signing backend failed (bad credentials, client error)."""
