"""Mini README: Interfaces exposing RoadLedger to clients.

Exports the FastAPI application factory behind the JSON API and the
currency formatter shared by API payloads and the CLI.
"""

from .web_app import create_application, format_currency

__all__ = ["create_application", "format_currency"]
