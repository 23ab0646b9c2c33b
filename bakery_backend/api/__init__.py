"""
GraphQL API package for the Bakery Backend.

A thin read/write surface over the repositories, built with Strawberry and
served by FastAPI. See `bakery_backend.api.schema` for the operations.
"""

from bakery_backend.api.app import GRAPHQL_PATH, HEALTH_PATH, create_app
from bakery_backend.api.context import AppContext
from bakery_backend.api.schema import schema

__all__ = ["AppContext", "GRAPHQL_PATH", "HEALTH_PATH", "create_app", "schema"]
