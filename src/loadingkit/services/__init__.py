"""Fetch collaborators: simulated services and a thin HTTP JSON client."""

from .http import HttpJsonService
from .mock import CATALOGUE, MockProductService, MockUserService

__all__ = ["CATALOGUE", "MockProductService", "MockUserService", "HttpJsonService"]
