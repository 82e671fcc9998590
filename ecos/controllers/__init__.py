"""FastAPI routers acting as controllers in the MVC architecture."""

from . import history, scenarios

__all__ = ["history", "scenarios"]
