"""Application factories for repository access."""

from placesum.application.factories.repository_factory import RepositoryFactory

__all__ = ["RepositoryFactory"]
