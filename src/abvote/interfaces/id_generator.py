"""Interface for ID generators."""

import abc

# pylint: disable=too-few-public-methods


class IdGenerator(abc.ABC):
    """Source of opaque, unique identifiers for users and tests."""

    @abc.abstractmethod
    def new_id(self) -> str:
        """Generate a new unique identifier."""
