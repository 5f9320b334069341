"""Port interface for the external technician identity lookup."""

from abc import ABC, abstractmethod

from dispatch.domain.entities.technician import TechnicianInfo


class TechnicianDirectoryUnavailable(Exception):
    """The identity store could not be reached or answered with an error."""


class TechnicianDirectory(ABC):
    @abstractmethod
    async def get_technician(self, technician_id: int) -> TechnicianInfo | None:
        """Fetch a technician by id.

        Returns None when the identity store says the technician does not
        exist. Raises TechnicianDirectoryUnavailable on transport failures
        or unexpected responses.
        """
        ...
