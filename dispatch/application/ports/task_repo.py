"""Port interface for service task persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from dispatch.domain.entities.service_task import ServiceTask
from dispatch.domain.value_objects.enums import Priority, TaskStatus

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
SORT_FIELDS = ("priority", "createdAt", "status")
MAX_TASK_ID = 2**31 - 1


@dataclass
class TaskQuery:
    """Filter, sort and pagination parameters for task listing."""

    status: TaskStatus | None = None
    priority: Priority | None = None
    search: str | None = None
    sort_by: str = "priority"
    sort_order: str = "desc"
    page: int = 0
    page_size: int = DEFAULT_PAGE_SIZE

    def normalized(self) -> TaskQuery:
        """Clamp paging and fall back to defaults for unknown sort options."""
        sort_by = next(
            (f for f in SORT_FIELDS if f.lower() == (self.sort_by or "").lower()),
            "priority",
        )
        page_size = self.page_size
        if page_size > MAX_PAGE_SIZE:
            page_size = MAX_PAGE_SIZE
        elif page_size < 1:
            page_size = DEFAULT_PAGE_SIZE
        search = self.search.strip() if self.search and self.search.strip() else None
        return TaskQuery(
            status=self.status,
            priority=self.priority,
            search=search,
            sort_by=sort_by,
            sort_order="asc" if (self.sort_order or "").lower() == "asc" else "desc",
            page=max(self.page, 0),
            page_size=page_size,
        )

    @property
    def search_id(self) -> int | None:
        """The search term read as a task id, or None when it is not a plain id."""
        term = self.search
        if not term or not (term.isascii() and term.isdigit()):
            return None
        task_id = int(term)
        return task_id if 0 < task_id <= MAX_TASK_ID else None


@dataclass
class TaskPage:
    tasks: list[ServiceTask]
    page: int
    page_size: int
    total_elements: int
    status_counts: dict[str, int] = field(default_factory=dict)

    @property
    def total_pages(self) -> int:
        return -(-self.total_elements // self.page_size) if self.page_size else 0

    @property
    def first(self) -> bool:
        return self.page == 0

    @property
    def last(self) -> bool:
        return self.page + 1 >= self.total_pages


class TaskRepository(ABC):
    @abstractmethod
    async def add(self, task: ServiceTask) -> ServiceTask:
        ...

    @abstractmethod
    async def get_by_id(self, task_id: int) -> ServiceTask | None:
        ...

    @abstractmethod
    async def get_for_update(self, task_id: int) -> ServiceTask | None:
        """Load the task and hold a row-level lock until the transaction ends.

        Must use SELECT ... FOR UPDATE so concurrent assignments of the same
        task are serialized.
        """
        ...

    @abstractmethod
    async def update(self, task: ServiceTask) -> ServiceTask:
        ...

    @abstractmethod
    async def search(self, query: TaskQuery) -> tuple[list[ServiceTask], int]:
        """Return one page of matching tasks and the total match count."""
        ...

    @abstractmethod
    async def count_by_status(self) -> dict[TaskStatus, int]:
        ...

    @abstractmethod
    async def get_by_technician(self, technician_id: int) -> list[ServiceTask]:
        """Tasks whose current technician is *technician_id*."""
        ...
