from .config import RepositoryOptions
from .cursor import (
    CursorCodec,
    CursorStrategy,
    IdCursorStrategy,
    NativeCursor,
    PositionalCursor,
)
from .engine import PaginationEngine
from .entity import DynamoEntity, validate_entity, with_timestamps
from .exceptions import (
    DynamoSerializationError,
    DynapageError,
    ProvisionedThroughputExceededError,
    RequestTimeoutError,
    TableNotFoundError,
    ValidationError,
)
from .filtering import FilterEngine
from .pagination import DEFAULT_LIMIT, MAX_LIMIT, MIN_LIMIT, PageQuery, PageResult
from .repository import DynamoRepository
from .sorting import DEFAULT_SORT_STRATEGY, FieldSortStrategy, SortOrder, SortStrategy
from .storage import DynamoTable, ScanPage, StorageFacade

__all__ = [
    "DynamoEntity",
    "DynamoRepository",
    "RepositoryOptions",
    "validate_entity",
    "with_timestamps",
    # Pagination
    "PageResult",
    "PageQuery",
    "PaginationEngine",
    "FilterEngine",
    "MIN_LIMIT",
    "MAX_LIMIT",
    "DEFAULT_LIMIT",
    # Cursors
    "CursorCodec",
    "CursorStrategy",
    "IdCursorStrategy",
    "NativeCursor",
    "PositionalCursor",
    # Sorting
    "SortOrder",
    "SortStrategy",
    "FieldSortStrategy",
    "DEFAULT_SORT_STRATEGY",
    # Storage
    "StorageFacade",
    "DynamoTable",
    "ScanPage",
    # Exceptions
    "DynapageError",
    "TableNotFoundError",
    "ProvisionedThroughputExceededError",
    "RequestTimeoutError",
    "ValidationError",
    "DynamoSerializationError",
]
