from collections.abc import Callable, Generator, Iterable
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, ClassVar, Generic, TypeVar

import boto3

from ._logging import logger, redact_value
from .config import RepositoryOptions
from .cursor import CursorCodec, CursorStrategy
from .engine import PaginationEngine
from .entity import DynamoEntity, validate_entity, with_timestamps
from .filtering import FilterEngine, Predicate
from .pagination import DEFAULT_LIMIT, PageQuery, PageResult
from .sorting import DEFAULT_SORT_STRATEGY, SortOrder, SortStrategy
from .storage import DynamoTable

T = TypeVar("T", bound=DynamoEntity)


class DynamoRepository(Generic[T]):
    """
    CRUD, pagination and search for one DynamoDB table.

    Subclasses declare their table and entity in an inner Meta class, and may
    override the sort/cursor strategies to support entity-specific fields.

    Usage:
        class ProductRepository(DynamoRepository[Product]):
            class Meta:
                table_name = "products"
                entity = Product

            sort_strategy = FieldSortStrategy(extra_fields={"price": lambda p: p.price})

        repo = ProductRepository()
        page = repo.get_all_paginated(limit=20, sort_by="price", sort_order="desc")
        next_page = repo.get_all_paginated(limit=20, cursor=page.next_cursor,
                                           sort_by="price", sort_order="desc")
    """

    _options: ClassVar[RepositoryOptions | None] = None

    # Client resolution: per-context override, then instance, then class default
    _client: ClassVar[Any | None] = None
    _client_context: ClassVar[ContextVar[Any | None]] = ContextVar(
        "dynapage_client", default=None
    )

    # Strategy hooks
    sort_strategy: ClassVar[SortStrategy] = DEFAULT_SORT_STRATEGY
    cursor_strategy: ClassVar[CursorStrategy[Any] | None] = None
    codec: ClassVar[CursorCodec] = CursorCodec()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)

        # Without Meta the options are inherited; an unconfigured base (shared
        # strategies only) is allowed and fails when first used
        meta_cls = cls.__dict__.get("Meta")
        if meta_cls is not None:
            cls._options = RepositoryOptions.from_meta(cls.__name__, meta_cls)

    @classmethod
    def _require_options(cls) -> RepositoryOptions:
        if cls._options is None:
            raise ValueError(
                f"Repository {cls.__name__} is missing a 'class Meta' with 'table_name'."
            )
        return cls._options

    def __init__(self, client: Any | None = None) -> None:
        self._instance_client = client

    # --- CLIENT ---

    @classmethod
    def set_client(cls, client: Any) -> None:
        """
        Sets the default boto3 client for this repository class.
        Useful for testing or advanced configurations.
        """
        cls._client = client

    @classmethod
    @contextmanager
    def using_client(cls, client: Any) -> Generator[None, None, None]:
        """
        Context manager to scope a client to a block of code.
        Thread-safe and Async-safe using contextvars.

        Usage:
            with ProductRepository.using_client(my_client):
                repo.get_by_id("...")
        """
        token = cls._client_context.set(client)
        try:
            yield
        finally:
            cls._client_context.reset(token)

    def _get_client(self) -> Any:
        ctx_client = self._client_context.get()
        if ctx_client is not None:
            return ctx_client
        if self._instance_client is not None:
            return self._instance_client

        cls = type(self)
        if cls._client is None:
            cls._client = boto3.client("dynamodb", region_name=cls._require_options().region)
        return cls._client

    # --- COLLABORATORS ---

    @property
    def options(self) -> RepositoryOptions:
        return self._require_options()

    @property
    def table(self) -> DynamoTable[T]:
        return DynamoTable(
            self.options.table_name,
            self.options.entity,
            self._get_client(),
            id_field=self.options.id_field,
        )

    def _engines(self) -> tuple[PaginationEngine[T], FilterEngine[T]]:
        table = self.table
        engine: PaginationEngine[T] = PaginationEngine(
            table,
            sort_strategy=self.sort_strategy,
            cursor_strategy=self.cursor_strategy,
            codec=self.codec,
        )
        return engine, FilterEngine(table, engine, self.options.entity)

    # --- CRUD ---

    def save(self, entity: T) -> T:
        """
        Validates and stores the entity, stamping created_at/updated_at.
        Returns the stamped copy that was written.

        Raises:
            ValidationError: If the entity id is blank (no store call is made)
        """
        validate_entity(entity)
        stamped = with_timestamps(entity)
        self.table.put_item(stamped)
        logger.debug(
            "Entity saved",
            extra={"table": self.options.table_name, "pk_hash": redact_value(stamped.id)},
        )
        return stamped

    def save_all(self, entities: Iterable[T]) -> list[T]:
        return [self.save(entity) for entity in entities]

    def save_if_valid(self, entity: T, validate: Callable[[T], bool] | None = None) -> bool:
        """Saves the entity when `validate` accepts it (default: non-blank id)."""
        check = validate or (lambda candidate: bool(candidate.id and candidate.id.strip()))
        if not check(entity):
            return False
        self.save(entity)
        return True

    def update(self, entity: T) -> T:
        # PutItem overwrites, so an update is a save
        return self.save(entity)

    def get_by_id(self, item_id: str) -> T | None:
        return self.table.get_item(item_id)

    def get_all_by_id(self, item_ids: Iterable[str]) -> list[T]:
        table = self.table
        found = (table.get_item(item_id) for item_id in item_ids)
        return [item for item in found if item is not None]

    def exists_by_id(self, item_id: str) -> bool:
        return self.get_by_id(item_id) is not None

    def delete_by_id(self, item_id: str) -> None:
        self.table.delete_item(item_id)

    def delete_all(self, item_ids: Iterable[str]) -> None:
        table = self.table
        for item_id in item_ids:
            table.delete_item(item_id)

    def get_all(self) -> list[T]:
        """
        Returns every item of the table.
        WARNING: Reads the whole table.
        """
        return self.table.scan_all()

    def count(self) -> int:
        """Approximate item count (DescribeTable ItemCount)."""
        return self.table.approximate_item_count()

    # --- PAGINATION ---

    def get_all_paginated(
        self,
        limit: int = DEFAULT_LIMIT,
        cursor: str | None = None,
        sort_by: str | None = None,
        sort_order: SortOrder | str = SortOrder.ASC,
    ) -> PageResult[T]:
        """
        Returns one page of the table.

        Without sort_by the page comes from a native limited scan; with sort_by the
        whole table is loaded, sorted and sliced in memory.
        """
        engine, _ = self._engines()
        return engine.paginate(limit, cursor, sort_by, SortOrder.from_string(sort_order))

    def paginate(self, query: PageQuery) -> PageResult[T]:
        return self.get_all_paginated(query.limit, query.cursor, query.sort_by, query.sort_order)

    # --- SEARCH ---

    def get_by_property(self, name: str, value: Any) -> T | None:
        """
        Returns the first item whose property equals value.
        Reads the whole table; an unknown property matches nothing.
        """
        _, filters = self._engines()
        return filters.find_by_property(name, value)

    def get_all_by_property(self, name: str, value: Any) -> list[T]:
        _, filters = self._engines()
        return filters.find_all_by_property(name, value)

    def scan_with_filter(self, predicate: Predicate[T]) -> list[T]:
        _, filters = self._engines()
        return filters.scan_filtered(predicate)

    def scan_with_filter_paginated(
        self, limit: int, cursor: str | None, predicate: Predicate[T]
    ) -> PageResult[T]:
        """One page of the items accepted by predicate; total_items counts matches only."""
        _, filters = self._engines()
        return filters.scan_filtered_paginated(limit, cursor, predicate)
