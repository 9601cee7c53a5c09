from dataclasses import dataclass
from typing import Any


@dataclass
class RepositoryOptions:
    """
    Internal container for Repository metadata.
    Populated from the inner 'Meta' class when a repository subclass is defined.
    """

    table_name: str
    entity: Any
    region: str = "us-east-1"
    id_field: str = "id"

    @classmethod
    def from_meta(cls, owner_name: str, meta_cls: type) -> "RepositoryOptions":
        """
        Builds options from a repository's inner Meta class.

        Args:
            owner_name: Name of the repository class (for error messages)
            meta_cls: The inner Meta class

        Raises:
            ValueError: If 'table_name' or 'entity' is missing, or the entity
                        is not a DynamoEntity subclass
        """
        from .entity import DynamoEntity

        if not getattr(meta_cls, "table_name", None):
            raise ValueError(f"Repository {owner_name} is missing a 'table_name' in class Meta.")

        entity = getattr(meta_cls, "entity", None)
        if entity is None:
            raise ValueError(f"Repository {owner_name} is missing an 'entity' in class Meta.")
        if not (isinstance(entity, type) and issubclass(entity, DynamoEntity)):
            raise ValueError(
                f"Repository {owner_name}: Meta.entity must be a DynamoEntity subclass, "
                f"got {entity!r}"
            )

        return cls(
            table_name=meta_cls.table_name,
            entity=entity,
            region=getattr(meta_cls, "region", "us-east-1"),
            id_field=getattr(meta_cls, "id_field", "id"),
        )
