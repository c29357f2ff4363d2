"""Generic repository over a single Cosmos DB container."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar, cast

from azure.cosmos.exceptions import CosmosHttpResponseError
from pydantic_core import to_jsonable_python

from inspection_desk.exceptions import AuthorizationError, NotFoundError
from inspection_desk.models.base import DocumentBase

if TYPE_CHECKING:
    from azure.cosmos.aio import ContainerProxy, DatabaseProxy

T = TypeVar("T", bound=DocumentBase)

_HTTP_UNAUTHORIZED = 401
_HTTP_FORBIDDEN = 403
_HTTP_NOT_FOUND = 404
_SYSTEM_FIELDS = ("_rid", "_self", "_etag", "_attachments", "_ts", "_lsn")


def _is_not_found(exc: CosmosHttpResponseError) -> bool:
    return exc.status_code == _HTTP_NOT_FOUND


def _check_access(exc: CosmosHttpResponseError, container_name: str) -> None:
    """Re-raise permission denials as AuthorizationError."""
    if exc.status_code in (_HTTP_UNAUTHORIZED, _HTTP_FORBIDDEN):
        raise AuthorizationError(f"Access denied to container '{container_name}'") from exc


class BaseRepository(Generic[T]):
    """CRUD and query helpers shared by every container repository.

    Store errors are translated at this boundary: 404 on reads becomes ``None``,
    401/403 becomes :class:`AuthorizationError`, anything else propagates.
    """

    container_name: ClassVar[str]
    model_class: type[T]

    def __init__(self, database: DatabaseProxy) -> None:
        self._container: ContainerProxy = database.get_container_client(self.container_name)

    def _to_model(self, data: dict[str, Any]) -> T:
        body = {k: v for k, v in data.items() if k not in _SYSTEM_FIELDS}
        # Documents written without updated_at still carry the store's last-modified epoch
        if body.get("updated_at") is None and isinstance(data.get("_ts"), int | float):
            body["updated_at"] = datetime.fromtimestamp(data["_ts"], UTC)
        return self.model_class.model_validate(body)

    @staticmethod
    def _to_body(document: DocumentBase) -> dict[str, Any]:
        return document.model_dump(mode="json", exclude_none=True)

    async def get(self, item_id: str, partition_key: str) -> T | None:
        """Read a document by id, returning None when it does not exist."""
        try:
            data = await self._container.read_item(item=item_id, partition_key=partition_key)
        except CosmosHttpResponseError as exc:
            if _is_not_found(exc):
                return None
            _check_access(exc, self.container_name)
            raise
        return self._to_model(cast("dict[str, Any]", data))

    async def create(self, document: T) -> T:
        """Insert a new document."""
        try:
            await self._container.create_item(body=self._to_body(document))
        except CosmosHttpResponseError as exc:
            _check_access(exc, self.container_name)
            raise
        return document

    async def upsert(self, document: T) -> T:
        """Write a document, fully replacing any existing one with the same id."""
        try:
            await self._container.upsert_item(body=self._to_body(document))
        except CosmosHttpResponseError as exc:
            _check_access(exc, self.container_name)
            raise
        return document

    async def patch(self, item_id: str, partition_key: str, fields: dict[str, Any]) -> T:
        """Set individual top-level fields without rewriting the document."""
        operations = [
            {"op": "set", "path": f"/{name}", "value": to_jsonable_python(value)}
            for name, value in fields.items()
        ]
        try:
            data = await self._container.patch_item(
                item=item_id,
                partition_key=partition_key,
                patch_operations=operations,
            )
        except CosmosHttpResponseError as exc:
            if _is_not_found(exc):
                raise NotFoundError(
                    f"Document '{item_id}' not found in '{self.container_name}'"
                ) from exc
            _check_access(exc, self.container_name)
            raise
        return self._to_model(cast("dict[str, Any]", data))

    async def query(self, sql: str, parameters: list[dict[str, Any]] | None = None) -> list[T]:
        """Run a parameterized SQL query and validate every row."""
        results: list[T] = []
        try:
            async for item in self._container.query_items(query=sql, parameters=parameters or []):
                results.append(self._to_model(item))
        except CosmosHttpResponseError as exc:
            _check_access(exc, self.container_name)
            raise
        return results
