"""Tests for BaseRepository error translation and serialization."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from azure.cosmos.exceptions import CosmosHttpResponseError

from inspection_desk.database.repositories.working_copies import WorkingCopyRepository
from inspection_desk.exceptions import AuthorizationError, NotFoundError
from inspection_desk.models.working_copy import PulledCopy


def _stored_copy() -> dict:
    return {
        "id": "insp-1",
        "title": "Vistoria",
        "version": 2,
        "source_inspection_id": "insp-1",
        "pulled_by": "mgr-1",
        "topics": [],
        "created_at": "2026-01-01T00:00:00+00:00",
        "updated_at": "2026-01-01T00:00:00+00:00",
        "_rid": "rid",
        "_etag": "etag-1",
        "_ts": 1767225600,
    }


class TestBaseRepository:
    """Test the Base Repository through the working-copy repository."""

    @pytest.fixture
    def repo(self) -> WorkingCopyRepository:
        """Create a repo for testing."""
        mock_db = MagicMock()
        mock_container = AsyncMock()
        mock_db.get_container_client.return_value = mock_container
        return WorkingCopyRepository(mock_db)

    def test_binds_its_container(self) -> None:
        """Verify the repository asks for its own container."""
        mock_db = MagicMock()

        WorkingCopyRepository(mock_db)

        mock_db.get_container_client.assert_called_once_with("inspections_data")

    async def test_get_strips_system_fields(self, repo: WorkingCopyRepository) -> None:
        """Verify Cosmos system properties are dropped before validation."""
        repo._container.read_item.return_value = _stored_copy()  # noqa: SLF001

        copy = await repo.get_copy("insp-1")

        assert copy is not None
        assert copy.version == 2
        assert "_etag" not in copy.model_dump()
        kwargs = repo._container.read_item.call_args.kwargs  # noqa: SLF001
        assert kwargs == {"item": "insp-1", "partition_key": "insp-1"}

    async def test_get_takes_missing_updated_at_from_ts(self, repo: WorkingCopyRepository) -> None:
        """Verify a document without updated_at gets the store's last-modified time."""
        stored = _stored_copy()
        del stored["updated_at"]
        repo._container.read_item.return_value = stored  # noqa: SLF001

        copy = await repo.get_copy("insp-1")

        assert copy is not None
        assert copy.updated_at == datetime(2026, 1, 1, tzinfo=UTC)

    async def test_get_leaves_updated_at_unset_without_ts(self, repo: WorkingCopyRepository) -> None:
        """Verify a document with neither updated_at nor _ts is not stamped with now."""
        stored = _stored_copy()
        del stored["updated_at"]
        del stored["_ts"]
        repo._container.read_item.return_value = stored  # noqa: SLF001

        copy = await repo.get_copy("insp-1")

        assert copy is not None
        assert copy.updated_at is None

    async def test_get_returns_none_when_missing(self, repo: WorkingCopyRepository) -> None:
        """Verify a 404 read is reported as absence."""
        repo._container.read_item.side_effect = CosmosHttpResponseError(  # noqa: SLF001
            status_code=404, message="Not found"
        )

        assert await repo.get_copy("insp-1") is None

    @pytest.mark.parametrize("status_code", [401, 403])
    async def test_get_translates_permission_errors(
        self, repo: WorkingCopyRepository, status_code: int
    ) -> None:
        """Verify permission denials become AuthorizationError."""
        repo._container.read_item.side_effect = CosmosHttpResponseError(  # noqa: SLF001
            status_code=status_code, message="Forbidden"
        )

        with pytest.raises(AuthorizationError):
            await repo.get_copy("insp-1")

    async def test_get_propagates_other_errors(self, repo: WorkingCopyRepository) -> None:
        """Verify unexpected store errors are not swallowed."""
        repo._container.read_item.side_effect = CosmosHttpResponseError(  # noqa: SLF001
            status_code=500, message="Boom"
        )

        with pytest.raises(CosmosHttpResponseError):
            await repo.get_copy("insp-1")

    async def test_upsert_serializes_without_nulls(self, repo: WorkingCopyRepository) -> None:
        """Verify the written body is JSON-ready and omits unset optionals."""
        copy = PulledCopy(id="insp-1", version=1, source_inspection_id="insp-1", pulled_by="m")

        await repo.replace_copy(copy)

        body = repo._container.upsert_item.call_args.kwargs["body"]  # noqa: SLF001
        assert body["id"] == "insp-1"
        assert body["version"] == 1
        assert isinstance(body["pulled_at"], str)
        assert "restored_from_version" not in body

    async def test_upsert_translates_permission_errors(self, repo: WorkingCopyRepository) -> None:
        """Verify write denials become AuthorizationError."""
        repo._container.upsert_item.side_effect = CosmosHttpResponseError(  # noqa: SLF001
            status_code=403, message="Forbidden"
        )
        copy = PulledCopy(id="insp-1", version=1, source_inspection_id="insp-1", pulled_by="m")

        with pytest.raises(AuthorizationError):
            await repo.replace_copy(copy)

    async def test_patch_sets_json_values(self, repo: WorkingCopyRepository) -> None:
        """Verify patch builds set operations with JSON-ready values."""
        repo._container.patch_item.return_value = _stored_copy()  # noqa: SLF001
        detected = datetime(2026, 2, 1, 8, 30, tzinfo=UTC)

        await repo.flag_changes("insp-1", detected)

        kwargs = repo._container.patch_item.call_args.kwargs  # noqa: SLF001
        assert kwargs["item"] == "insp-1"
        assert kwargs["partition_key"] == "insp-1"
        ops = {op["path"]: op for op in kwargs["patch_operations"]}
        assert ops["/has_changes_available"] == {
            "op": "set",
            "path": "/has_changes_available",
            "value": True,
        }
        assert ops["/last_change_detected_at"]["value"].startswith("2026-02-01T08:30:00")

    async def test_patch_missing_document(self, repo: WorkingCopyRepository) -> None:
        """Verify patching a missing document raises NotFoundError."""
        repo._container.patch_item.side_effect = CosmosHttpResponseError(  # noqa: SLF001
            status_code=404, message="Not found"
        )

        with pytest.raises(NotFoundError):
            await repo.flag_changes("insp-1", datetime.now(UTC))

    async def test_query_validates_rows(self, repo: WorkingCopyRepository) -> None:
        """Verify query iterates the async result and validates each row."""

        async def rows(**kwargs):
            yield _stored_copy()

        repo._container.query_items = MagicMock(side_effect=rows)  # noqa: SLF001

        result = await repo.query("SELECT * FROM c WHERE c.id = @id", [{"name": "@id", "value": "x"}])

        assert len(result) == 1
        assert result[0].version == 2
        kwargs = repo._container.query_items.call_args.kwargs  # noqa: SLF001
        assert kwargs["parameters"] == [{"name": "@id", "value": "x"}]
