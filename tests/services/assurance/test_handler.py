"""
Assessment Handler Tests
========================

Tests for create-or-update of assessments and their audit trail.

Version: 0.1.0
"""

import asyncio
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest

from services.assurance.services import AssessmentHandler, KeyedLock
from shared.config import settings
from shared.models import AssessmentSubmission, StandardRating


KEY = ("P1", "S1", "F1")


def submission(**kwargs) -> AssessmentSubmission:
    return AssessmentSubmission(**kwargs)


# =============================================================================
# Write Tests
# =============================================================================


class TestHandleWrites:
    """Tests for successful writes."""

    @pytest.mark.asyncio
    async def test_submit_then_read(self, handler) -> None:
        result = await handler.handle(*KEY, submission(status="GREEN", commentary="ok"))

        assessment = await handler.get_assessment(*KEY)

        assert result.is_valid is True
        assert assessment.status == StandardRating.GREEN
        assert assessment.commentary == "ok"

    @pytest.mark.asyncio
    async def test_status_stored_canonical(self, handler) -> None:
        await handler.handle(*KEY, submission(status="amber"))

        assessment = await handler.get_assessment(*KEY)

        assert assessment.status == StandardRating.AMBER

    @pytest.mark.asyncio
    async def test_first_write_records_one_entry(self, handler) -> None:
        await handler.handle(*KEY, submission(status="GREEN"))

        history = await handler.get_history(*KEY)

        assert len(history) == 1
        assert history[0].changes.status.from_ == ""
        assert history[0].changes.status.to == "GREEN"

    @pytest.mark.asyncio
    async def test_second_write_listed_first(self, handler) -> None:
        await handler.handle(*KEY, submission(status="GREEN"))
        await handler.handle(*KEY, submission(status="AMBER"))

        history = await handler.get_history(*KEY)

        assert len(history) == 2
        assert history[0].changes.status.from_ == "GREEN"
        assert history[0].changes.status.to == "AMBER"
        assert history[1].changes.status.to == "GREEN"

    @pytest.mark.asyncio
    async def test_path_overrides_body_key(self, handler) -> None:
        await handler.handle(
            *KEY,
            submission(status="GREEN", project_id="PX", standard_id="SX", profession_id="FX"),
        )

        assessment = await handler.get_assessment(*KEY)

        assert assessment.key == KEY

    @pytest.mark.asyncio
    async def test_id_reused_on_update(self, handler) -> None:
        await handler.handle(*KEY, submission(status="GREEN"))
        first = await handler.get_assessment(*KEY)

        await handler.handle(*KEY, submission(status="RED", id="ignored-on-update"))
        second = await handler.get_assessment(*KEY)

        assert second.id == first.id

    @pytest.mark.asyncio
    async def test_supplied_id_used_on_create(self, handler) -> None:
        await handler.handle(*KEY, submission(status="GREEN", id="65f0c0ffee0000000000beef"))

        assessment = await handler.get_assessment(*KEY)

        assert assessment.id == "65f0c0ffee0000000000beef"

    @pytest.mark.asyncio
    async def test_missing_actor_defaults_to_unknown(self, handler) -> None:
        await handler.handle(*KEY, submission(status="GREEN"))

        assessment = await handler.get_assessment(*KEY)
        history = await handler.get_history(*KEY)

        assert assessment.changed_by == settings.assessment.unknown_actor == "Unknown"
        assert history[0].changed_by == "Unknown"

    @pytest.mark.asyncio
    async def test_missing_actor_inherits_previous(self, handler) -> None:
        await handler.handle(*KEY, submission(status="GREEN", changed_by="alice"))
        await handler.handle(*KEY, submission(status="RED", changed_by=""))

        assessment = await handler.get_assessment(*KEY)

        assert assessment.changed_by == "alice"

    @pytest.mark.asyncio
    async def test_history_time_matches_assessment(self, handler) -> None:
        await handler.handle(*KEY, submission(status="GREEN", changed_by="alice"))

        assessment = await handler.get_assessment(*KEY)
        entry = (await handler.get_history(*KEY))[0]

        assert entry.timestamp == assessment.last_updated
        assert entry.changed_by == assessment.changed_by

    @pytest.mark.asyncio
    async def test_identical_submissions_not_deduplicated(self, storage, handler) -> None:
        body = submission(status="GREEN", commentary="same", changed_by="alice")

        await handler.handle(*KEY, body)
        await handler.handle(*KEY, body)

        history = await handler.get_history(*KEY)

        assert len(await storage.assessments.list_by_project("P1")) == 1
        assert len(history) == 2
        assert history[0].changes.status.from_ == history[0].changes.status.to == "GREEN"
        assert history[0].changes.commentary.from_ == history[0].changes.commentary.to == "same"

    @pytest.mark.asyncio
    async def test_keys_are_independent(self, handler) -> None:
        await handler.handle("P1", "S1", "F1", submission(status="GREEN"))
        await handler.handle("P1", "S1", "F2", submission(status="RED"))

        assert (await handler.get_assessment("P1", "S1", "F1")).status == StandardRating.GREEN
        assert (await handler.get_assessment("P1", "S1", "F2")).status == StandardRating.RED
        assert len(await handler.get_history("P1", "S1", "F1")) == 1


# =============================================================================
# Rejection Tests
# =============================================================================


class TestHandleRejections:
    """Tests for validation failures and faults."""

    @pytest.mark.asyncio
    async def test_invalid_status_writes_nothing(self, storage, handler) -> None:
        result = await handler.handle(*KEY, submission(status="blue"))

        assert result.status_code == 400
        assert result.error_message.startswith("Invalid status: blue.")
        assert await handler.get_assessment(*KEY) is None
        assert len(storage.history) == 0

    @pytest.mark.asyncio
    async def test_inactive_standard_writes_nothing(self, storage, handler) -> None:
        result = await handler.handle("P1", "S9", "F1", submission(status="GREEN"))

        assert result.status_code == 400
        assert await handler.get_assessment("P1", "S9", "F1") is None
        assert len(storage.history) == 0

    @pytest.mark.asyncio
    async def test_inactive_profession_writes_nothing(self, storage, handler) -> None:
        result = await handler.handle("P1", "S1", "F9", submission(status="GREEN"))

        assert result.status_code == 400
        assert len(storage.history) == 0

    @pytest.mark.asyncio
    async def test_rejected_update_keeps_previous(self, handler) -> None:
        await handler.handle(*KEY, submission(status="GREEN", commentary="ok"))

        await handler.handle(*KEY, submission(status="PURPLE"))

        assessment = await handler.get_assessment(*KEY)
        assert assessment.status == StandardRating.GREEN
        assert len(await handler.get_history(*KEY)) == 1

    @pytest.mark.asyncio
    async def test_store_fault_becomes_server_error(self, storage, handler) -> None:
        storage.assessments.upsert = AsyncMock(side_effect=RuntimeError("disk full"))

        result = await handler.handle(*KEY, submission(status="GREEN"))

        assert result.is_valid is False
        assert result.status_code == 500
        assert result.error_message == "Failed to process assessment: disk full"

    @pytest.mark.asyncio
    async def test_history_fault_becomes_server_error(self, storage, handler) -> None:
        storage.history.add = AsyncMock(side_effect=RuntimeError("write concern failed"))

        result = await handler.handle(*KEY, submission(status="GREEN"))

        assert result.status_code == 500
        assert result.error_message == "Failed to process assessment: write concern failed"

    @pytest.mark.asyncio
    async def test_reference_lookup_fault_becomes_server_error(self, storage, handler) -> None:
        storage.projects.get_by_id = AsyncMock(side_effect=RuntimeError("db down"))

        result = await handler.handle(*KEY, submission(status="GREEN"))

        assert result.is_valid is False
        assert result.status_code == 500
        assert result.error_message == "Failed to process assessment: db down"
        assert await handler.get_assessment(*KEY) is None

    @pytest.mark.asyncio
    async def test_history_fault_leaves_assessment_without_entry(self, storage, handler) -> None:
        storage.history.add = AsyncMock(side_effect=RuntimeError("write concern failed"))

        result = await handler.handle(*KEY, submission(status="GREEN"))

        assert result.status_code == 500
        assert (await handler.get_assessment(*KEY)).status == StandardRating.GREEN
        assert len(storage.history) == 0

    @pytest.mark.asyncio
    async def test_duplicate_id_on_create_becomes_server_error(self, handler) -> None:
        await handler.handle(*KEY, submission(status="GREEN", id="65f0c0ffee0000000000beef"))

        result = await handler.handle(
            "P1", "S1", "F2", submission(status="RED", id="65f0c0ffee0000000000beef")
        )

        assert result.status_code == 500
        assert await handler.get_assessment("P1", "S1", "F2") is None

    @pytest.mark.asyncio
    async def test_retry_after_fault_succeeds(self, storage, handler) -> None:
        original = storage.assessments.upsert
        storage.assessments.upsert = AsyncMock(side_effect=RuntimeError("timeout"))
        await handler.handle(*KEY, submission(status="GREEN"))

        storage.assessments.upsert = original
        result = await handler.handle(*KEY, submission(status="GREEN"))

        assert result.is_valid is True
        assert (await handler.get_assessment(*KEY)).status == StandardRating.GREEN


# =============================================================================
# Concurrency Tests
# =============================================================================


class TestConcurrentWrites:
    """Tests for per-key serialisation."""

    @pytest.mark.asyncio
    async def test_concurrent_writes_chain_history(self, storage) -> None:
        original_get = storage.assessments.get

        async def slow_get(*args):
            await asyncio.sleep(0)
            return await original_get(*args)

        storage.assessments.get = slow_get
        handler = AssessmentHandler(storage)
        statuses = ["GREEN", "AMBER", "RED", "PENDING", "GREEN"]

        await asyncio.gather(
            *(handler.handle(*KEY, submission(status=s)) for s in statuses)
        )

        history = list(reversed(await handler.get_history(*KEY)))

        assert len(history) == len(statuses)
        assert history[0].changes.status.from_ == ""
        for earlier, later in zip(history, history[1:]):
            assert later.changes.status.from_ == earlier.changes.status.to

    @pytest.mark.asyncio
    async def test_keyed_lock_released(self) -> None:
        locks = KeyedLock()

        async with locks.hold(KEY):
            assert len(locks) == 1

        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_keyed_lock_serialises_same_key(self) -> None:
        locks = KeyedLock()
        order: list[str] = []

        async def worker(name: str) -> None:
            async with locks.hold(KEY):
                order.append(f"{name}-in")
                await asyncio.sleep(0)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))

        assert order == ["a-in", "a-out", "b-in", "b-out"]


# =============================================================================
# Transaction Scope Tests
# =============================================================================


class TestTransactionScope:
    """Tests for the session shared by the upsert and the history append."""

    @pytest.mark.asyncio
    async def test_upsert_and_append_share_session(self, storage, handler) -> None:
        session = object()

        @asynccontextmanager
        async def transaction():
            yield session

        storage.transaction = transaction
        storage.assessments.upsert = AsyncMock()
        storage.history.add = AsyncMock()

        result = await handler.handle(*KEY, submission(status="GREEN"))

        assert result.is_valid is True
        assert storage.assessments.upsert.await_args.kwargs["session"] is session
        assert storage.history.add.await_args.kwargs["session"] is session

    @pytest.mark.asyncio
    async def test_fault_inside_transaction_propagates_to_scope(self, storage, handler) -> None:
        exits: list[type | None] = []

        @asynccontextmanager
        async def transaction():
            try:
                yield object()
            except Exception as e:
                exits.append(type(e))
                raise
            exits.append(None)

        storage.transaction = transaction
        storage.history.add = AsyncMock(side_effect=RuntimeError("aborted"))

        result = await handler.handle(*KEY, submission(status="GREEN"))

        assert result.status_code == 500
        assert exits == [RuntimeError]


# =============================================================================
# Archive Reconciliation Tests
# =============================================================================


class TestArchiveHistoryEntry:
    """Tests for archiving through the handler."""

    @pytest.mark.asyncio
    async def test_archive_newest_restores_previous_state(self, handler) -> None:
        await handler.handle(*KEY, submission(status="GREEN", commentary="ok", changed_by="alice"))
        await handler.handle(*KEY, submission(status="RED", commentary="regressed", changed_by="bob"))
        newest = (await handler.get_history(*KEY))[0]

        assert await handler.archive_history_entry(*KEY, newest.id) is True

        assessment = await handler.get_assessment(*KEY)
        assert assessment.status == StandardRating.GREEN
        assert assessment.commentary == "ok"
        assert assessment.changed_by == "alice"

    @pytest.mark.asyncio
    async def test_archive_without_reconciliation(self, handler, monkeypatch) -> None:
        monkeypatch.setattr(settings.assessment, "reconcile_on_archive", False)
        await handler.handle(*KEY, submission(status="GREEN"))
        await handler.handle(*KEY, submission(status="RED"))
        newest = (await handler.get_history(*KEY))[0]

        await handler.archive_history_entry(*KEY, newest.id)

        assert (await handler.get_assessment(*KEY)).status == StandardRating.RED

    @pytest.mark.asyncio
    async def test_archive_last_entry_keeps_assessment(self, handler) -> None:
        await handler.handle(*KEY, submission(status="GREEN"))
        only = (await handler.get_history(*KEY))[0]

        assert await handler.archive_history_entry(*KEY, only.id) is True

        assert await handler.get_history(*KEY) == []
        assert (await handler.get_assessment(*KEY)).status == StandardRating.GREEN

    @pytest.mark.asyncio
    async def test_archive_unknown_entry(self, handler) -> None:
        await handler.handle(*KEY, submission(status="GREEN"))

        assert await handler.archive_history_entry(*KEY, "missing") is False
        assert len(await handler.get_history(*KEY)) == 1


# =============================================================================
# End-to-End Scenario
# =============================================================================


class TestAssessmentLifecycle:
    """Create, update without an actor, then read back."""

    @pytest.mark.asyncio
    async def test_create_then_regress(self, handler) -> None:
        first = await handler.handle(
            *KEY, submission(status="GREEN", commentary="ok", changed_by="alice")
        )
        assert first.is_valid is True

        history = await handler.get_history(*KEY)
        assert len(history) == 1
        assert history[0].changes.status.from_ == ""
        assert history[0].changes.status.to == "GREEN"

        second = await handler.handle(*KEY, submission(status="RED", commentary="regressed"))
        assert second.is_valid is True

        assessment = await handler.get_assessment(*KEY)
        assert assessment.status == StandardRating.RED
        assert assessment.changed_by == "alice"

        history = await handler.get_history(*KEY)
        assert len(history) == 2
        assert history[0].changes.status.from_ == "GREEN"
        assert history[0].changes.status.to == "RED"
        assert history[0].changes.commentary.from_ == "ok"
        assert history[0].changes.commentary.to == "regressed"
