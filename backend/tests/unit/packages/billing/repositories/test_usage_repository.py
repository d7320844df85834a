import pytest
from datetime import date, datetime, timedelta, timezone

from packages.billing.models.domain.enums import UsageType
from packages.billing.models.domain.usage import UsageEventCreateModel
from packages.billing.repositories.usage_repository import UsageEventRepository

DAY = datetime(2026, 5, 20, 8, 30, tzinfo=timezone.utc)


class TestUsageEventRepository:
    @pytest.fixture
    async def repository(self):
        return UsageEventRepository()

    async def _add(self, repository, project_id, credits, when, usage_type=UsageType.API_CALL):
        return await repository.create(
            UsageEventCreateModel(
                project_id=project_id,
                credits=credits,
                type=usage_type,
                created_at=when,
                event_metadata={"source": "test"},
            )
        )

    async def test_create_keeps_metadata(self, repository, sample_project):
        event = await self._add(repository, sample_project.id, 4, DAY)

        assert event.event_metadata == {"source": "test"}
        assert event.type == UsageType.API_CALL

    async def test_total_credits_since(self, repository, sample_user, sample_project):
        await self._add(repository, sample_project.id, 4, DAY - timedelta(days=3))
        await self._add(repository, sample_project.id, 6, DAY)

        assert await repository.get_total_credits(sample_user.id) == 10
        assert await repository.get_total_credits(sample_user.id, DAY - timedelta(hours=1)) == 6

    async def test_daily_totals_are_dates(self, repository, sample_user, sample_project):
        await self._add(repository, sample_project.id, 1, DAY)
        await self._add(repository, sample_project.id, 2, DAY + timedelta(hours=10))
        await self._add(repository, sample_project.id, 3, DAY + timedelta(days=1))

        rows = await repository.get_daily_totals(sample_user.id, DAY - timedelta(days=1))

        assert rows == [(date(2026, 5, 20), 3), (date(2026, 5, 21), 3)]

    async def test_credits_by_project_and_type(
        self, repository, sample_user, sample_project
    ):
        await self._add(repository, sample_project.id, 1, DAY, UsageType.API_CALL)
        await self._add(repository, sample_project.id, 5, DAY, UsageType.MODEL_TRAINING)
        await self._add(repository, sample_project.id, 2, DAY, UsageType.API_CALL)

        rows = await repository.get_credits_by_project_and_type(sample_user.id)

        assert sorted(rows, key=lambda r: r[1].value) == [
            (sample_project.id, UsageType.API_CALL, 3),
            (sample_project.id, UsageType.MODEL_TRAINING, 5),
        ]
