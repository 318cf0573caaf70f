from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tender_filing.database.models import Firm
from tender_filing.repositories.base_repository import BaseRepository


class FirmRepository(BaseRepository[Firm]):
    """Repository for project-scoped firms."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Firm)

    async def find_active_by_name(self, project_id: str, entity: str) -> Optional[Firm]:
        """Exact, case-sensitive name lookup among live firms of a project."""
        result = await self.session.execute(
            select(Firm)
            .where(
                Firm.project_id == project_id,
                Firm.entity == entity,
                Firm.deleted_at.is_(None),
            )
            .order_by(Firm.display_order)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def max_display_order(self, project_id: str) -> Optional[int]:
        """Highest display order among live firms, or None when there are none."""
        result = await self.session.execute(
            select(func.max(Firm.display_order)).where(
                Firm.project_id == project_id,
                Firm.deleted_at.is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def create_firm(
        self, project_id: str, entity: str, display_order: int, actor_id: str
    ) -> Firm:
        return await self.create(
            project_id=project_id,
            entity=entity,
            display_order=display_order,
            created_by=actor_id,
            updated_by=actor_id,
        )

    async def list_for_project(self, project_id: str) -> List[Firm]:
        result = await self.session.execute(
            select(Firm)
            .where(Firm.project_id == project_id, Firm.deleted_at.is_(None))
            .order_by(Firm.display_order)
        )
        return list(result.scalars().all())
