from typing import List, Optional

from tender_filing.core.locks import FilingLockRegistry, filing_locks
from tender_filing.database.models import Firm
from tender_filing.repositories.firm_repository import FirmRepository
from tender_filing.utils.logging import get_logger

LOGGER = get_logger(__name__)

SYSTEM_ACTOR = "system"


class FirmRegistry:
    """Find-or-create for firms named in an upload context.

    Matching is by exact display name. Name variants ("ABC Pty Ltd" vs
    "ABC PTY LTD") become separate firms; merging them is a separate,
    explicit operation.
    """

    def __init__(self, firm_repo: FirmRepository, locks: Optional[FilingLockRegistry] = None):
        self.firm_repo = firm_repo
        self.locks = locks if locks is not None else filing_locks

    async def resolve_firm(
        self, project_id: str, name: str, actor_id: Optional[str] = None
    ) -> Firm:
        """Return the live firm called ``name`` in the project, creating it if needed.

        A new firm gets ``display_order = max(existing) + 1`` (1 for the first
        firm) and is committed before the lock is released, so a concurrent
        upload naming the same firm finds it instead of creating a twin.

        Args:
            project_id: Owning project
            name: Firm display name, matched case-sensitively
            actor_id: Caller recorded as creator; "system" when absent

        Returns:
            Firm: Existing or newly created firm
        """
        async with self.locks.hold(project_id, "firm", name):
            firm = await self.firm_repo.find_active_by_name(project_id, name)
            if firm is not None:
                LOGGER.debug(
                    f"Reusing firm '{firm.entity}'",
                    extra={"project_id": project_id, "firm_id": str(firm.id)},
                )
                return firm

            # Two different new firms must not share an ordinal either
            async with self.locks.hold(project_id, "firm-order"):
                current_max = await self.firm_repo.max_display_order(project_id)
                display_order = (current_max or 0) + 1
                firm = await self.firm_repo.create_firm(
                    project_id=project_id,
                    entity=name,
                    display_order=display_order,
                    actor_id=actor_id or SYSTEM_ACTOR,
                )
                await self.firm_repo.session.commit()
            LOGGER.info(
                f"Created firm '{name}' with display order {display_order}",
                extra={
                    "project_id": project_id,
                    "firm_id": str(firm.id),
                    "caller_id": actor_id,
                },
            )
            return firm

    async def list_firms(self, project_id: str) -> List[Firm]:
        return await self.firm_repo.list_for_project(project_id)
