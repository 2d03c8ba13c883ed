"""Sequential submission of a ledger plan, with a recoverable failure marker."""

import logging

from portfolio_client.core.exceptions import PartialSubmissionError, RemoteError
from portfolio_client.core.timezone import now_local
from portfolio_client.domain.models import PendingGroup
from portfolio_client.domain.views import SubmissionResult, ReconciliationReport
from portfolio_client.repositories.protocols import PendingGroupRepository
from portfolio_client.services.ledger_drafts import LedgerPlan
from portfolio_client.services.portfolio_data_service import PortfolioDataService

logger = logging.getLogger(__name__)


class TransactionSubmitter:
    """
    Creates the rows of a ledger plan one call at a time.

    The group is created first because every leg needs its id, then the
    stock leg, then the cash legs (linked to the stock leg where they settle
    it). While legs are being created the group is recorded locally as
    pending; a failure leaves the marker behind so that ``reconcile`` can
    remove the orphaned rows when the user asks for it.
    """

    def __init__(self, data_service: PortfolioDataService, pending_repo: PendingGroupRepository):
        self._data = data_service
        self._pending = pending_repo

    def submit(self, plan: LedgerPlan) -> SubmissionResult:
        """
        Create the group and all legs of ``plan``.

        Raises:
            RemoteError: if the group itself could not be created (nothing
                was saved).
            PartialSubmissionError: if a leg failed after the group was
                created.
        """
        group = self._data.create_group(plan.group)
        self._pending.add(
            PendingGroup(
                group_id=group.id,
                created_at=now_local().replace(tzinfo=None),
                description=f"{plan.group.group_type.value} {plan.group.occurred_at.isoformat()}",
            )
        )

        result = SubmissionResult(group=group)
        created_ids = [group.id]
        try:
            stock_leg_id = None
            if plan.stock_leg is not None:
                result.stock_transaction = self._data.create_stock_transaction(
                    plan.stock_leg, group.id
                )
                stock_leg_id = result.stock_transaction.id
                created_ids.append(stock_leg_id)

            for leg in plan.cash_legs:
                cash_tx = self._data.create_cash_transaction(
                    leg,
                    group.id,
                    related_stock_transaction_id=stock_leg_id if leg.settles_stock_leg else None,
                )
                result.cash_transactions.append(cash_tx)
                created_ids.append(cash_tx.id)
        except RemoteError as exc:
            logger.warning(
                "Submission of group %s stopped after %d rows: %s",
                group.id,
                len(created_ids),
                exc,
            )
            raise PartialSubmissionError(group.id, created_ids, exc) from exc

        self._pending.remove(group.id)
        logger.info("Submitted group %s with %d rows", group.id, len(created_ids))
        return result

    def pending_groups(self) -> list[PendingGroup]:
        return self._pending.list_all()

    def reconcile(self) -> ReconciliationReport:
        """
        Delete the rows of every group left pending by a failed submission.

        Each group is handled independently: a failure is recorded in the
        report and its marker kept for the next sweep.
        """
        report = ReconciliationReport()
        for pending in self._pending.list_all():
            try:
                removed = self._data.delete_group_legs(pending.group_id)
                self._data.delete_group(pending.group_id)
            except RemoteError as exc:
                logger.warning("Could not clean up group %s: %s", pending.group_id, exc)
                report.failed_groups[pending.group_id] = exc.message
                continue
            self._pending.remove(pending.group_id)
            report.removed_groups.append(pending.group_id)
            report.removed_legs += removed
        return report
