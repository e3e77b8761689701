"""
Period lifecycle state machine.

    OPEN --close--> CLOSED --lock--> LOCKED
      ^               |
      +----reopen-----+

LOCKED is terminal. At most one period is OPEN at any time; the store
also enforces this with a unique index so concurrent writers cannot
both open a period.
"""

from datetime import datetime

from messledger.config import get_logger
from messledger.core.entities.balance import PeriodItemBalance
from messledger.core.entities.period import Period, PeriodStatus, parse_period_code
from messledger.core.exceptions import (
    AnotherPeriodOpenError,
    DuplicatePeriodError,
    LedgerIntegrityError,
    PeriodLockedError,
    PeriodNotFoundError,
    PeriodNotOpenError,
    PeriodTransitionError,
    ValidationError,
)
from messledger.core.interfaces.ledger_store import ILedgerSession
from messledger.core.services.balance_calculator import PeriodBalanceCalculator

logger = get_logger(__name__)

# action -> statuses it may start from
ALLOWED_TRANSITIONS: dict[str, frozenset[PeriodStatus]] = {
    "close": frozenset({PeriodStatus.OPEN}),
    "reopen": frozenset({PeriodStatus.CLOSED}),
    "lock": frozenset({PeriodStatus.CLOSED}),
}

TARGET_STATUS: dict[str, PeriodStatus] = {
    "close": PeriodStatus.CLOSED,
    "reopen": PeriodStatus.OPEN,
    "lock": PeriodStatus.LOCKED,
}


def can_transition(status: PeriodStatus, action: str) -> bool:
    """True if action is allowed from status."""
    return status in ALLOWED_TRANSITIONS.get(action, frozenset())


def ensure_open_for_entries(period: Period) -> None:
    """Raise PeriodNotOpenError unless receipts and consumptions may be recorded."""
    if period.status != PeriodStatus.OPEN:
        raise PeriodNotOpenError(period.code, period.status.value)


class PeriodLifecycle:
    """Create periods and move them between statuses inside the caller's transaction."""

    def __init__(self, session: ILedgerSession) -> None:
        self._session = session

    async def get(self, code: str) -> Period:
        period = await self._session.get_period_by_code(code)
        if period is None:
            raise PeriodNotFoundError(code)
        return period

    async def get_open_for_entries(self, code: str) -> Period:
        """Load a period and check it accepts new receipts and consumptions."""
        period = await self.get(code)
        ensure_open_for_entries(period)
        return period

    async def _ensure_no_other_open(self, period: Period | None = None) -> None:
        open_period = await self._session.get_open_period()
        if open_period is not None and (period is None or open_period.id != period.id):
            raise AnotherPeriodOpenError(open_period.code)

    async def create(self, code: str, actor: str | None = None) -> Period:
        """
        Create a new OPEN period from a YYYY-MM code.

        Raises:
            ValidationError: Code is malformed.
            DuplicatePeriodError: Period already exists.
            AnotherPeriodOpenError: Some other period is OPEN.
        """
        try:
            period = Period.from_code(code, created_by=actor)
        except ValueError as e:
            raise ValidationError("code", str(e), code) from e

        if await self._session.get_period_by_code(period.code) is not None:
            raise DuplicatePeriodError(period.code)
        await self._ensure_no_other_open()

        period.status = PeriodStatus.OPEN
        period.opened_at = datetime.utcnow()
        period = await self._session.create_period(period)

        logger.info("period_created", period_code=period.code, created_by=actor)
        return period

    def _check_transition(self, period: Period, action: str) -> None:
        if can_transition(period.status, action):
            return
        if action == "close":
            raise PeriodNotOpenError(period.code, period.status.value)
        if action == "reopen" and period.status == PeriodStatus.LOCKED:
            raise PeriodLockedError(period.code)
        raise PeriodTransitionError(period.code, period.status.value, action)

    async def close(
        self, code: str, actor: str | None = None
    ) -> tuple[Period, list[PeriodItemBalance]]:
        """
        Verify the ledger, freeze item balances and mark the period CLOSED.

        Balances come from PeriodBalanceCalculator; the stored rows replace
        any left over from an earlier close of the same period.

        Raises:
            PeriodNotFoundError: No period with that code.
            PeriodNotOpenError: Period is not OPEN.
            LedgerIntegrityError: A lot has remaining_qty outside [0, quantity]
                or an item would close with negative quantity.
        """
        period = await self.get(code)
        self._check_transition(period, "close")

        violations = await self._session.find_remaining_violations()
        if violations:
            raise LedgerIntegrityError(
                "receipt lines with remaining quantity out of range",
                {"receipt_line_ids": violations},
            )

        balances = await PeriodBalanceCalculator(self._session).compute_for_period(period)
        negative = [b.item_id for b in balances if b.closing.qty < 0]
        if negative:
            raise LedgerIntegrityError(
                "negative closing quantity",
                {"item_ids": negative},
            )

        rows = [
            PeriodItemBalance(period_id=period.id, **balance.model_dump())  # type: ignore[arg-type]
            for balance in balances
        ]
        await self._session.save_period_item_balances(period.id, rows)  # type: ignore[arg-type]

        period.status = TARGET_STATUS["close"]
        period.closed_at = datetime.utcnow()
        period.closed_by = actor
        period = await self._session.update_period(period)

        logger.info(
            "period_closed",
            period_code=period.code,
            items=len(rows),
            closed_by=actor,
        )
        return period, rows

    async def reopen(self, code: str, actor: str | None = None) -> Period:
        """
        Move a CLOSED period back to OPEN and clear its close stamp.

        Raises:
            PeriodNotFoundError: No period with that code.
            PeriodLockedError: Period is LOCKED.
            PeriodTransitionError: Period is already OPEN.
            AnotherPeriodOpenError: Some other period is OPEN.
        """
        period = await self.get(code)
        self._check_transition(period, "reopen")
        await self._ensure_no_other_open(period)

        period.status = TARGET_STATUS["reopen"]
        period.closed_at = None
        period.closed_by = None
        period = await self._session.update_period(period)

        logger.info("period_reopened", period_code=period.code, reopened_by=actor)
        return period

    async def lock(self, code: str, actor: str | None = None) -> Period:
        """
        Lock a CLOSED period for good.

        Raises:
            PeriodNotFoundError: No period with that code.
            PeriodTransitionError: Period is not CLOSED.
        """
        period = await self.get(code)
        self._check_transition(period, "lock")

        period.status = TARGET_STATUS["lock"]
        period.locked_at = datetime.utcnow()
        period.locked_by = actor
        period = await self._session.update_period(period)

        logger.info("period_locked", period_code=period.code, locked_by=actor)
        return period
