"""SQLite implementation of ledger storage."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal

import aiosqlite

from messledger.config import get_logger
from messledger.core.entities.balance import BalanceBucket, PeriodItemBalance
from messledger.core.entities.consumption import (
    Consumption,
    ConsumptionAllocation,
    ConsumptionLine,
)
from messledger.core.entities.item import Item
from messledger.core.entities.period import Period, PeriodStatus
from messledger.core.entities.receipt import AvailableLot, Receipt, ReceiptLine
from messledger.core.exceptions import (
    AnotherPeriodOpenError,
    ConflictError,
    DatabaseError,
    DuplicatePeriodError,
)
from messledger.core.interfaces.ledger_store import ILedgerSession, ILedgerStore
from messledger.infrastructure.storage.sqlite.connection import ConnectionPool, get_pool
from messledger.infrastructure.storage.sqlite.fixed_point import (
    money_from_db,
    money_to_db,
    qty_from_db,
    qty_rate_from_db,
    qty_to_db,
)

logger = get_logger(__name__)

_PRIOR_PERIOD = "(p.year < ? OR (p.year = ? AND p.month < ?))"
_CONSUMED_FROM_PERIOD_ON = "NOT (cp.year < ? OR (cp.year = ? AND cp.month < ?))"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _dt(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None


def _placeholders(values: list) -> str:
    return ", ".join("?" for _ in values)


class SQLiteLedgerSession(ILedgerSession):
    """Ledger repository calls on one connection inside an open transaction."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    # Items

    async def create_item(self, item: Item) -> Item:
        """Create a new item."""
        now = datetime.utcnow()
        item.created_at = now
        item.updated_at = now
        try:
            cursor = await self._conn.execute(
                """
                INSERT INTO items (name, uom, is_active, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (item.name, item.uom, int(item.is_active), _iso(now), _iso(now)),
            )
        except aiosqlite.IntegrityError as e:
            raise ConflictError(
                f"Item already exists: {item.name}",
                code="DUPLICATE_ITEM",
                details={"name": item.name},
            ) from e
        item.id = cursor.lastrowid
        logger.info("item_created", item_id=item.id, name=item.name)
        return item

    async def get_item_by_name(self, name: str) -> Item | None:
        cursor = await self._conn.execute("SELECT * FROM items WHERE name = ?", (name,))
        row = await cursor.fetchone()
        return self._row_to_item(row) if row else None

    async def get_items(self, item_ids: list[int]) -> dict[int, Item]:
        ids = sorted(set(item_ids))
        if not ids:
            return {}
        cursor = await self._conn.execute(
            f"SELECT * FROM items WHERE id IN ({_placeholders(ids)})", ids
        )
        return {row["id"]: self._row_to_item(row) for row in await cursor.fetchall()}

    async def list_items(self, active_only: bool = True) -> list[Item]:
        query = "SELECT * FROM items"
        if active_only:
            query += " WHERE is_active = 1"
        cursor = await self._conn.execute(query + " ORDER BY name, id")
        return [self._row_to_item(row) for row in await cursor.fetchall()]

    # Periods

    async def _period_conflict(
        self, period: Period, error: aiosqlite.IntegrityError
    ) -> ConflictError:
        """Map a unique index violation on periods to a domain conflict."""
        if "periods.status" in str(error):
            open_period = await self.get_open_period()
            return AnotherPeriodOpenError(open_period.code if open_period else None)
        return DuplicatePeriodError(period.code)

    async def create_period(self, period: Period) -> Period:
        """Create a period. The unique indexes reject duplicates and a second OPEN period."""
        now = datetime.utcnow()
        period.created_at = now
        period.updated_at = now
        try:
            cursor = await self._conn.execute(
                """
                INSERT INTO periods (
                    code, year, month, status, opened_at, created_by,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    period.code,
                    period.year,
                    period.month,
                    period.status.value,
                    _iso(period.opened_at),
                    period.created_by,
                    _iso(now),
                    _iso(now),
                ),
            )
        except aiosqlite.IntegrityError as e:
            raise await self._period_conflict(period, e) from e
        period.id = cursor.lastrowid
        return period

    async def get_period(self, period_id: int) -> Period | None:
        cursor = await self._conn.execute("SELECT * FROM periods WHERE id = ?", (period_id,))
        row = await cursor.fetchone()
        return self._row_to_period(row) if row else None

    async def get_period_by_code(self, code: str) -> Period | None:
        cursor = await self._conn.execute("SELECT * FROM periods WHERE code = ?", (code,))
        row = await cursor.fetchone()
        return self._row_to_period(row) if row else None

    async def get_open_period(self) -> Period | None:
        cursor = await self._conn.execute(
            "SELECT * FROM periods WHERE status = ?", (PeriodStatus.OPEN.value,)
        )
        row = await cursor.fetchone()
        return self._row_to_period(row) if row else None

    async def list_periods(self) -> list[Period]:
        cursor = await self._conn.execute(
            "SELECT * FROM periods ORDER BY year DESC, month DESC"
        )
        return [self._row_to_period(row) for row in await cursor.fetchall()]

    async def update_period(self, period: Period) -> Period:
        period.updated_at = datetime.utcnow()
        try:
            await self._conn.execute(
                """
                UPDATE periods SET
                    status = ?,
                    opened_at = ?,
                    closed_at = ?,
                    closed_by = ?,
                    locked_at = ?,
                    locked_by = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    period.status.value,
                    _iso(period.opened_at),
                    _iso(period.closed_at),
                    period.closed_by,
                    _iso(period.locked_at),
                    period.locked_by,
                    _iso(period.updated_at),
                    period.id,
                ),
            )
        except aiosqlite.IntegrityError as e:
            raise await self._period_conflict(period, e) from e
        return period

    # Receipts

    async def create_receipt(self, receipt: Receipt) -> Receipt:
        """Create a receipt header and its lines."""
        now = datetime.utcnow()
        receipt.created_at = now
        receipt.updated_at = now
        cursor = await self._conn.execute(
            """
            INSERT INTO receipts (
                period_id, ref_no, notes, is_void, created_by, created_at, updated_at
            ) VALUES (?, ?, ?, 0, ?, ?, ?)
            """,
            (
                receipt.period_id,
                receipt.ref_no,
                receipt.notes,
                receipt.created_by,
                _iso(now),
                _iso(now),
            ),
        )
        receipt.id = cursor.lastrowid

        for line in receipt.lines:
            line.receipt_id = receipt.id
            line.created_at = now
            line.updated_at = now
            cursor = await self._conn.execute(
                """
                INSERT INTO receipt_lines (
                    receipt_id, item_id, quantity, rate, amount, remaining_qty,
                    lot_no, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    line.receipt_id,
                    line.item_id,
                    qty_to_db(line.quantity),
                    money_to_db(line.rate),
                    money_to_db(line.amount),
                    qty_to_db(line.remaining_qty),  # type: ignore[arg-type]
                    line.lot_no,
                    _iso(now),
                    _iso(now),
                ),
            )
            line.id = cursor.lastrowid

        return receipt

    async def get_receipt(self, receipt_id: int) -> Receipt | None:
        cursor = await self._conn.execute(
            """
            SELECT r.*, p.code AS period_code
            FROM receipts r JOIN periods p ON p.id = r.period_id
            WHERE r.id = ?
            """,
            (receipt_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        lines = await self._load_receipt_lines([receipt_id])
        return self._row_to_receipt(row, lines.get(receipt_id, []))

    async def list_receipts(
        self, period_id: int, include_void: bool = False
    ) -> list[Receipt]:
        query = """
            SELECT r.*, p.code AS period_code
            FROM receipts r JOIN periods p ON p.id = r.period_id
            WHERE r.period_id = ?
        """
        if not include_void:
            query += " AND r.is_void = 0"
        cursor = await self._conn.execute(query + " ORDER BY r.id", (period_id,))
        rows = await cursor.fetchall()
        lines = await self._load_receipt_lines([row["id"] for row in rows])
        return [self._row_to_receipt(row, lines.get(row["id"], [])) for row in rows]

    async def update_receipt(self, receipt: Receipt) -> Receipt:
        receipt.updated_at = datetime.utcnow()
        await self._conn.execute(
            """
            UPDATE receipts SET
                ref_no = ?,
                notes = ?,
                is_void = ?,
                void_reason = ?,
                voided_at = ?,
                voided_by = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (
                receipt.ref_no,
                receipt.notes,
                int(receipt.is_void),
                receipt.void_reason,
                _iso(receipt.voided_at),
                receipt.voided_by,
                _iso(receipt.updated_at),
                receipt.id,
            ),
        )
        return receipt

    async def get_receipt_line(self, receipt_line_id: int) -> ReceiptLine | None:
        cursor = await self._conn.execute(
            "SELECT * FROM receipt_lines WHERE id = ?", (receipt_line_id,)
        )
        row = await cursor.fetchone()
        return self._row_to_receipt_line(row) if row else None

    async def find_available_lots(self, item_id: int) -> list[AvailableLot]:
        """Lots with stock left on non-void receipts, oldest period first, then line id."""
        cursor = await self._conn.execute(
            """
            SELECT
                rl.id AS receipt_line_id, rl.receipt_id, rl.item_id,
                rl.remaining_qty, rl.rate,
                p.year AS period_year, p.month AS period_month
            FROM receipt_lines rl
            JOIN receipts r ON r.id = rl.receipt_id
            JOIN periods p ON p.id = r.period_id
            WHERE rl.item_id = ?
              AND rl.remaining_qty > 0
              AND r.is_void = 0
            ORDER BY p.year ASC, p.month ASC, rl.id ASC
            """,
            (item_id,),
        )
        return [
            AvailableLot(
                receipt_line_id=row["receipt_line_id"],
                receipt_id=row["receipt_id"],
                item_id=row["item_id"],
                remaining_qty=qty_from_db(row["remaining_qty"]),
                rate=money_from_db(row["rate"]),
                period_year=row["period_year"],
                period_month=row["period_month"],
            )
            for row in await cursor.fetchall()
        ]

    async def set_remaining_qty(self, receipt_line_id: int, remaining_qty: Decimal) -> None:
        await self._conn.execute(
            "UPDATE receipt_lines SET remaining_qty = ?, updated_at = ? WHERE id = ?",
            (qty_to_db(remaining_qty), _iso(datetime.utcnow()), receipt_line_id),
        )

    async def find_remaining_violations(self) -> list[int]:
        cursor = await self._conn.execute(
            """
            SELECT id FROM receipt_lines
            WHERE remaining_qty < 0 OR remaining_qty > quantity
            ORDER BY id
            """
        )
        return [row["id"] for row in await cursor.fetchall()]

    async def _load_receipt_lines(self, receipt_ids: list[int]) -> dict[int, list[ReceiptLine]]:
        if not receipt_ids:
            return {}
        cursor = await self._conn.execute(
            f"""
            SELECT * FROM receipt_lines
            WHERE receipt_id IN ({_placeholders(receipt_ids)})
            ORDER BY id
            """,
            receipt_ids,
        )
        lines: dict[int, list[ReceiptLine]] = {}
        for row in await cursor.fetchall():
            lines.setdefault(row["receipt_id"], []).append(self._row_to_receipt_line(row))
        return lines

    # Consumptions

    async def create_consumption(self, consumption: Consumption) -> Consumption:
        now = datetime.utcnow()
        consumption.created_at = now
        consumption.updated_at = now
        cursor = await self._conn.execute(
            """
            INSERT INTO consumptions (
                period_id, notes, is_void, created_by, created_at, updated_at
            ) VALUES (?, ?, 0, ?, ?, ?)
            """,
            (
                consumption.period_id,
                consumption.notes,
                consumption.created_by,
                _iso(now),
                _iso(now),
            ),
        )
        consumption.id = cursor.lastrowid
        return consumption

    async def add_consumption_line(self, line: ConsumptionLine) -> ConsumptionLine:
        cursor = await self._conn.execute(
            """
            INSERT INTO consumption_lines (consumption_id, item_id, entered_qty, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (
                line.consumption_id,
                line.item_id,
                qty_to_db(line.entered_qty),
                _iso(line.created_at),
            ),
        )
        line.id = cursor.lastrowid
        return line

    async def add_allocation(
        self, allocation: ConsumptionAllocation
    ) -> ConsumptionAllocation:
        cursor = await self._conn.execute(
            """
            INSERT INTO consumption_allocations (
                consumption_line_id, receipt_line_id, qty, rate, amount, created_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                allocation.consumption_line_id,
                allocation.receipt_line_id,
                qty_to_db(allocation.qty),
                money_to_db(allocation.rate),
                money_to_db(allocation.amount),
                _iso(allocation.created_at),
            ),
        )
        allocation.id = cursor.lastrowid
        return allocation

    async def get_consumption(self, consumption_id: int) -> Consumption | None:
        cursor = await self._conn.execute(
            """
            SELECT c.*, p.code AS period_code
            FROM consumptions c JOIN periods p ON p.id = c.period_id
            WHERE c.id = ?
            """,
            (consumption_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        lines = await self._load_consumption_lines([consumption_id])
        return self._row_to_consumption(row, lines.get(consumption_id, []))

    async def list_consumptions(
        self, period_id: int, include_void: bool = False
    ) -> list[Consumption]:
        query = """
            SELECT c.*, p.code AS period_code
            FROM consumptions c JOIN periods p ON p.id = c.period_id
            WHERE c.period_id = ?
        """
        if not include_void:
            query += " AND c.is_void = 0"
        cursor = await self._conn.execute(query + " ORDER BY c.id", (period_id,))
        rows = await cursor.fetchall()
        lines = await self._load_consumption_lines([row["id"] for row in rows])
        return [self._row_to_consumption(row, lines.get(row["id"], [])) for row in rows]

    async def update_consumption(self, consumption: Consumption) -> Consumption:
        consumption.updated_at = datetime.utcnow()
        await self._conn.execute(
            """
            UPDATE consumptions SET
                notes = ?,
                is_void = ?,
                void_reason = ?,
                voided_at = ?,
                voided_by = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (
                consumption.notes,
                int(consumption.is_void),
                consumption.void_reason,
                _iso(consumption.voided_at),
                consumption.voided_by,
                _iso(consumption.updated_at),
                consumption.id,
            ),
        )
        return consumption

    async def _load_consumption_lines(
        self, consumption_ids: list[int]
    ) -> dict[int, list[ConsumptionLine]]:
        if not consumption_ids:
            return {}
        cursor = await self._conn.execute(
            f"""
            SELECT * FROM consumption_lines
            WHERE consumption_id IN ({_placeholders(consumption_ids)})
            ORDER BY id
            """,
            consumption_ids,
        )
        line_rows = await cursor.fetchall()
        line_ids = [row["id"] for row in line_rows]

        allocations: dict[int, list[ConsumptionAllocation]] = {}
        if line_ids:
            cursor = await self._conn.execute(
                f"""
                SELECT * FROM consumption_allocations
                WHERE consumption_line_id IN ({_placeholders(line_ids)})
                ORDER BY id
                """,
                line_ids,
            )
            for row in await cursor.fetchall():
                allocations.setdefault(row["consumption_line_id"], []).append(
                    ConsumptionAllocation(
                        id=row["id"],
                        consumption_line_id=row["consumption_line_id"],
                        receipt_line_id=row["receipt_line_id"],
                        qty=qty_from_db(row["qty"]),
                        rate=money_from_db(row["rate"]),
                        amount=money_from_db(row["amount"]),
                        created_at=_dt(row["created_at"]) or datetime.utcnow(),
                    )
                )

        lines: dict[int, list[ConsumptionLine]] = {}
        for row in line_rows:
            lines.setdefault(row["consumption_id"], []).append(
                ConsumptionLine(
                    id=row["id"],
                    consumption_id=row["consumption_id"],
                    item_id=row["item_id"],
                    entered_qty=qty_from_db(row["entered_qty"]),
                    allocations=allocations.get(row["id"], []),
                    created_at=_dt(row["created_at"]) or datetime.utcnow(),
                )
            )
        return lines

    # Balances

    async def _aggregate(self, query: str, params: tuple, amount_is_product: bool = False):
        cursor = await self._conn.execute(query, params)
        buckets: dict[int, BalanceBucket] = {}
        for row in await cursor.fetchall():
            amt = qty_rate_from_db(row["amt"]) if amount_is_product else money_from_db(row["amt"])
            buckets[row["item_id"]] = BalanceBucket(qty=qty_from_db(row["qty"]), amt=amt)
        return buckets

    async def aggregate_opening(self, period: Period) -> dict[int, BalanceBucket]:
        """
        Stock of earlier lots as it stood when the period began.

        Current remaining_qty plus what active consumptions of this or a
        later period have drawn from those lots since. Both parts are
        qty * rate at scale 10^5.
        """
        return await self._aggregate(
            f"""
            SELECT item_id, SUM(qty) AS qty, SUM(amt) AS amt
            FROM (
                SELECT rl.item_id,
                       rl.remaining_qty AS qty,
                       rl.remaining_qty * rl.rate AS amt
                FROM receipt_lines rl
                JOIN receipts r ON r.id = rl.receipt_id
                JOIN periods p ON p.id = r.period_id
                WHERE r.is_void = 0 AND {_PRIOR_PERIOD}

                UNION ALL

                SELECT rl.item_id,
                       ca.qty AS qty,
                       ca.qty * ca.rate AS amt
                FROM consumption_allocations ca
                JOIN consumption_lines cl ON cl.id = ca.consumption_line_id
                JOIN consumptions c ON c.id = cl.consumption_id
                JOIN periods cp ON cp.id = c.period_id
                JOIN receipt_lines rl ON rl.id = ca.receipt_line_id
                JOIN receipts r ON r.id = rl.receipt_id
                JOIN periods p ON p.id = r.period_id
                WHERE c.is_void = 0 AND r.is_void = 0
                  AND {_PRIOR_PERIOD}
                  AND {_CONSUMED_FROM_PERIOD_ON}
            )
            GROUP BY item_id
            """,
            (
                period.year, period.year, period.month,
                period.year, period.year, period.month,
                period.year, period.year, period.month,
            ),
            amount_is_product=True,
        )

    async def aggregate_received(self, period: Period) -> dict[int, BalanceBucket]:
        return await self._aggregate(
            """
            SELECT rl.item_id,
                   SUM(rl.quantity) AS qty,
                   SUM(rl.amount) AS amt
            FROM receipt_lines rl
            JOIN receipts r ON r.id = rl.receipt_id
            WHERE r.is_void = 0 AND r.period_id = ?
            GROUP BY rl.item_id
            """,
            (period.id,),
        )

    async def aggregate_consumed_from_opening(
        self, period: Period
    ) -> dict[int, BalanceBucket]:
        return await self._aggregate(
            f"""
            SELECT cl.item_id,
                   SUM(ca.qty) AS qty,
                   SUM(ca.amount) AS amt
            FROM consumption_allocations ca
            JOIN consumption_lines cl ON cl.id = ca.consumption_line_id
            JOIN consumptions c ON c.id = cl.consumption_id
            JOIN receipt_lines rl ON rl.id = ca.receipt_line_id
            JOIN receipts r ON r.id = rl.receipt_id
            JOIN periods p ON p.id = r.period_id
            WHERE c.is_void = 0 AND c.period_id = ? AND {_PRIOR_PERIOD}
            GROUP BY cl.item_id
            """,
            (period.id, period.year, period.year, period.month),
        )

    async def aggregate_consumed_from_current(
        self, period: Period
    ) -> dict[int, BalanceBucket]:
        return await self._aggregate(
            """
            SELECT cl.item_id,
                   SUM(ca.qty) AS qty,
                   SUM(ca.amount) AS amt
            FROM consumption_allocations ca
            JOIN consumption_lines cl ON cl.id = ca.consumption_line_id
            JOIN consumptions c ON c.id = cl.consumption_id
            JOIN receipt_lines rl ON rl.id = ca.receipt_line_id
            JOIN receipts r ON r.id = rl.receipt_id
            WHERE c.is_void = 0 AND c.period_id = ? AND r.period_id = ?
            GROUP BY cl.item_id
            """,
            (period.id, period.id),
        )

    async def save_period_item_balances(
        self, period_id: int, balances: list[PeriodItemBalance]
    ) -> None:
        now = _iso(datetime.utcnow())
        await self._conn.execute(
            "DELETE FROM period_item_balances WHERE period_id = ?", (period_id,)
        )
        await self._conn.executemany(
            """
            INSERT INTO period_item_balances (
                period_id, item_id,
                opening_qty, opening_amt,
                received_qty, received_amt,
                cons_from_opening_qty, cons_from_opening_amt,
                cons_from_current_qty, cons_from_current_amt,
                closing_qty, closing_amt,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    period_id,
                    b.item_id,
                    qty_to_db(b.opening.qty),
                    money_to_db(b.opening.amt),
                    qty_to_db(b.received.qty),
                    money_to_db(b.received.amt),
                    qty_to_db(b.consumed_from_opening.qty),
                    money_to_db(b.consumed_from_opening.amt),
                    qty_to_db(b.consumed_from_current.qty),
                    money_to_db(b.consumed_from_current.amt),
                    qty_to_db(b.closing.qty),
                    money_to_db(b.closing.amt),
                    now,
                    now,
                )
                for b in balances
            ],
        )
        logger.debug("period_item_balances_saved", period_id=period_id, rows=len(balances))

    async def list_period_item_balances(self, period_id: int) -> list[PeriodItemBalance]:
        cursor = await self._conn.execute(
            """
            SELECT b.*, i.name AS item_name, i.uom AS uom
            FROM period_item_balances b
            JOIN items i ON i.id = b.item_id
            WHERE b.period_id = ?
            ORDER BY i.name, i.id
            """,
            (period_id,),
        )
        return [self._row_to_period_item_balance(row) for row in await cursor.fetchall()]

    # Row mapping

    @staticmethod
    def _row_to_item(row: aiosqlite.Row) -> Item:
        return Item(
            id=row["id"],
            name=row["name"],
            uom=row["uom"],
            is_active=bool(row["is_active"]),
            created_at=_dt(row["created_at"]) or datetime.utcnow(),
            updated_at=_dt(row["updated_at"]) or datetime.utcnow(),
        )

    @staticmethod
    def _row_to_period(row: aiosqlite.Row) -> Period:
        return Period(
            id=row["id"],
            code=row["code"],
            year=row["year"],
            month=row["month"],
            status=PeriodStatus(row["status"]),
            opened_at=_dt(row["opened_at"]),
            closed_at=_dt(row["closed_at"]),
            closed_by=row["closed_by"],
            locked_at=_dt(row["locked_at"]),
            locked_by=row["locked_by"],
            created_by=row["created_by"],
            created_at=_dt(row["created_at"]) or datetime.utcnow(),
            updated_at=_dt(row["updated_at"]) or datetime.utcnow(),
        )

    @staticmethod
    def _row_to_receipt_line(row: aiosqlite.Row) -> ReceiptLine:
        return ReceiptLine(
            id=row["id"],
            receipt_id=row["receipt_id"],
            item_id=row["item_id"],
            quantity=qty_from_db(row["quantity"]),
            rate=money_from_db(row["rate"]),
            amount=money_from_db(row["amount"]),
            remaining_qty=qty_from_db(row["remaining_qty"]),
            lot_no=row["lot_no"],
            created_at=_dt(row["created_at"]) or datetime.utcnow(),
            updated_at=_dt(row["updated_at"]) or datetime.utcnow(),
        )

    @staticmethod
    def _row_to_receipt(row: aiosqlite.Row, lines: list[ReceiptLine]) -> Receipt:
        return Receipt(
            id=row["id"],
            period_id=row["period_id"],
            period_code=row["period_code"],
            ref_no=row["ref_no"],
            notes=row["notes"],
            is_void=bool(row["is_void"]),
            void_reason=row["void_reason"],
            voided_at=_dt(row["voided_at"]),
            voided_by=row["voided_by"],
            created_by=row["created_by"],
            lines=lines,
            created_at=_dt(row["created_at"]) or datetime.utcnow(),
            updated_at=_dt(row["updated_at"]) or datetime.utcnow(),
        )

    @staticmethod
    def _row_to_consumption(row: aiosqlite.Row, lines: list[ConsumptionLine]) -> Consumption:
        return Consumption(
            id=row["id"],
            period_id=row["period_id"],
            period_code=row["period_code"],
            notes=row["notes"],
            is_void=bool(row["is_void"]),
            void_reason=row["void_reason"],
            voided_at=_dt(row["voided_at"]),
            voided_by=row["voided_by"],
            created_by=row["created_by"],
            lines=lines,
            created_at=_dt(row["created_at"]) or datetime.utcnow(),
            updated_at=_dt(row["updated_at"]) or datetime.utcnow(),
        )

    @staticmethod
    def _row_to_period_item_balance(row: aiosqlite.Row) -> PeriodItemBalance:
        def bucket(prefix: str) -> BalanceBucket:
            return BalanceBucket(
                qty=qty_from_db(row[f"{prefix}_qty"]),
                amt=money_from_db(row[f"{prefix}_amt"]),
            )

        return PeriodItemBalance(
            id=row["id"],
            period_id=row["period_id"],
            item_id=row["item_id"],
            item_name=row["item_name"],
            uom=row["uom"],
            opening=bucket("opening"),
            received=bucket("received"),
            consumed_from_opening=bucket("cons_from_opening"),
            consumed_from_current=bucket("cons_from_current"),
            closing=bucket("closing"),
            created_at=_dt(row["created_at"]) or datetime.utcnow(),
            updated_at=_dt(row["updated_at"]) or datetime.utcnow(),
        )


class SQLiteLedgerStore(ILedgerStore):
    """SQLite ledger store backed by the shared connection pool."""

    def __init__(self, pool: ConnectionPool | None = None):
        self._pool = pool

    async def _get_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool
        return await get_pool()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SQLiteLedgerSession]:
        pool = await self._get_pool()
        try:
            async with pool.transaction() as conn:
                yield SQLiteLedgerSession(conn)
        except aiosqlite.Error as e:
            logger.error("ledger_transaction_failed", error=str(e))
            raise DatabaseError("transaction", str(e)) from e

    @asynccontextmanager
    async def snapshot(self) -> AsyncIterator[SQLiteLedgerSession]:
        pool = await self._get_pool()
        try:
            async with pool.snapshot() as conn:
                yield SQLiteLedgerSession(conn)
        except aiosqlite.Error as e:
            raise DatabaseError("snapshot", str(e)) from e
