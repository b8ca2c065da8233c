# ===== app/services/inventory/inventory_service.py =====
"""
Per-restaurant, per-day table inventory.

Callers own the transaction: mutators only flush, so a concurrent writer
that already bumped a TableDefinition's version surfaces here as
sqlalchemy.orm.exc.StaleDataError on flush.
"""
from datetime import date
from typing import Any, Dict, List, Optional, Set
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from app.config.database import persistence_guard
from app.core.exceptions import (
    InventoryInUseError,
    InvalidInventoryError,
    InvalidTimeFormatError,
    RestaurantNotFoundError,
    SlotNotFoundError,
    TableDefinitionNotFoundError,
)
from app.models.booking import Booking, BookingStatus
from app.models.restaurant import DateAvailability, Restaurant, TableDefinition
from app.utils.time_utils import DateLike, normalize_utc_day, sort_times

logger = logging.getLogger(__name__)


class InventoryService:
    """Read access and slot mutators for the time-slot inventory"""

    @staticmethod
    def get_date_availability(
            db: Session,
            restaurant_id: UUID,
            day: DateLike
    ) -> Optional[DateAvailability]:
        """Find the entry for a restaurant on a day (normalized to UTC first)"""
        target_day = normalize_utc_day(day)
        return db.query(DateAvailability).filter(
            DateAvailability.restaurant_id == restaurant_id,
            DateAvailability.date == target_day
        ).first()

    @staticmethod
    def get_tables(
            db: Session,
            restaurant_id: UUID,
            day: DateLike
    ) -> List[TableDefinition]:
        """Table definitions for the day in insertion order (empty if none)"""
        entry = InventoryService.get_date_availability(db, restaurant_id, day)
        if not entry:
            return []
        return list(entry.tables)

    @staticmethod
    def get_table_definition(db: Session, table_definition_id: UUID) -> Optional[TableDefinition]:
        return db.get(TableDefinition, table_definition_id)

    @staticmethod
    def consume_slot(db: Session, table_definition_id: UUID, time_str: str) -> TableDefinition:
        """
        Remove a time from a table's open slots.

        Not idempotent: the slot must currently be present, which the matcher
        has already checked against the same snapshot.
        """
        table = InventoryService.get_table_definition(db, table_definition_id)
        if table is None:
            raise TableDefinitionNotFoundError()

        if not table.has_time(time_str):
            raise SlotNotFoundError(f"Time {time_str} is not open on table {table_definition_id}")

        # Reassign rather than mutate so the JSON column is marked dirty
        table.available_times = [t for t in table.available_times if t != time_str]
        db.flush()

        logger.debug(f"Consumed slot {time_str} on table {table_definition_id}")
        return table

    @staticmethod
    def release_slot(db: Session, table_definition_id: UUID, time_str: str) -> bool:
        """
        Put a time back on a table, keeping the list chronologically sorted.

        Idempotent: returns False without writing when the time is already open.
        """
        table = InventoryService.get_table_definition(db, table_definition_id)
        if table is None:
            raise TableDefinitionNotFoundError()

        return InventoryService.release_on_table(db, table, time_str)

    @staticmethod
    def release_on_table(db: Session, table: TableDefinition, time_str: str) -> bool:
        if table.has_time(time_str):
            return False

        table.available_times = sort_times([*(table.available_times or []), time_str])
        db.flush()

        logger.debug(f"Released slot {time_str} on table {table.id}")
        return True

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    @staticmethod
    def set_date_availability(
            db: Session,
            restaurant_id: UUID,
            day: DateLike,
            tables: List[Dict[str, Any]]
    ) -> DateAvailability:
        """
        Create or replace the tables offered on one day.

        Each item is {"table_size": int, "available_times": [...], "id": optional}.
        Items carrying the id of an existing table update it in place so its
        identity (and any booking referencing it) survives; other existing
        tables for the day are removed; items without an id get a fresh id.

        Times held by confirmed bookings on a kept table are never re-opened,
        and a table that confirmed bookings reference cannot be removed
        (InventoryInUseError).
        """
        with persistence_guard(db):
            restaurant = db.get(Restaurant, restaurant_id)
            if restaurant is None:
                raise RestaurantNotFoundError()

            target_day: date = normalize_utc_day(day)
            cleaned = [InventoryService._clean_table(item) for item in tables]

            entry = InventoryService.get_date_availability(db, restaurant_id, target_day)
            if entry is None:
                entry = DateAvailability(restaurant_id=restaurant_id, date=target_day)
                db.add(entry)

            existing = {table.id: table for table in entry.tables}
            held = InventoryService.held_times(db, restaurant_id, target_day, list(existing))

            kept = []
            for position, item in enumerate(cleaned):
                table = existing.pop(item["id"], None) if item["id"] else None
                if table is None:
                    table = TableDefinition(table_size=item["table_size"], available_times=item["available_times"])
                    entry.tables.append(table)
                else:
                    booked = held.get(table.id, set())
                    if booked:
                        logger.info(f"Keeping {sorted(booked)} closed on table {table.id}: held by confirmed bookings")
                    table.table_size = item["table_size"]
                    table.available_times = [t for t in item["available_times"] if t not in booked]
                table.position = position
                kept.append(table)

            in_use = [orphan.id for orphan in existing.values() if orphan.id in held]
            if in_use:
                db.rollback()
                raise InventoryInUseError(
                    f"Cannot remove table definition(s) {', '.join(str(i) for i in in_use)}: "
                    f"confirmed bookings on {target_day.isoformat()} reference them"
                )

            for orphan in existing.values():
                entry.tables.remove(orphan)

            db.commit()
            db.refresh(entry)

        logger.info(
            f"Seeded {len(kept)} table definition(s) for restaurant {restaurant_id} on {target_day.isoformat()}"
        )
        return entry

    @staticmethod
    def held_times(
            db: Session,
            restaurant_id: UUID,
            day: date,
            table_ids: List[UUID]
    ) -> Dict[UUID, Set[str]]:
        """Times taken by confirmed bookings, per booked table definition"""
        if not table_ids:
            return {}

        rows = db.query(Booking.booked_table_definition_id, Booking.time).filter(
            Booking.restaurant_id == restaurant_id,
            Booking.date == day,
            Booking.status == BookingStatus.CONFIRMED.value,
            Booking.booked_table_definition_id.in_(table_ids)
        ).all()

        held: Dict[UUID, Set[str]] = {}
        for table_id, time_str in rows:
            held.setdefault(table_id, set()).add(time_str)
        return held

    @staticmethod
    def _clean_table(item: Dict[str, Any]) -> Dict[str, Any]:
        try:
            table_size = int(item.get("table_size"))
        except (TypeError, ValueError):
            raise InvalidInventoryError(f"Invalid table size: {item.get('table_size')!r}")
        if table_size < 1:
            raise InvalidInventoryError("Table size must be at least 1")

        try:
            times = sort_times(item.get("available_times") or [])
        except InvalidTimeFormatError as e:
            raise InvalidInventoryError(e.message)

        table_id = item.get("id")
        if table_id is not None and not isinstance(table_id, UUID):
            try:
                table_id = UUID(str(table_id))
            except ValueError:
                raise InvalidInventoryError(f"Invalid table definition id: {table_id!r}")

        return {"id": table_id, "table_size": table_size, "available_times": times}
