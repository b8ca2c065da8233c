# ===== app/services/availability/availability_matcher.py =====
from typing import Callable, Iterable, Optional
import logging

from sqlalchemy.orm import Session

from app.core.exceptions import NoAvailabilityForDateError, NoSuitableTableError
from app.models.restaurant import Restaurant, TableDefinition
from app.services.inventory.inventory_service import InventoryService
from app.utils.time_utils import DateLike, normalize_utc_day

logger = logging.getLogger(__name__)

TimesPredicate = Callable[[Iterable[str]], bool]


def exact_time(time_str: str) -> TimesPredicate:
    """Booking path: the requested time must be an open slot verbatim"""
    return lambda times: time_str in times


def time_window(start_str: str, end_str: str) -> TimesPredicate:
    """Search path: any open slot inside [start, end], compared as HH:MM strings"""
    return lambda times: any(start_str <= t <= end_str for t in times)


def table_fits(table: TableDefinition, party_size: Optional[int], times_predicate: TimesPredicate) -> bool:
    """
    Eligibility shared by booking and search.

    party_size None means no size filter (search with a missing or invalid size).
    """
    if party_size is not None and table.table_size < party_size:
        return False
    return times_predicate(table.available_times or [])


class AvailabilityMatcher:
    """Finds the table definition a reservation request will consume"""

    @staticmethod
    def find_table(
            db: Session,
            restaurant: Restaurant,
            day: DateLike,
            time_str: str,
            party_size: int
    ) -> TableDefinition:
        """
        First fit in insertion order: the first table with enough seats that
        has the exact requested time open. No best-fit attempt is made.
        """
        target_day = normalize_utc_day(day)
        entry = InventoryService.get_date_availability(db, restaurant.id, target_day)
        if entry is None:
            raise NoAvailabilityForDateError()

        predicate = exact_time(time_str)
        for table in entry.tables:
            if table_fits(table, party_size, predicate):
                return table

        logger.info(
            f"No table for party of {party_size} at {time_str} on {target_day.isoformat()} "
            f"in restaurant {restaurant.id}"
        )
        raise NoSuitableTableError()
