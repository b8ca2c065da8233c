# ===== seed_inventory.py =====
"""
Seed table inventory for a restaurant over the coming days.

    python -m app.scripts.seed_inventory <restaurant_id> --days 14
"""
import argparse
from datetime import datetime, timedelta, timezone
from uuid import UUID

from app.config.database import SessionLocal
from app.services.inventory.inventory_service import InventoryService

# Default layout: two 2-tops, two 4-tops and one 6-top, evening service
DEFAULT_TIMES = ["17:00", "17:30", "18:00", "18:30", "19:00", "19:30", "20:00", "20:30", "21:00"]
DEFAULT_TABLES = [
    {"table_size": 2, "available_times": DEFAULT_TIMES},
    {"table_size": 2, "available_times": DEFAULT_TIMES},
    {"table_size": 4, "available_times": DEFAULT_TIMES},
    {"table_size": 4, "available_times": DEFAULT_TIMES},
    {"table_size": 6, "available_times": DEFAULT_TIMES},
]


def seed_inventory(restaurant_id: UUID, days: int):
    db = SessionLocal()
    today = datetime.now(timezone.utc).date()

    try:
        for offset in range(days):
            day = today + timedelta(days=offset)
            if InventoryService.get_date_availability(db, restaurant_id, day):
                print(f"⏭️  {day.isoformat()} already seeded, skipping")
                continue
            InventoryService.set_date_availability(db, restaurant_id, day, DEFAULT_TABLES)
            print(f"✅ Seeded {len(DEFAULT_TABLES)} tables for {day.isoformat()}")

    except Exception as e:
        db.rollback()
        print("❌ Error seeding inventory:", e)
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed table inventory for a restaurant")
    parser.add_argument("restaurant_id", type=UUID)
    parser.add_argument("--days", type=int, default=14)
    args = parser.parse_args()

    seed_inventory(args.restaurant_id, args.days)
