#!/usr/bin/env python3
"""
Register a restaurant for an existing manager, optionally approving it.

    python -m app.scripts.create_restaurant manager@example.com "Nopa" "Californian" \
        --city "San Francisco" --zip 94117 --opening 17:00 --closing 22:00 --approve

Approval is operator-only; without --approve the listing stays pending and
hidden from search. Seed tables afterwards with app.scripts.seed_inventory.
"""
import argparse
import sys

from sqlalchemy.orm import Session

from app.config.database import SessionLocal
from app.core.exceptions import BookTableError
from app.models.user import User, UserRole
from app.services.restaurant.restaurant_service import RestaurantService


def create_restaurant(args: argparse.Namespace) -> str:
    db: Session = SessionLocal()

    try:
        manager = db.query(User).filter(User.email == args.manager_email).first()
        if manager is None or manager.role != UserRole.MANAGER:
            print(f"❌ No manager account for {args.manager_email}")
            sys.exit(1)

        restaurant = RestaurantService.create_restaurant(db, manager, {
            "name": args.name,
            "cuisine_type": args.cuisine_type,
            "description": args.description,
            "cost_rating": args.cost_rating,
            "phone": args.phone,
            "email": args.email,
            "address": {"street": args.street, "city": args.city, "state": args.state, "zip_code": args.zip_code},
            "hours": {"opening": args.opening, "closing": args.closing},
        })

        if args.approve:
            restaurant.is_approved = True
            restaurant.is_pending = False
            db.commit()

        print(f"\n✅ Created restaurant: {restaurant.name}")
        print(f"   Restaurant ID: {restaurant.id}")
        print(f"   Manager: {manager.email}")
        print(f"   Status: {'approved' if restaurant.is_approved else 'pending approval'}")
        print("\nNEXT STEP: seed tables")
        print(f"python -m app.scripts.seed_inventory {restaurant.id} --days 14\n")

        return str(restaurant.id)

    except BookTableError as e:
        db.rollback()
        print(f"\n❌ Error creating restaurant: {e.message}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Register a restaurant for a manager")
    parser.add_argument("manager_email")
    parser.add_argument("name")
    parser.add_argument("cuisine_type")
    parser.add_argument("--description")
    parser.add_argument("--cost-rating", type=int, choices=[1, 2, 3, 4])
    parser.add_argument("--street")
    parser.add_argument("--city")
    parser.add_argument("--state")
    parser.add_argument("--zip", dest="zip_code")
    parser.add_argument("--phone")
    parser.add_argument("--email")
    parser.add_argument("--opening", help="HH:MM")
    parser.add_argument("--closing", help="HH:MM")
    parser.add_argument("--approve", action="store_true", help="Make the listing visible in search right away")

    create_restaurant(parser.parse_args())
