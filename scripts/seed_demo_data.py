"""
Seed demo data for testing and demos.

Creates the demo membership plans, inventory items and class schedule when
they are missing. Existing rows (matched by name) are left untouched.
"""

import sys
from pathlib import Path

# Add parent directory to path so we can import from repositories
sys.path.insert(0, str(Path(__file__).parent.parent))

from datetime import datetime, timezone
from decimal import Decimal

from domain.inventory import InventoryCategory
from repositories.client import get_supabase
from repositories.inventory_repository import create_inventory_item, list_inventory_items
from repositories.plan_repository import create_plan, list_plans


DEMO_PLANS = [
    ("Daily Pass", 1, Decimal("10.00"), "Access for one day."),
    ("Weekly Access", 7, Decimal("35.00"), "Full access for one week."),
    ("Monthly Subscription", 30, Decimal("99.99"), "Standard monthly gym access."),
    ("Annual Membership", 365, Decimal("999.99"), "Best value! Full access for one year."),
]

DEMO_INVENTORY = [
    ("Protein Powder (Vanilla)", InventoryCategory.SUPPLEMENTS, 45, Decimal("39.99")),
    ("Gym Towel (Logo)", InventoryCategory.APPAREL, 120, Decimal("9.50")),
    ("Water Bottle (Insulated)", InventoryCategory.EQUIPMENT, 15, Decimal("19.99")),
    ("Pre-Workout Mix", InventoryCategory.SUPPLEMENTS, 5, Decimal("29.99")),
]

DEMO_CLASSES = [
    {"id": "yoga-mon", "name": "Morning Yoga Flow", "trainer": "Sarah Connor",
     "day": "Monday", "time": "07:00 AM", "capacity": 20, "current_enrollment": 0},
    {"id": "spin-mon", "name": "High Intensity Spin", "trainer": "Kyle Reese",
     "day": "Monday", "time": "06:00 PM", "capacity": 15, "current_enrollment": 0},
    {"id": "zumba-tue", "name": "Zumba Party", "trainer": "Alice Johnson",
     "day": "Tuesday", "time": "05:30 PM", "capacity": 30, "current_enrollment": 0},
    {"id": "weights-wed", "name": "Strength Training 101", "trainer": "Marcus Wright",
     "day": "Wednesday", "time": "08:00 AM", "capacity": 10, "current_enrollment": 0},
]


def seed_plans():
    existing = {plan.name for plan in list_plans()}
    for name, duration_days, price, description in DEMO_PLANS:
        if name in existing:
            print(f"Plan already exists: {name}")
            continue
        plan = create_plan(name, duration_days, price, description=description)
        print(f"[SUCCESS] Created plan {plan.name} ({plan.plan_id})")


def seed_inventory():
    existing = {item.name for item in list_inventory_items()}
    today = datetime.now(timezone.utc).date()
    for name, category, stock, price in DEMO_INVENTORY:
        if name in existing:
            print(f"Inventory item already exists: {name}")
            continue
        item = create_inventory_item(name, category, stock, price, stocked_on=today)
        print(f"[SUCCESS] Created inventory item {item.name} (stock {item.stock})")


def seed_classes():
    supabase = get_supabase()
    for gym_class in DEMO_CLASSES:
        existing = supabase.table("gym_classes").select("id").eq("id", gym_class["id"]).execute()
        if existing.data:
            print(f"Class already exists: {gym_class['id']}")
            continue

        result = supabase.table("gym_classes").insert(gym_class).execute()
        if result.data:
            print(f"[SUCCESS] Created class {gym_class['name']}")
        else:
            print(f"[ERROR] Failed to create class {gym_class['name']}")


if __name__ == "__main__":
    seed_plans()
    seed_inventory()
    seed_classes()
