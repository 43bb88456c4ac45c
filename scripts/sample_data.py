#!/usr/bin/env python3
"""
Sample data population script for Duka Manager.
Creates a demo kiosk with an owner, an attendant, products, sales,
customer credit and expenses for testing and demonstration.
"""
import sys
import os
import asyncio
import random
from datetime import datetime, timedelta

# Add the project root to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from duka.core.database import get_db_context, init_db
from duka.models.sales import Sale
from duka.models.shops import Profile
from duka.services.shop_accounts import ShopAccounts
from duka.services.inventory_monitor import InventoryMonitor
from duka.services.sales_logger import SalesLogger
from duka.services.credit_ledger import CreditLedger
from duka.services.expense_tracker import ExpenseTracker

OWNER_EMAIL = "mama.njeri@example.com"
OWNER_PASSWORD = "duka1234"

SAMPLE_PRODUCTS = [
    {"name": "Unga wa Ugali 2kg", "category": "Food", "cost_price": 150, "selling_price": 180, "quantity": 40, "low_stock_threshold": 10},
    {"name": "Sukari 1kg", "category": "Food", "cost_price": 140, "selling_price": 170, "quantity": 30, "low_stock_threshold": 8},
    {"name": "Maziwa 500ml", "category": "Dairy", "cost_price": 50, "selling_price": 65, "quantity": 24, "low_stock_threshold": 6},
    {"name": "Mkate 400g", "category": "Bakery", "cost_price": 55, "selling_price": 70, "quantity": 15, "low_stock_threshold": 5},
    {"name": "Sabuni ya Kufulia", "category": "Household", "cost_price": 90, "selling_price": 120, "quantity": 12, "low_stock_threshold": 4},
    {"name": "Mafuta ya Kupika 1L", "category": "Food", "cost_price": 280, "selling_price": 330, "quantity": 10, "low_stock_threshold": 3},
    {"name": "Airtime Scratch 100", "category": "Airtime", "cost_price": 95, "selling_price": 100, "quantity": 50, "low_stock_threshold": 10},
    {"name": "Kiberiti", "category": "Household", "cost_price": 3, "selling_price": 5, "quantity": 4, "low_stock_threshold": 10, "unit": "box"},
]


async def create_sample_shop():
    """Create the owner, shop and one attendant."""
    accounts = ShopAccounts()
    with get_db_context() as db:
        if db.query(Profile).filter(Profile.email == OWNER_EMAIL).first():
            print(f"Owner {OWNER_EMAIL} already exists, skipping...")
            return None

    shop = await accounts.sign_up(OWNER_EMAIL, OWNER_PASSWORD, "Njeri Wambui", "Mama Njeri Duka")
    owner = {"user_id": shop["user"]["id"], "shop_id": shop["shop"]["id"], "role": "owner"}
    await accounts.create_employee(owner, "otieno@example.com", "otieno123", "Otieno Ouma")
    print(f"✅ Created shop '{shop['shop']['name']}' (owner login: {OWNER_EMAIL} / {OWNER_PASSWORD})")
    return owner


async def create_sample_products(owner):
    inventory = InventoryMonitor()
    products = []
    for product_data in SAMPLE_PRODUCTS:
        products.append(await inventory.add_product(owner, product_data))
        # Give the shop enough stock to sell over a month
        await inventory.restock(owner, products[-1]["id"], 60)
    print(f"✅ Created {len(products)} sample products")
    return products


async def create_sample_sales(owner, products):
    """Record sales and spread them over the last 30 days."""
    sales_logger = SalesLogger()
    now = datetime.utcnow()
    total_sales = 0

    for days_ago in range(30, -1, -1):
        for _ in range(random.randint(3, 8)):
            product = random.choice(products)
            try:
                sale = await sales_logger.record_sale(
                    owner["shop_id"], product["id"], random.randint(1, 2), recorded_by=owner["user_id"]
                )
            except ValueError:
                continue

            sold_at = now - timedelta(days=days_ago, hours=random.randint(0, 10), minutes=random.randint(0, 59))
            with get_db_context() as db:
                db.query(Sale).filter(Sale.id == sale["id"]).update({"created_at": sold_at})
                db.commit()
            total_sales += 1

    print(f"✅ Created {total_sales} sample sales over the last 30 days")


async def create_sample_credit(owner, products):
    ledger = CreditLedger()
    sales_logger = SalesLogger()

    wanjiku = await ledger.add_customer(owner["shop_id"], "Wanjiku Kamau", phone="0712345678")
    baraka = await ledger.add_customer(owner["shop_id"], "Baraka Mwangi", phone="0722000111")

    sale = await sales_logger.record_sale(
        owner["shop_id"], products[0]["id"], 2, customer_id=wanjiku["id"], on_credit=True
    )
    await ledger.record_payment(owner["shop_id"], sale["credit_sale_id"], 100)

    await ledger.add_credit_sale(owner["shop_id"], baraka["id"], "Sukari 1kg", 1, 170)
    print("✅ Created sample customers and credit")


async def create_sample_expenses(owner):
    tracker = ExpenseTracker()
    await tracker.add_expense(owner, "Monthly rent", 5000, category="Rent")
    await tracker.add_expense(owner, "KPLC tokens", 800, category="Utilities")
    await tracker.add_expense(owner, "Boda boda to wholesaler", 300, category="Transport")
    await tracker.quick_add_tot(owner)
    print("✅ Created sample expenses")


async def main():
    print("🏪 Duka Manager Sample Data Population")
    print("=" * 50)

    init_db()
    owner = await create_sample_shop()
    if owner is None:
        return

    products = await create_sample_products(owner)
    await create_sample_sales(owner, products)
    await create_sample_credit(owner, products)
    await create_sample_expenses(owner)

    print("\n🎉 Sample data population completed!")


if __name__ == "__main__":
    asyncio.run(main())
