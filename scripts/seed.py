"""
Database Seed Script

Wipes the database and loads demo users, addresses, one restaurant and its
menu. Run from project root: python scripts/seed.py
"""

import asyncio
import os
import sys

from sqlalchemy import delete

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fooddelivery.core.config import setup_logging  # noqa: E402
from fooddelivery.core.security import hash_password  # noqa: E402
from fooddelivery.database import async_session_maker, engine, init_db  # noqa: E402
from fooddelivery.models import (  # noqa: E402
    Address,
    MenuItem,
    Order,
    OrderItem,
    Restaurant,
    RestaurantAnalytics,
    Review,
    SpiceLevel,
    User,
    UserRole,
)

DEMO_PASSWORD = "password123"

USERS = [
    ("admin@fooddelivery.com", "Admin", "User", "+91-9999999999", UserRole.ADMIN),
    ("owner@tastybites.com", "Restaurant", "Owner", "+91-9876543210", UserRole.RESTAURANT_OWNER),
    ("john.doe@email.com", "John", "Doe", "+91-9123456789", UserRole.CUSTOMER),
    ("jane.smith@email.com", "Jane", "Smith", "+91-9123456788", UserRole.CUSTOMER),
]

MENU = [
    ("Chicken Biryani", "Aromatic basmati rice with spiced chicken pieces, served with raita and pickle",
     280.0, "Main Course", False, SpiceLevel.MEDIUM),
    ("Paneer Butter Masala", "Creamy paneer curry with rich tomato and butter gravy",
     240.0, "Main Course", True, SpiceLevel.MILD),
    ("Garlic Naan", "Fresh baked naan bread with garlic and herbs",
     60.0, "Bread", True, SpiceLevel.MILD),
    ("Chicken Tikka", "Grilled chicken pieces marinated in yogurt and spices",
     320.0, "Starter", False, SpiceLevel.SPICY),
    ("Veg Hakka Noodles", "Stir-fried noodles with fresh vegetables and sauces",
     180.0, "Chinese", True, SpiceLevel.MEDIUM),
    ("Gulab Jamun (2 pcs)", "Sweet milk dumplings in sugar syrup",
     80.0, "Dessert", True, SpiceLevel.MILD),
]


async def seed() -> None:
    await init_db()

    async with async_session_maker() as db:
        for model in (Review, OrderItem, Order, RestaurantAnalytics, MenuItem, Restaurant, Address, User):
            await db.execute(delete(model))
        print("Cleared existing data")

        password_hash = hash_password(DEMO_PASSWORD)
        users = {}
        for email, first, last, phone, role in USERS:
            user = User(
                email=email,
                password_hash=password_hash,
                first_name=first,
                last_name=last,
                phone=phone,
                role=role,
            )
            db.add(user)
            users[email] = user
        await db.flush()
        print("Created users")

        restaurant_address = Address(
            street="123 Food Street, Near City Mall",
            city="Vellore",
            state="Tamil Nadu",
            zip_code="632014",
            landmark="Next to City Mall",
            latitude=12.9716,
            longitude=79.1588,
        )
        db.add_all([
            restaurant_address,
            Address(
                user_id=users["john.doe@email.com"].id,
                street="456 Customer Lane, Apartment 2B",
                city="Vellore",
                state="Tamil Nadu",
                zip_code="632014",
                landmark="Near VIT University",
                is_default=True,
            ),
            Address(
                user_id=users["jane.smith@email.com"].id,
                street="789 Residential Complex, Block C",
                city="Vellore",
                state="Tamil Nadu",
                zip_code="632014",
                landmark="Behind Hospital",
                is_default=True,
            ),
        ])
        await db.flush()
        print("Created addresses")

        restaurant = Restaurant(
            name="Tasty Bites",
            description="Delicious North Indian cuisine delivered fresh and hot",
            phone="+91-9876543210",
            email="contact@tastybites.com",
            delivery_fee=30.0,
            min_order=150.0,
            rating=4.5,
            cuisine_type=["North Indian", "Chinese", "Continental"],
            open_time="10:00",
            close_time="23:00",
            owner_id=users["owner@tastybites.com"].id,
            address_id=restaurant_address.id,
        )
        db.add(restaurant)
        await db.flush()
        print("Created restaurants")

        db.add_all([
            MenuItem(
                restaurant_id=restaurant.id,
                name=name,
                description=description,
                price=price,
                category=category,
                is_veg=is_veg,
                spice_level=spice,
            )
            for name, description, price, category, is_veg, spice in MENU
        ])
        await db.commit()
        print("Created menu items")

    await engine.dispose()

    print("\nDatabase seeded successfully!")
    print("\nTest Accounts:")
    for email, _, _, _, role in USERS:
        print(f"  {role.value:<17} {email} / {DEMO_PASSWORD}")


if __name__ == "__main__":
    setup_logging()
    asyncio.run(seed())
