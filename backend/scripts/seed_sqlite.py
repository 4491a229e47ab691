"""
Seed the configured database with demo packages, users, bookings and the
default home page configuration. Existing tables are dropped first.
Run: python scripts/seed_sqlite.py  (from the backend directory)
"""

import os
import sys
from datetime import timedelta

# Add backend directory to path for app imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.security import create_identity_token
from app.db.database import SessionLocal, engine
from app.db.models import (
    Base,
    Booking,
    BookingStatus,
    HomeConfig,
    Package,
    PaymentStatus,
    User,
    UserRole,
    utcnow,
)
from app.services.home_config import SECTION_COLUMNS, default_sections
from app.services.slugs import slugify

PACKAGES = [
    {
        "title": "Golden Triangle Discovery",
        "location": "Delhi",
        "duration": 5,
        "price": 24999,
        "discounted_price": 21999,
        "featured": True,
        "max_group_size": 12,
        "short_description": "Delhi, Agra and Jaipur in five days.",
        "description": "Forts, palaces and the Taj Mahal at sunrise on India's classic circuit.",
    },
    {
        "title": "Kerala Backwaters Escape",
        "location": "Kerala",
        "duration": 6,
        "price": 32999,
        "featured": True,
        "max_group_size": 8,
        "short_description": "Houseboats, tea estates and quiet beaches.",
        "description": "Drift through Alleppey on a houseboat and wake up in the hills of Munnar.",
    },
    {
        "title": "Goa Beach Weekend",
        "location": "Goa",
        "duration": 3,
        "price": 12999,
        "featured": False,
        "max_group_size": 10,
        "short_description": "Sun, sand and seafood.",
        "description": "A relaxed long weekend across North and South Goa beaches.",
    },
    {
        "title": "Ladakh High Passes Adventure",
        "location": "Ladakh",
        "duration": 9,
        "price": 54999,
        "featured": True,
        "max_group_size": 6,
        "short_description": "Monasteries, lakes and the world's highest roads.",
        "description": "Acclimatise in Leh, then cross Khardung La to Nubra and Pangong Tso.",
    },
    {
        "title": "Rishikesh Yoga Retreat",
        "location": "Uttarakhand",
        "duration": 7,
        "price": 18999,
        "featured": False,
        "max_group_size": 15,
        "short_description": "Yoga by the Ganges.",
        "description": "Daily yoga and meditation sessions with evenings at the Ganga aarti.",
    },
]

USERS = [
    {"external_id": "demo-admin", "email": "admin@bhraman.test", "name": "Bhraman Admin", "role": UserRole.ADMIN.value},
    {"external_id": "demo-user-1", "email": "asha@example.com", "name": "Asha Verma", "phone": "+91 9876543210"},
    {"external_id": "demo-user-2", "email": "rohan@example.com", "name": "Rohan Iyer", "phone": "+91 9123456780"},
]


def _package(data):
    return Package(
        slug=slugify(data["title"]),
        images=[f"/images/packages/{slugify(data['title'])}.jpg"],
        inclusions=["Hotel stay", "Breakfast", "Local transfers"],
        exclusions=["Flights", "Personal expenses"],
        itinerary=[
            {"day": day, "title": f"Day {day}", "description": "Guided sightseeing and free time."}
            for day in range(1, data["duration"] + 1)
        ],
        **data,
    )


def main():
    print(f"Database: {engine.url}")

    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    print("Tables created")

    session = SessionLocal()
    try:
        packages = [_package(p) for p in PACKAGES]
        users = [User(**u) for u in USERS]
        session.add_all(packages + users)
        session.commit()
        print(f"Inserted {len(packages)} packages and {len(users)} users")

        now = utcnow()
        customers = [u for u in users if u.role == UserRole.USER.value]
        statuses = [
            (BookingStatus.CONFIRMED, PaymentStatus.COMPLETED),
            (BookingStatus.PENDING, PaymentStatus.PENDING),
            (BookingStatus.COMPLETED, PaymentStatus.COMPLETED),
            (BookingStatus.CANCELLED, PaymentStatus.REFUNDED),
        ]
        count = 0
        for i, (status, payment_status) in enumerate(statuses * 2):
            customer = customers[i % len(customers)]
            package = packages[i % len(packages)]
            people = 1 + i % 4
            session.add(Booking(
                user_id=customer.id,
                package_id=package.id,
                start_date=now + timedelta(days=30 + 7 * i),
                number_of_people=people,
                total_amount=(package.discounted_price or package.price) * people,
                status=status.value,
                payment_status=payment_status.value,
                payment_id=f"pay_demo_{i}" if payment_status != PaymentStatus.PENDING else None,
                contact_name=customer.name,
                contact_email=customer.email,
                contact_phone=customer.phone or "",
                created_at=now - timedelta(days=35 * i),
            ))
            count += 1

        sections = default_sections()
        session.add(HomeConfig(**{SECTION_COLUMNS[name]: value for name, value in sections.items()}))
        session.commit()
        print(f"Inserted {count} bookings and the home page configuration")

        print("\nDemo bearer tokens:")
        for user in users:
            token = create_identity_token(user.external_id, email=user.email, name=user.name)
            print(f"  {user.role:<5} {user.email}: {token}")
    finally:
        session.close()
        engine.dispose()

    print("\nSeed complete!")


if __name__ == "__main__":
    main()
