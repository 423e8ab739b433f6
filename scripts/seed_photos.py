#!/usr/bin/env python3
"""
Seed a city with photographers, enthusiasts and approved photos.

Usage:
    python scripts/seed_photos.py paris
    python scripts/seed_photos.py "new york" --photos 300
    python scripts/seed_photos.py --list  # Show available cities

Creates:
- ~40 fake users (a quarter of them photographers)
- N photos scattered around the city center, about half with a blurred
  public location, most of them approved
"""

import asyncio
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from faker import Faker
from sqlalchemy import select

from core.config import settings
from db.database import create_async_session, create_db_and_tables, dispose_engine
from db.models import Photo, PhotoTag, Tag, User
from services.geo_blur import GeoPoint, random_offset_point
from services.photo_query import PHOTO_CATEGORIES, SEASONS, TIMES_OF_DAY

fake = Faker()

# City centers; photos land within `spread_m` of the center
CITIES = {
    "paris": {"lat": 48.8566, "lng": 2.3522, "spread_m": 6000},
    "london": {"lat": 51.5074, "lng": -0.1278, "spread_m": 8000},
    "new york": {"lat": 40.7128, "lng": -74.0060, "spread_m": 9000},
    "tokyo": {"lat": 35.6762, "lng": 139.6503, "spread_m": 9000},
    "reykjavik": {"lat": 64.1466, "lng": -21.9426, "spread_m": 15000},
    "cape town": {"lat": -33.9249, "lng": 18.4241, "spread_m": 12000},
    "fiji": {"lat": -17.7134, "lng": 179.9000, "spread_m": 20000},
}

TAGS = [
    "sunrise", "sunset", "skyline", "bridge", "reflection", "fog",
    "longexposure", "milkyway", "mountains", "beach", "streetart", "bokeh",
]

CAMERAS = ["Sony A7 IV", "Canon R5", "Nikon Z6 II", "Fujifilm X-T5", "iPhone 15 Pro"]
LENSES = ["24-70mm f/2.8", "16-35mm f/4", "50mm f/1.8", "70-200mm f/2.8", "14mm f/2.8"]

USER_COUNT = 40


async def _get_or_create_tags(db, names):
    result = await db.execute(select(Tag).where(Tag.name.in_(names)))
    tags = {tag.name: tag for tag in result.scalars().all()}
    for name in names:
        if name not in tags:
            tags[name] = Tag(name=name)
            db.add(tags[name])
    return tags


async def seed_city(city_name: str, photo_count: int):
    """Seed a city with users and photos"""
    city_key = city_name.lower()
    if city_key not in CITIES:
        print(f"❌ Unknown city: {city_name}")
        print(f"Available cities: {', '.join(CITIES.keys())}")
        return

    city = CITIES[city_key]
    center = GeoPoint(lon=city["lng"], lat=city["lat"])
    print(f"\n🌆 Seeding {city_name.title()} with {photo_count} photos...")
    print(f"   Center: {center.lat}, {center.lon}")

    await create_db_and_tables()
    db = create_async_session()

    try:
        # Step 1: Create fake users
        print(f"\n👥 Creating {USER_COUNT} fake users...")
        users = []
        for i in range(USER_COUNT):
            role = "photographer" if i % 4 == 0 else "enthusiast"
            user = User(
                email=fake.unique.email(),
                role=role,
                display_name=fake.name(),
                avatar_url=f"https://i.pravatar.cc/150?u={fake.uuid4()}",
                bio=fake.sentence(nb_words=12) if random.random() > 0.3 else None,
                company_name=fake.company() if role == "photographer" else None,
                website_url=fake.url() if role == "photographer" else None,
                social_links={"instagram": f"@{fake.user_name()}"} if role == "photographer" else None,
            )
            db.add(user)
            users.append(user)

        await db.commit()
        print(f"✅ Created {len(users)} users")

        # Step 2: Photos, blurred once here the same way uploads are
        print("\n📷 Creating photos...")
        tags = await _get_or_create_tags(db, TAGS)
        now = datetime.now(timezone.utc)
        blurred_count = 0

        for i in range(photo_count):
            exact = random_offset_point(center, city["spread_m"])
            blur = random.random() < 0.5
            blur_radius = random.choice([100, 200, 300, 500]) if blur else None
            public = random_offset_point(exact, blur_radius) if blur else exact
            blurred_count += int(blur)

            photo = Photo(
                user_id=random.choice(users).id,
                title=fake.sentence(nb_words=4).rstrip("."),
                description=fake.paragraph(nb_sentences=2) if random.random() > 0.4 else None,
                category=random.choice(PHOTO_CATEGORIES),
                season=random.choice(SEASONS) if random.random() > 0.2 else None,
                time_of_day=random.choice(TIMES_OF_DAY) if random.random() > 0.2 else None,
                file_url=f"https://picsum.photos/seed/{fake.uuid4()}/1200/800",
                mime_type="image/jpeg",
                exact_latitude=exact.lat,
                exact_longitude=exact.lon,
                public_latitude=public.lat,
                public_longitude=public.lon,
                blur_location=blur,
                blur_radius=blur_radius,
                status="approved" if random.random() < 0.85 else "pending",
                exif={
                    "iso": random.choice([100, 200, 400, 800, 1600, 3200]),
                    "aperture": random.choice(["f/1.8", "f/2.8", "f/4", "f/8", "f/11"]),
                    "shutter": random.choice(["1/1000", "1/250", "1/60", "1/4", "30"]),
                },
                gear={"camera": random.choice(CAMERAS), "lens": random.choice(LENSES)},
                created_at=now - timedelta(minutes=random.randint(0, 60 * 24 * 90)),
                photo_tags=[PhotoTag(tag=tags[name]) for name in random.sample(TAGS, random.randint(0, 4))],
            )
            db.add(photo)

            if (i + 1) % 50 == 0:
                await db.commit()
                print(f"   Created {i + 1} photos...")

        await db.commit()

        # Summary
        print("\n" + "=" * 60)
        print(f"🎉 Seeding complete for {city_name.title()}!")
        print("=" * 60)
        print(f"   Users created: {len(users)}")
        print(f"   Photos created: {photo_count}")
        print(f"   Blurred locations: {blurred_count}")
        print(f"   Database: {settings.DATABASE_URL.split('@')[-1]}")
        print("=" * 60)

    except Exception as e:
        await db.rollback()
        print(f"❌ Error: {e}")
        import traceback

        traceback.print_exc()
        raise
    finally:
        await db.close()
        await dispose_engine()


def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/seed_photos.py <city> [--photos N]")
        print("       python scripts/seed_photos.py --list")
        print("\nExample: python scripts/seed_photos.py paris --photos 300")
        sys.exit(1)

    arg = sys.argv[1]

    if arg == "--list":
        print("Available cities:")
        for city in CITIES.keys():
            print(f"  - {city}")
        sys.exit(0)

    photo_count = 200
    if "--photos" in sys.argv:
        photo_count = int(sys.argv[sys.argv.index("--photos") + 1])

    asyncio.run(seed_city(arg, photo_count))


if __name__ == "__main__":
    main()
