"""
Demo catalog loaded into an empty store at startup (SEED_DEMO_DATA=true).

Goes through the Storage interface, so it works for every backend.
"""

from datetime import datetime, timezone
from decimal import Decimal

from eventify.core.logging import get_logger
from eventify.core.security import hash_password
from eventify.domain import NewCategory, NewEvent, NewTicketType, NewUser, SeatingMap
from eventify.stores.interfaces import Storage

logger = get_logger(__name__)

DEFAULT_CATEGORIES = [
    ("Concerts", "music"),
    ("Theater", "masks-theater"),
    ("Sports", "futbol"),
    ("Food & Drink", "utensils"),
    ("Workshops", "graduation-cap"),
]

# (event kwargs, [(name, description, price, quantity, available)])
DEMO_EVENTS = [
    (
        dict(
            title="Summer Music Festival",
            description=(
                "Three days of music featuring top artists in pop, rock, hip-hop "
                "and electronic music, with great food all weekend."
            ),
            image_url="https://images.unsplash.com/photo-1429962714451-bb934ecdc4ec",
            location="Grand Park, Los Angeles, CA",
            start_date=datetime(2027, 8, 15, tzinfo=timezone.utc),
            end_date=datetime(2027, 8, 17, tzinfo=timezone.utc),
            category="Concerts",
            is_featured=True,
            is_trending=True,
            has_seating=True,
            seating_map=SeatingMap(rows=10, cols=20, unavailable_seats=((2, 3), (2, 4), (5, 9), (5, 10))),
        ),
        [
            ("General Admission", "Access to all three days, general areas", "99", 1000, 850),
            ("VIP Package", "Premium viewing areas, exclusive lounges, merchandise", "199", 200, 150),
        ],
    ),
    (
        dict(
            title="Basketball Finals - Game 7",
            description="The two best teams in basketball face off in the decisive game.",
            image_url="https://images.unsplash.com/photo-1540575467063-178a50c2df87",
            location="Boston, MA",
            start_date=datetime(2027, 6, 10, tzinfo=timezone.utc),
            end_date=datetime(2027, 6, 10, tzinfo=timezone.utc),
            category="Sports",
            is_trending=True,
            has_seating=True,
            seating_map=SeatingMap(rows=20, cols=30),
        ),
        [
            ("Standard Seating", "Standard seating for the game", "180", 5000, 3200),
            ("Premium Seating", "Premium seating with better views", "350", 2000, 1500),
            ("Courtside", "Courtside seats for the ultimate experience", "1200", 100, 20),
        ],
    ),
    (
        dict(
            title="Stadium Pop Tour",
            description="A record-breaking tour celebrating every era of a pop icon's career.",
            image_url="https://images.unsplash.com/photo-1516450360452-9312f5e86fc7",
            location="New York, NY",
            start_date=datetime(2027, 7, 22, tzinfo=timezone.utc),
            end_date=datetime(2027, 7, 22, tzinfo=timezone.utc),
            category="Concerts",
            is_featured=True,
            is_trending=True,
            has_seating=True,
            seating_map=SeatingMap(rows=15, cols=25),
        ),
        [
            ("Standard Ticket", "Standard admission", "95", 10000, 5000),
            ("VIP Experience", "VIP package with merchandise and early entry", "450", 1000, 300),
        ],
    ),
    (
        dict(
            title="International Food Festival",
            description="Taste cuisine from over 30 countries, watch cooking demonstrations, enjoy live entertainment.",
            image_url="https://images.unsplash.com/photo-1560439514-e960a3ef5019",
            location="Chicago, IL",
            start_date=datetime(2027, 9, 8, tzinfo=timezone.utc),
            end_date=datetime(2027, 9, 10, tzinfo=timezone.utc),
            category="Food & Drink",
            is_trending=True,
        ),
        [
            ("One Day Pass", "Access for one day of your choice", "25", 5000, 4200),
            ("Full Weekend Pass", "Access for all three days", "75", 2000, 1800),
        ],
    ),
]


async def seed_demo_data(storage: Storage, admin_password: str = "password123") -> bool:
    """Populate an empty store. Returns False if the store already had categories."""
    if await storage.list_categories():
        return False

    categories = {}
    for name, icon in DEFAULT_CATEGORIES:
        category = await storage.create_category(NewCategory(name=name, icon=icon))
        categories[name] = category.id

    admin = await storage.create_user(
        NewUser(
            username="admin",
            email="admin@example.com",
            hashed_password=hash_password(admin_password),
            full_name="Admin User",
            is_organizer=True,
        )
    )

    for event_data, ticket_types in DEMO_EVENTS:
        fields = dict(event_data)
        category_name = fields.pop("category")
        event = await storage.create_event(
            NewEvent(**fields, organizer_id=admin.id, category_id=categories[category_name])
        )
        for name, description, price, quantity, available in ticket_types:
            await storage.create_ticket_type(
                NewTicketType(
                    event_id=event.id,
                    name=name,
                    description=description,
                    price=Decimal(price),
                    quantity=quantity,
                    available=available,
                )
            )

    logger.info("demo_data_seeded", categories=len(categories), events=len(DEMO_EVENTS))
    return True
