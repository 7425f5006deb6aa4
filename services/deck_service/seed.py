"""Seed data used on a cold start with no saved snapshot.

Three brands, a brand owner with authoring templates, a sales rep on
AtelierAura's team and one customer, plus a small catalog, chats, sales and
live streams so every screen has something to show.

Seed passwords: ``password123`` for everyone except Ibrahim (``admin123``).
"""

from datetime import datetime, timedelta
from functools import lru_cache
from typing import Optional

from libs.auth.passwords import hash_password
from libs.common.datetime_utils import to_iso, utc_now
from services.deck_service.models import (
    CommentType,
    Language,
    MediaType,
    StreamStatus,
    UserRole,
)
from services.deck_service.schemas import (
    Address,
    AppState,
    Chat,
    Contact,
    Deck,
    Fabric,
    LiveComment,
    LiveStream,
    MediaVariant,
    Product,
    ProductPack,
    ProductPackTemplate,
    SaleRecord,
    SaleRecordItem,
    SizeGuide,
    SizeGuideTemplate,
    TextMessage,
    User,
)

SAMPLE_VIDEO_BASE = "http://commondatastorage.googleapis.com/gtv-videos-bucket/sample"


@lru_cache
def _credentials(password: str) -> tuple[str, str]:
    return hash_password(password)


def _user(
    user_id: str,
    username: str,
    bio: str,
    email: str,
    phone: str,
    role: UserRole,
    language: Optional[Language] = None,
    password: str = "password123",
    maps_url: str = "https://www.google.com/maps",
    **extra,
) -> User:
    password_hash, password_salt = _credentials(password)
    return User(
        id=user_id,
        username=username,
        avatar_url=f"https://picsum.photos/seed/{user_id}/200",
        original_avatar_url=f"https://picsum.photos/seed/{user_id}/800",
        bio=bio,
        contact=Contact(email=email, phone=phone),
        address=Address(google_maps_url=maps_url),
        password_hash=password_hash,
        password_salt=password_salt,
        role=role,
        language=language,
        **extra,
    )


def _image(name: str, color: str, seed: str) -> MediaVariant:
    return MediaVariant(
        name=name,
        color=color,
        media_url=f"https://picsum.photos/seed/{seed}/1080/1920",
        media_type=MediaType.IMAGE,
    )


def _video(name: str, color: str, clip: str) -> MediaVariant:
    return MediaVariant(
        name=name,
        color=color,
        media_url=f"{SAMPLE_VIDEO_BASE}/{clip}",
        media_type=MediaType.VIDEO,
    )


def seed_users() -> list[User]:
    return [
        _user(
            "user1",
            "AtelierAura",
            "Timeless elegance, ethically crafted. Slow fashion from Paris.",
            "contact@atelieraura.com",
            "555-0101",
            UserRole.BRAND_OWNER,
            Language.DE,
            maps_url="https://www.google.com/maps/place/Rue+de+la+Paix,+Paris,+France",
            decks=[
                Deck(
                    id="deck1",
                    name="La Parisienne",
                    media_urls=[
                        "https://picsum.photos/seed/deck1/400",
                        "https://picsum.photos/seed/deck1-2/400",
                    ],
                    product_ids=["prod1", "prod2"],
                ),
                Deck(
                    id="deck2",
                    name="Autumn Hues",
                    media_urls=["https://picsum.photos/seed/deck2/400"],
                    product_ids=["prod1"],
                ),
            ],
            following_ids=["user2", "user4"],
            follower_ids=["user4", "user6"],
            team_member_ids=["user5"],
            payment_provider_id="acct_atelieraura_12345",
            voice_messages_enabled=True,
        ),
        _user(
            "user2",
            "UrbanTread",
            "High-performance streetwear. Engineered for the city.",
            "info@urbantread.io",
            "555-0102",
            UserRole.BRAND_OWNER,
            Language.EN,
            decks=[
                Deck(
                    id="deck3",
                    name="Techwear Essentials",
                    media_urls=["https://picsum.photos/seed/deck3/400"],
                    product_ids=["prod3", "prod4"],
                )
            ],
            follower_ids=["user1", "user4"],
        ),
        _user(
            "user3",
            "NomadLinen",
            "Breathable, beautiful linen for the modern wanderer.",
            "hello@nomadlinen.co",
            "555-0103",
            UserRole.BRAND_OWNER,
            Language.RU,
            decks=[
                Deck(
                    id="deck4",
                    name="Coastal Living",
                    media_urls=["https://picsum.photos/seed/deck4/400"],
                    product_ids=["prod5"],
                )
            ],
            follower_ids=["user4"],
            voice_messages_enabled=True,
        ),
        _user(
            "user4",
            "Ibrahim Akbaba",
            "Software engineer and fashion enthusiast. Welcome to my brand!",
            "akbaba.ibrahime@gmail.com",
            "555-0104",
            UserRole.BRAND_OWNER,
            Language.TR,
            password="admin123",
            following_ids=["user1", "user2", "user3"],
            follower_ids=["user1"],
            voice_messages_enabled=True,
            size_guide_templates=[
                SizeGuideTemplate(
                    id="sgt1",
                    name="Standard T-Shirt",
                    size_guide=SizeGuide(
                        headers=["Chest", "Waist", "Sleeve"],
                        measurements={
                            "S": ["86-89", "66-69", "20"],
                            "M": ["91-94", "71-74", "21"],
                            "L": ["97-102", "76-80", "22"],
                        },
                    ),
                )
            ],
            pack_templates=[
                ProductPackTemplate(
                    id="ppt1", name="Standard Series (4)", contents={"S": 1, "M": 2, "L": 1}
                ),
                ProductPackTemplate(
                    id="ppt2", name="Large Series (4)", contents={"L": 2, "XL": 2}
                ),
            ],
        ),
        _user(
            "user5",
            "Sophie Dubois",
            "Sales representative for AtelierAura.",
            "sophie@atelieraura.com",
            "555-0105",
            UserRole.SALES_REP,
            Language.DE,
            company_id="user1",
            commission_rate=10,
            voice_messages_enabled=True,
        ),
        _user(
            "user6",
            "Alex Chen",
            "Loves discovering new brands and unique styles.",
            "alex.chen@example.com",
            "555-0106",
            UserRole.CUSTOMER,
            Language.EN,
            following_ids=["user1"],
        ),
    ]


def seed_products(users: list[User], now: datetime) -> list[Product]:
    creators = {u.id: u.summary() for u in users}
    size_guide = SizeGuide(
        headers=["Chest", "Waist", "Hip"],
        measurements={
            "S": ["86-89", "66-69", "91-94"],
            "M": ["91-94", "71-74", "97-99"],
            "L": ["97-102", "76-80", "102-105"],
        },
    )
    return [
        Product(
            id="prod1",
            name="The Marais Trench",
            price=420.0,
            original_price=480.0,
            is_featured=True,
            description="A classic double-breasted trench in water-resistant cotton gabardine.",
            fabric=Fabric(
                name="Cotton Gabardine",
                description="A tightly woven, durable and water-resistant fabric.",
                close_up_image_url="https://picsum.photos/seed/fabric1/800",
            ),
            variants=[
                _video("Beige", "#C8A67B", "ForBiggerEscapes.mp4"),
                _image("Navy", "#000080", "prod1-navy"),
            ],
            creator=creators["user1"],
            sizes=["XS", "S", "M", "L", "XL"],
            size_guide=size_guide,
            shop_the_look_product_ids=["prod2"],
            category="Clothing/Outerwear",
            tags=["classic", "water-resistant", "cotton"],
            view_count=1245,
            sales_count=152,
            created_at=now - timedelta(days=10),
        ),
        Product(
            id="prod2",
            name="Silk Charmeuse Blouse",
            price=180.0,
            is_featured=True,
            description="A fluid, lustrous silk blouse with mother-of-pearl buttons.",
            fabric=Fabric(name="Silk Charmeuse"),
            variants=[
                _image("Ivory", "#FFFFF0", "prod2-ivory"),
                _image("Black", "#000000", "prod2-black"),
            ],
            creator=creators["user1"],
            sizes=["XS", "S", "M", "L"],
            size_guide=size_guide,
            category="Clothing/Tops/Blouse",
            tags=["silk", "luxury"],
            view_count=980,
            sales_count=210,
            created_at=now - timedelta(days=10),
        ),
        Product(
            id="prod3",
            name="X-7 Utility Pant",
            price=250.0,
            is_featured=True,
            description="A technical cargo pant with articulated knees and zip pockets.",
            fabric=Fabric(name="Ripstop Nylon"),
            variants=[
                _image("Graphite", "#36454F", "prod3-graphite"),
                _image("Black", "#000000", "prod3-black"),
            ],
            creator=creators["user2"],
            sizes=["S", "M", "L", "XL"],
            is_wholesale=True,
            packs=[
                ProductPack(
                    id="pack-prod3-1",
                    name="Standard Series",
                    contents={"S": 1, "M": 2, "L": 1},
                    total_quantity=4,
                    price=800.0,
                ),
                ProductPack(
                    id="pack-prod3-2",
                    name="Large Size Series",
                    contents={"L": 2, "XL": 2},
                    total_quantity=4,
                    price=880.0,
                ),
            ],
            category="Clothing/Bottoms/Trousers",
            tags=["technical", "cargo", "wholesale"],
            view_count=2500,
            sales_count=450,
            created_at=now - timedelta(days=4),
        ),
        Product(
            id="prod4",
            name="Aero-Shell Jacket",
            price=380.0,
            description="An ultralight packable windbreaker in Japanese nylon.",
            fabric=Fabric(name="Ultralight Nylon"),
            variants=[_video("Silver", "#C0C0C0", "TearsOfSteel.mp4")],
            creator=creators["user2"],
            sizes=["S", "M", "L"],
            shop_the_look_product_ids=["prod3"],
            category="Clothing/Outerwear/Jacket",
            tags=["lightweight", "technical"],
            view_count=1800,
            sales_count=95,
            created_at=now - timedelta(days=2),
        ),
        Product(
            id="prod5",
            name="Breezy Linen Tunic",
            price=155.0,
            is_featured=True,
            description="An oversized linen tunic for warm days.",
            fabric=Fabric(name="European Flax Linen"),
            variants=[
                _image("White", "#FFFFFF", "prod5-white"),
                _image("Sand", "#C2B280", "prod5-sand"),
            ],
            creator=creators["user3"],
            sizes=["One Size"],
            category="Clothing/Tops/Tunic",
            tags=["linen", "oversize", "beach"],
            view_count=3200,
            sales_count=640,
            created_at=now,
        ),
    ]


def seed_chats(now: datetime) -> list[Chat]:
    def msg(msg_id: str, sender_id: str, text: str, minutes_ago: int) -> TextMessage:
        return TextMessage(
            id=msg_id,
            sender_id=sender_id,
            text=text,
            timestamp=to_iso(now - timedelta(minutes=minutes_ago)),
        )

    return [
        Chat(
            id="chat1",
            participant_ids=["user4", "user1"],
            product_id="prod1",
            messages=[
                msg("chat1-msg1", "user4", "Hi, does the Marais Trench run true to size?", 5),
                msg("chat1-msg2", "user1", "Hallo! Ja, die Passform ist klassisch.", 4),
                msg("chat1-msg3", "user4", "Thanks! I'll take a size M in Beige.", 3),
            ],
        ),
        Chat(
            id="chat2",
            participant_ids=["user4", "user2"],
            product_id="prod4",
            messages=[
                msg("chat2-msg1", "user4", "Is the Aero-Shell Jacket fully waterproof?", 24 * 60),
                msg("chat2-msg2", "user2", "It's highly water-resistant with a DWR finish.", 23 * 60),
            ],
        ),
        Chat(
            id="chat3",
            participant_ids=["user4", "user3"],
            messages=[
                msg("chat3-msg1", "user4", "Just wanted to say I love the linen tunic!", 2 * 24 * 60),
            ],
        ),
    ]


def seed_sales(now: datetime) -> list[SaleRecord]:
    def item(product_id, name, variant, size, quantity, price) -> SaleRecordItem:
        return SaleRecordItem(
            product_id=product_id,
            product_name=name,
            variant_name=variant,
            size=size,
            quantity=quantity,
            price_per_unit=price,
        )

    return [
        SaleRecord(
            id="sale1",
            salesperson_id="user5",
            brand_owner_id="user1",
            items=(
                item("prod1", "The Marais Trench", "Beige", "M", 1, 420.0),
                item("prod2", "Silk Charmeuse Blouse", "Ivory", "S", 2, 180.0),
            ),
            total_amount=780.0,
            commission_amount=78.0,
            timestamp=now,
        ),
        SaleRecord(
            id="sale2",
            salesperson_id="user5",
            brand_owner_id="user1",
            items=(item("prod1", "The Marais Trench", "Navy", "L", 1, 420.0),),
            total_amount=420.0,
            commission_amount=42.0,
            timestamp=now - timedelta(days=1),
        ),
        SaleRecord(
            id="sale3",
            salesperson_id="user5",
            brand_owner_id="user1",
            items=(item("prod2", "Silk Charmeuse Blouse", "Black", "M", 5, 180.0),),
            total_amount=900.0,
            commission_amount=90.0,
            timestamp=now - timedelta(days=31),
        ),
    ]


def seed_live_streams(now: datetime) -> list[LiveStream]:
    return [
        LiveStream(
            id="live1",
            host_id="user1",
            title="La Parisienne: New Season Launch",
            status=StreamStatus.LIVE,
            started_at=to_iso(now - timedelta(minutes=10)),
            thumbnail_url="https://picsum.photos/seed/live1-thumb/400/600",
            product_showcase_ids=["prod1", "prod2"],
            viewer_count=1340,
            likes_count=25700,
            comments=[
                LiveComment(
                    id="c1",
                    user_id="user6",
                    username="Alex Chen",
                    avatar_url="https://picsum.photos/seed/user6/200",
                    text="Alex Chen joined",
                    type=CommentType.JOIN,
                    timestamp=to_iso(now - timedelta(minutes=9)),
                ),
                LiveComment(
                    id="c2",
                    user_id="user2",
                    username="UrbanTread",
                    avatar_url="https://picsum.photos/seed/user2/200",
                    text="This trench coat is great!",
                    timestamp=to_iso(now - timedelta(minutes=8)),
                ),
            ],
            playback_url=f"{SAMPLE_VIDEO_BASE}/ForBiggerEscapes.mp4",
        ),
        LiveStream(
            id="live2",
            host_id="user2",
            title="Techwear Essentials Showcase",
            status=StreamStatus.UPCOMING,
            scheduled_at=to_iso(now + timedelta(hours=2)),
            thumbnail_url="https://picsum.photos/seed/live2-thumb/400/600",
            product_showcase_ids=["prod3", "prod4"],
        ),
        LiveStream(
            id="live3",
            host_id="user3",
            title="Coastal Living: Linen Collection",
            status=StreamStatus.ENDED,
            started_at=to_iso(now - timedelta(days=2)),
            ended_at=to_iso(now - timedelta(days=2) + timedelta(minutes=30)),
            thumbnail_url="https://picsum.photos/seed/live3-thumb/400/600",
            product_showcase_ids=["prod5"],
            viewer_count=876,
            likes_count=12400,
            playback_url=f"{SAMPLE_VIDEO_BASE}/ElephantsDream.mp4",
        ),
    ]


def build_seed_state(now: Optional[datetime] = None) -> AppState:
    now = now or utc_now()
    users = seed_users()
    return AppState(
        all_users=users,
        all_products=seed_products(users, now),
        all_chats=seed_chats(now),
        all_sales=seed_sales(now),
        all_live_streams=seed_live_streams(now),
    )
