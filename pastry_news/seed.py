"""
Sample data for a fresh installation: an admin account, the starter
categories and a few published articles.
"""

from __future__ import annotations

import logging
from typing import Optional

from pastry_news.db import DbClient
from pastry_news.records import (
    ARTICLES_COLLECTION,
    CATEGORIES_COLLECTION,
    USERS_COLLECTION,
    Article,
    ArticleStatus,
    Category,
    User,
    UserRole,
)
from pastry_news.repositories import (
    ArticleRepository,
    CategoryRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@pastrynews.com"
DEFAULT_ADMIN_PASSWORD = "admin123"

SAMPLE_CATEGORIES = [
    ("Pastry Techniques", "Master the fundamental techniques of pastry arts", "#F8BBD9"),
    ("Chef Interviews", "Exclusive interviews with renowned pastry chefs", "#8D6E63"),
    ("Industry News", "Latest updates from the pastry industry", "#FFB74D"),
    ("Recipe Development", "Innovative recipes and development processes", "#81C784"),
    ("Competition Coverage", "Coverage of pastry competitions and events", "#F06292"),
]

SAMPLE_ARTICLES = [
    {
        "title": "The Art of French Macarons: A Complete Guide",
        "excerpt": (
            "Master the delicate art of creating perfect French macarons with our "
            "comprehensive guide covering techniques, tips, and troubleshooting."
        ),
        "featured_image": "https://images.unsplash.com/photo-1569864358645-9d1684040f43?w=800&h=600&fit=crop",
        "content": (
            "<h2>Introduction to French Macarons</h2>"
            "<p>French macarons are one of the most elegant and challenging pastries "
            "to master. These delicate almond-based cookies with a smooth ganache "
            "filling require precision, patience, and practice.</p>"
            "<h2>Step-by-Step Process</h2>"
            "<p>The key to perfect macarons lies in the macaronage technique, the "
            "process of folding the dry ingredients into the meringue.</p>"
            "<h2>Tips for Success</h2>"
            "<ul><li>Use aged egg whites for better stability</li>"
            "<li>Let macarons rest before baking to form a skin</li>"
            "<li>Use an oven thermometer for accurate temperature</li></ul>"
        ),
        "tags": ["macarons", "french-pastry", "techniques", "baking"],
        "category": "Pastry Techniques",
        "views": 1250,
        "likes": 89,
        "featured": True,
    },
    {
        "title": "Interview with Chef Pierre Dubois: Modern Pastry Innovation",
        "excerpt": (
            "An exclusive conversation with renowned pastry chef Pierre Dubois about "
            "innovation, sustainability, and the future of pastry arts."
        ),
        "featured_image": "https://images.unsplash.com/photo-1556909114-f6e7ad7d3136?w=800&h=600&fit=crop",
        "content": (
            "<h2>Meet Chef Pierre Dubois</h2>"
            "<p>Chef Pierre Dubois has been at the forefront of pastry innovation for "
            "over two decades.</p>"
            "<h2>On Innovation in Pastry</h2>"
            "<p>\"Innovation doesn't mean abandoning tradition,\" says Chef Dubois. "
            "\"It means understanding the fundamentals so well that you can "
            "respectfully evolve them.\"</p>"
        ),
        "tags": ["chef-interview", "innovation", "sustainability", "french-pastry"],
        "category": "Chef Interviews",
        "views": 890,
        "likes": 67,
        "featured": False,
    },
    {
        "title": "Pastry Industry Trends: What's Next?",
        "excerpt": (
            "Explore the latest trends shaping the pastry industry, from plant-based "
            "innovations to technology integration."
        ),
        "featured_image": "https://images.unsplash.com/photo-1578985545062-69928b1d9587?w=800&h=600&fit=crop",
        "content": (
            "<h2>Plant-Based Revolution</h2>"
            "<p>The plant-based movement continues to gain momentum in pastry, with "
            "innovative alternatives to eggs, butter, and cream.</p>"
            "<h2>Technology Integration</h2>"
            "<p>From 3D-printed decorations to assisted recipe development, technology "
            "is transforming how pastry chefs work.</p>"
        ),
        "tags": ["industry-trends", "innovation", "sustainability"],
        "category": "Industry News",
        "views": 756,
        "likes": 45,
        "featured": False,
    },
]


def clear_collections(db: DbClient) -> None:
    for collection in (ARTICLES_COLLECTION, CATEGORIES_COLLECTION, USERS_COLLECTION):
        for record_id in list(db.list_records(collection)):
            db.delete_record(collection, record_id)


def seed_database(
    db: DbClient,
    *,
    admin_email: str = DEFAULT_ADMIN_EMAIL,
    admin_password: str = DEFAULT_ADMIN_PASSWORD,
    reset: bool = False,
) -> dict:
    """
    Insert the sample data and return counts of what was created.

    Existing records with the same admin email, category name or article title
    are reused, so running twice does not duplicate data.
    """
    if reset:
        logger.info("Clearing articles, categories and users")
        clear_collections(db)

    users = UserRepository(db)
    categories = CategoryRepository(db)
    articles = ArticleRepository(db)
    created = {"users": 0, "categories": 0, "articles": 0}

    admin: Optional[User] = users.find_by_email(admin_email)
    if not admin:
        admin = users.create(
            User(
                username="admin",
                email=admin_email,
                password=admin_password,
                first_name="Admin",
                last_name="User",
                role=UserRole.ADMIN,
                email_verified=True,
            )
        )
        created["users"] += 1
        logger.info("Admin user created: %s", admin_email)

    by_name: dict[str, Category] = {c.name: c for c in categories.find_all()}
    for sort_order, (name, description, color) in enumerate(SAMPLE_CATEGORIES):
        if name in by_name:
            continue
        by_name[name] = categories.create(
            Category(
                name=name, description=description, color=color, sort_order=sort_order
            )
        )
        created["categories"] += 1
        logger.info("Created category: %s", name)

    existing_titles = {a.title for a in articles.find_all()}
    for sample in SAMPLE_ARTICLES:
        if sample["title"] in existing_titles:
            continue
        article = articles.create(
            Article(
                title=sample["title"],
                excerpt=sample["excerpt"],
                content=sample["content"],
                featured_image=sample["featured_image"],
                tags=list(sample["tags"]),
                category=by_name[sample["category"]].id,
                author=admin.id,
                status=ArticleStatus.PUBLISHED,
                is_featured=sample["featured"],
            )
        )
        db.update_record(
            ARTICLES_COLLECTION,
            article.id,
            {"viewCount": sample["views"], "likes": sample["likes"]},
        )
        created["articles"] += 1
        logger.info("Created article: %s", article.title)

    categories.refresh_article_counts(
        articles.find_all(), [c.id for c in by_name.values()]
    )
    return created
