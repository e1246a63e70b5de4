from fastapi import APIRouter

from pastry_news.routes import articles, auth, categories, contact, health, users

router = APIRouter()
router.include_router(health.router)
router.include_router(auth.router)
router.include_router(articles.router)
router.include_router(categories.router)
router.include_router(users.router)
router.include_router(contact.router)
