from fastapi import APIRouter
from app.api.public import users, categories, products, reviews

router = APIRouter()
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(categories.router, prefix="/categories", tags=["Categories"])
router.include_router(products.router, prefix="/products", tags=["Products"])
router.include_router(reviews.router, prefix="/reviews", tags=["Reviews"])
