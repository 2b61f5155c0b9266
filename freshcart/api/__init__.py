# freshcart/api/__init__.py
from fastapi import FastAPI
from freshcart.api.routers import carriers, carts, catalog, coupons, orders, ratings, users
from freshcart.api.routers.health import router as health_router

def create_app() -> FastAPI:
    app = FastAPI(title="FreshCart Ordering Service", version="1.0.0")
    app.include_router(health_router)
    app.include_router(users.router)
    app.include_router(catalog.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(carriers.router)
    app.include_router(ratings.router)
    app.include_router(coupons.router)
    return app
