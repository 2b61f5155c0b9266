# freshcart/data/seed.py
from freshcart.data.database import SessionLocal
from freshcart.data.models import LoyaltySettingsModel, ProductModel, RegionModel
from freshcart.utils.logging import get_logger

logger = get_logger(__name__)

# districts around the store, distance in km
REGIONS = [
    ("Kadikoy", 0.0),
    ("Uskudar", 4.0),
    ("Atasehir", 8.5),
    ("Besiktas", 9.0),
    ("Sisli", 12.0),
    ("Bakirkoy", 21.0),
]

# name, category, price per kg, stock kg, threshold kg
PRODUCTS = [
    ("Tomato", "vegetable", 10.0, 120.0, 5.0),
    ("Potato", "vegetable", 8.5, 200.0, 10.0),
    ("Onion", "vegetable", 7.0, 150.0, 10.0),
    ("Carrot", "vegetable", 9.0, 80.0, 5.0),
    ("Cucumber", "vegetable", 12.0, 60.0, 4.0),
    ("Pepper", "vegetable", 18.0, 40.0, 3.0),
    ("Spinach", "vegetable", 22.0, 25.0, 2.0),
    ("Apple", "fruit", 15.0, 100.0, 5.0),
    ("Banana", "fruit", 35.0, 70.0, 4.0),
    ("Orange", "fruit", 14.0, 90.0, 6.0),
    ("Strawberry", "fruit", 60.0, 20.0, 2.0),
    ("Watermelon", "fruit", 6.0, 300.0, 15.0),
]


def seed():
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            return

        db.add_all(RegionModel(name=name, distance_km=km) for name, km in REGIONS)
        db.add_all(
            ProductModel(name=name, category=category, price=price, stock=stock, threshold=threshold)
            for name, category, price, stock, threshold in PRODUCTS
        )
        if not db.query(LoyaltySettingsModel).first():
            db.add(LoyaltySettingsModel())

        db.commit()
        logger.info(f"Seeded {len(REGIONS)} regions and {len(PRODUCTS)} products")
    finally:
        db.close()
