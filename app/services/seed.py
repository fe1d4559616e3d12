"""
Демо-данные каталога весов.

Заполняет пустую БД категориями и товарами. Если хотя бы одна
категория уже есть, ничего не делает.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.db.models import Category, Product

logger = logging.getLogger(__name__)

SAMPLE_CATEGORIES = [
    {
        "name": "Personal Scales",
        "slug": "personal",
        "description": "Used for personal body weight tracking",
        "title": "Personal Weighing Scales",
    },
    {
        "name": "Jewelry Scales",
        "slug": "jewelry",
        "description": "Precision scales for jewelry and small items",
        "title": "Jewelry Weighing Scales",
    },
    {
        "name": "Industrial Scales",
        "slug": "industrial",
        "description": "Heavy-duty scales for industrial use",
        "title": "Industrial Weighing Scales",
    },
    {
        "name": "Kitchen Scales",
        "slug": "kitchen",
        "description": "Scales for cooking and food preparation",
        "title": "Kitchen Weighing Scales",
    },
    {
        "name": "Dairy Scales",
        "slug": "dairy",
        "description": "Specialized scales for dairy operations",
        "title": "Dairy Weighing Scales",
    },
]

# (category slug, name, price, flags, accuracy, power supply, display, material, warranty)
SAMPLE_PRODUCTS = [
    ("industrial", "Industrial Platform Scale", 16499, {"featured": True},
     "±50g", "Rechargeable Battery", "LCD Digital", "Stainless Steel", "5 Years"),
    ("dairy", "Milk Collection Scale", 12999, {"featured": True},
     "±10g", "AC/Battery", "LCD Digital", "Stainless Steel", "3 Years"),
    ("kitchen", "Digital Kitchen Scale", 1499, {"featured": True},
     "±1g", "Battery", "LCD Digital", "Tempered Glass", "1 Year"),
    ("personal", "Mechanical Bathroom Scale", 999, {},
     "±500g", "Mechanical", "Analog Dial", "Metal/Plastic", "1 Year"),
    ("industrial", "Digital Crane Scale", 24999, {},
     "±500g", "Rechargeable Battery", "LED Digital", "Aluminum Alloy", "2 Years"),
    ("jewelry", "Pocket Jewelry Scale", 2999, {"bestseller": True},
     "±0.01g", "Battery", "LCD Digital", "ABS Plastic", "1 Year"),
    ("personal", "Smart Body Analyzer", 4999, {"new_arrival": True},
     "±0.1kg", "Rechargeable Battery", "LED Digital", "Tempered Glass", "2 Years"),
    ("jewelry", "Laboratory Precision Scale", 35999, {},
     "±0.0001g", "AC Power", "Digital LCD", "Stainless Steel", "5 Years"),
    ("industrial", "Digital Price Computing Scale", 7499, {"new_arrival": True},
     "±2g", "AC/Battery", "Dual LCD", "ABS Plastic/Steel", "2 Years"),
    ("personal", "Digital Infant Scale", 6999, {},
     "±5g", "Battery", "LCD Digital", "ABS Plastic", "2 Years"),
]


def seed_sample_catalog(db: Session) -> bool:
    """
    Заполнить каталог демо-данными.

    Returns:
        bool: True, если данные были добавлены
    """
    if db.scalar(select(func.count(Category.id))):
        return False

    categories = {}
    for data in SAMPLE_CATEGORIES:
        category = Category(href=f"/category/{data['slug']}", **data)
        db.add(category)
        categories[data["slug"]] = category
    db.flush()

    for slug, name, price, flags, accuracy, power, display, material, warranty in SAMPLE_PRODUCTS:
        db.add(
            Product(
                name=name,
                description=f"{name} from the {categories[slug].name.lower()} range.",
                price=price,
                category_id=categories[slug].id,
                featured=flags.get("featured", False),
                bestseller=flags.get("bestseller", False),
                new_arrival=flags.get("new_arrival", False),
                accuracy=accuracy,
                power_supply=power,
                display=display,
                material=material,
                warranty=warranty,
                certification="ISO 9001",
            )
        )

    db.commit()
    logger.info(
        "Sample catalog seeded: %d categories, %d products",
        len(SAMPLE_CATEGORIES), len(SAMPLE_PRODUCTS),
    )
    return True
