from __future__ import annotations

import random
from pathlib import Path
from typing import Any

import yaml

from islanders.core.schemas import CatalogItem

LOCATIONS = ["Kyrenia", "Famagusta", "Nicosia", "Iskele", "Bellapais", "Esentepe", "Lapta", "Catalkoy"]

PROPERTY_IMAGE = "https://images.unsplash.com/photo-1613490493576-7fde63acd811?q=80&w=2671&auto=format&fit=crop"
CAR_IMAGE = "https://images.unsplash.com/photo-1533473359331-0135ef1b58bf?q=80&w=2670&auto=format&fit=crop"
FOOD_IMAGE = "https://images.unsplash.com/photo-1504674900247-0877df9cc836?q=80&w=2670&auto=format&fit=crop"
HOTEL_IMAGE = "https://images.unsplash.com/photo-1566073771259-6a8506099945?q=80&w=2670&auto=format&fit=crop"
SERVICE_IMAGE = "https://images.unsplash.com/photo-1581578731117-104f2a412c5d?q=80&w=2574&auto=format&fit=crop"

AGENT_PHONE = "905330000000"


def load_catalog(path: str | Path) -> list[CatalogItem]:
    """
    Load catalog items from a YAML file.

    Expected structure:
      items:
        - id: re_0
          domain: Real Estate
          title: ...
    A bare top-level list is accepted too.
    """
    catalog_path = Path(path)
    if not catalog_path.exists():
        raise FileNotFoundError(f"catalog file not found: {catalog_path}")

    data = _load_yaml(catalog_path)
    raw_items = data.get("items", []) if isinstance(data, dict) else data
    return [CatalogItem(**raw) for raw in (raw_items if isinstance(raw_items, list) else [])]


def dump_catalog(items: list[CatalogItem], path: str | Path) -> None:
    payload = {"items": [item.model_dump(exclude_none=True) for item in items]}
    Path(path).write_text(yaml.safe_dump(payload, allow_unicode=True, sort_keys=False), encoding="utf-8")


def generate_mock_catalog(per_domain: int = 50, seed: int = 7) -> list[CatalogItem]:
    """Deterministic demo catalog: properties, cars, restaurants, hotels and services."""
    rng = random.Random(seed)
    items: list[CatalogItem] = []

    for i in range(per_domain):
        kind = rng.choice(["Villa", "Apartment", "Penthouse", "Bungalow"])
        rental_type = rng.choice(["sale", "short-term", "long-term", "project"])
        loc = rng.choice(LOCATIONS)
        if rental_type in ("sale", "project"):
            price = 80000 + i * 5000
        elif rental_type == "long-term":
            price = 400 + i * 20
        else:
            price = 80 + i * 5
        items.append(
            CatalogItem(
                id=f"re_{i}",
                domain="Real Estate",
                title=f"{kind} in {loc} - {'Luxury Living' if rental_type == 'sale' else 'Great View'}",
                location=f"{loc}, North Cyprus",
                price=price,
                image_url=PROPERTY_IMAGE,
                category=kind,
                rental_type=rental_type,
                tags=[kind, "Sea View", "Off Plan" if rental_type == "project" else "Ready"],
                amenities=["Pool", "Wifi", "Parking", "AC"],
                rating=round(4.0 + (i % 10) / 10, 1),
                agent_phone=AGENT_PHONE,
                description=f"A stunning {kind.lower()} located in the heart of {loc}.",
            )
        )

    for i in range(per_domain):
        make = rng.choice(["Mercedes", "BMW", "Ford", "Toyota", "Nissan", "Land Rover"])
        vehicle_type = rng.choice(["rental", "sale"])
        items.append(
            CatalogItem(
                id=f"car_{i}",
                domain="Cars",
                title=f"{make} {'Rental' if vehicle_type == 'rental' else 'Series'}",
                location=rng.choice(LOCATIONS),
                price=15000 + i * 1000 if vehicle_type == "sale" else 30 + i * 2,
                image_url=CAR_IMAGE,
                vehicle_type=vehicle_type,
                features=["AC", "Bluetooth", "GPS"],
                tags=[make, "Daily" if vehicle_type == "rental" else "Dealership"],
                agent_phone=AGENT_PHONE,
            )
        )

    for i in range(per_domain):
        cat = rng.choice(["Meyhane", "Seafood", "Bistro", "Fine Dining", "Cafe"])
        items.append(
            CatalogItem(
                id=f"rest_{i}",
                domain="Restaurants",
                title=f"{cat} Delight {i}",
                location=rng.choice(LOCATIONS),
                price=20 + i % 50,
                image_url=FOOD_IMAGE,
                category=cat,
                tags=[cat, "Dinner", "Lunch"],
                agent_phone=AGENT_PHONE,
            )
        )

    for i in range(per_domain):
        hotel_type = rng.choice(["Boutique", "Resort & Casino", "City Hotel", "Bungalow"])
        items.append(
            CatalogItem(
                id=f"hotel_{i}",
                domain="Hotels",
                title=f"{hotel_type} Paradise {i}",
                location=rng.choice(LOCATIONS),
                price=80 + i * 5,
                image_url=HOTEL_IMAGE,
                hotel_type=hotel_type,
                amenities=["Pool", "Spa", "Gym", "Breakfast"],
                tags=[hotel_type, "Luxury", "Stay"],
                agent_phone=AGENT_PHONE,
            )
        )

    for i in range(per_domain):
        cat = rng.choice(["Cleaning", "Plumbing", "Electrician", "Gardening", "Health", "Beauty"])
        items.append(
            CatalogItem(
                id=f"srv_{i}",
                domain="Health & Beauty" if cat in ("Health", "Beauty") else "Services",
                title=f"Professional {cat} {i}",
                location=rng.choice(LOCATIONS),
                price=30 + i % 20,
                image_url=SERVICE_IMAGE,
                category=cat,
                tags=[cat, "Professional", "Trusted"],
                agent_phone=AGENT_PHONE,
            )
        )

    return items


def _load_yaml(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}
