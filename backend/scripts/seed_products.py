#!/usr/bin/env python3
"""
Seed the catalogue from a JSON file.

Accepts either a list of products or an object with an "items" list. Each
entry may use the storefront's field names (precio, sabor, tamano, imagenes)
or plain English ones (price, flavor, size_ml, images).

Usage:
    python scripts/seed_products.py --file catalogue.json
"""
import argparse
import json
import os
import sys

# allow running from repo/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.db import SessionLocal, init_db  # noqa: E402
from app.models.product import Product  # noqa: E402
from app.repositories.product_repo import ProductRepository  # noqa: E402
from app.services.pricing import round2  # noqa: E402
from app.utils.logging import configure_logging, get_logger  # noqa: E402

logger = get_logger("seed_products")

DEFAULT_SOURCE = os.path.join(os.path.dirname(__file__), "catalogue.json")


def _normalize_entry(entry):
    """Return a dict with keys: name, description, price, flavor, size_ml, stock, images"""
    images = entry.get("imagenes") or entry.get("images") or []
    images = [i.get("imageUrl") if isinstance(i, dict) else i for i in images]
    return {
        "name": entry.get("name") or entry.get("nombre") or "",
        "description": entry.get("description") or entry.get("descripcion") or "",
        "price": round2(str(entry.get("precio", entry.get("price", 0)) or 0)),
        "flavor": entry.get("sabor") or entry.get("flavor"),
        "size_ml": int(entry.get("tamano", entry.get("size_ml", 750)) or 0),
        "stock": int(entry.get("stock", 0) or 0),
        "images": [i for i in images if i],
    }


def seed_from_file(path: str) -> int:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        source_list = data.get("items") if isinstance(data.get("items"), list) else list(data.values())
    elif isinstance(data, list):
        source_list = data
    else:
        source_list = []

    init_db()
    db = SessionLocal()
    repo = ProductRepository(db)
    created = 0
    try:
        for entry in source_list:
            fields = _normalize_entry(entry)
            if not fields["name"]:
                continue
            if db.query(Product).filter(Product.name == fields["name"]).first():
                logger.info("Skipping existing product %r", fields["name"])
                continue
            images = fields.pop("images")
            repo.create(image_urls=images, **fields)
            created += 1
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    logger.info("Seeded %s products", created)
    return created


if __name__ == "__main__":
    configure_logging()
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", "-f", default=DEFAULT_SOURCE, help="Path to a product JSON file")
    args = parser.parse_args()
    if not os.path.exists(args.file):
        logger.error("File not found: %s", args.file)
        sys.exit(1)
    seed_from_file(args.file)
