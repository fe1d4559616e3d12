#!/usr/bin/env python3
"""
Скрипт для инициализации базы данных.

    python init_db.py            # создать таблицы
    python init_db.py --drop     # пересоздать таблицы
    python init_db.py --seed     # создать таблицы и заполнить демо-данными
"""

import argparse
import logging
import sys

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from app.db.database import SessionLocal, engine
from app.db.models import Base
from app.services.seed import seed_sample_catalog

logger = logging.getLogger("init_db")


def init_database(drop: bool = False, seed: bool = False) -> bool:
    """Создает все таблицы в базе данных."""
    try:
        if drop:
            logger.warning("Dropping all tables")
            Base.metadata.drop_all(bind=engine)

        Base.metadata.create_all(bind=engine)
        tables = inspect(engine).get_table_names()
        logger.info("Tables ready (%d): %s", len(tables), ", ".join(sorted(tables)))

        if seed:
            with SessionLocal() as db:
                if not seed_sample_catalog(db):
                    logger.info("Catalog is not empty, sample data skipped")
        return True

    except SQLAlchemyError:
        logger.exception("Database initialization failed")
        return False


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Инициализация базы данных каталога")
    parser.add_argument("--drop", action="store_true", help="удалить таблицы перед созданием")
    parser.add_argument("--seed", action="store_true", help="заполнить пустой каталог демо-данными")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    return 0 if init_database(drop=args.drop, seed=args.seed) else 1


if __name__ == "__main__":
    sys.exit(main())
