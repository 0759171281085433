import argparse
import logging
import sys, pathlib
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "backend"))

from heyu_booking.config import settings
from heyu_booking.database import create_db_engine, create_session_factory, create_tables
from heyu_booking.redis_client import close_redis, open_redis
from heyu_booking.services.legacy_import import import_legacy_dir
from heyu_booking.services.slots import invalidate_availability_cache


def main():
    parser = argparse.ArgumentParser(
        description="Import legacy services.json / bookings.json / blockedDates.json"
    )
    parser.add_argument("data_dir", type=pathlib.Path, help="directory with the JSON files")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level.upper())

    if not args.data_dir.is_dir():
        print(f"Not a directory: {args.data_dir}")
        return 1

    engine = create_db_engine(settings.resolved_database_url)
    create_tables(engine)
    db = create_session_factory(engine)()
    redis = open_redis(settings.redis_url)
    try:
        print(f"Using DB: {settings.resolved_database_url}")
        result = import_legacy_dir(db, args.data_dir)
        invalidate_availability_cache(redis)

        for name, count in result.items():
            print(f"✔ {name}: {count}")
        return 0
    finally:
        db.close()
        close_redis(redis)
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
