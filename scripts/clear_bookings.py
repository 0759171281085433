import argparse
import sys, pathlib
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "backend"))

from heyu_booking.config import settings
from heyu_booking.database import create_db_engine, create_session_factory, create_tables
from heyu_booking.models.tables import Bookings
from heyu_booking.redis_client import close_redis, open_redis
from heyu_booking.services.slots import invalidate_availability_cache


def main():
    parser = argparse.ArgumentParser(description="Delete all bookings")
    parser.add_argument("--yes", action="store_true", help="skip confirmation prompt")
    args = parser.parse_args()

    engine = create_db_engine(settings.resolved_database_url)
    create_tables(engine)
    db = create_session_factory(engine)()
    redis = open_redis(settings.redis_url)
    try:
        total = db.query(Bookings).count()
        print(f"Using DB: {settings.resolved_database_url}")
        print(f"Bookings: {total}")

        if not total:
            print("Nothing to clear.")
            return 0

        if not args.yes:
            answer = input(f"Delete all {total} bookings? [y/N] ").strip().lower()
            if answer not in ("y", "yes"):
                print("Aborted.")
                return 1

        deleted = db.query(Bookings).delete()
        db.commit()
        keys = invalidate_availability_cache(redis)

        print(f"✔ Deleted {deleted} bookings")
        print(f"✔ Invalidated {keys} cached availability entries")
        return 0
    finally:
        db.close()
        close_redis(redis)
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
