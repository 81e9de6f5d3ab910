"""Create the attendance tables. Pass --reset to drop and recreate them (demo/dev only)."""
import argparse
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from daycare.config import settings
from daycare.database import engine, Base
import daycare.models  # noqa: F401 - registers all models


def init_db(reset: bool = False):
    print(f"Database: {settings.DATABASE_URL}")
    if reset:
        print("Dropping existing tables...")
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    print(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--reset", action="store_true", help="drop all tables before creating them")
    init_db(reset=parser.parse_args().reset)
