# reset_db.py
import sys

from serenai.models import database  # Make sure this imports your Base
from serenai.models import *  # registers all models
from serenai.models.database import engine, SessionLocal
from serenai.utils.seed_data import seed_sample_data

if __name__ == "__main__":
    print("⚠️ Dropping all existing tables...")
    database.Base.metadata.drop_all(bind=engine)

    print("✅ Recreating tables from models...")
    database.Base.metadata.create_all(bind=engine)

    if "--seed" in sys.argv:
        db = SessionLocal()
        try:
            seed_sample_data(db)
            print("🌱 Sample data inserted.")
        finally:
            db.close()

    print("✅ Database reset complete.")
