# init_db.py
import logging
from app import config
from app.auth import hash_password
from app.database import engine, SessionLocal, Base
from app.db.models.user import User
from app.db.models.enums import UserRole

logger = logging.getLogger(__name__)

def seed():
    """Create the bootstrap admin account when ADMIN_EMAIL/ADMIN_PASSWORD are set."""
    if not (config.ADMIN_EMAIL and config.ADMIN_PASSWORD):
        return
    db = SessionLocal()
    try:
        if not db.query(User).filter(User.role == UserRole.ADMIN).first():
            db.add(User(
                email=config.ADMIN_EMAIL,
                phone=config.ADMIN_PHONE,
                password_hash=hash_password(config.ADMIN_PASSWORD),
                role=UserRole.ADMIN,
            ))
            db.commit()
            logger.info(f"Seeded admin user: {config.ADMIN_EMAIL}")
    finally:
        db.close()

def init():
    Base.metadata.create_all(bind=engine)
    print("✅ Tables created")
    seed()
    print("✅ Seed data added")

if __name__ == "__main__":
    init()
