from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from config import get_settings

DATABASE_URL = get_settings().database_url

# SQLite (testy, lokální vývoj) potřebuje povolit přístup z více vláken
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# Vytvoření SQLAlchemy engine
engine = create_engine(DATABASE_URL, connect_args=connect_args)

# Factory na DB session
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Základ pro modely
Base = declarative_base()


# Dependency pro FastAPI – dostaneš db session do endpointů
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
