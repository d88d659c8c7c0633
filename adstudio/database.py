from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from adstudio.config import DATABASE_URL

# SQLite needs this when the session is used from FastAPI's threadpool
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# Create engine
engine = create_engine(DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)

# Create session
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


# Dependency for FastAPI routes
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
