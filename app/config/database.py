# app/config/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from .settings import settings

engine_kwargs = {
    "pool_pre_ping": True,
    "echo": settings.debug
}

if settings.database_url.startswith("sqlite"):
    # Desarrollo local: una conexión compartida entre hilos del servidor
    engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    engine_kwargs["pool_recycle"] = 300
    # SSL para bases hospedadas en Render
    if "render" in settings.database_url:
        engine_kwargs["connect_args"] = {"sslmode": "require"}

engine = create_engine(
    settings.database_url_with_ssl,
    **engine_kwargs
)

# Las transferencias confirman item por item; nada se confirma solo
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def get_db():
    """Sesión por request para FastAPI"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
