"""
In-memory SQLite database for tests that exercise real queries.

Every call to make_session_factory() gets a fresh, empty schema.
"""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.models import Base, Movie, User


def make_session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def add_user(db: Session, github_id: str = "1001", name: str = "Ada", **extra) -> User:
    user = User(github_id=github_id, name=name, **extra)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def add_movie(db: Session, title: str = "Arrival", year: int = 2016, **extra) -> Movie:
    extra.setdefault("genre", [])
    movie = Movie(title=title, year=year, **extra)
    db.add(movie)
    db.commit()
    db.refresh(movie)
    return movie
