from os import getenv

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from models.base_model import Base
from models.user import User
from models.post import Post
from models.comment import Comment

load_dotenv()
# Map model names for easy querying
classes = {
    "User": User,
    "Post": Post,
    "Comment": Comment,
}


def _enable_sqlite_foreign_keys(engine):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class DBStorage:
    """
    Record store used by the whole app: insert/update through new()+save(),
    lookup by key with get(), lookup by field equality with find_one().
    """
    __engine = None
    __session = None

    def __init__(self, database_url: str | None = None):
        """Initialize engine based on environment"""
        ENV = getenv("APP_ENV", "dev").lower()
        echo = getenv("SQL_ECHO", "0").lower() in ("1", "true", "yes")
        database_url = database_url or getenv("DATABASE_URL")

        if database_url:
            self.__engine = create_engine(database_url, pool_pre_ping=True, echo=echo)
        elif ENV in ("test", "testing"):
            # One shared in-memory database for every session/thread
            self.__engine = create_engine(
                "sqlite://",
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=echo,
            )
        elif ENV == "dev":
            self.__engine = create_engine("sqlite:///blog.db", echo=echo)
        else:
            raise RuntimeError("DATABASE_URL must be set outside of dev/test environments")

        if self.__engine.url.get_backend_name() == "sqlite":
            _enable_sqlite_foreign_keys(self.__engine)

    def reload(self):
        """Create tables and start session"""
        Base.metadata.create_all(self.__engine)
        session_factory = sessionmaker(bind=self.__engine, expire_on_commit=False)
        Session = scoped_session(session_factory)
        self.__session = Session

    def reset(self):
        """Drop and recreate every table (used by the test suite)."""
        self.__session.remove()
        Base.metadata.drop_all(self.__engine)
        Base.metadata.create_all(self.__engine)

    def new(self, obj):
        """Add object to session"""
        self.__session.add(obj)

    def save(self):
        """Commit session"""
        try:
            self.__session.commit()
        except SQLAlchemyError:
            self.__session.rollback()
            raise

    def rollback(self):
        self.__session.rollback()

    def delete(self, obj=None):
        """Delete object if exists (hard delete)"""
        if obj:
            self.__session.delete(obj)

    def get(self, cls, id):
        """Fetch one object by class and ID"""
        if cls in classes.values() and id is not None:
            return self.__session.get(cls, id)
        return None

    def find_one(self, cls, **filters):
        """First object of cls whose columns equal every keyword filter"""
        return self.__session.query(cls).filter_by(**filters).first()

    def count(self, cls=None):
        """Count objects"""
        if cls:
            return self.__session.query(cls).count()
        total = 0
        for model in classes.values():
            total += self.__session.query(model).count()
        return total

    def close(self):
        """Remove session (for API teardown)"""
        self.__session.remove()

    # expose the SQLAlchemy session for advanced querying (joins, filters, etc.)
    def get_session(self):
        return self.__session
