"""SQLAlchemy models for the identity store."""

from datetime import datetime

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import Column, DateTime, Integer, String, Text, \
    UniqueConstraint, text

db: SQLAlchemy = SQLAlchemy()


class DBUserProfile(db.Model):  # type: ignore
    """Persistence for :class:`domain.UserProfile`."""

    __tablename__ = 'user_profile'

    username = Column(String(255), primary_key=True)
    """Primary key; uniqueness of profiles rests on this constraint."""

    distinguished_name = Column(String(1024), nullable=False,
                                server_default=text("''"))
    roles = Column(Text, nullable=False, server_default=text("''"))
    """Comma-separated role names."""

    credential = Column(String(255), nullable=True)
    country = Column(String(8), nullable=False, server_default=text("'us'"))
    created_by = Column(String(255), nullable=False,
                        server_default=text("'system'"))
    created_on = Column(DateTime(timezone=True), default=datetime.now)
    last_updated_on = Column(DateTime(timezone=True), default=datetime.now)


class DBApiKey(db.Model):  # type: ignore
    """
    Persistence for the API key bound to a user.

    Both columns are unique, so that the live keys and their owners are in
    one-to-one correspondence.
    """

    __tablename__ = 'api_key'

    username = Column(String(255), primary_key=True)
    uuid = Column(String(64), nullable=False, unique=True, index=True)


class DBThrottle(db.Model):  # type: ignore
    """Cumulative count of actions in one throttle category for one user."""

    __tablename__ = 'user_throttle'
    __table_args__ = (
        UniqueConstraint('username', 'category', name='uq_throttle'),
    )

    throttle_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, index=True)
    category = Column(String(255), nullable=False)
    count = Column(Integer, nullable=False, default=0,
                   server_default=text("0"))
