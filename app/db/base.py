from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """SQLAlchemy declarative base — samples, notifications and subscriptions inherit from this."""
    pass
