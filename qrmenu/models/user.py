from sqlalchemy import Column, Integer, String

from qrmenu.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String, unique=True, nullable=False)
    # Legacy column name; it only ever stores a salted hash.
    password_hash = Column("password", String, nullable=False)
