from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from qrmenu.core.database import Base


class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True)
    owner_id = Column("user_id", Integer, ForeignKey("users.id"), index=True, nullable=False)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    address = Column(String, nullable=True)
    contact_number = Column(String, nullable=True)
    whatsapp_number = Column(String, nullable=True)
    cuisine_type = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    cover_image = Column(String, nullable=True)
    table_count = Column(Integer, nullable=True, default=10)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
