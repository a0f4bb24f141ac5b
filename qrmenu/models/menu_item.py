from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text

from qrmenu.core.database import Base


class MenuItem(Base):
    __tablename__ = "menu_items"
    __table_args__ = (Index("ix_menu_items_menu_position", "menu_id", "position"),)

    id = Column(Integer, primary_key=True)
    menu_id = Column(Integer, ForeignKey("menus.id"), index=True, nullable=False)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(String, nullable=False)
    price_minor = Column(Integer, nullable=True)
    category = Column(String, nullable=False)
    image_url = Column(String, nullable=True)
    # NULL counts as available (rows created before the column existed).
    is_available = Column(Boolean, nullable=True, default=True)
    is_bestseller = Column(Boolean, nullable=True, default=False)
    is_chefs_pick = Column(Boolean, nullable=True, default=False)
    is_todays_special = Column(Boolean, nullable=True, default=False)
    position = Column(Integer, nullable=False, default=0)
