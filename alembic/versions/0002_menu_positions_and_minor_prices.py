from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0002_positions_minor_prices"
down_revision = "0001_create_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("menus") as batch:
        batch.add_column(sa.Column("position", sa.Integer(), nullable=False, server_default="0"))

    with op.batch_alter_table("menu_items") as batch:
        batch.add_column(sa.Column("price_minor", sa.Integer(), nullable=True))
        batch.add_column(sa.Column("position", sa.Integer(), nullable=False, server_default="0"))

    op.create_index("ix_menus_restaurant_position", "menus", ["restaurant_id", "position"])
    op.create_index("ix_menu_items_menu_position", "menu_items", ["menu_id", "position"])


def downgrade() -> None:
    op.drop_index("ix_menu_items_menu_position", table_name="menu_items")
    op.drop_index("ix_menus_restaurant_position", table_name="menus")

    with op.batch_alter_table("menu_items") as batch:
        batch.drop_column("position")
        batch.drop_column("price_minor")

    with op.batch_alter_table("menus") as batch:
        batch.drop_column("position")
