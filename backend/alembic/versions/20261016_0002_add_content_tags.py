"""Add user tags to posts and comments."""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

revision: str = "20261016_0002"
down_revision: str | None = "20261016_0001"
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None

EMPTY_JSON_LIST = sa.text("'[]'")


def upgrade() -> None:
    for table_name in ("posts", "comments"):
        op.add_column(
            table_name,
            sa.Column("tags", sa.JSON(), server_default=EMPTY_JSON_LIST, nullable=False),
        )


def downgrade() -> None:
    for table_name in ("comments", "posts"):
        with op.batch_alter_table(table_name) as batch_op:
            batch_op.drop_column("tags")
