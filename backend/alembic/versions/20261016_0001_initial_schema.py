"""Create users, content, relationship, visibility and archive tables."""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

revision: str = "20261016_0001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None

TIMESTAMP_DEFAULT = sa.text("CURRENT_TIMESTAMP")
FALSE_DEFAULT = sa.text("false")
EMPTY_JSON_LIST = sa.text("'[]'")


def _timestamp(name: str, *, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.DateTime(timezone=True), nullable=True)
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=TIMESTAMP_DEFAULT,
        nullable=False,
    )


def _soft_delete_columns() -> list[sa.Column]:
    return [
        sa.Column("is_deleted", sa.Boolean(), server_default=FALSE_DEFAULT, nullable=False),
        _timestamp("deleted_at", nullable=True),
        sa.Column("deletion_cause", sa.String(length=16), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("username", sa.String(length=30), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=80), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "posts",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("owner_id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "allow_comments",
            sa.Boolean(),
            server_default=sa.text("true"),
            nullable=False,
        ),
        sa.Column("images", sa.JSON(), server_default=EMPTY_JSON_LIST, nullable=False),
        *_soft_delete_columns(),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_posts_owner_created_at", "posts", ["owner_id", "created_at"])
    op.create_index("ix_posts_created_at_id", "posts", ["created_at", "id"])

    op.create_table(
        "comments",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("owner_id", sa.String(length=36), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("images", sa.JSON(), server_default=EMPTY_JSON_LIST, nullable=False),
        sa.Column("target_kind", sa.String(length=16), nullable=False),
        sa.Column("target_id", sa.String(length=36), nullable=False),
        *_soft_delete_columns(),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comments_target", "comments", ["target_kind", "target_id"])
    op.create_index(
        "ix_comments_owner_target",
        "comments",
        ["owner_id", "target_kind", "target_id"],
    )

    op.create_table(
        "reacts",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("owner_id", sa.String(length=36), nullable=False),
        sa.Column("react_type", sa.String(length=16), server_default="like", nullable=False),
        sa.Column("target_kind", sa.String(length=16), nullable=False),
        sa.Column("target_id", sa.String(length=36), nullable=False),
        *_soft_delete_columns(),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_reacts_target", "reacts", ["target_kind", "target_id"])
    op.create_index(
        "ix_reacts_owner_target",
        "reacts",
        ["owner_id", "target_kind", "target_id"],
    )

    op.create_table(
        "relationship_aggregates",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("owner_id", sa.String(length=36), nullable=False),
        sa.Column("kind", sa.String(length=16), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "owner_id",
            "kind",
            name="ux_relationship_aggregates_owner_kind",
        ),
    )
    op.create_table(
        "relationship_members",
        sa.Column("aggregate_id", sa.String(length=36), nullable=False),
        sa.Column("peer_id", sa.String(length=36), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["aggregate_id"],
            ["relationship_aggregates.id"],
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(["peer_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("aggregate_id", "peer_id"),
    )
    op.create_index(
        "ix_relationship_members_peer_aggregate",
        "relationship_members",
        ["peer_id", "aggregate_id"],
    )

    op.create_table(
        "friend_request_aggregates",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("requester_id", sa.String(length=36), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["requester_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("requester_id"),
    )
    op.create_table(
        "friend_request_pendings",
        sa.Column("aggregate_id", sa.String(length=36), nullable=False),
        sa.Column("target_id", sa.String(length=36), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["aggregate_id"],
            ["friend_request_aggregates.id"],
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(["target_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("aggregate_id", "target_id"),
    )
    op.create_index(
        "ix_friend_request_pendings_target_created_at",
        "friend_request_pendings",
        ["target_id", "created_at"],
    )

    op.create_table(
        "hidden_posts",
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("post_id", sa.String(length=36), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["post_id"], ["posts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "post_id"),
    )

    op.create_table(
        "saved_posts",
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("post_id", sa.String(length=36), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["post_id"], ["posts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "post_id"),
    )
    op.create_index(
        "ix_saved_posts_user_created_at_post_id",
        "saved_posts",
        ["user_id", "created_at", "post_id"],
    )

    op.create_table(
        "post_archives",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
    )
    op.create_table(
        "archived_posts",
        sa.Column("archive_id", sa.String(length=36), nullable=False),
        sa.Column("post_id", sa.String(length=36), nullable=False),
        _timestamp("archived_at"),
        sa.ForeignKeyConstraint(["archive_id"], ["post_archives.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("archive_id", "post_id"),
    )
    op.create_index(
        "ix_archived_posts_archive_archived_at",
        "archived_posts",
        ["archive_id", "archived_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_archived_posts_archive_archived_at", table_name="archived_posts")
    op.drop_table("archived_posts")
    op.drop_table("post_archives")
    op.drop_index("ix_saved_posts_user_created_at_post_id", table_name="saved_posts")
    op.drop_table("saved_posts")
    op.drop_table("hidden_posts")
    op.drop_index(
        "ix_friend_request_pendings_target_created_at",
        table_name="friend_request_pendings",
    )
    op.drop_table("friend_request_pendings")
    op.drop_table("friend_request_aggregates")
    op.drop_index(
        "ix_relationship_members_peer_aggregate",
        table_name="relationship_members",
    )
    op.drop_table("relationship_members")
    op.drop_table("relationship_aggregates")
    op.drop_index("ix_reacts_owner_target", table_name="reacts")
    op.drop_index("ix_reacts_target", table_name="reacts")
    op.drop_table("reacts")
    op.drop_index("ix_comments_owner_target", table_name="comments")
    op.drop_index("ix_comments_target", table_name="comments")
    op.drop_table("comments")
    op.drop_index("ix_posts_created_at_id", table_name="posts")
    op.drop_index("ix_posts_owner_created_at", table_name="posts")
    op.drop_table("posts")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
