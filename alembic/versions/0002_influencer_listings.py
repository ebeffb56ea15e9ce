from alembic import op
import sqlalchemy as sa

revision = "0002_influencer_listings"
down_revision = "0001_users_profiles"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "niches",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False, unique=True),
        sa.Column("slug", sa.String(length=120), nullable=False, unique=True),
    )

    op.create_table(
        "influencer_listings",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column(
            "influencer_profile_id", sa.String(),
            sa.ForeignKey("influencer_profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("pricing_type", sa.String(length=20), nullable=False),
        sa.Column("fixed_price", sa.Float(), nullable=True),
        sa.Column("starting_bid", sa.Float(), nullable=True),
        sa.Column("reserve_price", sa.Float(), nullable=True),
        sa.Column("auction_ends_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="OPEN"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_influencer_listings_influencer_profile_id", "influencer_listings", ["influencer_profile_id"])
    op.create_index("ix_influencer_listings_status_created", "influencer_listings", ["status", "created_at"])

    op.create_table(
        "influencer_listing_niches",
        sa.Column(
            "listing_id", sa.String(),
            sa.ForeignKey("influencer_listings.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column("niche_id", sa.String(), sa.ForeignKey("niches.id", ondelete="CASCADE"), primary_key=True),
    )
    op.create_index("ix_influencer_listing_niches_niche_id", "influencer_listing_niches", ["niche_id"])

    op.create_table(
        "listing_bids",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("listing_id", sa.String(), sa.ForeignKey("influencer_listings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("brand_profile_id", sa.String(), sa.ForeignKey("brand_profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("message", sa.String(length=500), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="PENDING"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_listing_bids_listing_status_amount", "listing_bids", ["listing_id", "status", "amount"])
    op.create_index("ix_listing_bids_brand_profile_id", "listing_bids", ["brand_profile_id"])

    # At most one winner per listing, enforced by the database as well as the service.
    op.create_index(
        "uq_listing_bids_one_accepted",
        "listing_bids",
        ["listing_id"],
        unique=True,
        postgresql_where=sa.text("status = 'ACCEPTED'"),
    )


def downgrade():
    op.drop_index("uq_listing_bids_one_accepted", table_name="listing_bids")
    op.drop_index("ix_listing_bids_brand_profile_id", table_name="listing_bids")
    op.drop_index("ix_listing_bids_listing_status_amount", table_name="listing_bids")
    op.drop_table("listing_bids")
    op.drop_index("ix_influencer_listing_niches_niche_id", table_name="influencer_listing_niches")
    op.drop_table("influencer_listing_niches")
    op.drop_index("ix_influencer_listings_status_created", table_name="influencer_listings")
    op.drop_index("ix_influencer_listings_influencer_profile_id", table_name="influencer_listings")
    op.drop_table("influencer_listings")
    op.drop_table("niches")
