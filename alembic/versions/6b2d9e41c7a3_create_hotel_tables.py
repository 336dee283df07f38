"""create_hotel_tables

Revision ID: 6b2d9e41c7a3
Revises:
Create Date: 2026-10-18 11:42:07.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '6b2d9e41c7a3'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'hotel_categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('specs', sa.JSON(), nullable=False),
        sa.Column('essential_amenities', sa.JSON(), nullable=False),
        sa.Column('bed_type', sa.String(), nullable=True),
        sa.Column('max_occupancy', sa.Integer(), nullable=True),
        sa.Column('room_size', sa.String(), nullable=True),
        sa.Column('room_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('video_url', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_hotel_categories_id'), 'hotel_categories', ['id'], unique=False)
    op.create_index(op.f('ix_hotel_categories_slug'), 'hotel_categories', ['slug'], unique=True)

    op.create_table(
        'gallery_images',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('url', sa.String(), nullable=False),
        sa.Column('public_id', sa.String(), nullable=False),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('caption', sa.String(), nullable=True),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['category_id'], ['hotel_categories.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_gallery_images_id'), 'gallery_images', ['id'], unique=False)
    op.create_index(op.f('ix_gallery_images_public_id'), 'gallery_images', ['public_id'], unique=False)
    op.create_index(op.f('ix_gallery_images_category_id'), 'gallery_images', ['category_id'], unique=False)
    # Admin listing is newest first
    op.create_index(op.f('ix_gallery_images_created_at'), 'gallery_images', ['created_at'], unique=False)

    op.create_table(
        'prices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('label', sa.String(), nullable=True),
        sa.Column('hourly_hours', sa.Integer(), nullable=False),
        sa.Column('rate_cents', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['category_id'], ['hotel_categories.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_prices_id'), 'prices', ['id'], unique=False)
    op.create_index(op.f('ix_prices_category_id'), 'prices', ['category_id'], unique=False)

    op.create_table(
        'room_features',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(), nullable=False),
        sa.Column('label', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('category', sa.String(), nullable=False, server_default='general'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('key'),
    )
    op.create_index(op.f('ix_room_features_id'), 'room_features', ['id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_room_features_id'), table_name='room_features')
    op.drop_table('room_features')

    op.drop_index(op.f('ix_prices_category_id'), table_name='prices')
    op.drop_index(op.f('ix_prices_id'), table_name='prices')
    op.drop_table('prices')

    op.drop_index(op.f('ix_gallery_images_created_at'), table_name='gallery_images')
    op.drop_index(op.f('ix_gallery_images_category_id'), table_name='gallery_images')
    op.drop_index(op.f('ix_gallery_images_public_id'), table_name='gallery_images')
    op.drop_index(op.f('ix_gallery_images_id'), table_name='gallery_images')
    op.drop_table('gallery_images')

    op.drop_index(op.f('ix_hotel_categories_slug'), table_name='hotel_categories')
    op.drop_index(op.f('ix_hotel_categories_id'), table_name='hotel_categories')
    op.drop_table('hotel_categories')
