"""Create catalog, item and SEO tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _item_fk(ondelete: str = 'CASCADE') -> sa.ForeignKey:
    return sa.ForeignKey('items.id', ondelete=ondelete)


def upgrade() -> None:
    """Create catalog, item and SEO tables."""
    # Catalog structure
    op.create_table(
        'catalogs',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('name', sa.String(128), nullable=False),
        sa.Column('is_virtual', sa.Boolean(), nullable=False, server_default='false'),
    )

    op.create_table(
        'categories',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('catalog_id', sa.String(128),
                  sa.ForeignKey('catalogs.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('parent_id', sa.String(128),
                  sa.ForeignKey('categories.id'), nullable=True, index=True),
        sa.Column('code', sa.String(64), nullable=False),
        sa.Column('name', sa.String(128), nullable=False),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='0'),
    )

    # Products and variations
    op.create_table(
        'items',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('code', sa.String(64), nullable=False, index=True),
        sa.Column('name', sa.String(1024), nullable=False),
        sa.Column('catalog_id', sa.String(128),
                  sa.ForeignKey('catalogs.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('category_id', sa.String(128),
                  sa.ForeignKey('categories.id'), nullable=True, index=True),
        sa.Column('main_product_id', sa.String(128), _item_fk(), nullable=True, index=True),
        sa.Column('product_type', sa.String(64), nullable=True),
        sa.Column('gtin', sa.String(64), nullable=True),
        sa.Column('vendor', sa.String(128), nullable=True),
        sa.Column('outer_id', sa.String(128), nullable=True),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('is_buyable', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('track_inventory', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('weight', sa.Numeric(18, 4), nullable=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('modified_date', sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        'property_values',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('item_id', sa.String(128), _item_fk(), nullable=False, index=True),
        sa.Column('name', sa.String(64), nullable=False),
        sa.Column('value_type', sa.String(64), nullable=False),
        sa.Column('short_text_value', sa.String(512), nullable=True),
        sa.Column('long_text_value', sa.Text(), nullable=True),
        sa.Column('decimal_value', sa.Numeric(18, 5), nullable=True),
        sa.Column('integer_value', sa.Integer(), nullable=True),
        sa.Column('boolean_value', sa.Boolean(), nullable=True),
        sa.Column('datetime_value', sa.DateTime(timezone=True), nullable=True),
        sa.Column('locale', sa.String(64), nullable=True),
        sa.Column('alias', sa.String(512), nullable=True),
    )

    op.create_table(
        'images',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('item_id', sa.String(128), _item_fk(), nullable=False, index=True),
        sa.Column('url', sa.String(2083), nullable=False),
        sa.Column('name', sa.String(1024), nullable=True),
        sa.Column('group_name', sa.String(64), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('language_code', sa.String(5), nullable=True),
    )

    op.create_table(
        'editorial_reviews',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('item_id', sa.String(128), _item_fk(), nullable=False, index=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('review_type', sa.String(128), nullable=False),
        sa.Column('language_code', sa.String(5), nullable=True),
    )

    op.create_table(
        'category_item_relations',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('item_id', sa.String(128), _item_fk(), nullable=False, index=True),
        sa.Column('catalog_id', sa.String(128),
                  sa.ForeignKey('catalogs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', sa.String(128),
                  sa.ForeignKey('categories.id'), nullable=True),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='0'),
    )

    op.create_table(
        'associations',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('item_id', sa.String(128), _item_fk(), nullable=False, index=True),
        sa.Column('association_type', sa.String(128), nullable=False),
        sa.Column('associated_item_id', sa.String(128), _item_fk(), nullable=True, index=True),
        sa.Column('associated_category_id', sa.String(128),
                  sa.ForeignKey('categories.id', ondelete='CASCADE'), nullable=True),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('quantity', sa.Integer(), nullable=True),
        sa.Column('tags', sa.String(1024), nullable=True),
        sa.Column('outer_id', sa.String(128), nullable=True),
    )

    # SEO keywords of catalogs, categories and products
    op.create_table(
        'seo_url_keywords',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('object_type', sa.String(64), nullable=False),
        sa.Column('object_id', sa.String(255), nullable=False),
        sa.Column('keyword', sa.String(255), nullable=False, index=True),
        sa.Column('store_id', sa.String(128), nullable=True),
        sa.Column('language', sa.String(5), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('meta_description', sa.String(1024), nullable=True),
        sa.Column('meta_keywords', sa.String(255), nullable=True),
        sa.Column('image_alt_description', sa.String(255), nullable=True),
    )
    op.create_index(
        'ix_seo_url_keywords_object',
        'seo_url_keywords',
        ['object_type', 'object_id'],
    )


def downgrade() -> None:
    """Drop catalog, item and SEO tables."""
    op.drop_index('ix_seo_url_keywords_object', table_name='seo_url_keywords')
    op.drop_table('seo_url_keywords')
    op.drop_table('associations')
    op.drop_table('category_item_relations')
    op.drop_table('editorial_reviews')
    op.drop_table('images')
    op.drop_table('property_values')
    op.drop_table('items')
    op.drop_table('categories')
    op.drop_table('catalogs')
