"""create product_gallery_images table

Revision ID: b7c1d2e3f4a5
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b7c1d2e3f4a5'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'product_gallery_images',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.String(length=100), nullable=False),
        sa.Column('angle', sa.String(length=20), nullable=False),
        sa.Column('image_url', sa.String(length=1024), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('product_id', 'angle', name='uq_gallery_product_angle'),
    )
    op.create_index(
        'ix_product_gallery_images_product_id',
        'product_gallery_images',
        ['product_id'],
    )


def downgrade():
    op.drop_index('ix_product_gallery_images_product_id', table_name='product_gallery_images')
    op.drop_table('product_gallery_images')
