"""create_inventory_items

Revision ID: e91a3b7c2f64
Revises: c47d9e0f5a28
Create Date: 2026-10-05 10:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = 'e91a3b7c2f64'
down_revision: Union[str, None] = 'c47d9e0f5a28'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create inventory_items and link scan_results to it."""
    op.create_table(
        'inventory_items',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column(
            'org_id',
            UUID(as_uuid=True),
            sa.ForeignKey('organizations.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('bin_number', sa.String(length=50), nullable=False, server_default=''),
        sa.Column('rack_number', sa.String(length=50), nullable=False, server_default=''),
        sa.Column('platform', sa.String(length=50), nullable=False, server_default=''),
        sa.Column(
            'status',
            sa.Enum('pending', 'completed', 'sold', name='inventory_status'),
            nullable=False,
            server_default='pending',
        ),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('par_level', sa.Integer(), nullable=True),
        sa.Column('cost', sa.Float(), nullable=True),
        sa.Column('sold_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('sold_price', sa.Float(), nullable=True),
        sa.Column('ship_by_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('shipper_qr_code', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_inventory_items_org_id', 'inventory_items', ['org_id'])

    op.add_column(
        'scan_results',
        sa.Column(
            'inventory_item_id',
            UUID(as_uuid=True),
            sa.ForeignKey('inventory_items.id', ondelete='SET NULL'),
            nullable=True,
        ),
    )
    op.create_index('ix_scan_results_inventory_item_id', 'scan_results', ['inventory_item_id'])


def downgrade() -> None:
    """Drop inventory_items and the scan result link."""
    op.drop_index('ix_scan_results_inventory_item_id', table_name='scan_results')
    op.drop_column('scan_results', 'inventory_item_id')
    op.drop_index('ix_inventory_items_org_id', table_name='inventory_items')
    op.drop_table('inventory_items')
    sa.Enum(name='inventory_status').drop(op.get_bind(), checkfirst=True)
