"""create_scan_tables

Revision ID: c47d9e0f5a28
Revises: 8b2e4c6a1d33
Create Date: 2026-10-03 14:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = 'c47d9e0f5a28'
down_revision: Union[str, None] = '8b2e4c6a1d33'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create scan_sessions and scan_results tables."""
    op.create_table(
        'scan_sessions',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column(
            'status',
            sa.Enum('created', 'processing', 'done', 'failed', name='scan_status'),
            nullable=False,
            server_default='created',
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_scan_sessions_user_id', 'scan_sessions', ['user_id'])

    op.create_table(
        'scan_results',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column(
            'scan_session_id',
            UUID(as_uuid=True),
            sa.ForeignKey('scan_sessions.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('label', sa.String(length=200), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False),
        sa.Column('confidence', sa.Float(), nullable=True),
    )
    op.create_index('ix_scan_results_scan_session_id', 'scan_results', ['scan_session_id'])


def downgrade() -> None:
    """Drop scan tables."""
    op.drop_index('ix_scan_results_scan_session_id', table_name='scan_results')
    op.drop_table('scan_results')
    op.drop_index('ix_scan_sessions_user_id', table_name='scan_sessions')
    op.drop_table('scan_sessions')
    sa.Enum(name='scan_status').drop(op.get_bind(), checkfirst=True)
