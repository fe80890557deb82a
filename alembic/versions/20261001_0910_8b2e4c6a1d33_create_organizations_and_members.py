"""create_organizations_and_members

Revision ID: 8b2e4c6a1d33
Revises: 3f1c2a9d7b10
Create Date: 2026-10-01 09:10:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = '8b2e4c6a1d33'
down_revision: Union[str, None] = '3f1c2a9d7b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create organizations and org_members tables."""
    op.create_table(
        'organizations',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('invite_code', sa.String(length=6), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    # Uniqueness of invite codes is enforced here; the service retries on violation
    op.create_index('ix_organizations_invite_code', 'organizations', ['invite_code'], unique=True)

    op.create_table(
        'org_members',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('org_id', UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('role', sa.Enum('owner', 'admin', 'member', name='org_role'), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('org_id', 'user_id', name='uq_org_members_org_user'),
    )

    op.create_foreign_key(
        'org_members_org_id_fkey',
        'org_members', 'organizations',
        ['org_id'], ['id'],
        ondelete='CASCADE'
    )
    op.create_foreign_key(
        'org_members_user_id_fkey',
        'org_members', 'users',
        ['user_id'], ['id'],
        ondelete='CASCADE'
    )

    op.create_index('ix_org_members_org_id', 'org_members', ['org_id'])
    op.create_index('ix_org_members_user_id', 'org_members', ['user_id'])


def downgrade() -> None:
    """Drop org_members and organizations tables and the role enum."""
    op.drop_index('ix_org_members_user_id', table_name='org_members')
    op.drop_index('ix_org_members_org_id', table_name='org_members')
    op.drop_constraint('org_members_user_id_fkey', 'org_members', type_='foreignkey')
    op.drop_constraint('org_members_org_id_fkey', 'org_members', type_='foreignkey')
    op.drop_table('org_members')
    sa.Enum(name='org_role').drop(op.get_bind(), checkfirst=True)

    op.drop_index('ix_organizations_invite_code', table_name='organizations')
    op.drop_table('organizations')
