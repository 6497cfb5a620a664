"""Create org table

Revision ID: 002
Revises: 001
Create Date: 2026-10-12 09:10:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'org',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('domain', sa.Text(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        # One org per (user, domain); concurrent deliveries race on this key
        sa.UniqueConstraint('user_id', 'domain', name='uq_org_user_domain'),
        sa.CheckConstraint('domain = lower(domain)', name='ck_org_domain_lowercase')
    )

    op.create_index('idx_org_user_id', 'org', ['user_id'])


def downgrade():
    op.drop_index('idx_org_user_id', table_name='org')
    op.drop_table('org')
