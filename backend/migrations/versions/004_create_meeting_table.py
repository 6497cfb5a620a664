"""Create meeting table

Revision ID: 004
Revises: 003
Create Date: 2026-10-12 09:30:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '004'
down_revision = '003'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'meeting',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('org_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('meeting_type', sa.Text(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['org_id'], ['org.id'], ondelete='SET NULL'),
        sa.CheckConstraint(
            "meeting_type IN ('QBR', 'ANNUAL_REVIEW', 'WEEKLY_CHECKIN', 'DEAL_REVIEW', 'OTHER')",
            name='ck_meeting_type'
        )
    )

    op.create_index('idx_meeting_user_created', 'meeting', ['user_id', 'created_at'])

    # Case-insensitive title lookup (newest first) used to group a thread's replies
    op.execute(
        'CREATE INDEX idx_meeting_user_title_lower ON meeting (user_id, lower(title), created_at DESC)'
    )


def downgrade():
    op.execute('DROP INDEX IF EXISTS idx_meeting_user_title_lower')
    op.drop_index('idx_meeting_user_created', table_name='meeting')
    op.drop_table('meeting')
