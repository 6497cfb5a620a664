"""Create email_message table

Revision ID: 005
Revises: 004
Create Date: 2026-10-12 09:40:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '005'
down_revision = '004'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'email_message',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('message_id', sa.Text(), nullable=False),
        sa.Column('thread_id', sa.Text(), nullable=True),
        sa.Column('from_address', sa.Text(), nullable=False),
        sa.Column('to_addresses', postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('cc_addresses', postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('subject', sa.Text(), nullable=False),
        sa.Column('text_body', sa.Text(), nullable=True),
        sa.Column('html_body', sa.Text(), nullable=True),
        sa.Column('sent_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('received_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('meeting_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('deal_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['meeting_id'], ['meeting.id'], ondelete='SET NULL'),
        # Webhook retries are detected through this key
        sa.UniqueConstraint('user_id', 'message_id', name='uq_email_message_user_message_id')
    )

    op.create_index('idx_email_message_user_sent', 'email_message', ['user_id', 'sent_at'])
    op.create_index('idx_email_message_thread', 'email_message', ['user_id', 'thread_id'])


def downgrade():
    op.drop_index('idx_email_message_thread', table_name='email_message')
    op.drop_index('idx_email_message_user_sent', table_name='email_message')
    op.drop_table('email_message')
