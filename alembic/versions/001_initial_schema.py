"""Initial schema

Revision ID: 001
Revises: 
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Profiles table (id mirrors the Supabase auth user id)
    op.create_table(
        'profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('username', sa.String(), nullable=True, unique=True),
        sa.Column('role', sa.Enum('fan', 'creator', 'admin', name='userrole'), nullable=False, server_default='fan'),
        sa.Column('stripe_customer_id', sa.String(), nullable=True),
        sa.Column('stripe_account_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_profiles_email', 'profiles', ['email'], unique=True)
    op.create_index('ix_profiles_stripe_customer_id', 'profiles', ['stripe_customer_id'])

    # Transactions table
    op.create_table(
        'transactions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('fan_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('creator_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('type', sa.Enum('Subscription', 'Tip', 'PPV Message', 'PPV Post', name='transactiontype'), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('platform_fee', sa.Integer(), nullable=False),
        sa.Column('creator_payout', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='usd'),
        sa.Column('status', sa.Enum('Pending', 'Cleared', 'Failed', 'Refunded', name='transactionstatus'), nullable=False, server_default='Pending'),
        sa.Column('related_content_id', sa.String(), nullable=True),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('payment_gateway_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['fan_id'], ['profiles.id'], ),
        sa.ForeignKeyConstraint(['creator_id'], ['profiles.id'], ),
        sa.CheckConstraint('platform_fee + creator_payout = amount', name='ck_transactions_split'),
    )
    op.create_index('ix_transactions_fan_id', 'transactions', ['fan_id'])
    op.create_index('ix_transactions_creator_id', 'transactions', ['creator_id'])
    op.create_index('ix_transactions_status', 'transactions', ['status'])
    op.create_index('ix_transactions_payment_gateway_id', 'transactions', ['payment_gateway_id'], unique=True)
    op.create_index('ix_transactions_created_at', 'transactions', ['created_at'])

    # Subscriptions table (id is the Stripe subscription id)
    op.create_table(
        'subscriptions',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('fan_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('creator_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('tier_id', sa.String(), nullable=False),
        sa.Column('status', sa.Enum('active', 'canceled', 'expired', name='subscriptionstatus'), nullable=False, server_default='active'),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('next_billing_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['fan_id'], ['profiles.id'], ),
        sa.ForeignKeyConstraint(['creator_id'], ['profiles.id'], ),
    )
    op.create_index('ix_subscriptions_fan_id', 'subscriptions', ['fan_id'])
    op.create_index('ix_subscriptions_creator_id', 'subscriptions', ['creator_id'])
    op.create_index('ix_subscriptions_status', 'subscriptions', ['status'])

    # Stripe events table
    op.create_table(
        'stripe_events',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('stripe_event_id', sa.String(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('payload', postgresql.JSON(astext_type=sa.Text()), nullable=False),
        sa.Column('processed', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('received_at', sa.DateTime(), nullable=False),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_stripe_events_stripe_event_id', 'stripe_events', ['stripe_event_id'], unique=True)
    op.create_index('ix_stripe_events_type', 'stripe_events', ['type'])
    op.create_index('ix_stripe_events_processed', 'stripe_events', ['processed'])
    op.create_index('ix_stripe_events_received_at', 'stripe_events', ['received_at'])

    # Messaging tables
    op.create_table(
        'conversations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('participant_a', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('participant_b', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['participant_a'], ['profiles.id'], ),
        sa.ForeignKeyConstraint(['participant_b'], ['profiles.id'], ),
    )
    op.create_index('ix_conversations_participant_a', 'conversations', ['participant_a'])
    op.create_index('ix_conversations_participant_b', 'conversations', ['participant_b'])

    op.create_table(
        'messages',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('conversation_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('sender_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('receiver_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('price', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['conversation_id'], ['conversations.id'], ),
        sa.ForeignKeyConstraint(['sender_id'], ['profiles.id'], ),
        sa.ForeignKeyConstraint(['receiver_id'], ['profiles.id'], ),
    )
    op.create_index('ix_messages_conversation_id', 'messages', ['conversation_id'])
    op.create_index('ix_messages_receiver_id', 'messages', ['receiver_id'])
    op.create_index('ix_messages_created_at', 'messages', ['created_at'])

    # Galleries table
    op.create_table(
        'galleries',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('creator_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('content_ids', postgresql.JSON(astext_type=sa.Text()), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['creator_id'], ['profiles.id'], ),
    )
    op.create_index('ix_galleries_creator_id', 'galleries', ['creator_id'])


def downgrade() -> None:
    op.drop_table('galleries')
    op.drop_table('messages')
    op.drop_table('conversations')
    op.drop_table('stripe_events')
    op.drop_table('subscriptions')
    op.drop_table('transactions')
    op.drop_table('profiles')
    op.execute('DROP TYPE IF EXISTS subscriptionstatus')
    op.execute('DROP TYPE IF EXISTS transactionstatus')
    op.execute('DROP TYPE IF EXISTS transactiontype')
    op.execute('DROP TYPE IF EXISTS userrole')
