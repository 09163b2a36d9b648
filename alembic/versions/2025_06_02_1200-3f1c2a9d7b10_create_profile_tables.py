"""create profile, subscription and analysis tables

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2025-06-02 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = '3f1c2a9d7b10'
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('display_name', sa.String(), nullable=True),
        sa.Column('photo_url', sa.String(), nullable=True),
        sa.Column('hashed_password', sa.String(), nullable=True),
        sa.Column('google_id', sa.String(), nullable=True),
        sa.Column('auth_provider', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('google_id')
    )
    op.create_table('subscriptions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('plan_name', sa.String(), nullable=False),
        sa.Column('analyses_remaining', sa.Integer(), nullable=False),
        sa.Column('advice_chats_remaining', sa.Integer(), nullable=False),
        sa.Column('instagram_credit_claimed', sa.Boolean(), nullable=False),
        sa.CheckConstraint('analyses_remaining >= 0', name='ck_subscriptions_analyses_non_negative'),
        sa.CheckConstraint('advice_chats_remaining >= 0', name='ck_subscriptions_advice_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id')
    )
    op.create_index(op.f('ix_subscriptions_id'), 'subscriptions', ['id'], unique=False)
    op.create_table('analysis_results',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('face_shape', sa.String(), nullable=False),
        sa.Column('face_shape_description', sa.Text(), nullable=False),
        sa.Column('feature_ratings', sa.JSON(), nullable=False),
        sa.Column('image_urls', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_analysis_results_user_id'), 'analysis_results', ['user_id'], unique=False)
    op.create_index(op.f('ix_analysis_results_created_at'), 'analysis_results', ['created_at'], unique=False)
    op.create_table('processed_sessions',
        sa.Column('session_id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('plan_key', sa.String(), nullable=False),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('session_id')
    )

def downgrade() -> None:
    op.drop_table('processed_sessions')
    op.drop_index(op.f('ix_analysis_results_created_at'), table_name='analysis_results')
    op.drop_index(op.f('ix_analysis_results_user_id'), table_name='analysis_results')
    op.drop_table('analysis_results')
    op.drop_index(op.f('ix_subscriptions_id'), table_name='subscriptions')
    op.drop_table('subscriptions')
    op.drop_table('users')
