"""create account economy, daily color, attempt, modifier, leaderboard and settlement tables

Revision ID: a1c7e5d2b9f0
Revises:
Create Date: 2026-10-17 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a1c7e5d2b9f0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'account' not in existing_tables:
        op.create_table(
            'account',
            sa.Column('id', sa.String(length=64), primary_key=True),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('points', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('level', sa.Integer(), nullable=False, server_default='1'),
            sa.Column('credits', sa.Integer(), nullable=False, server_default='0'),
        )
        op.create_index('ix_account_username', 'account', ['username'], unique=True)
    else:
        # Account table belongs to the account service; only add the economy columns
        cols = {c['name'] for c in insp.get_columns('account')}
        with op.batch_alter_table('account') as batch_op:
            if 'points' not in cols:
                batch_op.add_column(sa.Column('points', sa.Integer(), nullable=False, server_default='0'))
            if 'level' not in cols:
                batch_op.add_column(sa.Column('level', sa.Integer(), nullable=False, server_default='1'))
            if 'credits' not in cols:
                batch_op.add_column(sa.Column('credits', sa.Integer(), nullable=False, server_default='0'))

    if 'daily_color' not in existing_tables:
        op.create_table(
            'daily_color',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('date', sa.Date(), nullable=False),
            sa.Column('color_name', sa.String(length=128), nullable=False),
            sa.Column('r', sa.Integer(), nullable=False),
            sa.Column('g', sa.Integer(), nullable=False),
            sa.Column('b', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_daily_color_date', 'daily_color', ['date'], unique=True)

    if 'daily_attempt' not in existing_tables:
        op.create_table(
            'daily_attempt',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.String(length=64), nullable=False),
            sa.Column('date', sa.Date(), nullable=False),
            sa.Column('attempt_number', sa.Integer(), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False),
            sa.Column('submitted_r', sa.Integer(), nullable=False),
            sa.Column('submitted_g', sa.Integer(), nullable=False),
            sa.Column('submitted_b', sa.Integer(), nullable=False),
            sa.Column('target_r', sa.Integer(), nullable=False),
            sa.Column('target_g', sa.Integer(), nullable=False),
            sa.Column('target_b', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.UniqueConstraint('user_id', 'date', 'attempt_number', name='uq_daily_attempt_user_date_number'),
            sa.CheckConstraint('score >= 0 AND score <= 100', name='ck_daily_attempt_score'),
            sa.CheckConstraint('attempt_number >= 1', name='ck_daily_attempt_number'),
        )
        op.create_index('ix_daily_attempt_user_id', 'daily_attempt', ['user_id'])
        op.create_index('ix_daily_attempt_date', 'daily_attempt', ['date'])

    if 'daily_attempt_modifier' not in existing_tables:
        op.create_table(
            'daily_attempt_modifier',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.String(length=64), nullable=False),
            sa.Column('date', sa.Date(), nullable=False),
            sa.Column('extra_attempts', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
            sa.UniqueConstraint('user_id', 'date', name='uq_daily_attempt_modifier_user_date'),
            sa.CheckConstraint('extra_attempts >= 0', name='ck_daily_attempt_modifier_extra'),
        )

    if 'daily_leaderboard' not in existing_tables:
        op.create_table(
            'daily_leaderboard',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.String(length=64), nullable=False),
            sa.Column('date', sa.Date(), nullable=False),
            sa.Column('best_score', sa.Integer(), nullable=False),
            sa.Column('attempts_used', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
            sa.UniqueConstraint('user_id', 'date', name='uq_daily_leaderboard_user_date'),
        )
        op.create_index('ix_daily_leaderboard_date_score', 'daily_leaderboard', ['date', 'best_score'])

    if 'daily_settlement' not in existing_tables:
        op.create_table(
            'daily_settlement',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.String(length=64), nullable=False),
            sa.Column('date', sa.Date(), nullable=False),
            sa.Column('points_awarded', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('credits_awarded', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('levels_gained', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.UniqueConstraint('user_id', 'date', name='uq_daily_settlement_user_date'),
        )


def downgrade():
    op.drop_table('daily_settlement')
    op.drop_index('ix_daily_leaderboard_date_score', table_name='daily_leaderboard')
    op.drop_table('daily_leaderboard')
    op.drop_table('daily_attempt_modifier')
    op.drop_index('ix_daily_attempt_date', table_name='daily_attempt')
    op.drop_index('ix_daily_attempt_user_id', table_name='daily_attempt')
    op.drop_table('daily_attempt')
    op.drop_index('ix_daily_color_date', table_name='daily_color')
    op.drop_table('daily_color')
