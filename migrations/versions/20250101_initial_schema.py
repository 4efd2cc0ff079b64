"""
Initial Chon schema.

Creates accounts, players, competitions with questions and prize tiers,
points and wallet ledgers, notifications, app versions and advertisements.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = 'chon_initial_20250101'
down_revision = None
branch_labels = None
depends_on = None


def _ts(name, nullable=False):
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def _timestamps():
    return [_ts('created_at'), _ts('updated_at')]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(320), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='editor'),
        _ts('created_at', nullable=True),
        _ts('updated_at', nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'personal_access_tokens',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token_id', sa.String(64), nullable=False, unique=True),
        sa.Column('token_hash', sa.Text(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('last_four', sa.String(4), nullable=True),
        _ts('created_at'),
        _ts('last_used_at', nullable=True),
        _ts('revoked_at', nullable=True),
    )
    op.create_index('idx_pat_user_created', 'personal_access_tokens', ['user_id', 'created_at'])

    op.create_table(
        'players',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('whatsapp_number', sa.String(32), nullable=False, unique=True),
        sa.Column('nickname', sa.String(100), nullable=True),
        sa.Column('total_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('level', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('experience_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('language', sa.String(5), nullable=False, server_default='en'),
        sa.Column('fcm_token', sa.Text(), nullable=True),
        _ts('joined_at'),
        _ts('updated_at'),
    )
    op.create_index('idx_players_total_score', 'players', ['total_score'])

    op.create_table(
        'player_otps',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('players.id', ondelete='CASCADE'), nullable=False),
        sa.Column('otp_code', sa.String(10), nullable=False),
        sa.Column('purpose', sa.String(20), nullable=False, server_default='login'),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        _ts('expires_at'),
        _ts('created_at'),
    )
    op.create_index('idx_player_otps_player_purpose', 'player_otps', ['player_id', 'purpose'])

    op.create_table(
        'competitions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('name_kurdish', sa.String(255), nullable=True),
        sa.Column('name_arabic', sa.String(255), nullable=True),
        sa.Column('name_kurmanji', sa.String(255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('description_kurdish', sa.Text(), nullable=True),
        sa.Column('description_arabic', sa.Text(), nullable=True),
        sa.Column('description_kurmanji', sa.Text(), nullable=True),
        sa.Column('entry_fee', sa.Numeric(10, 2), nullable=False, server_default='0'),
        _ts('open_time'),
        _ts('start_time'),
        _ts('end_time'),
        sa.Column('max_users', sa.Integer(), nullable=False, server_default='100'),
        sa.Column('game_type', sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_competitions_schedule', 'competitions', ['open_time', 'start_time', 'end_time'])
    op.create_index('idx_competitions_game_type', 'competitions', ['game_type'])

    op.create_table(
        'questions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('question_text_kurdish', sa.Text(), nullable=True),
        sa.Column('question_text_arabic', sa.Text(), nullable=True),
        sa.Column('question_text_kurmanji', sa.Text(), nullable=True),
        sa.Column('question_type', sa.String(30), nullable=False, server_default='multi_choice'),
        sa.Column('options', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('options_kurdish', postgresql.JSONB(), nullable=True),
        sa.Column('options_arabic', postgresql.JSONB(), nullable=True),
        sa.Column('options_kurmanji', postgresql.JSONB(), nullable=True),
        sa.Column('correct_answer', sa.Text(), nullable=False),
        sa.Column('correct_answer_kurdish', sa.Text(), nullable=True),
        sa.Column('correct_answer_arabic', sa.Text(), nullable=True),
        sa.Column('correct_answer_kurmanji', sa.Text(), nullable=True),
        sa.Column('level', sa.String(10), nullable=False, server_default='medium'),
        *_timestamps(),
    )
    op.create_index('idx_questions_type_level', 'questions', ['question_type', 'level'])

    op.create_table(
        'competitions_questions',
        sa.Column('competition_id', sa.Integer(), sa.ForeignKey('competitions.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('question_id', sa.Integer(), sa.ForeignKey('questions.id', ondelete='CASCADE'), primary_key=True),
        _ts('created_at', nullable=True),
    )

    op.create_table(
        'prize_tiers',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('competition_id', sa.Integer(), sa.ForeignKey('competitions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('rank_from', sa.Integer(), nullable=False),
        sa.Column('rank_to', sa.Integer(), nullable=False),
        sa.Column('prize_type', sa.String(20), nullable=False, server_default='cash'),
        sa.Column('prize_value', sa.Numeric(12, 2), nullable=True),
        sa.Column('item_details', postgresql.JSONB(), nullable=True),
        _ts('created_at'),
    )

    op.create_table(
        'competition_leaderboards',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('competition_id', sa.Integer(), sa.ForeignKey('competitions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('players.id', ondelete='CASCADE'), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('rank', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('competition_id', 'player_id', name='uq_competition_leaderboards_player'),
    )
    op.create_index('idx_competition_leaderboards_rank', 'competition_leaderboards', ['competition_id', 'rank'])

    op.create_table(
        'competition_player_answers',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('players.id', ondelete='CASCADE'), nullable=False),
        sa.Column('competition_id', sa.Integer(), sa.ForeignKey('competitions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_id', sa.Integer(), sa.ForeignKey('questions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('player_answer', sa.Text(), nullable=False),
        sa.Column('correct_answer', sa.Text(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False),
        _ts('answered_at'),
        *_timestamps(),
        sa.UniqueConstraint('player_id', 'competition_id', 'question_id', name='uq_competition_player_answers_question'),
    )
    op.create_index(
        'idx_player_answers_comp_time_player',
        'competition_player_answers',
        ['competition_id', 'answered_at', 'player_id'],
    )

    op.create_table(
        'player_points_balance',
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('players.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('current_balance', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_earned', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_spent', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
    )

    op.create_table(
        'points_transactions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('players.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('balance_before', sa.Integer(), nullable=False),
        sa.Column('balance_after', sa.Integer(), nullable=False),
        sa.Column('reference_type', sa.String(30), nullable=True),
        sa.Column('reference_id', sa.String(255), nullable=True),
        sa.Column('metadata', postgresql.JSONB(), nullable=True),
        _ts('created_at'),
    )
    op.create_index('idx_points_transactions_player_created', 'points_transactions', ['player_id', 'created_at'])
    op.create_index('idx_points_transactions_reference', 'points_transactions', ['reference_type', 'reference_id'])

    op.create_table(
        'points_packages',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('points_amount', sa.Integer(), nullable=False),
        sa.Column('price_iqd', sa.Integer(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
    )

    op.create_table(
        'player_wallets',
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('players.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('balance', sa.Numeric(12, 2), nullable=False, server_default='0'),
        _ts('last_updated'),
    )

    op.create_table(
        'payment_methods',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('name_kurdish', sa.String(255), nullable=True),
        sa.Column('name_arabic', sa.String(255), nullable=True),
        sa.Column('name_kurmanji', sa.String(255), nullable=True),
        sa.Column('code', sa.String(50), nullable=False, unique=True),
        sa.Column('provider', sa.String(100), nullable=True),
        sa.Column('icon', sa.String(255), nullable=True),
        sa.Column('config', postgresql.JSONB(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('supports_deposit', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('supports_withdrawal', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('min_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('max_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('fee_fixed', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('fee_percentage', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('processing_time_hours', sa.Integer(), nullable=True),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('instructions_kurdish', sa.Text(), nullable=True),
        sa.Column('instructions_arabic', sa.Text(), nullable=True),
        sa.Column('instructions_kurmanji', sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'player_payment_methods',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('players.id', ondelete='CASCADE'), nullable=False),
        sa.Column(
            'payment_method_id', sa.Integer(), sa.ForeignKey('payment_methods.id', ondelete='CASCADE'), nullable=False
        ),
        sa.Column('token', sa.String(255), nullable=True),
        sa.Column('external_id', sa.String(255), nullable=True),
        sa.Column('nickname', sa.String(255), nullable=True),
        sa.Column('details', postgresql.JSONB(), nullable=True),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.false()),
        _ts('last_used_at', nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('player_id', 'payment_method_id', 'token', name='uq_player_payment_methods_token'),
    )

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('players.id', ondelete='CASCADE'), nullable=False),
        sa.Column('competition_id', sa.Integer(), sa.ForeignKey('competitions.id', ondelete='SET NULL'), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('transaction_type', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('payment_provider', sa.String(100), nullable=True),
        sa.Column('payment_details', postgresql.JSONB(), nullable=True),
        sa.Column('reference_id', sa.String(100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_transactions_player_created', 'transactions', ['player_id', 'created_at'])
    op.create_index('idx_transactions_type_status', 'transactions', ['transaction_type', 'status'])

    op.create_table(
        'transaction_logs',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('transaction_id', sa.Integer(), sa.ForeignKey('transactions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('metadata', postgresql.JSONB(), nullable=True),
        _ts('created_at'),
    )

    op.create_table(
        'competition_registrations',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('competition_id', sa.Integer(), sa.ForeignKey('competitions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('players.id', ondelete='CASCADE'), nullable=False),
        sa.Column('transaction_id', sa.Integer(), sa.ForeignKey('transactions.id', ondelete='SET NULL'), nullable=True),
        sa.Column('registration_status', sa.String(30), nullable=False, server_default='pending_payment'),
        sa.Column('entry_fee_paid', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('is_free_entry', sa.Boolean(), nullable=False, server_default=sa.false()),
        _ts('registered_at', nullable=True),
        _ts('expires_at', nullable=True),
        sa.Column('registration_source', sa.String(20), nullable=False, server_default='mobile_app'),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('competition_id', 'player_id', name='uq_competition_registrations_player'),
    )
    op.create_index(
        'idx_competition_registrations_status',
        'competition_registrations',
        ['competition_id', 'registration_status'],
    )

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('title_kurdish', sa.String(255), nullable=True),
        sa.Column('title_arabic', sa.String(255), nullable=True),
        sa.Column('title_kurmanji', sa.String(255), nullable=True),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('message_kurdish', sa.Text(), nullable=True),
        sa.Column('message_arabic', sa.Text(), nullable=True),
        sa.Column('message_kurmanji', sa.Text(), nullable=True),
        sa.Column('type', sa.String(20), nullable=False, server_default='general'),
        sa.Column('priority', sa.String(10), nullable=False, server_default='normal'),
        sa.Column('data', postgresql.JSONB(), nullable=True),
        _ts('scheduled_at', nullable=True),
        _ts('sent_at', nullable=True),
        sa.Column('status', sa.String(10), nullable=False, server_default='pending'),
        sa.Column('api_response', postgresql.JSONB(), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_notifications_status_scheduled', 'notifications', ['status', 'scheduled_at'])
    op.create_index('idx_notifications_type', 'notifications', ['type'])

    op.create_table(
        'player_notifications',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('players.id', ondelete='CASCADE'), nullable=False),
        sa.Column('notification_id', sa.Integer(), sa.ForeignKey('notifications.id', ondelete='CASCADE'), nullable=False),
        _ts('received_at'),
        _ts('read_at', nullable=True),
        sa.Column('delivery_data', postgresql.JSONB(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('player_id', 'notification_id', name='uq_player_notifications_pair'),
    )
    op.create_index('idx_player_notifications_player_received', 'player_notifications', ['player_id', 'received_at'])
    op.create_index('idx_player_notifications_player_read', 'player_notifications', ['player_id', 'read_at'])

    op.create_table(
        'app_versions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('platform', sa.String(10), nullable=False),
        sa.Column('version', sa.String(20), nullable=False),
        sa.Column('build_number', sa.Integer(), nullable=False),
        sa.Column('app_store_url', sa.String(500), nullable=True),
        sa.Column('release_notes', sa.Text(), nullable=True),
        sa.Column('is_force_update', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        _ts('released_at', nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('platform', 'version', name='uq_app_versions_platform_version'),
    )
    op.create_index(
        'idx_app_versions_platform_active_build',
        'app_versions',
        ['platform', 'is_active', 'build_number'],
    )

    op.create_table(
        'advertisements',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('company_name', sa.String(255), nullable=False),
        sa.Column('phone_number', sa.String(32), nullable=True),
        sa.Column('image', sa.String(500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('idx_advertisements_active_created', 'advertisements', ['is_active', 'created_at'])


def downgrade() -> None:
    for table in (
        'advertisements',
        'app_versions',
        'player_notifications',
        'notifications',
        'competition_registrations',
        'transaction_logs',
        'transactions',
        'player_payment_methods',
        'payment_methods',
        'player_wallets',
        'points_packages',
        'points_transactions',
        'player_points_balance',
        'competition_player_answers',
        'competition_leaderboards',
        'prize_tiers',
        'competitions_questions',
        'questions',
        'competitions',
        'player_otps',
        'players',
        'personal_access_tokens',
        'users',
    ):
        op.drop_table(table)
