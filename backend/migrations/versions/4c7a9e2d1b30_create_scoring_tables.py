"""create user, team, match and foul tables

Revision ID: 4c7a9e2d1b30
Revises:
Create Date: 2026-10-17 09:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c7a9e2d1b30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_user_username', 'user', ['username'], unique=True)

    if 'team' not in existing_tables:
        op.create_table(
            'team',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=128), nullable=False),
            sa.Column('short_code', sa.String(length=8), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('name'),
        )

    if 'match' not in existing_tables:
        op.create_table(
            'match',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('sport', sa.String(length=32), nullable=False),
            sa.Column('status', sa.String(length=16), nullable=False),
            sa.Column('team_a_id', sa.Integer(), nullable=False),
            sa.Column('team_b_id', sa.Integer(), nullable=False),
            sa.Column('winner_id', sa.Integer(), nullable=True),
            sa.Column('score_a', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('score_b', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('period', sa.Integer(), nullable=True),
            sa.Column('max_sets', sa.Integer(), nullable=True),
            sa.Column('current_server', sa.String(length=1), nullable=True),
            sa.Column('toss_winner', sa.String(length=1), nullable=True),
            sa.Column('toss_decision', sa.String(length=32), nullable=True),
            sa.Column('venue', sa.String(length=128), nullable=True),
            sa.Column('scheduled_at', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('cricket_data', sa.Text(), nullable=True),
            sa.Column('current_set_data', sa.Text(), nullable=True),
            sa.Column('set_details_data', sa.Text(), nullable=True),
            sa.Column('score_deltas_data', sa.Text(), nullable=True),
            sa.Column('version_id', sa.Integer(), nullable=False),
            sa.ForeignKeyConstraint(['team_a_id'], ['team.id']),
            sa.ForeignKeyConstraint(['team_b_id'], ['team.id']),
            sa.ForeignKeyConstraint(['winner_id'], ['team.id']),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_match_sport', 'match', ['sport'])
        op.create_index('ix_match_status', 'match', ['status'])

    if 'foul' not in existing_tables:
        op.create_table(
            'foul',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('match_id', sa.Integer(), nullable=False),
            sa.Column('team', sa.String(length=1), nullable=False),
            sa.Column('foul_type', sa.String(length=32), nullable=False),
            sa.Column('player_name', sa.String(length=128), nullable=False),
            sa.Column('jersey_number', sa.Integer(), nullable=True),
            sa.Column('game_time', sa.Integer(), nullable=True),
            sa.Column('reason', sa.String(length=256), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['match_id'], ['match.id']),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_foul_match_id', 'foul', ['match_id'])


def downgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    # Children first
    if 'foul' in existing_tables:
        op.drop_index('ix_foul_match_id', table_name='foul')
        op.drop_table('foul')
    if 'match' in existing_tables:
        op.drop_index('ix_match_status', table_name='match')
        op.drop_index('ix_match_sport', table_name='match')
        op.drop_table('match')
    if 'team' in existing_tables:
        op.drop_table('team')
    if 'user' in existing_tables:
        op.drop_index('ix_user_username', table_name='user')
        op.drop_table('user')
