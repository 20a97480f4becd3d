"""create user table with rating columns

Revision ID: 5c2d7e9a1b40
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2d7e9a1b40'
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
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
            sa.Column('rating', sa.Integer(), nullable=False, server_default='1000'),
            sa.Column('games_played', sa.Integer(), nullable=False, server_default='0'),
        )
        op.create_index('ix_user_username', 'user', ['username'], unique=True)
        return

    # Older installs already have the user table; only add the rating columns
    user_cols = {c['name'] for c in insp.get_columns('user')}
    if 'rating' not in user_cols:
        op.add_column('user', sa.Column('rating', sa.Integer(), nullable=False, server_default='1000'))
    if 'games_played' not in user_cols:
        op.add_column('user', sa.Column('games_played', sa.Integer(), nullable=False, server_default='0'))


def downgrade():
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
