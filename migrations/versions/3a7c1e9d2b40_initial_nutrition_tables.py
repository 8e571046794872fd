"""initial nutrition tables

Revision ID: 3a7c1e9d2b40
Revises: 
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3a7c1e9d2b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    conn = op.get_bind()
    insp = sa.inspect(conn)

    if not insp.has_table('users'):
        op.create_table(
            'users',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('age', sa.Integer(), nullable=True),
            sa.Column('biological_sex', sa.String(length=20), nullable=True),
            sa.Column('height', sa.Integer(), nullable=True),
            sa.Column('weight', sa.Integer(), nullable=True),
            sa.Column('activity_level', sa.String(length=50), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
        )

    if not insp.has_table('goals'):
        op.create_table(
            'goals',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, unique=True),
            sa.Column('target_calories', sa.Integer(), nullable=True),
            sa.Column('target_protein', sa.Integer(), nullable=True),
            sa.Column('target_carbs', sa.Integer(), nullable=True),
            sa.Column('target_fat', sa.Integer(), nullable=True),
            sa.Column('macro_split', sa.String(length=50), nullable=True),
            sa.Column('goal_type', sa.String(length=50), nullable=True),
            sa.Column('pace', sa.String(length=50), nullable=True),
            sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        )

    if not insp.has_table('food_logs'):
        op.create_table(
            'food_logs',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
            sa.Column('day', sa.Date(), nullable=True),
            sa.Column('logged_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
            sa.Column('item', sa.String(length=255), nullable=False),
            sa.Column('meal_type', sa.String(length=50), nullable=True),
            sa.Column('quantity', sa.Float(), nullable=True),
            sa.Column('unit', sa.String(length=50), nullable=True),
            sa.Column('calories', sa.Integer(), nullable=True),
            sa.Column('protein', sa.Float(), nullable=True),
            sa.Column('carbs', sa.Float(), nullable=True),
            sa.Column('fat', sa.Float(), nullable=True),
            sa.Column('fiber', sa.Float(), nullable=True),
            sa.Column('sugar', sa.Float(), nullable=True),
            sa.Column('sodium', sa.Float(), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
        )
        op.create_index('ix_food_logs_user_day', 'food_logs', ['user_id', 'day'])


def downgrade():
    op.drop_index('ix_food_logs_user_day', table_name='food_logs')
    op.drop_table('food_logs')
    op.drop_table('goals')
    op.drop_table('users')
