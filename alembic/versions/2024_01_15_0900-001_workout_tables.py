"""Create users, routines, workout sessions and exercise sets

Revision ID: 001
Revises:
Create Date: 2024-01-15 09:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
import sqlmodel
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

AutoString = sqlmodel.sql.sqltypes.AutoString

session_status = sa.Enum('ACTIVE', 'PAUSED', 'COMPLETED', 'CANCELLED', name='sessionstatus')
set_type = sa.Enum('NORMAL', 'WARMUP', 'DROPSET', 'FAILURE', name='settype')


def upgrade() -> None:
    """Create the workout tables."""
    op.create_table('users', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', AutoString(length=255), nullable=False),
        sa.Column('full_name', AutoString(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table('routines', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('name', AutoString(length=120), nullable=False),
        sa.Column('description', AutoString(length=1000), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_routines_user_id'), 'routines', ['user_id'])

    op.create_table('routine_exercises', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('routine_id', sa.Integer(), nullable=False),
        sa.Column('exercise_id', AutoString(length=64), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('target_sets', sa.Integer(), nullable=False),
        sa.Column('target_reps', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['routine_id'], ['routines.id']),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_routine_exercises_routine_id'), 'routine_exercises', ['routine_id'])

    op.create_table('workout_sessions', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('routine_id', sa.Integer(), nullable=True),
        sa.Column('name', AutoString(length=200), nullable=False),
        sa.Column('status', session_status, nullable=False),
        sa.Column('started_at', sa.DateTime(), nullable=False),
        sa.Column('paused_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('paused_seconds', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total_duration_seconds', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('notes', AutoString(length=1000), nullable=True),
        sa.Column('location', AutoString(length=200), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['routine_id'], ['routines.id']),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_workout_sessions_user_id'), 'workout_sessions', ['user_id'])
    op.create_index(op.f('ix_workout_sessions_routine_id'), 'workout_sessions', ['routine_id'])
    op.create_index(op.f('ix_workout_sessions_status'), 'workout_sessions', ['status'])

    op.create_table('exercise_sets', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.Integer(), nullable=False),
        sa.Column('exercise_id', AutoString(length=64), nullable=False),
        sa.Column('set_number', sa.Integer(), nullable=False),
        sa.Column('set_type', set_type, nullable=False),
        sa.Column('weight_kg', sa.Float(), nullable=True),
        sa.Column('reps_completed', sa.Integer(), nullable=False),
        sa.Column('rpe_score', sa.Integer(), nullable=True),
        sa.Column('notes', AutoString(length=500), nullable=True),
        sa.Column('rest_duration_seconds', sa.Integer(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.ForeignKeyConstraint(['session_id'], ['workout_sessions.id']),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_exercise_sets_session_id'), 'exercise_sets', ['session_id'])
    op.create_index(op.f('ix_exercise_sets_exercise_id'), 'exercise_sets', ['exercise_id'])


def downgrade() -> None:
    """Drop the workout tables."""
    op.drop_index(op.f('ix_exercise_sets_exercise_id'), table_name='exercise_sets')
    op.drop_index(op.f('ix_exercise_sets_session_id'), table_name='exercise_sets')
    op.drop_table('exercise_sets')
    op.drop_index(op.f('ix_workout_sessions_status'), table_name='workout_sessions')
    op.drop_index(op.f('ix_workout_sessions_routine_id'), table_name='workout_sessions')
    op.drop_index(op.f('ix_workout_sessions_user_id'), table_name='workout_sessions')
    op.drop_table('workout_sessions')
    op.drop_index(op.f('ix_routine_exercises_routine_id'), table_name='routine_exercises')
    op.drop_table('routine_exercises')
    op.drop_index(op.f('ix_routines_user_id'), table_name='routines')
    op.drop_table('routines')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
    session_status.drop(op.get_bind(), checkfirst=True)
    set_type.drop(op.get_bind(), checkfirst=True)
