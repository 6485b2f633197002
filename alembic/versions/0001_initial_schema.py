"""initial sixkul schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-12-01 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def base_columns():
    return [
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
    ]


def base_indexes(table):
    op.create_index(op.f(f'ix_{table}_id'), table, ['id'], unique=False)
    op.create_index(op.f(f'ix_{table}_created_at'), table, ['created_at'], unique=False)
    op.create_index(op.f(f'ix_{table}_is_deleted'), table, ['is_deleted'], unique=False)


def upgrade():
    op.create_table('users',
        *base_columns(),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=150), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint('id')
    )
    base_indexes('users')
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_role'), 'users', ['role'], unique=False)

    op.create_table('student_profiles',
        *base_columns(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('nis', sa.String(length=30), nullable=False),
        sa.Column('class_name', sa.String(length=50), nullable=False),
        sa.Column('major', sa.String(length=100), nullable=False),
        sa.Column('phone_number', sa.String(length=20), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id')
    )
    base_indexes('student_profiles')
    op.create_index(op.f('ix_student_profiles_nis'), 'student_profiles', ['nis'], unique=True)

    op.create_table('pembina_profiles',
        *base_columns(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('nip', sa.String(length=30), nullable=False),
        sa.Column('expertise', sa.String(length=255), nullable=True),
        sa.Column('phone_number', sa.String(length=20), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id')
    )
    base_indexes('pembina_profiles')
    op.create_index(op.f('ix_pembina_profiles_nip'), 'pembina_profiles', ['nip'], unique=True)

    op.create_table('extracurriculars',
        *base_columns(),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('logo_url', sa.String(length=500), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('pembina_id', sa.Uuid(), nullable=True),
        sa.ForeignKeyConstraint(['pembina_id'], ['pembina_profiles.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    base_indexes('extracurriculars')
    op.create_index(op.f('ix_extracurriculars_name'), 'extracurriculars', ['name'], unique=False)
    op.create_index(op.f('ix_extracurriculars_category'), 'extracurriculars', ['category'], unique=False)
    op.create_index(op.f('ix_extracurriculars_status'), 'extracurriculars', ['status'], unique=False)
    op.create_index(op.f('ix_extracurriculars_pembina_id'), 'extracurriculars', ['pembina_id'], unique=False)

    op.create_table('schedules',
        *base_columns(),
        sa.Column('extracurricular_id', sa.Uuid(), nullable=False),
        sa.Column('day_of_week', sa.String(length=10), nullable=False),
        sa.Column('start_time', sa.String(length=5), nullable=False),
        sa.Column('end_time', sa.String(length=5), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(['extracurricular_id'], ['extracurriculars.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    base_indexes('schedules')
    op.create_index(op.f('ix_schedules_extracurricular_id'), 'schedules', ['extracurricular_id'], unique=False)

    op.create_table('sessions',
        *base_columns(),
        sa.Column('extracurricular_id', sa.Uuid(), nullable=False),
        sa.Column('schedule_id', sa.Uuid(), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.String(length=5), nullable=False),
        sa.Column('end_time', sa.String(length=5), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_cancelled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(['extracurricular_id'], ['extracurriculars.id'], ),
        sa.ForeignKeyConstraint(['schedule_id'], ['schedules.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    base_indexes('sessions')
    op.create_index(op.f('ix_sessions_extracurricular_id'), 'sessions', ['extracurricular_id'], unique=False)
    op.create_index(op.f('ix_sessions_schedule_id'), 'sessions', ['schedule_id'], unique=False)
    op.create_index(op.f('ix_sessions_date'), 'sessions', ['date'], unique=False)

    op.create_table('enrollments',
        *base_columns(),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('extracurricular_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('joined_at', sa.DateTime(), nullable=False),
        sa.Column('academic_year', sa.String(length=10), nullable=False),
        sa.ForeignKeyConstraint(['student_id'], ['student_profiles.id'], ),
        sa.ForeignKeyConstraint(['extracurricular_id'], ['extracurriculars.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    base_indexes('enrollments')
    op.create_index(op.f('ix_enrollments_student_id'), 'enrollments', ['student_id'], unique=False)
    op.create_index(op.f('ix_enrollments_extracurricular_id'), 'enrollments', ['extracurricular_id'], unique=False)
    op.create_index(op.f('ix_enrollments_status'), 'enrollments', ['status'], unique=False)

    op.create_table('attendances',
        *base_columns(),
        sa.Column('enrollment_id', sa.Uuid(), nullable=False),
        sa.Column('session_id', sa.Uuid(), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_locked', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.ForeignKeyConstraint(['enrollment_id'], ['enrollments.id'], ),
        sa.ForeignKeyConstraint(['session_id'], ['sessions.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('enrollment_id', 'date', name='uq_attendance_enrollment_date')
    )
    base_indexes('attendances')
    op.create_index(op.f('ix_attendances_enrollment_id'), 'attendances', ['enrollment_id'], unique=False)
    op.create_index(op.f('ix_attendances_session_id'), 'attendances', ['session_id'], unique=False)
    op.create_index(op.f('ix_attendances_date'), 'attendances', ['date'], unique=False)

    op.create_table('announcements',
        *base_columns(),
        sa.Column('scope', sa.String(length=20), nullable=False),
        sa.Column('extracurricular_id', sa.Uuid(), nullable=True),
        sa.Column('author_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(['extracurricular_id'], ['extracurriculars.id'], ),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    base_indexes('announcements')
    op.create_index(op.f('ix_announcements_scope'), 'announcements', ['scope'], unique=False)
    op.create_index(op.f('ix_announcements_extracurricular_id'), 'announcements', ['extracurricular_id'], unique=False)
    op.create_index(op.f('ix_announcements_author_id'), 'announcements', ['author_id'], unique=False)

    op.create_table('notifications',
        *base_columns(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('enrollment_id', sa.Uuid(), nullable=True),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['enrollment_id'], ['enrollments.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    base_indexes('notifications')
    op.create_index(op.f('ix_notifications_user_id'), 'notifications', ['user_id'], unique=False)
    op.create_index(op.f('ix_notifications_is_read'), 'notifications', ['is_read'], unique=False)

    op.create_table('student_preferences',
        *base_columns(),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('notify_announcements', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('notify_schedule_changes', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('notify_attendance', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('schedule_default_view', sa.String(length=20), nullable=False, server_default='date'),
        sa.Column('schedule_range_days', sa.Integer(), nullable=False, server_default='7'),
        sa.ForeignKeyConstraint(['student_id'], ['student_profiles.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('student_id')
    )
    base_indexes('student_preferences')


def downgrade():
    for table in (
        'student_preferences', 'notifications', 'announcements', 'attendances', 'enrollments',
        'sessions', 'schedules', 'extracurriculars', 'pembina_profiles', 'student_profiles', 'users',
    ):
        op.drop_table(table)
