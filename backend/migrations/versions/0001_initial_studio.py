"""initial studio tables

Revision ID: 0001_initial_studio
Revises: 
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_initial_studio'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade():
    op.create_table('identities',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=128), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_identities_email', 'identities', ['email'])

    op.create_table('users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('email', sa.String(length=128), nullable=False, unique=True),
        sa.Column('mobile', sa.String(length=32)),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='USER'),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_name', 'users', ['name'])
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table('services',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=150), nullable=False, unique=True),
        *_timestamps(),
    )
    op.create_index('ix_services_name', 'services', ['name'])

    op.create_table('vendors',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('studio_name', sa.String(length=150), nullable=False),
        sa.Column('contact_person', sa.String(length=150), nullable=False),
        sa.Column('mobile', sa.String(length=32), nullable=False),
        sa.Column('email', sa.String(length=150)),
        sa.Column('location', sa.String(length=255)),
        sa.Column('notes', sa.Text()),
        sa.Column('created_by', sa.Integer()),
        *_timestamps(),
    )
    op.create_index('ix_vendors_studio_name', 'vendors', ['studio_name'])
    op.create_index('ix_vendors_email', 'vendors', ['email'])

    op.create_table('staff_service_configs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('staff_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('service_id', sa.Integer(), sa.ForeignKey('services.id', ondelete='CASCADE'), nullable=False),
        sa.Column('percentage', sa.Numeric(5, 2), nullable=False),
        sa.Column('due_date_offset', sa.Integer()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('staff_id', 'service_id', name='uq_staff_service'),
    )
    op.create_index('ix_staff_service_configs_staff_id', 'staff_service_configs', ['staff_id'])
    op.create_index('ix_staff_service_configs_service_id', 'staff_service_configs', ['service_id'])

    op.create_table('jobs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('service_id', sa.Integer(), sa.ForeignKey('services.id'), nullable=False),
        sa.Column('vendor_id', sa.Integer(), sa.ForeignKey('vendors.id', ondelete='SET NULL')),
        sa.Column('staff_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('data_location', sa.String(length=500)),
        sa.Column('final_location', sa.String(length=500)),
        sa.Column('job_due_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('commission_percentage', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('commission_amount', sa.Numeric(18, 6), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='PENDING'),
        sa.Column('started_at', sa.DateTime(timezone=True)),
        sa.Column('completed_at', sa.DateTime(timezone=True)),
        sa.Column('created_by', sa.Integer()),
        *_timestamps(),
    )
    for col in ('service_id', 'vendor_id', 'staff_id', 'job_due_date', 'status', 'created_at'):
        op.create_index(f'ix_jobs_{col}', 'jobs', [col])

    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('actor_user_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('entity', sa.String(length=64)),
        sa.Column('entity_id', sa.String(length=64)),
        sa.Column('role_snapshot', sa.String(length=16)),
        sa.Column('meta', sa.JSON()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_audit_logs_actor_user_id', 'audit_logs', ['actor_user_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])


def downgrade():
    for table in ('audit_logs', 'jobs', 'staff_service_configs', 'vendors', 'services', 'users', 'identities'):
        op.drop_table(table)
