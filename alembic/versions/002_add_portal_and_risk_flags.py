"""Add client portal links, company risk flags and client-visible golden calls

Revision ID: 002
Revises: 001
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column(
        'golden_calls',
        sa.Column('is_client_visible', sa.Boolean(), nullable=False, server_default='false'),
    )

    # Create portal_tokens table
    op.create_table(
        'portal_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=True),
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('can_view_calls', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('can_view_appointments', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('can_view_golden_calls', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('last_accessed_at', sa.DateTime(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.ForeignKeyConstraint(['created_by'], ['operators.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_portal_tokens_client_id', 'portal_tokens', ['client_id'], unique=False)
    op.create_index('ix_portal_tokens_token', 'portal_tokens', ['token'], unique=True)

    # Create company_risk_flags table
    op.create_table(
        'company_risk_flags',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('company_id', sa.Integer(), nullable=False),
        sa.Column('flag_type', sa.Enum(
            'lawsuit', 'financial_warning', 'negative_press', 'executive_change',
            'compliance_issue', 'other', name='riskflagtype'
        ), nullable=False),
        sa.Column('severity', sa.Enum('low', 'medium', 'high', 'critical', name='riskseverity'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('source_url', sa.String(length=1000), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('detected_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.Column('resolved_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.ForeignKeyConstraint(['resolved_by'], ['operators.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_company_risk_flags_company_id', 'company_risk_flags', ['company_id'], unique=False)
    op.create_index('ix_company_risk_flags_is_active', 'company_risk_flags', ['is_active'], unique=False)


def downgrade() -> None:
    op.drop_table('company_risk_flags')
    op.drop_table('portal_tokens')
    op.drop_column('golden_calls', 'is_client_visible')
    sa.Enum(name='riskseverity').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='riskflagtype').drop(op.get_bind(), checkfirst=True)
