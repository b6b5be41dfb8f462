"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create clients table
    op.create_table(
        'clients',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('industry', sa.String(length=100), nullable=True),
        sa.Column('contact_name', sa.String(length=255), nullable=True),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('status', sa.Enum('active', 'inactive', name='clientstatus'), nullable=False, server_default='active'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_clients_name', 'clients', ['name'], unique=False)
    op.create_index('ix_clients_status', 'clients', ['status'], unique=False)

    # Create operators table
    op.create_table(
        'operators',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('role', sa.Enum('director', 'operator', name='operatorrole'), nullable=False, server_default='operator'),
        sa.Column('status', sa.Enum('active', 'inactive', 'on_leave', name='operatorstatus'), nullable=False, server_default='active'),
        sa.Column('hourly_rate', sa.Integer(), nullable=True),
        sa.Column('skills', sa.JSON(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('google_access_token', sa.Text(), nullable=True),
        sa.Column('google_refresh_token', sa.Text(), nullable=True),
        sa.Column('google_token_expires_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_operators_email', 'operators', ['email'], unique=True)

    # Create projects table
    op.create_table(
        'projects',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('product_name', sa.String(length=255), nullable=True),
        sa.Column('target_industries', sa.JSON(), nullable=True),
        sa.Column('status', sa.Enum('draft', 'active', 'paused', 'completed', 'archived', name='projectstatus'), nullable=False, server_default='draft'),
        sa.Column('daily_call_target', sa.Integer(), nullable=True),
        sa.Column('min_appointment_rate', sa.Float(), nullable=True),
        sa.Column('withdrawal_threshold_days', sa.Integer(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_projects_client_id', 'projects', ['client_id'], unique=False)
    op.create_index('ix_projects_status', 'projects', ['status'], unique=False)

    # Create project_members table
    op.create_table(
        'project_members',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('operator_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.Enum('admin', 'manager', 'appointer', name='memberrole'), nullable=False, server_default='appointer'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('joined_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.ForeignKeyConstraint(['operator_id'], ['operators.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('project_id', 'operator_id', name='uq_project_members_project_operator')
    )
    op.create_index('ix_project_members_project_id', 'project_members', ['project_id'], unique=False)
    op.create_index('ix_project_members_operator_id', 'project_members', ['operator_id'], unique=False)

    # Create companies table
    op.create_table(
        'companies',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('industry', sa.String(length=100), nullable=True),
        sa.Column('employees', sa.Integer(), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('website', sa.String(length=500), nullable=True),
        sa.Column('rank', sa.Enum('S', 'A', 'B', 'C', name='companyrank'), nullable=False, server_default='B'),
        sa.Column('status', sa.Enum('new', 'calling', 'appointment', 'completed', 'ng', name='companystatus'), nullable=False, server_default='new'),
        sa.Column('intent_score', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('source', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_companies_project_id', 'companies', ['project_id'], unique=False)
    op.create_index('ix_companies_name', 'companies', ['name'], unique=False)
    op.create_index('ix_companies_project_status', 'companies', ['project_id', 'status'], unique=False)

    # Create call_logs table
    op.create_table(
        'call_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('company_id', sa.Integer(), nullable=False),
        sa.Column('operator_id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=True),
        sa.Column('result', sa.Enum('appointment', 'document_sent', 'callback', 'absent', 'rejected', 'ng', name='callresult'), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('sentiment_score', sa.Float(), nullable=True),
        sa.Column('called_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.ForeignKeyConstraint(['operator_id'], ['operators.id']),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_call_logs_company_id', 'call_logs', ['company_id'], unique=False)
    op.create_index('ix_call_logs_operator_id', 'call_logs', ['operator_id'], unique=False)
    op.create_index('ix_call_logs_project_id', 'call_logs', ['project_id'], unique=False)
    op.create_index('ix_call_logs_called_at', 'call_logs', ['called_at'], unique=False)
    op.create_index('ix_call_logs_project_called', 'call_logs', ['project_id', 'called_at'], unique=False)
    op.create_index('ix_call_logs_operator_called', 'call_logs', ['operator_id', 'called_at'], unique=False)

    # Create call_recordings table
    op.create_table(
        'call_recordings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('call_log_id', sa.Integer(), nullable=False),
        sa.Column('recording_url', sa.String(length=1000), nullable=True),
        sa.Column('transcription', sa.Text(), nullable=True),
        sa.Column('sentiment_analysis', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['call_log_id'], ['call_logs.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_call_recordings_call_log_id', 'call_recordings', ['call_log_id'], unique=True)

    # Create appointments table
    op.create_table(
        'appointments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('company_id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=True),
        sa.Column('operator_id', sa.Integer(), nullable=True),
        sa.Column('call_log_id', sa.Integer(), nullable=True),
        sa.Column('scheduled_at', sa.DateTime(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('meeting_type', sa.Enum('online', 'onsite', 'phone', name='meetingtype'), nullable=False, server_default='online'),
        sa.Column('status', sa.Enum('tentative', 'confirmed', 'completed', 'cancelled', 'no_show', name='appointmentstatus'), nullable=False, server_default='confirmed'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('google_calendar_event_id', sa.String(length=255), nullable=True),
        sa.Column('cancel_reason', sa.String(length=255), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.ForeignKeyConstraint(['operator_id'], ['operators.id']),
        sa.ForeignKeyConstraint(['call_log_id'], ['call_logs.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_appointments_company_id', 'appointments', ['company_id'], unique=False)
    op.create_index('ix_appointments_project_id', 'appointments', ['project_id'], unique=False)
    op.create_index('ix_appointments_operator_id', 'appointments', ['operator_id'], unique=False)
    op.create_index('ix_appointments_scheduled_at', 'appointments', ['scheduled_at'], unique=False)
    op.create_index('ix_appointments_status_scheduled', 'appointments', ['status', 'scheduled_at'], unique=False)

    # Create daily_schedules table
    op.create_table(
        'daily_schedules',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('operator_id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('schedule_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.String(length=5), nullable=False),
        sa.Column('end_time', sa.String(length=5), nullable=False),
        sa.Column('target_calls', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['operator_id'], ['operators.id']),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_daily_schedules_schedule_date', 'daily_schedules', ['schedule_date'], unique=False)
    op.create_index('ix_daily_schedules_date_operator', 'daily_schedules', ['schedule_date', 'operator_id'], unique=False)

    # Create document_templates table
    op.create_table(
        'document_templates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('template_type', sa.Enum('email', 'dm', 'letter', name='templatetype'), nullable=False, server_default='email'),
        sa.Column('subject', sa.String(length=500), nullable=True),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('variables', sa.JSON(), nullable=True),
        sa.Column('document_url', sa.String(length=1000), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.PrimaryKeyConstraint('id')
    )

    # Create document_sends table
    op.create_table(
        'document_sends',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('template_id', sa.Integer(), nullable=True),
        sa.Column('company_id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=True),
        sa.Column('operator_id', sa.Integer(), nullable=True),
        sa.Column('channel', sa.Enum('email', 'dm', 'letter', 'fax', name='sendchannel'), nullable=False, server_default='email'),
        sa.Column('recipient', sa.String(length=255), nullable=True),
        sa.Column('subject', sa.String(length=500), nullable=True),
        sa.Column('body', sa.Text(), nullable=True),
        sa.Column('status', sa.Enum('draft', 'sent', 'delivered', 'bounced', 'failed', name='sendstatus'), nullable=False, server_default='draft'),
        sa.Column('provider_message_id', sa.String(length=255), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('opened_at', sa.DateTime(), nullable=True),
        sa.Column('open_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('click_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['template_id'], ['document_templates.id']),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.ForeignKeyConstraint(['operator_id'], ['operators.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_document_sends_company_id', 'document_sends', ['company_id'], unique=False)
    op.create_index('ix_document_sends_project_id', 'document_sends', ['project_id'], unique=False)

    # Create document_tracking table
    op.create_table(
        'document_tracking',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('send_id', sa.Integer(), nullable=False),
        sa.Column('event_type', sa.Enum('open', 'page_view', 'link_click', 'download', 'forward', name='trackingeventtype'), nullable=False),
        sa.Column('event_metadata', sa.JSON(), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('tracked_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['send_id'], ['document_sends.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_document_tracking_send_id', 'document_tracking', ['send_id'], unique=False)

    # Create engagement_scores table
    op.create_table(
        'engagement_scores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('company_id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=True),
        sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('call_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('document_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('trend', sa.Enum('rising', 'stable', 'falling', name='engagementtrend'), nullable=False, server_default='stable'),
        sa.Column('alert_level', sa.Enum('none', 'low', 'medium', 'high', 'critical', name='alertlevel'), nullable=False, server_default='none'),
        sa.Column('event_counts', sa.JSON(), nullable=True),
        sa.Column('last_activity_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_engagement_scores_company_id', 'engagement_scores', ['company_id'], unique=True)

    # Create followup_rules table
    op.create_table(
        'followup_rules',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('trigger_type', sa.Enum('no_response_after_send', 'document_opened', 'appointment_no_show', 'call_rejection', 'engagement_score_threshold', name='followuptrigger'), nullable=False),
        sa.Column('trigger_conditions', sa.JSON(), nullable=True),
        sa.Column('action_type', sa.Enum('send_email', 'send_line', 'create_task', 'alert_manager', 'schedule_call', name='followupaction'), nullable=False),
        sa.Column('action_config', sa.JSON(), nullable=True),
        sa.Column('delay_minutes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('max_executions', sa.Integer(), nullable=True),
        sa.Column('execution_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('last_run_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_followup_rules_is_active', 'followup_rules', ['is_active'], unique=False)

    # Create followup_executions table
    op.create_table(
        'followup_executions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('rule_id', sa.Integer(), nullable=False),
        sa.Column('company_id', sa.Integer(), nullable=False),
        sa.Column('result', sa.Enum('success', 'failed', 'skipped', name='executionresult'), nullable=False),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('executed_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['rule_id'], ['followup_rules.id']),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_followup_executions_executed_at', 'followup_executions', ['executed_at'], unique=False)
    op.create_index('ix_followup_executions_rule_company', 'followup_executions', ['rule_id', 'company_id'], unique=False)

    # Create call_quality_scores table
    op.create_table(
        'call_quality_scores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('call_log_id', sa.Integer(), nullable=False),
        sa.Column('operator_id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=True),
        sa.Column('greeting_score', sa.Integer(), nullable=False),
        sa.Column('hearing_score', sa.Integer(), nullable=False),
        sa.Column('proposal_score', sa.Integer(), nullable=False),
        sa.Column('closing_score', sa.Integer(), nullable=False),
        sa.Column('pace_score', sa.Integer(), nullable=False),
        sa.Column('tone_score', sa.Integer(), nullable=False),
        sa.Column('total_score', sa.Integer(), nullable=False),
        sa.Column('positive_points', sa.JSON(), nullable=True),
        sa.Column('improvement_points', sa.JSON(), nullable=True),
        sa.Column('coaching_tip', sa.Text(), nullable=True),
        sa.Column('scored_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['call_log_id'], ['call_logs.id']),
        sa.ForeignKeyConstraint(['operator_id'], ['operators.id']),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_call_quality_scores_call_log_id', 'call_quality_scores', ['call_log_id'], unique=True)
    op.create_index('ix_call_quality_scores_total_score', 'call_quality_scores', ['total_score'], unique=False)
    op.create_index('ix_call_quality_scores_scored_at', 'call_quality_scores', ['scored_at'], unique=False)

    # Create golden_calls table
    op.create_table(
        'golden_calls',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('call_log_id', sa.Integer(), nullable=True),
        sa.Column('operator_id', sa.Integer(), nullable=True),
        sa.Column('project_id', sa.Integer(), nullable=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('recording_url', sa.String(length=1000), nullable=True),
        sa.Column('total_score', sa.Integer(), nullable=True),
        sa.Column('curated_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['call_log_id'], ['call_logs.id']),
        sa.ForeignKeyConstraint(['operator_id'], ['operators.id']),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.ForeignKeyConstraint(['curated_by'], ['operators.id']),
        sa.PrimaryKeyConstraint('id')
    )

    # Create pivot_alerts table
    op.create_table(
        'pivot_alerts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('alert_type', sa.Enum('low_rate', 'high_rejection', name='pivotalerttype'), nullable=False),
        sa.Column('severity', sa.Enum('critical', 'warning', name='pivotalertseverity'), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('metrics', sa.JSON(), nullable=True),
        sa.Column('suggestions', sa.JSON(), nullable=True),
        sa.Column('status', sa.Enum('active', 'acknowledged', 'resolved', name='pivotalertstatus'), nullable=False, server_default='active'),
        sa.Column('acknowledged_by', sa.Integer(), nullable=True),
        sa.Column('acknowledged_at', sa.DateTime(), nullable=True),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.ForeignKeyConstraint(['acknowledged_by'], ['operators.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_pivot_alerts_project_status', 'pivot_alerts', ['project_id', 'status'], unique=False)

    # Create rejection_insights table
    op.create_table(
        'rejection_insights',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('call_log_id', sa.Integer(), nullable=True),
        sa.Column('company_id', sa.Integer(), nullable=True),
        sa.Column('project_id', sa.Integer(), nullable=True),
        sa.Column('category', sa.String(length=50), nullable=False, server_default='other'),
        sa.Column('detail', sa.Text(), nullable=True),
        sa.Column('pain_point', sa.String(length=500), nullable=True),
        sa.Column('unmet_need', sa.String(length=500), nullable=True),
        sa.Column('sentiment_score', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['call_log_id'], ['call_logs.id']),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_rejection_insights_category', 'rejection_insights', ['category'], unique=False)
    op.create_index('ix_rejection_insights_created_at', 'rejection_insights', ['created_at'], unique=False)

    # Create cross_sell_recommendations table
    op.create_table(
        'cross_sell_recommendations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('company_id', sa.Integer(), nullable=False),
        sa.Column('source_project_id', sa.Integer(), nullable=True),
        sa.Column('target_project_id', sa.Integer(), nullable=False),
        sa.Column('call_log_id', sa.Integer(), nullable=True),
        sa.Column('match_score', sa.Integer(), nullable=False),
        sa.Column('reasons', sa.JSON(), nullable=True),
        sa.Column('rejection_category', sa.String(length=50), nullable=True),
        sa.Column('status', sa.Enum('suggested', 'accepted', 'contacted', 'converted', 'dismissed', name='crosssellstatus'), nullable=False, server_default='suggested'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.ForeignKeyConstraint(['source_project_id'], ['projects.id']),
        sa.ForeignKeyConstraint(['target_project_id'], ['projects.id']),
        sa.ForeignKeyConstraint(['call_log_id'], ['call_logs.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_cross_sell_recommendations_target_project_id', 'cross_sell_recommendations', ['target_project_id'], unique=False)

    # Create operator_fraud_scores table
    op.create_table(
        'operator_fraud_scores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('operator_id', sa.Integer(), nullable=False),
        sa.Column('fraud_type', sa.Enum('ghost_call', 'fake_appointment', 'data_manipulation', 'time_fraud', name='fraudtype'), nullable=False),
        sa.Column('risk_score', sa.Integer(), nullable=False),
        sa.Column('evidence', sa.JSON(), nullable=True),
        sa.Column('status', sa.Enum('pending', 'investigating', 'confirmed', 'dismissed', name='fraudstatus'), nullable=False, server_default='pending'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('reviewed_by', sa.Integer(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('detected_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['operator_id'], ['operators.id']),
        sa.ForeignKeyConstraint(['reviewed_by'], ['operators.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_operator_fraud_scores_risk_score', 'operator_fraud_scores', ['risk_score'], unique=False)
    op.create_index('ix_operator_fraud_scores_operator_type', 'operator_fraud_scores', ['operator_id', 'fraud_type'], unique=False)

    # Create subsidy_reports table
    op.create_table(
        'subsidy_reports',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=True),
        sa.Column('project_id', sa.Integer(), nullable=True),
        sa.Column('report_type', sa.Enum('performance', 'effect', 'productivity', 'wage_increase', name='subsidyreporttype'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=True),
        sa.Column('period_start', sa.Date(), nullable=False),
        sa.Column('period_end', sa.Date(), nullable=False),
        sa.Column('status', sa.Enum('draft', 'generated', 'reviewed', 'submitted', 'accepted', 'rejected', name='subsidyreportstatus'), nullable=False, server_default='draft'),
        sa.Column('metrics', sa.JSON(), nullable=True),
        sa.Column('productivity_data', sa.JSON(), nullable=True),
        sa.Column('generated_by', sa.Integer(), nullable=True),
        sa.Column('generated_at', sa.DateTime(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.ForeignKeyConstraint(['generated_by'], ['operators.id']),
        sa.PrimaryKeyConstraint('id')
    )

    # Create compliance_documents table
    op.create_table(
        'compliance_documents',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=True),
        sa.Column('project_id', sa.Integer(), nullable=True),
        sa.Column('document_type', sa.Enum('contract', 'order', 'delivery', 'invoice', 'daily_report', 'other', name='documenttype'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('file_url', sa.String(length=1000), nullable=True),
        sa.Column('file_hash', sa.String(length=64), nullable=True),
        sa.Column('retention_start', sa.Date(), nullable=False),
        sa.Column('retention_end', sa.Date(), nullable=False),
        sa.Column('is_immutable', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('status', sa.Enum('active', 'archived', name='documentstatus'), nullable=False, server_default='active'),
        sa.Column('uploaded_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.ForeignKeyConstraint(['uploaded_by'], ['operators.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_compliance_documents_retention_end', 'compliance_documents', ['retention_end'], unique=False)

    # Create audit_logs table
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('operator_id', sa.Integer(), nullable=True),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('entity_type', sa.String(length=100), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=True),
        sa.Column('changes', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['operator_id'], ['operators.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'], unique=False)
    op.create_index('ix_audit_logs_entity_type', 'audit_logs', ['entity_type'], unique=False)
    op.create_index('ix_audit_logs_created_at', 'audit_logs', ['created_at'], unique=False)

    # Create crawl_jobs table
    op.create_table(
        'crawl_jobs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('source_urls', sa.JSON(), nullable=False),
        sa.Column('keywords', sa.JSON(), nullable=True),
        sa.Column('status', sa.Enum('pending', 'running', 'completed', 'failed', 'cancelled', name='crawljobstatus'), nullable=False, server_default='pending'),
        sa.Column('companies_found', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('companies_imported', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('errors', sa.JSON(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.ForeignKeyConstraint(['created_by'], ['operators.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_crawl_jobs_status', 'crawl_jobs', ['status'], unique=False)

    # Create news_triggers table
    op.create_table(
        'news_triggers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('company_id', sa.Integer(), nullable=True),
        sa.Column('project_id', sa.Integer(), nullable=True),
        sa.Column('trigger_type', sa.Enum('funding', 'executive_change', 'expansion', 'award', 'partnership', 'ipo', 'product_launch', 'other', name='newstriggertype'), nullable=False, server_default='other'),
        sa.Column('headline', sa.String(length=500), nullable=False),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('source_url', sa.String(length=1000), nullable=True),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        sa.Column('suggested_talk', sa.Text(), nullable=True),
        sa.Column('talk_tone', sa.String(length=50), nullable=True),
        sa.Column('priority_score', sa.Integer(), nullable=False, server_default='50'),
        sa.Column('is_processed', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_news_triggers_priority_score', 'news_triggers', ['priority_score'], unique=False)
    op.create_index('ix_news_triggers_is_processed', 'news_triggers', ['is_processed'], unique=False)

    # Create roleplay_sessions table
    op.create_table(
        'roleplay_sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('operator_id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=True),
        sa.Column('scenario', sa.Enum('cold_call', 'follow_up', 'objection_handling', 'closing', name='roleplayscenario'), nullable=False),
        sa.Column('difficulty', sa.String(length=20), nullable=False, server_default='normal'),
        sa.Column('conversation_log', sa.JSON(), nullable=True),
        sa.Column('ai_feedback', sa.JSON(), nullable=True),
        sa.Column('score', sa.Integer(), nullable=True),
        sa.Column('started_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['operator_id'], ['operators.id']),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_roleplay_sessions_operator_id', 'roleplay_sessions', ['operator_id'], unique=False)

    # Create notifications table
    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('operator_id', sa.Integer(), nullable=True),
        sa.Column('notification_type', sa.Enum('appointment', 'call_complete', 'new_company', 'system', 'alert', name='notificationtype'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['operator_id'], ['operators.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notifications_operator_id', 'notifications', ['operator_id'], unique=False)
    op.create_index('ix_notifications_is_read', 'notifications', ['is_read'], unique=False)

    # Create sales_floor_status table
    op.create_table(
        'sales_floor_status',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('operator_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.Enum('idle', 'calling', 'on_call', 'wrapping_up', 'break', 'offline', name='floorstatus'), nullable=False, server_default='offline'),
        sa.Column('current_company_id', sa.Integer(), nullable=True),
        sa.Column('current_project_id', sa.Integer(), nullable=True),
        sa.Column('call_start_time', sa.DateTime(), nullable=True),
        sa.Column('calls_today', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('appointments_today', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['operator_id'], ['operators.id']),
        sa.ForeignKeyConstraint(['current_company_id'], ['companies.id']),
        sa.ForeignKeyConstraint(['current_project_id'], ['projects.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_sales_floor_status_operator_id', 'sales_floor_status', ['operator_id'], unique=True)


def downgrade() -> None:
    for table in (
        'sales_floor_status',
        'notifications',
        'roleplay_sessions',
        'news_triggers',
        'crawl_jobs',
        'audit_logs',
        'compliance_documents',
        'subsidy_reports',
        'operator_fraud_scores',
        'cross_sell_recommendations',
        'rejection_insights',
        'pivot_alerts',
        'golden_calls',
        'call_quality_scores',
        'followup_executions',
        'followup_rules',
        'engagement_scores',
        'document_tracking',
        'document_sends',
        'document_templates',
        'daily_schedules',
        'appointments',
        'call_recordings',
        'call_logs',
        'companies',
        'project_members',
        'projects',
        'operators',
        'clients',
    ):
        op.drop_table(table)

    for enum_name in (
        'floorstatus', 'notificationtype', 'roleplayscenario', 'newstriggertype',
        'crawljobstatus', 'documentstatus', 'documenttype', 'subsidyreportstatus',
        'subsidyreporttype', 'fraudstatus', 'fraudtype', 'crosssellstatus',
        'pivotalertstatus', 'pivotalertseverity', 'pivotalerttype', 'executionresult',
        'followupaction', 'followuptrigger', 'alertlevel', 'engagementtrend',
        'trackingeventtype', 'sendstatus', 'sendchannel', 'templatetype',
        'appointmentstatus', 'meetingtype', 'callresult', 'companystatus',
        'companyrank', 'memberrole', 'projectstatus', 'operatorstatus',
        'operatorrole', 'clientstatus',
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
