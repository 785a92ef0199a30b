"""create prospectai tables

Revision ID: 20261019_create_prospectai
Revises:
Create Date: 2026-10-19

Cria as tabelas do pipeline de prospecção: tenants, sellers,
pipeline_stages (com papel explícito da etapa) e prospect_leads.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '20261019_create_prospectai'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Criar tabelas e índices."""

    op.create_table(
        'tenants',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('slug', sa.String(length=100), nullable=False),
        sa.Column('settings', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tenants_slug', 'tenants', ['slug'], unique=True)

    op.create_table(
        'sellers',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('monthly_sales_goal', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        # {"deadlines": {"initial_contact": {...}}}
        sa.Column('prospect_settings', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_sellers_tenant_id', 'sellers', ['tenant_id'])

    op.create_table(
        'pipeline_stages',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('stage_order', sa.Integer(), nullable=False),
        # entry | first_attempt | standard | scheduling | terminal | holding
        sa.Column('role', sa.String(length=20), nullable=False, server_default='standard'),
        sa.Column('is_fixed', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('is_enabled', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'name', name='uq_pipeline_stages_tenant_name'),
    )
    op.create_index('ix_pipeline_stages_tenant_id', 'pipeline_stages', ['tenant_id'])

    op.create_table(
        'prospect_leads',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=36), nullable=False),
        sa.Column('seller_id', sa.String(length=36), nullable=False),
        sa.Column('stage_id', sa.String(length=36), nullable=False),
        sa.Column('lead_name', sa.String(length=200), nullable=False),
        sa.Column('lead_phone', sa.String(length=20), nullable=True),
        sa.Column('interest_vehicle', sa.String(length=200), nullable=True),
        sa.Column('raw_lead_data', sa.Text(), nullable=True),
        sa.Column('outcome', sa.String(length=20), nullable=True),
        sa.Column('appointment_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('details', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('feedback', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('prospected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_feedback_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['seller_id'], ['sellers.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['stage_id'], ['pipeline_stages.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_prospect_leads_tenant_id', 'prospect_leads', ['tenant_id'])
    op.create_index('ix_prospect_leads_seller_id', 'prospect_leads', ['seller_id'])
    op.create_index('ix_prospect_leads_stage_id', 'prospect_leads', ['stage_id'])

    # Varredura de prazos: dono + etapa + criação
    op.create_index(
        'ix_prospect_leads_sweep',
        'prospect_leads',
        ['seller_id', 'stage_id', 'created_at'],
    )


def downgrade() -> None:
    """Remover tabelas."""
    op.drop_index('ix_prospect_leads_sweep', table_name='prospect_leads')
    op.drop_index('ix_prospect_leads_stage_id', table_name='prospect_leads')
    op.drop_index('ix_prospect_leads_seller_id', table_name='prospect_leads')
    op.drop_index('ix_prospect_leads_tenant_id', table_name='prospect_leads')
    op.drop_table('prospect_leads')
    op.drop_index('ix_pipeline_stages_tenant_id', table_name='pipeline_stages')
    op.drop_table('pipeline_stages')
    op.drop_index('ix_sellers_tenant_id', table_name='sellers')
    op.drop_table('sellers')
    op.drop_index('ix_tenants_slug', table_name='tenants')
    op.drop_table('tenants')
