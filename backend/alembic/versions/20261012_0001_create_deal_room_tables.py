"""create deal room tables

Revision ID: 1d2e3f4a5b6c
Revises:
Create Date: 2026-10-12 00:01:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '1d2e3f4a5b6c'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


deal_status = sa.Enum(
    'DRAFT', 'AWAITING_RESPONSE', 'NEGOTIATING', 'AGREED', 'SIGNING', 'COMPLETED', 'CANCELLED',
    name='dealstatus'
)
governing_law = sa.Enum('CALIFORNIA', 'ENGLAND_WALES', 'SPAIN', name='governinglaw')
party_role = sa.Enum('INITIATOR', 'RESPONDENT', name='partyrole')
# Second use of the party roles; non-native so the type is only created once
round_initiator = sa.Enum('INITIATOR', 'RESPONDENT', name='partyrole', native_enum=False)
party_status = sa.Enum('PENDING', 'SUBMITTED', 'REVIEWING', 'ACCEPTED', name='partystatus')
clause_status = sa.Enum('PENDING', 'SUGGESTED', 'AGREED', name='clausestatus')
round_status = sa.Enum('PENDING_RESPONSE', name='roundstatus')
proposal_status = sa.Enum('PENDING', 'ACCEPTED', 'REJECTED', 'SUPERSEDED', name='proposalstatus')
invitation_status = sa.Enum('PENDING', 'ACCEPTED', 'CANCELLED', name='invitationstatus')
signing_status = sa.Enum('PENDING', 'PARTIALLY_SIGNED', 'COMPLETED', name='signingstatus')


def upgrade() -> None:
    """Create the catalog, deal, negotiation, invitation, signing and audit tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('name', sa.String(200), nullable=True),
        sa.Column('company', sa.String(200), nullable=True),
        sa.Column('api_key_hash', sa.String(256), nullable=False),
        sa.Column('entitlements', sa.JSON, nullable=False),
        sa.Column('created_at', sa.TIMESTAMP, nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('last_seen_at', sa.TIMESTAMP, nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_api_key_hash', 'users', ['api_key_hash'])

    # Clause catalog
    op.create_table(
        'contract_templates',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('contract_type', sa.String(50), nullable=False, unique=True),
        sa.Column('display_name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('version', sa.String(20), nullable=False, server_default='1.0'),
        sa.Column('is_licensed', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.TIMESTAMP, nullable=True, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_contract_templates_contract_type', 'contract_templates', ['contract_type'])

    op.create_table(
        'clause_templates',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('contract_template_id', sa.String(36),
                  sa.ForeignKey('contract_templates.id', ondelete='CASCADE'), nullable=False),
        sa.Column('clause_key', sa.String(100), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('category', sa.String(100), nullable=False, server_default='general'),
        sa.Column('order', sa.Integer, nullable=False),
        sa.Column('plain_description', sa.Text, nullable=False, server_default=''),
        sa.Column('legal_context', sa.Text, nullable=True),
        sa.Column('is_required', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.UniqueConstraint('contract_template_id', 'clause_key', name='uq_clause_template_key'),
    )
    op.create_index('ix_clause_templates_contract_template_id', 'clause_templates', ['contract_template_id'])

    op.create_table(
        'clause_options',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('clause_template_id', sa.String(36),
                  sa.ForeignKey('clause_templates.id', ondelete='CASCADE'), nullable=False),
        sa.Column('code', sa.String(100), nullable=False),
        sa.Column('label', sa.String(200), nullable=False),
        sa.Column('order', sa.Integer, nullable=False),
        sa.Column('plain_description', sa.Text, nullable=False, server_default=''),
        sa.Column('legal_text', sa.Text, nullable=False, server_default=''),
        sa.Column('bias_party_a', sa.Float, nullable=False, server_default='0'),
        sa.Column('bias_party_b', sa.Float, nullable=False, server_default='0'),
        sa.UniqueConstraint('clause_template_id', 'code', name='uq_clause_option_code'),
    )
    op.create_index('ix_clause_options_clause_template_id', 'clause_options', ['clause_template_id'])

    # Deals
    op.create_table(
        'deals',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('contract_template_id', sa.String(36), sa.ForeignKey('contract_templates.id'), nullable=False),
        sa.Column('governing_law', governing_law, nullable=False),
        sa.Column('contract_language', sa.String(5), nullable=False, server_default='en'),
        sa.Column('status', deal_status, nullable=False, server_default='DRAFT'),
        sa.Column('current_round', sa.Integer, nullable=False, server_default='0'),
        sa.Column('version', sa.Integer, nullable=False, server_default='1'),
        sa.Column('created_at', sa.TIMESTAMP, nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.TIMESTAMP, nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_deals_contract_template_id', 'deals', ['contract_template_id'])
    op.create_index('ix_deals_status', 'deals', ['status'])

    op.create_table(
        'parties',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('deal_id', sa.String(36), sa.ForeignKey('deals.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('role', party_role, nullable=False),
        sa.Column('status', party_status, nullable=False, server_default='PENDING'),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(200), nullable=True),
        sa.Column('company', sa.String(200), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP, nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('submitted_at', sa.TIMESTAMP, nullable=True),
        sa.UniqueConstraint('deal_id', 'role', name='uq_party_deal_role'),
    )
    op.create_index('ix_parties_deal_id', 'parties', ['deal_id'])
    op.create_index('ix_parties_user_id', 'parties', ['user_id'])

    op.create_table(
        'deal_clauses',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('deal_id', sa.String(36), sa.ForeignKey('deals.id', ondelete='CASCADE'), nullable=False),
        sa.Column('clause_template_id', sa.String(36), sa.ForeignKey('clause_templates.id'), nullable=False),
        sa.Column('position', sa.Integer, nullable=False),
        sa.Column('status', clause_status, nullable=False, server_default='PENDING'),
        sa.Column('agreed_option_id', sa.String(36), sa.ForeignKey('clause_options.id'), nullable=True),
    )
    op.create_index('ix_deal_clauses_deal_id', 'deal_clauses', ['deal_id'])
    op.create_index('ix_deal_clauses_status', 'deal_clauses', ['status'])

    op.create_table(
        'selections',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('deal_clause_id', sa.String(36),
                  sa.ForeignKey('deal_clauses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('party_id', sa.String(36), sa.ForeignKey('parties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('option_id', sa.String(36), sa.ForeignKey('clause_options.id'), nullable=False),
        sa.Column('priority', sa.Integer, nullable=False, server_default='3'),
        sa.Column('flexibility', sa.Integer, nullable=False, server_default='3'),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('created_at', sa.TIMESTAMP, nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.TIMESTAMP, nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.UniqueConstraint('deal_clause_id', 'party_id', name='uq_selection_clause_party'),
    )
    op.create_index('ix_selections_deal_clause_id', 'selections', ['deal_clause_id'])
    op.create_index('ix_selections_party_id', 'selections', ['party_id'])

    # Negotiation rounds
    op.create_table(
        'negotiation_rounds',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('deal_id', sa.String(36), sa.ForeignKey('deals.id', ondelete='CASCADE'), nullable=False),
        sa.Column('round_number', sa.Integer, nullable=False),
        sa.Column('initiated_by', round_initiator, nullable=False),
        sa.Column('status', round_status, nullable=False, server_default='PENDING_RESPONSE'),
        sa.Column('created_at', sa.TIMESTAMP, nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.UniqueConstraint('deal_id', 'round_number', name='uq_round_deal_number'),
    )
    op.create_index('ix_negotiation_rounds_deal_id', 'negotiation_rounds', ['deal_id'])

    op.create_table(
        'compromise_suggestions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('deal_clause_id', sa.String(36),
                  sa.ForeignKey('deal_clauses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('round_number', sa.Integer, nullable=False),
        sa.Column('suggested_option_id', sa.String(36), sa.ForeignKey('clause_options.id'), nullable=False),
        sa.Column('satisfaction_party_a', sa.Integer, nullable=False),
        sa.Column('satisfaction_party_b', sa.Integer, nullable=False),
        sa.Column('reasoning', sa.Text, nullable=False),
        sa.Column('party_a_accepted', sa.Boolean, nullable=True),
        sa.Column('party_b_accepted', sa.Boolean, nullable=True),
        sa.Column('created_at', sa.TIMESTAMP, nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.UniqueConstraint('deal_clause_id', 'round_number', name='uq_suggestion_clause_round'),
    )
    op.create_index('ix_compromise_suggestions_deal_clause_id', 'compromise_suggestions', ['deal_clause_id'])

    op.create_table(
        'counter_proposals',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('round_id', sa.String(36),
                  sa.ForeignKey('negotiation_rounds.id', ondelete='CASCADE'), nullable=False),
        sa.Column('deal_clause_id', sa.String(36),
                  sa.ForeignKey('deal_clauses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('proposing_party_id', sa.String(36),
                  sa.ForeignKey('parties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('proposed_option_id', sa.String(36), sa.ForeignKey('clause_options.id'), nullable=False),
        sa.Column('rationale', sa.Text, nullable=True),
        sa.Column('new_priority', sa.Integer, nullable=True),
        sa.Column('status', proposal_status, nullable=False, server_default='PENDING'),
        sa.Column('created_at', sa.TIMESTAMP, nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('resolved_at', sa.TIMESTAMP, nullable=True),
    )
    op.create_index('ix_counter_proposals_round_id', 'counter_proposals', ['round_id'])
    op.create_index('ix_counter_proposals_deal_clause_id', 'counter_proposals', ['deal_clause_id'])
    op.create_index('ix_counter_proposals_status', 'counter_proposals', ['status'])

    # Invitations and signing
    op.create_table(
        'invitations',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('deal_id', sa.String(36), sa.ForeignKey('deals.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sender_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('token', sa.String(64), nullable=False, unique=True),
        sa.Column('status', invitation_status, nullable=False, server_default='PENDING'),
        sa.Column('sent_at', sa.TIMESTAMP, nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('expires_at', sa.TIMESTAMP, nullable=False),
        sa.Column('accepted_at', sa.TIMESTAMP, nullable=True),
    )
    op.create_index('ix_invitations_deal_id', 'invitations', ['deal_id'])
    op.create_index('ix_invitations_token', 'invitations', ['token'])

    op.create_table(
        'signing_requests',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('deal_id', sa.String(36), sa.ForeignKey('deals.id', ondelete='CASCADE'), nullable=False),
        sa.Column('provider', sa.String(50), nullable=False),
        sa.Column('external_id', sa.String(255), nullable=True),
        sa.Column('status', signing_status, nullable=False, server_default='PENDING'),
        sa.Column('party_a_signature', sa.Text, nullable=True),
        sa.Column('party_a_signed_at', sa.TIMESTAMP, nullable=True),
        sa.Column('party_b_signature', sa.Text, nullable=True),
        sa.Column('party_b_signed_at', sa.TIMESTAMP, nullable=True),
        sa.Column('created_at', sa.TIMESTAMP, nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('completed_at', sa.TIMESTAMP, nullable=True),
    )
    op.create_index('ix_signing_requests_deal_id', 'signing_requests', ['deal_id'])

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('deal_id', sa.String(36), sa.ForeignKey('deals.id', ondelete='SET NULL'), nullable=True),
        sa.Column('actor_id', sa.String(36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('details', sa.JSON, nullable=False),
        sa.Column('created_at', sa.TIMESTAMP, nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_audit_log_action', 'audit_log', ['action'])
    op.create_index('ix_audit_log_created_at', 'audit_log', ['created_at'])
    op.create_index('idx_audit_deal_created', 'audit_log', ['deal_id', 'created_at'])


def downgrade() -> None:
    """Drop all deal room tables."""
    op.drop_table('audit_log')
    op.drop_table('signing_requests')
    op.drop_table('invitations')
    op.drop_table('counter_proposals')
    op.drop_table('compromise_suggestions')
    op.drop_table('negotiation_rounds')
    op.drop_table('selections')
    op.drop_table('deal_clauses')
    op.drop_table('parties')
    op.drop_table('deals')
    op.drop_table('clause_options')
    op.drop_table('clause_templates')
    op.drop_table('contract_templates')
    op.drop_table('users')

    bind = op.get_bind()
    for enum in (
        deal_status, governing_law, party_role, party_status, clause_status,
        round_status, proposal_status, invitation_status, signing_status,
    ):
        enum.drop(bind, checkfirst=True)
