"""Create trading agents, trades, risk events, metrics and configurations

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create trading_agents table
    op.create_table(
        'trading_agents',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='idle'),
        sa.Column('balance', sa.Numeric(15, 2), server_default='0.00'),
        sa.Column('risk_tolerance', sa.Numeric(5, 4), server_default='0.02'),
        sa.Column('strategy_params', postgresql.JSONB(), server_default='{}'),
        sa.Column('last_trade_at', sa.DateTime(), nullable=True),
        sa.Column('total_trades', sa.Integer(), server_default='0'),
        sa.Column('winning_trades', sa.Integer(), server_default='0'),
        sa.Column('losing_trades', sa.Integer(), server_default='0'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('name', name='uq_trading_agents_name'),
    )
    op.create_index('ix_trading_agents_status', 'trading_agents', ['status'])

    # Create trades table
    op.create_table(
        'trades',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('agent_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('symbol', sa.String(50), nullable=False),
        sa.Column('side', sa.String(10), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('quantity', sa.Numeric(20, 8), nullable=False),
        sa.Column('price', sa.Numeric(15, 8), nullable=False),
        sa.Column('executed_at', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('pnl', sa.Numeric(15, 2), nullable=True),
        sa.Column('fees', sa.Numeric(15, 8), nullable=True),
        sa.Column('metadata', postgresql.JSONB(), server_default='{}'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(
            ['agent_id'], ['trading_agents.id'], name='fk_trades_agent_id', ondelete='CASCADE'
        ),
    )
    op.create_index('ix_trades_agent_id', 'trades', ['agent_id'])
    op.create_index('ix_trades_symbol', 'trades', ['symbol'])
    op.create_index('ix_trades_executed_at', 'trades', ['executed_at'])
    op.create_index('ix_trades_status', 'trades', ['status'])

    # Create risk_events table
    op.create_table(
        'risk_events',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('agent_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('event_type', sa.String(50), nullable=False),
        sa.Column('severity', sa.String(20), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('metadata', postgresql.JSONB(), server_default='{}'),
        sa.Column('resolved', sa.Boolean(), server_default=sa.false()),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(
            ['agent_id'], ['trading_agents.id'], name='fk_risk_events_agent_id', ondelete='CASCADE'
        ),
    )
    op.create_index('ix_risk_events_agent_id', 'risk_events', ['agent_id'])
    op.create_index('ix_risk_events_event_type', 'risk_events', ['event_type'])
    op.create_index('ix_risk_events_severity', 'risk_events', ['severity'])
    op.create_index('ix_risk_events_resolved', 'risk_events', ['resolved'])

    # Create performance_metrics table
    op.create_table(
        'performance_metrics',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('agent_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('total_pnl', sa.Numeric(15, 2), server_default='0'),
        sa.Column('daily_pnl', sa.Numeric(15, 2), server_default='0'),
        sa.Column('drawdown', sa.Numeric(5, 4), server_default='0'),
        sa.Column('win_rate', sa.Numeric(5, 4), server_default='0'),
        sa.Column('total_trades', sa.Integer(), server_default='0'),
        sa.Column('winning_trades', sa.Integer(), server_default='0'),
        sa.Column('losing_trades', sa.Integer(), server_default='0'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(
            ['agent_id'], ['trading_agents.id'], name='fk_performance_metrics_agent_id', ondelete='CASCADE'
        ),
        sa.UniqueConstraint('agent_id', 'date', name='uq_performance_metrics_agent_date'),
    )
    op.create_index('ix_performance_metrics_date', 'performance_metrics', ['date'])

    # Create system_configurations table
    op.create_table(
        'system_configurations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('key', sa.String(255), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('category', sa.String(50), server_default='general'),
        sa.Column('encrypted', sa.Boolean(), server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('key', name='uq_system_configurations_key'),
    )
    op.create_index('ix_system_configurations_category', 'system_configurations', ['category'])


def downgrade() -> None:
    op.drop_table('system_configurations')
    op.drop_table('performance_metrics')
    op.drop_table('risk_events')
    op.drop_table('trades')
    op.drop_table('trading_agents')
