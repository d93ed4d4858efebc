"""tablero_ot_initial

Crea las tablas del tablero de OTs: usuario, work_order, work_order_date,
work_order_history, issue e issue_note.

Revision ID: 3c7d52a9e1f4
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3c7d52a9e1f4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_user(name: str) -> sa.Column:
    return sa.Column(
        name, sa.Integer(),
        sa.ForeignKey('usuario.id', ondelete='SET NULL'), nullable=True,
    )


def upgrade() -> None:
    op.create_table(
        'usuario',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(200), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(200), nullable=False),
        sa.Column('nombre_completo', sa.String(300), nullable=True),
        sa.Column('rol', sa.String(50), nullable=False, server_default='CONSULTA'),
        sa.Column('activo', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('ultimo_acceso', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'work_order',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('ot', sa.String(50), nullable=False),
        sa.Column('client', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('tag', sa.String(100), nullable=True),
        sa.Column('location', sa.String(20), nullable=False, server_default='INCO'),
        sa.Column('status', sa.String(100), nullable=False, server_default='Sin iniciar'),
        sa.Column('progress', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('priority', sa.Boolean(), nullable=False, server_default=sa.false()),
        _audit_user('created_by'),
        _audit_user('updated_by'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_work_order_ot', 'work_order', ['ot'], unique=True)
    op.create_index('ix_work_order_location', 'work_order', ['location'])

    op.create_table(
        'work_order_date',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'work_order_id', sa.Integer(),
            sa.ForeignKey('work_order.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('stage', sa.String(100), nullable=False),
        sa.Column('date', sa.Date(), nullable=True),
        sa.Column('confirmed', sa.Boolean(), nullable=False, server_default=sa.false()),
        _audit_user('created_by'),
        _audit_user('updated_by'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('work_order_id', 'stage', name='uq_work_order_date_stage'),
    )
    op.create_index('ix_work_order_date_work_order_id', 'work_order_date', ['work_order_id'])

    op.create_table(
        'work_order_history',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'work_order_id', sa.Integer(),
            sa.ForeignKey('work_order.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('field', sa.String(100), nullable=False),
        sa.Column('old_value', sa.String(200), nullable=True),
        sa.Column('new_value', sa.String(200), nullable=True),
        _audit_user('changed_by'),
        sa.Column('changed_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_work_order_history_work_order_id', 'work_order_history', ['work_order_id'])
    op.create_index('ix_work_order_history_changed_at', 'work_order_history', ['changed_at'])

    op.create_table(
        'issue',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'work_order_id', sa.Integer(),
            sa.ForeignKey('work_order.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('stage', sa.String(100), nullable=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('priority', sa.String(20), nullable=False, server_default='MEDIUM'),
        sa.Column('status', sa.String(20), nullable=False, server_default='OPEN'),
        sa.Column('delay_start_date', sa.Date(), nullable=True),
        sa.Column('delay_end_date', sa.Date(), nullable=True),
        _audit_user('created_by'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_issue_work_order_id', 'issue', ['work_order_id'])
    op.create_index('ix_issue_status', 'issue', ['status'])

    op.create_table(
        'issue_note',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'issue_id', sa.Integer(),
            sa.ForeignKey('issue.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('content', sa.Text(), nullable=False),
        _audit_user('created_by'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_issue_note_issue_id', 'issue_note', ['issue_id'])


def downgrade() -> None:
    op.drop_table('issue_note')
    op.drop_table('issue')
    op.drop_table('work_order_history')
    op.drop_table('work_order_date')
    op.drop_table('work_order')
    op.drop_table('usuario')
