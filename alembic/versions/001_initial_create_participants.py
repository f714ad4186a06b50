"""initial create participants

Revision ID: 001
Revises:
Create Date: 2026-10-19 10:00:00.000000

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
    # ID atribuído pelo serviço ("2026-0001" ou UUID)
    op.create_table(
        'participants',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('birthDate', sa.String(length=40), nullable=False),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('cpf', sa.String(length=20), nullable=False),
        sa.Column('church', sa.String(length=200), nullable=False),
        sa.Column('district', sa.String(length=200), nullable=False),
        sa.Column('whatsapp', sa.String(length=50), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    # CPF não é único (mesma pessoa pode se inscrever de novo), só indexado para busca
    op.create_index('ix_participants_cpf', 'participants', ['cpf'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_participants_cpf', table_name='participants')
    op.drop_table('participants')
