"""create etiquetas_producao

Revision ID: 001
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from etiquetas.core.config import settings


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TABLE = settings.LABELS_TABLE_NAME


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table(TABLE):
        op.create_table(TABLE,
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('ord_in_codigo', sa.BigInteger(), nullable=False),
        sa.Column('ord_dt_abertura_real', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('fil_in_codigo', sa.Integer(), server_default='1', nullable=False),
        sa.Column('pro_st_alternativo', sa.Text(), server_default='', nullable=False),
        sa.Column('pro_st_descricao', sa.Text(), server_default='Produto sem descrição', nullable=False),
        sa.Column('orl_st_lotefabricacao', sa.Text(), server_default='', nullable=False),
        sa.Column('esv_st_valor', sa.Text(), server_default='', nullable=False),
        sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_etiquetas_ord_in_codigo', TABLE, ['ord_in_codigo'], unique=False)

    # Tablas creadas a mano antes de esta migracion pueden no tener la clave del UPSERT
    constraints = [uc['name'] for uc in sa.inspect(bind).get_unique_constraints(TABLE)]
    if 'uq_etiquetas_ordem_filial_lote' not in constraints:
        op.create_unique_constraint(
            'uq_etiquetas_ordem_filial_lote',
            TABLE,
            ['ord_in_codigo', 'fil_in_codigo', 'orl_st_lotefabricacao'],
        )


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if inspector.has_table(TABLE):
        indexes = [idx['name'] for idx in inspector.get_indexes(TABLE)]
        if 'ix_etiquetas_ord_in_codigo' in indexes:
            op.drop_index('ix_etiquetas_ord_in_codigo', table_name=TABLE)
        op.drop_table(TABLE)
