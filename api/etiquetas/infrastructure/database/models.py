"""
Modelos de base de datos (ORM).
"""
from sqlalchemy import BigInteger, Column, DateTime, Index, Integer, Text, UniqueConstraint
from sqlalchemy.sql import func

from etiquetas.core.config import settings
from etiquetas.infrastructure.database.session import Base


class ProductionLabelModel(Base):
    """
    Orden de produccion sincronizada desde Power BI.

    La misma OP puede tener varias filas (distinta filial o lote); la
    unicidad es la clave compuesta que usa el UPSERT del sync.
    """

    __tablename__ = settings.LABELS_TABLE_NAME
    __table_args__ = (
        UniqueConstraint(
            "ord_in_codigo", "fil_in_codigo", "orl_st_lotefabricacao",
            name="uq_etiquetas_ordem_filial_lote",
        ),
        Index("ix_etiquetas_ord_in_codigo", "ord_in_codigo"),
    )

    # BigInteger no autoincrementa en SQLite; se usa Integer en ese dialecto.
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    ord_in_codigo = Column(BigInteger, nullable=False)
    ord_dt_abertura_real = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    fil_in_codigo = Column(Integer, nullable=False, server_default="1")
    pro_st_alternativo = Column(Text, nullable=False, server_default="")
    pro_st_descricao = Column(Text, nullable=False, server_default="Produto sem descrição")
    orl_st_lotefabricacao = Column(Text, nullable=False, server_default="")
    esv_st_valor = Column(Text, nullable=False, server_default="")

    def __repr__(self):
        return (
            f"<ProductionLabel(op={self.ord_in_codigo}, filial={self.fil_in_codigo}, "
            f"lote={self.orl_st_lotefabricacao})>"
        )
