"""
Pipeline de sincronización one-way: Power BI -> PostgreSQL.

Alimenta la tabla de referencia que consulta el generador de etiquetas.
Se puede ejecutar como job (scripts/powerbi_to_postgres_sync.py) o
dispararse desde la API de administración.

Objetivos de diseño:
- Idempotencia: UPSERT por (ord_in_codigo, fil_in_codigo, orl_st_lotefabricacao).
- Secuencial: una etapa a la vez, lotes de a uno.
- Sin reintentos: cada fallo es terminal y se reporta con la etapa donde ocurrió.
"""
