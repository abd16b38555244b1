"""
Clientes HTTP mínimos para Azure AD y la API REST de Power BI (sin SDKs externos).

Requisitos cubiertos:
- requests
- token OAuth2 client_credentials
- executeQueries con una consulta DAX fija (TOPN)

Sin reintentos: cualquier fallo es terminal para la corrida y el caller
decide si vuelve a disparar el sync.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import requests

from etiquetas.shared.exceptions.sync import AuthenticationError, QueryError, RemoteQueryError

from .types import (
    COL_OPENED_AT,
    LABEL_COLUMNS,
    PowerBiSyncConfig,
)

# Cota fija de filas por corrida (no configurable por el caller).
QUERY_ROW_LIMIT = 5000


def _quote_table(table_name: str) -> str:
    """Referencia de tabla DAX: comillas simples, duplicando las internas."""
    return "'" + table_name.replace("'", "''") + "'"


def build_dax_query(table_name: str, limit: int = QUERY_ROW_LIMIT) -> str:
    """
    Construye la consulta DAX: top-N filas ordenadas por fecha de apertura desc,
    proyectando solo las columnas que usa la etiqueta.
    """
    table_ref = _quote_table(table_name)
    columns = ",\n".join(
        f'      "{col}", {table_ref}[{col}]' for col in LABEL_COLUMNS
    )
    return (
        "EVALUATE\n"
        "SELECTCOLUMNS(\n"
        f"  TOPN({limit}, {table_ref}, {table_ref}[{COL_OPENED_AT}], DESC),\n"
        f"{columns}\n"
        ")"
    )


def extract_rows(payload: dict[str, Any]) -> list[dict[str, Any]]:
    """results[0].tables[0].rows, o [] si falta cualquier nivel."""
    results = payload.get("results") or []
    if not results:
        return []
    tables = (results[0] or {}).get("tables") or []
    if not tables:
        return []
    return (tables[0] or {}).get("rows") or []


class AzureTokenAcquirer:
    """
    Obtiene un bearer token vía OAuth2 client_credentials.

    El cuerpo de la respuesta de error se conserva textual: suele traer el
    diagnóstico útil (AADSTS7000215 = secret inválido, etc.).
    """

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        authority_url: str = "https://login.microsoftonline.com",
        timeout_s: int = 60,
    ) -> None:
        self._session = session or requests.Session()
        self._authority_url = authority_url.rstrip("/")
        self._timeout_s = timeout_s

    def token_url(self, tenant_id: str) -> str:
        return f"{self._authority_url}/{tenant_id}/oauth2/v2.0/token"

    def acquire(self, config: PowerBiSyncConfig) -> str:
        data = {
            "grant_type": "client_credentials",
            "client_id": config.client_id,
            "client_secret": config.client_secret,
            "scope": config.scope,
        }
        try:
            resp = self._session.post(
                self.token_url(config.tenant_id),
                data=data,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self._timeout_s,
            )
        except requests.RequestException as e:
            raise AuthenticationError(f"Azure AD inaccesible: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise AuthenticationError(
                f"Falla de autenticacion Azure ({resp.status_code}): {resp.text}",
                status=resp.status_code,
                body=resp.text,
            )

        try:
            token = resp.json().get("access_token")
        except ValueError as e:
            raise AuthenticationError(
                f"Respuesta de Azure AD no es JSON: {resp.text}",
                status=resp.status_code,
                body=resp.text,
            ) from e

        if not token:
            raise AuthenticationError(
                "Azure AD respondio sin 'access_token'",
                status=resp.status_code,
                body=resp.text,
            )
        return token


class PowerBiDatasetQuerier:
    """
    Ejecuta la consulta DAX fija contra executeQueries y devuelve las filas crudas.

    Importante:
    - No hace cast de tipos: eso se decide en la normalización.
    - Un 2xx no implica éxito: Power BI puede devolver `error` dentro del sobre.
    """

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        base_url: str = "https://api.powerbi.com/v1.0/myorg",
        timeout_s: int = 60,
    ) -> None:
        self._session = session or requests.Session()
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s

    def query_url(self, group_id: str, dataset_id: str) -> str:
        return f"{self._base_url}/groups/{group_id}/datasets/{dataset_id}/executeQueries"

    def fetch_rows(self, token: str, config: PowerBiSyncConfig) -> list[dict[str, Any]]:
        body = {
            "queries": [{"query": build_dax_query(config.table_name)}],
            "serializerSettings": {"includeNulls": True},
        }
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        try:
            resp = self._session.post(
                self.query_url(config.group_id, config.dataset_id),
                json=body,
                headers=headers,
                timeout=self._timeout_s,
            )
        except requests.RequestException as e:
            raise QueryError(f"Power BI inaccesible: {e}") from e

        if resp.status_code == 404:
            raise QueryError(
                "Dataset o workspace no encontrado, o el service principal "
                f"({config.client_id}) no esta autorizado: agreguelo como miembro/admin "
                f"del workspace. Respuesta (404): {resp.text}",
                status=404,
                body=resp.text,
                error_code="DATASET_NOT_FOUND",
            )

        if not 200 <= resp.status_code < 300:
            raise QueryError(
                f"Consulta Power BI fallo ({resp.status_code}): {resp.text}",
                status=resp.status_code,
                body=resp.text,
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise QueryError(
                f"Respuesta de Power BI no es JSON: {resp.text}",
                status=resp.status_code,
                body=resp.text,
            ) from e

        if payload.get("error"):
            raise RemoteQueryError(
                f"Power BI devolvio error de consulta: {json.dumps(payload['error'], ensure_ascii=False)}",
                payload["error"],
            )

        # Errores por consulta vienen dentro de results[i].error
        first_result = (payload.get("results") or [{}])[0] or {}
        if first_result.get("error"):
            raise RemoteQueryError(
                f"Power BI devolvio error de consulta: {json.dumps(first_result['error'], ensure_ascii=False)}",
                first_result["error"],
            )

        return extract_rows(payload)
