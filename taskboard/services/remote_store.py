"""
Backend distant - CRUD par collection, positions groupées, notifications de changement
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging
import uuid

import requests

from taskboard.core.exceptions import RemoteStoreError
from taskboard.schemas.enums import EntityKind

logger = logging.getLogger(__name__)

TABLES = {
    EntityKind.TASK: "tasks",
    EntityKind.SECTION: "sections",
    EntityKind.PROJECT: "projects",
    EntityKind.REMINDER: "reminders",
}

ChangeCallback = Callable[[], None]


def table_for(entity: EntityKind) -> str:
    try:
        return TABLES[EntityKind(entity)]
    except (KeyError, ValueError):
        raise RemoteStoreError(f"Unknown entity kind: {entity}")


class RemoteStore(ABC):
    """Contrat minimal attendu du backend.

    Les notifications ne portent aucune donnée utile: un abonné sait
    seulement que "quelque chose a changé" et refait un select.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Tuple[Optional[str], ChangeCallback]]] = defaultdict(list)

    @abstractmethod
    def select(self, entity: EntityKind, filters: Optional[Dict[str, Any]] = None,
               order_by: Optional[str] = None) -> List[dict]:
        ...

    @abstractmethod
    def insert(self, entity: EntityKind, row: dict) -> dict:
        ...

    @abstractmethod
    def update(self, entity: EntityKind, entity_id: str, changes: dict) -> dict:
        ...

    @abstractmethod
    def delete(self, entity: EntityKind, entity_id: str) -> None:
        ...

    @abstractmethod
    def set_positions(self, entity: EntityKind, positions: List[dict]) -> None:
        """Réécrit les positions [{"id", "position"}, ...] en un seul appel."""

    @abstractmethod
    def is_reachable(self) -> bool:
        ...

    def subscribe(self, entity: EntityKind, owner_id: Optional[str],
                  callback: ChangeCallback) -> Callable[[], None]:
        key = table_for(entity)
        subscription = (owner_id, callback)
        self._subscribers[key].append(subscription)

        def unsubscribe():
            if subscription in self._subscribers[key]:
                self._subscribers[key].remove(subscription)

        return unsubscribe

    def notify(self, entity: EntityKind, row: Optional[dict] = None) -> int:
        """Prévient les abonnés d'un changement. Retourne le nombre d'abonnés appelés."""
        owner = row.get("user_id") if row else None
        notified = 0
        for owner_id, callback in list(self._subscribers[table_for(entity)]):
            if owner is not None and owner_id is not None and owner != owner_id:
                continue
            callback()
            notified += 1
        return notified


def _sort_key(column: str):
    # valeurs nulles en dernier
    def key(row: dict):
        value = row.get(column)
        return (value is None, value if value is not None else "")
    return key


def sort_rows(rows: List[dict], column: str) -> List[dict]:
    return sorted(rows, key=_sort_key(column))


class InMemoryRemoteStore(RemoteStore):
    """Backend en mémoire (dev + tests). `reachable=False` simule une coupure réseau."""

    def __init__(self):
        super().__init__()
        self.tables: Dict[str, Dict[str, dict]] = {table: {} for table in TABLES.values()}
        self.reachable = True

    def _table(self, entity: EntityKind) -> Dict[str, dict]:
        if not self.reachable:
            raise RemoteStoreError("Remote store unreachable")
        return self.tables[table_for(entity)]

    def select(self, entity, filters=None, order_by=None):
        rows = [
            dict(row) for row in self._table(entity).values()
            if all(row.get(k) == v for k, v in (filters or {}).items())
        ]
        if order_by:
            rows = sort_rows(rows, order_by)
        return rows

    def insert(self, entity, row):
        table = self._table(entity)
        new_row = dict(row)
        new_row.setdefault("id", str(uuid.uuid4()))
        if new_row["id"] in table:
            raise RemoteStoreError(f"Duplicate id {new_row['id']}", status_code=409)
        table[new_row["id"]] = new_row
        self.notify(entity, new_row)
        return dict(new_row)

    def update(self, entity, entity_id, changes):
        table = self._table(entity)
        if entity_id not in table:
            raise RemoteStoreError(f"{table_for(entity)} {entity_id} not found", status_code=404)
        table[entity_id].update(changes)
        self.notify(entity, table[entity_id])
        return dict(table[entity_id])

    def delete(self, entity, entity_id):
        row = self._table(entity).pop(entity_id, None)
        if row is not None:
            self.notify(entity, row)

    def set_positions(self, entity, positions):
        table = self._table(entity)
        missing = [p["id"] for p in positions if p["id"] not in table]
        if missing:
            # tout ou rien
            raise RemoteStoreError(f"Unknown ids in reorder: {missing}", status_code=404)
        for item in positions:
            table[item["id"]]["position"] = item["position"]
        if positions:
            self.notify(entity, table[positions[0]["id"]])

    def is_reachable(self):
        return self.reachable


def _filter_value(value: Any) -> str:
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


class RestRemoteStore(RemoteStore):
    """Client REST façon PostgREST / Supabase.

    Les notifications temps réel arrivent par webhook (POST /sync/notify/{entity})
    qui appelle `notify`.
    """

    def __init__(self, base_url: str, api_key: str = "", access_token: str = "",
                 timeout: int = 10, rpc_set_positions: str = "set_positions",
                 session: Optional[requests.Session] = None):
        super().__init__()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.rpc_set_positions = rpc_set_positions
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if api_key:
            self.session.headers.update({"apikey": api_key})
        token = access_token or api_key
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}/{path}"
        try:
            r = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise RemoteStoreError(str(e)) from e
        if not r.ok:
            raise RemoteStoreError(f"{method} {path} failed: {r.status_code} {r.text}", status_code=r.status_code)
        return r

    def select(self, entity, filters=None, order_by=None):
        params = {"select": "*"}
        for column, value in (filters or {}).items():
            params[column] = _filter_value(value)
        if order_by:
            params["order"] = f"{order_by}.asc.nullslast"
        r = self._request("GET", table_for(entity), params=params)
        return r.json()

    def insert(self, entity, row):
        r = self._request("POST", table_for(entity), json=row,
                          headers={"Prefer": "return=representation"})
        rows = r.json()
        return rows[0] if rows else dict(row)

    def update(self, entity, entity_id, changes):
        r = self._request("PATCH", table_for(entity), params={"id": f"eq.{entity_id}"},
                          json=changes, headers={"Prefer": "return=representation"})
        rows = r.json()
        if not rows:
            raise RemoteStoreError(f"{table_for(entity)} {entity_id} not found", status_code=404)
        return rows[0]

    def delete(self, entity, entity_id):
        self._request("DELETE", table_for(entity), params={"id": f"eq.{entity_id}"})

    def set_positions(self, entity, positions):
        # une seule transaction côté serveur (fonction SQL)
        self._request("POST", f"rpc/{self.rpc_set_positions}",
                      json={"table_name": table_for(entity), "positions": positions})

    def is_reachable(self):
        try:
            r = self.session.get(f"{self.base_url}/", timeout=5)
            return r.status_code < 500
        except requests.RequestException as e:
            logger.warning(f"Remote store not reachable: {e}")
            return False
