import logging
import threading
import requests
from typing import Optional, Any, Dict, List
from trackodds.core.config import SUPABASE_URL, SUPABASE_ANON_KEY, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


class DataAccessError(RuntimeError):
    """Raised when a read against the hosted store fails or returns an unexpected payload."""


class SupabaseClient:
    _instance: Optional['SupabaseClient'] = None
    _session: Optional[requests.Session] = None
    _lock = threading.Lock()

    def __new__(cls) -> 'SupabaseClient':
        if cls._instance is None:
            cls._instance = super(SupabaseClient, cls).__new__(cls)
        return cls._instance

    def initialize_session(self) -> None:
        with self._lock:
            if self._session is not None:
                return
            if not SUPABASE_URL or not SUPABASE_ANON_KEY:
                raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY environment variables must be set")
            session = requests.Session()
            session.headers.update({
                "apikey": SUPABASE_ANON_KEY,
                "Authorization": f"Bearer {SUPABASE_ANON_KEY}",
                "Accept": "application/json",
            })
            self._session = session

    def get_session(self) -> requests.Session:
        """
        Returns the shared HTTP session, creating it on first use.
        """
        if self._session is None:
            self.initialize_session()

        if self._session is None:
            raise RuntimeError("Store session failed to initialize correctly.")

        return self._session

    def endpoint(self, table: str) -> str:
        return f"{SUPABASE_URL.rstrip('/')}/rest/v1/{table}"

    def select(self, table: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Runs a read query against a table through the PostgREST interface.

        Args:
            table (str): Table or view name.
            params (dict): PostgREST query parameters (select, filters, order, limit).

        Returns:
            List[Dict[str, Any]]: The rows returned by the store.

        Raises:
            DataAccessError: On transport errors, HTTP errors or a non-list payload.
        """
        query = {"select": "*"}
        if params:
            query.update(params)

        url = self.endpoint(table)
        logger.debug(f"GET {url} {query}")
        try:
            session = self.get_session()
            response = session.get(url, params=query, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            rows = response.json()
        except (requests.exceptions.RequestException, ValueError) as exc:
            raise DataAccessError(f"Query on '{table}' failed: {exc}") from exc

        if not isinstance(rows, list):
            raise DataAccessError(f"Unexpected payload from '{table}': {type(rows).__name__}")
        return [row for row in rows if isinstance(row, dict)]

    def close_session(self) -> None:
        """
        Closes the underlying HTTP session.
        """
        if self._session:
            self._session.close()
            self._session = None
