"""Per-invocation CLI state.

Services are created on first use, so a command only opens the
connections it needs. Tests pass pre-built collaborators in.
"""

import datetime as dt
import logging
from typing import Callable, Optional

from pydantic import ValidationError

from timebill.cli.error_handlers import ConfigurationError
from timebill.config.settings import TimebillConfig, get_config
from timebill.repositories import BillingRepository, get_engine, get_session_factory, init_db
from timebill.services import (
    DataCache,
    InvalidRequestError,
    InvoiceService,
    SalaryCreditService,
    TimebillApiClient,
    WorkspaceDataService,
)
from timebill.tracking import (
    JsonFileStore,
    KeyValueStore,
    TimeTracker,
    get_current_workspace_id,
)

logger = logging.getLogger(__name__)


class CliContext:
    """Lazily built services shared by the commands of one invocation."""

    def __init__(
        self,
        config: Optional[TimebillConfig] = None,
        api: Optional[TimebillApiClient] = None,
        cache: Optional[DataCache] = None,
        store: Optional[KeyValueStore] = None,
        repository: Optional[BillingRepository] = None,
        today: Callable[[], dt.date] = dt.date.today,
        debug: bool = False,
    ):
        self._config = config
        self._api = api
        self._cache = cache
        self._store = store
        self._repository = repository
        self._data: Optional[WorkspaceDataService] = None
        self.today = today
        self.debug = debug

    @property
    def config(self) -> TimebillConfig:
        if self._config is None:
            try:
                self._config = get_config()
            except ValidationError as e:
                fields = ", ".join(
                    str(err["loc"][0]) for err in e.errors() if err.get("loc")
                )
                raise ConfigurationError(
                    f"Invalid or missing settings: {fields}",
                    recovery_hint="Set them in the environment or a .env file",
                ) from e
        return self._config

    @property
    def api(self) -> TimebillApiClient:
        if self._api is None:
            self._api = TimebillApiClient.from_config(self.config)
        return self._api

    @property
    def cache(self) -> DataCache:
        if self._cache is None:
            self._cache = DataCache()
        return self._cache

    @property
    def data(self) -> WorkspaceDataService:
        if self._data is None:
            self._data = WorkspaceDataService(self.api, self.cache)
        return self._data

    @property
    def store(self) -> KeyValueStore:
        if self._store is None:
            self._store = JsonFileStore(self.config.state_file)
        return self._store

    @property
    def tracker(self) -> TimeTracker:
        return TimeTracker(self.store)

    @property
    def repository(self) -> BillingRepository:
        if self._repository is None:
            engine = get_engine(self.config.database_url)
            init_db(engine)
            self._repository = BillingRepository(get_session_factory(engine))
        return self._repository

    @property
    def credit_service(self) -> SalaryCreditService:
        return SalaryCreditService(self.repository, today=self.today)

    @property
    def invoice_service(self) -> InvoiceService:
        return InvoiceService(self.repository, self.credit_service, today=self.today)

    def workspace_id(self, explicit: Optional[str] = None) -> str:
        """The ``--workspace`` option, else the remembered workspace.

        Raises:
            InvalidRequestError: No workspace given or remembered
        """
        workspace_id = explicit or get_current_workspace_id(self.store)
        if not workspace_id:
            raise InvalidRequestError(
                "No workspace selected. Run 'timebill workspace use <id>' first"
            )
        return workspace_id

    def close(self) -> None:
        if self._cache is not None:
            self._cache.close()
        if self._api is not None:
            self._api.close()
