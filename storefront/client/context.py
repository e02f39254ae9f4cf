import logging
from typing import Optional

from storefront.client.api import ApiClient
from storefront.client.events import EventBus
from storefront.client.schemas import Session
from storefront.client.session import MemorySessionStore

log = logging.getLogger(__name__)


class ClientContext:
    """What every service is handed: the API client, the event bus and the
    current session (``None`` when logged out)."""

    def __init__(self, api: ApiClient = None, store=None, bus: EventBus = None):
        self.api = api or ApiClient()
        self.store = store if store is not None else MemorySessionStore()
        self.bus = bus or EventBus()
        self.session: Optional[Session] = None
        self._use(self.store.load())

    def _use(self, session: Optional[Session]):
        self.session = session
        self.api.token = session.token if session else None

    def sign_in(self, session: Session):
        self.store.save(session)
        self._use(session)
        log.info("signed in user %s as %s", session.user_id, session.role)

    def sign_out(self):
        self.store.clear()
        self._use(None)
