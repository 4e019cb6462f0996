"""Composition root for the Promise Realty client.

Builds the storage, backend client, auth session, resource clients, and
back-office actions from one Settings object.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from realty.auth.session import AuthSession
from realty.client.backend import BackendClient
from realty.client.fallback import RetryPolicy
from realty.client.resources import (
    ADMIN_REVIEWS,
    BLOGS,
    CONTACTS,
    PROPERTIES,
    REVIEWS,
    VISIT_REQUESTS,
    PropertyClient,
    ResourceClient,
    ResourceSpec,
)
from realty.client.sub_admins import SubAdminClient
from realty.store.persistent import JsonFileStore, PersistentStore
from realty.store.records import LocalRecordStore
from . import constants
from .actions import AdminActions
from .env_loader import Settings
from .logging_config import setup_logging
from .notifications import LoggingNotifier, Notifier

logger = logging.getLogger(__name__)


@dataclass
class RealtyApp:
    settings: Settings
    store: PersistentStore
    notifier: Notifier
    backend: BackendClient
    session: AuthSession
    properties: PropertyClient
    reviews: ResourceClient
    admin_reviews: ResourceClient
    blogs: ResourceClient
    contacts: ResourceClient
    visit_requests: ResourceClient
    sub_admins: SubAdminClient
    actions: AdminActions

    @classmethod
    def build(
        cls,
        settings: Optional[Settings] = None,
        store: Optional[PersistentStore] = None,
        notifier: Optional[Notifier] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> RealtyApp:
        """Wire every component together.

        Args:
            settings: Defaults to Settings.from_env().
            store: Defaults to a JsonFileStore at settings.storage_path.
            notifier: Defaults to a LoggingNotifier.
            transport: httpx transport for every backend call, e.g. an
                httpx.ASGITransport in tests.
        """
        settings = settings or Settings.from_env()
        if settings.log_level is not None:
            setup_logging(settings.log_level)
        store = store if store is not None else JsonFileStore(
            settings.resolved_storage_path
        )
        notifier = notifier or LoggingNotifier()
        retry_policy = RetryPolicy.from_settings(settings)

        backend = BackendClient(settings=settings, store=store, transport=transport)
        session = AuthSession(backend, store, notifier, settings)
        # The backend needs the session to end it on a 401, and vice versa.
        backend.on_unauthorized = session.handle_unauthorized

        def resource(spec: ResourceSpec, client_cls=ResourceClient):
            return client_cls(
                spec=spec,
                backend=backend,
                local=LocalRecordStore(store, spec.storage_key),
                settings=settings,
                retry_policy=retry_policy,
            )

        properties = resource(PROPERTIES, PropertyClient)
        reviews = resource(REVIEWS)
        admin_reviews = resource(ADMIN_REVIEWS)
        blogs = resource(BLOGS)
        contacts = resource(CONTACTS)
        visit_requests = resource(VISIT_REQUESTS)
        sub_admins = SubAdminClient(
            backend=backend,
            local=LocalRecordStore(store, constants.SUB_ADMINS_KEY),
            settings=settings,
        )
        actions = AdminActions(
            session=session,
            properties=properties,
            blogs=blogs,
            reviews=admin_reviews,
            contacts=contacts,
            visit_requests=visit_requests,
            sub_admins=sub_admins,
            notifier=notifier,
        )
        logger.info(f"Built client for {settings.api_base_url}")
        return cls(
            settings=settings,
            store=store,
            notifier=notifier,
            backend=backend,
            session=session,
            properties=properties,
            reviews=reviews,
            admin_reviews=admin_reviews,
            blogs=blogs,
            contacts=contacts,
            visit_requests=visit_requests,
            sub_admins=sub_admins,
            actions=actions,
        )

    async def start(self) -> bool:
        """Restore any persisted session. Returns whether one was restored."""
        return await self.session.restore_session()
