"""Shared test fixtures."""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from threading import Lock
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from crop_gateway.api.app import create_app
from crop_gateway.config import Settings
from crop_gateway.containers import AppContainer
from crop_gateway.domain.documents import DocumentRecord, PageSize
from crop_gateway.domain.history import HistoryEntry, HistoryRecord
from crop_gateway.domain.regions import (
    PUBLIC_ACTOR,
    RegionDraft,
    RegionRecord,
    RegionSource,
    RegionUpdate,
)
from crop_gateway.domain.sessions import (
    CropSessionRecord,
    MutationResult,
    MutationStatus,
)
from crop_gateway.services.admin import AdminService
from crop_gateway.services.cache import InMemoryCache
from crop_gateway.services.documents import DocumentRepository, DocumentService
from crop_gateway.services.history import HistoryLedger, HistoryRepository
from crop_gateway.services.regions import (
    RegionMutationStore,
    RegionMutator,
    RegionRepository,
)
from crop_gateway.services.sessions import CropSessionRepository, SessionAuthorizer
from crop_gateway.services.sweeper import CropSessionSweeper
from crop_gateway.services.tenants import TenantDirectory, TenantService
from crop_gateway.services.tokens import TokenIssuer, generate_session_key

TENANT_ID = UUID("11111111-1111-1111-1111-111111111111")
OTHER_TENANT_ID = UUID("22222222-2222-2222-2222-222222222222")
TENANT_DOMAIN = "daily.example.com"
OTHER_TENANT_DOMAIN = "weekly.example.com"


@dataclass
class InMemoryDatabase:
    """Tables shared by the in-memory repositories.

    A single lock serializes transactions, so the conditional quota
    increment behaves like the row-level update in Postgres.
    """

    documents: dict[UUID, DocumentRecord] = field(default_factory=dict)
    page_sizes: dict[tuple[UUID, int], PageSize] = field(default_factory=dict)
    regions: dict[UUID, RegionRecord] = field(default_factory=dict)
    assets: dict[UUID, list[str]] = field(default_factory=dict)
    sessions: dict[UUID, CropSessionRecord] = field(default_factory=dict)
    history: list[HistoryRecord] = field(default_factory=list)
    domains: dict[str, UUID] = field(default_factory=dict)
    lock: Lock = field(default_factory=Lock)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self.lock:
            snapshot = (
                dict(self.regions),
                {key: list(value) for key, value in self.assets.items()},
                dict(self.sessions),
                list(self.history),
            )
            try:
                yield
            except Exception:
                self.regions, self.assets, self.sessions, self.history = snapshot
                raise

    def add_document(
        self,
        tenant_id: UUID = TENANT_ID,
        page_count: int = 4,
        page_width: float = 1000.0,
        page_height: float = 1500.0,
    ) -> DocumentRecord:
        document = DocumentRecord(
            id=uuid4(),
            tenant_id=tenant_id,
            page_count=page_count,
            page_width=page_width,
            page_height=page_height,
        )
        self.documents[document.id] = document
        return document

    def add_region(  # noqa: PLR0913
        self,
        document_id: UUID,
        page_number: int = 1,
        x: float = 10.0,
        y: float = 10.0,
        width: float = 100.0,
        height: float = 50.0,
        source: RegionSource = RegionSource.AUTOMATIC,
        is_active: bool = True,
        confidence: float | None = 0.87,
        label: str | None = "col-1",
    ) -> RegionRecord:
        region = RegionRecord(
            id=uuid4(),
            document_id=document_id,
            page_number=page_number,
            x=x,
            y=y,
            width=width,
            height=height,
            label=label,
            title=None,
            article_ref=None,
            source=source,
            is_active=is_active,
            confidence=confidence,
            created_by="system",
            updated_by="system",
        )
        self.regions[region.id] = region
        return region

    def add_session(  # noqa: PLR0913
        self,
        document_id: UUID,
        scoped_region_id: UUID | None = None,
        expires_at: datetime | None = None,
        update_count: int = 0,
        requester_fingerprint: str | None = None,
        session_key: str | None = None,
    ) -> CropSessionRecord:
        session = CropSessionRecord(
            id=uuid4(),
            session_key=session_key or generate_session_key(),
            document_id=document_id,
            tenant_id=self.documents[document_id].tenant_id,
            scoped_region_id=scoped_region_id,
            expires_at=expires_at or datetime.now(tz=UTC) + timedelta(minutes=5),
            update_count=update_count,
            requester_fingerprint=requester_fingerprint,
            user_agent=None,
        )
        self.sessions[session.id] = session
        return session

    def history_for(self, region_id: UUID) -> list[HistoryRecord]:
        return [record for record in self.history if record.entry.region_id == region_id]


@dataclass
class InMemoryDocumentRepository(DocumentRepository):
    """In-memory document repository for tests."""

    db: InMemoryDatabase
    lookups: int = 0

    def get_document(self, document_id: UUID) -> DocumentRecord | None:
        self.lookups += 1
        return self.db.documents.get(document_id)

    def get_page_size(self, document_id: UUID, page_number: int) -> PageSize | None:
        return self.db.page_sizes.get((document_id, page_number))


@dataclass
class InMemoryTenantDirectory(TenantDirectory):
    """In-memory tenant directory for tests."""

    db: InMemoryDatabase

    def resolve_domain(self, domain: str) -> UUID | None:
        return self.db.domains.get(domain)


@dataclass
class InMemoryCropSessionRepository(CropSessionRepository):
    """In-memory crop session repository for tests."""

    db: InMemoryDatabase

    def create_session(  # noqa: PLR0913
        self,
        session_key: str,
        document_id: UUID,
        scoped_region_id: UUID | None,
        expires_at: datetime,
        requester_fingerprint: str | None,
        user_agent: str | None,
    ) -> CropSessionRecord:
        session = CropSessionRecord(
            id=uuid4(),
            session_key=session_key,
            document_id=document_id,
            tenant_id=self.db.documents[document_id].tenant_id,
            scoped_region_id=scoped_region_id,
            expires_at=expires_at,
            update_count=0,
            requester_fingerprint=requester_fingerprint,
            user_agent=user_agent,
        )
        with self.db.lock:
            self.db.sessions[session.id] = session
        return session

    def get_by_key(self, session_key: str) -> CropSessionRecord | None:
        for session in list(self.db.sessions.values()):
            if session.session_key == session_key:
                return session
        return None

    def delete_expired(self, before: datetime) -> int:
        with self.db.lock:
            expired = [
                session_id
                for session_id, session in self.db.sessions.items()
                if session.expires_at < before
            ]
            for session_id in expired:
                del self.db.sessions[session_id]
        return len(expired)


@dataclass
class InMemoryRegionRepository(RegionRepository):
    """In-memory region repository for tests."""

    db: InMemoryDatabase

    def get_region(self, region_id: UUID) -> RegionRecord | None:
        return self.db.regions.get(region_id)

    def list_pending_regions(self, document_id: UUID) -> list[RegionRecord]:
        return [
            region
            for region in self.db.regions.values()
            if region.document_id == document_id
            and region.source is RegionSource.PUBLIC
            and not region.is_active
        ]

    def activate_region(self, region_id: UUID) -> RegionRecord | None:
        with self.db.lock:
            region = self.db.regions.get(region_id)
            if region is None:
                return None
            activated = replace(region, is_active=True, updated_by="admin")
            self.db.regions[region_id] = activated
        return activated


@dataclass
class InMemoryHistoryRepository(HistoryRepository):
    """In-memory history reads for tests."""

    db: InMemoryDatabase

    def list_for_region(self, region_id: UUID, limit: int) -> list[HistoryRecord]:
        return list(reversed(self.db.history_for(region_id)))[:limit]


@dataclass
class InMemoryRegionMutationStore(RegionMutationStore):
    """In-memory transactional store mirroring the crop_* stored functions."""

    db: InMemoryDatabase
    fail_on_region_write: bool = False
    before_commit: Callable[[], None] | None = None

    def apply_update(
        self,
        session_id: UUID,
        max_operations: int,
        update: RegionUpdate,
    ) -> MutationResult:
        if self.before_commit is not None:
            self.before_commit()
        with self.db.transaction():
            region = self.db.regions.get(update.region_id)
            if region is None:
                return MutationResult(status=MutationStatus.REGION_MISSING, update_count=0)
            failure = self._reserve(session_id, max_operations)
            if failure is not None:
                return failure
            rectangle = update.rectangle
            changed = region.rectangle != rectangle
            if changed:
                entry = HistoryEntry(
                    region_id=region.id,
                    previous=region.rectangle,
                    new=rectangle,
                    changed_by=update.changed_by,
                    session_id=session_id,
                    requester_fingerprint=update.requester_fingerprint,
                )
                self.db.history.append(
                    HistoryRecord(id=uuid4(), entry=entry, created_at=datetime.now(tz=UTC))
                )
            if self.fail_on_region_write:
                raise RuntimeError("could not serialize access: pg internal detail")
            updated = replace(
                region,
                x=rectangle.x,
                y=rectangle.y,
                width=rectangle.width,
                height=rectangle.height,
                label=update.metadata.get("label", region.label),
                title=update.metadata.get("title", region.title),
                confidence=None,
                updated_by=PUBLIC_ACTOR,
            )
            self.db.regions[region.id] = updated
            if changed:
                self.db.assets.pop(region.id, None)
            count = self.db.sessions[session_id].update_count
        return MutationResult(status=MutationStatus.OK, update_count=count, region=updated)

    def create_public_region(
        self, session_id: UUID, max_operations: int, draft: RegionDraft
    ) -> MutationResult:
        with self.db.transaction():
            failure = self._reserve(session_id, max_operations)
            if failure is not None:
                return failure
            region = RegionRecord(
                id=uuid4(),
                document_id=draft.document_id,
                page_number=draft.page_number,
                x=draft.rectangle.x,
                y=draft.rectangle.y,
                width=draft.rectangle.width,
                height=draft.rectangle.height,
                label=draft.label,
                title=draft.title,
                article_ref=draft.article_ref,
                source=RegionSource.PUBLIC,
                is_active=False,
                confidence=None,
                created_by=PUBLIC_ACTOR,
                updated_by=PUBLIC_ACTOR,
            )
            self.db.regions[region.id] = region
            count = self.db.sessions[session_id].update_count
        return MutationResult(status=MutationStatus.OK, update_count=count, region=region)

    def _reserve(self, session_id: UUID, max_operations: int) -> MutationResult | None:
        session = self.db.sessions.get(session_id)
        if session is None:
            return MutationResult(status=MutationStatus.SESSION_MISSING, update_count=0)
        if session.expires_at < datetime.now(tz=UTC):
            return MutationResult(
                status=MutationStatus.EXPIRED, update_count=session.update_count
            )
        if session.update_count >= max_operations:
            return MutationResult(
                status=MutationStatus.QUOTA_EXHAUSTED, update_count=session.update_count
            )
        self.db.sessions[session_id] = replace(
            session, update_count=session.update_count + 1
        )
        return None


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key=(
            "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
            "eyJyb2xlIjoic2VydmljZV9yb2xlIn0.c2lnbmF0dXJl"
        ),
        admin_token="admin-token",
        sweep_interval_seconds=0,
    )


@pytest.fixture
def db() -> InMemoryDatabase:
    database = InMemoryDatabase()
    database.domains[TENANT_DOMAIN] = TENANT_ID
    database.domains[OTHER_TENANT_DOMAIN] = OTHER_TENANT_ID
    return database


@pytest.fixture
def mutation_store(db: InMemoryDatabase) -> InMemoryRegionMutationStore:
    return InMemoryRegionMutationStore(db)


@pytest.fixture
def container(
    settings: Settings,
    db: InMemoryDatabase,
    mutation_store: InMemoryRegionMutationStore,
) -> AppContainer:
    cache = InMemoryCache()
    session_repository = InMemoryCropSessionRepository(db)
    region_repository = InMemoryRegionRepository(db)
    document_service = DocumentService(
        repository=InMemoryDocumentRepository(db),
        cache=cache,
        ttl_seconds=settings.document_cache_ttl_seconds,
    )
    authorizer = SessionAuthorizer(
        repository=session_repository,
        max_operations=settings.crop_session_max_operations,
    )
    history_ledger = HistoryLedger(InMemoryHistoryRepository(db))
    sweeper = CropSessionSweeper(session_repository)
    return AppContainer(
        settings=settings,
        tenant_service=TenantService(InMemoryTenantDirectory(db), cache),
        document_service=document_service,
        token_issuer=TokenIssuer(
            session_repository=session_repository,
            region_repository=region_repository,
            document_service=document_service,
            ttl_seconds=settings.crop_session_ttl_seconds,
        ),
        session_authorizer=authorizer,
        region_mutator=RegionMutator(
            region_repository=region_repository,
            mutation_store=mutation_store,
            document_service=document_service,
            authorizer=authorizer,
            history_ledger=history_ledger,
        ),
        sweeper=sweeper,
        admin_service=AdminService(
            region_repository=region_repository,
            history_ledger=history_ledger,
            sweeper=sweeper,
        ),
    )


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container), raise_server_exceptions=False)


@pytest.fixture
def tenant_headers() -> dict[str, str]:
    return {"X-Tenant-Domain": TENANT_DOMAIN}
