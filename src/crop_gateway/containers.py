"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from crop_gateway.adapters.supabase_crop_session_repository import (
    SupabaseCropSessionRepository,
)
from crop_gateway.adapters.supabase_document_repository import (
    SupabaseDocumentRepository,
)
from crop_gateway.adapters.supabase_history_repository import (
    SupabaseHistoryRepository,
)
from crop_gateway.adapters.supabase_region_mutation_store import (
    SupabaseRegionMutationStore,
)
from crop_gateway.adapters.supabase_region_repository import SupabaseRegionRepository
from crop_gateway.adapters.supabase_tenant_directory import SupabaseTenantDirectory
from crop_gateway.config import Settings
from crop_gateway.services.admin import AdminService
from crop_gateway.services.cache import InMemoryCache
from crop_gateway.services.documents import DocumentService
from crop_gateway.services.history import HistoryLedger
from crop_gateway.services.regions import RegionMutator
from crop_gateway.services.sessions import SessionAuthorizer
from crop_gateway.services.sweeper import CropSessionSweeper
from crop_gateway.services.tenants import TenantService
from crop_gateway.services.tokens import TokenIssuer


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    tenant_service: TenantService
    document_service: DocumentService
    token_issuer: TokenIssuer
    session_authorizer: SessionAuthorizer
    region_mutator: RegionMutator
    sweeper: CropSessionSweeper
    admin_service: AdminService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    cache = InMemoryCache()
    session_repository = SupabaseCropSessionRepository(supabase_client)
    region_repository = SupabaseRegionRepository(supabase_client)
    tenant_service = TenantService(SupabaseTenantDirectory(supabase_client), cache)
    document_service = DocumentService(
        repository=SupabaseDocumentRepository(supabase_client),
        cache=cache,
        ttl_seconds=resolved_settings.document_cache_ttl_seconds,
    )
    authorizer = SessionAuthorizer(
        repository=session_repository,
        max_operations=resolved_settings.crop_session_max_operations,
    )
    history_ledger = HistoryLedger(SupabaseHistoryRepository(supabase_client))
    region_mutator = RegionMutator(
        region_repository=region_repository,
        mutation_store=SupabaseRegionMutationStore(supabase_client),
        document_service=document_service,
        authorizer=authorizer,
        history_ledger=history_ledger,
    )
    token_issuer = TokenIssuer(
        session_repository=session_repository,
        region_repository=region_repository,
        document_service=document_service,
        ttl_seconds=resolved_settings.crop_session_ttl_seconds,
    )
    sweeper = CropSessionSweeper(session_repository)
    admin_service = AdminService(
        region_repository=region_repository,
        history_ledger=history_ledger,
        sweeper=sweeper,
    )
    return AppContainer(
        settings=resolved_settings,
        tenant_service=tenant_service,
        document_service=document_service,
        token_issuer=token_issuer,
        session_authorizer=authorizer,
        region_mutator=region_mutator,
        sweeper=sweeper,
        admin_service=admin_service,
    )
