"""Tenant resolution for public requests."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from crop_gateway.config import normalize_domain
from crop_gateway.domain.errors import tenant_required
from crop_gateway.services.cache import Cache


class TenantDirectory(Protocol):
    """Maps public domains to tenants."""

    def resolve_domain(self, domain: str) -> UUID | None:
        """Return the tenant id serving a domain, if any."""


@dataclass
class TenantService:
    """Resolves the tenant for a request from its domain header."""

    directory: TenantDirectory
    cache: Cache
    ttl_seconds: int = 300

    def resolve(self, raw_domain: str | None) -> UUID:
        domain = normalize_domain(raw_domain)
        if domain is None:
            raise tenant_required()
        cache_key = f"tenant:{domain}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, UUID):
            return cached
        tenant_id = self.directory.resolve_domain(domain)
        if tenant_id is None:
            raise tenant_required()
        self.cache.set(cache_key, tenant_id, ttl_seconds=self.ttl_seconds)
        return tenant_id
