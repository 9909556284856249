"""Supabase-backed tenant domain lookups."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from crop_gateway.services.tenants import TenantDirectory


@dataclass
class SupabaseTenantDirectory(TenantDirectory):
    """Resolves tenants from the tenant_domains table."""

    client: Client

    def resolve_domain(self, domain: str) -> UUID | None:
        response = (
            self.client.table("tenant_domains")
            .select("tenant_id")
            .eq("domain", domain)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return UUID(response.data[0]["tenant_id"])
