"""Static site hosting: subdomains bound to storage directories."""

from __future__ import annotations

import logging
from typing import Any

from ..config import INTERFACE_SUBDOMAINS
from ..exceptions import ConflictError
from ..models import SubdomainRecord
from ._base import Resource

logger = logging.getLogger(__name__)


class PuterHosting(Resource):
    """Subdomains serving the content of a directory at ``<subdomain>.puter.site``."""

    async def create(self, subdomain: str, root_dir: str) -> SubdomainRecord:
        """Create a subdomain.

        Args:
            subdomain: Subdomain name, without the site domain.
            root_dir: Directory whose files are served.

        Returns:
            The created subdomain.

        Raises:
            ValidationError: If subdomain or root_dir is missing.
            BackendError: If the subdomain could not be created.
        """
        self._require(subdomain and root_dir, "Subdomain and root directory are required")

        envelope = await self._transport.call(
            INTERFACE_SUBDOMAINS,
            "create",
            {"object": {"subdomain": subdomain, "root_dir": root_dir}},
            expect_success=True,
            failure_message="Failed to create subdomain",
        )
        return self._safe_validate(SubdomainRecord, envelope.get("result"))

    async def delete(self, subdomain_id: str) -> dict[str, Any]:
        """Delete a subdomain.

        Args:
            subdomain_id: Subdomain identifier.

        Returns:
            The response envelope.
        """
        self._require(subdomain_id, "Subdomain ID is required", "subdomain_id")

        return await self._transport.call(
            INTERFACE_SUBDOMAINS,
            "delete",
            {"id": {"subdomain": subdomain_id}},
            expect_success=True,
            failure_message="Failed to delete subdomain",
        )

    async def list(self, **filters: Any) -> list[SubdomainRecord]:
        """List the user's subdomains.

        Args:
            **filters: Optional selection arguments passed to the backend.
        """
        envelope = await self._transport.call(
            INTERFACE_SUBDOMAINS,
            "select",
            filters,
            failure_message="Failed to list subdomains",
        )
        return [self._safe_validate(SubdomainRecord, r) for r in envelope.get("result") or []]


class PuterSites(Resource):
    """Website deployments, a thin layer over :class:`PuterHosting`."""

    def __init__(self, transport, hosting: PuterHosting) -> None:
        super().__init__(transport)
        self._hosting = hosting

    async def get(self, site_id: str) -> SubdomainRecord:
        """Get a site by uid."""
        self._require(site_id, "Site ID is required", "site_id")

        envelope = await self._transport.call(
            INTERFACE_SUBDOMAINS,
            "read",
            {"uid": site_id},
            expect_success=True,
            failure_message="Failed to get site info",
        )
        return self._safe_validate(SubdomainRecord, envelope.get("result"))

    async def create(self, name: str, directory: str) -> SubdomainRecord:
        """Publish a directory under a new subdomain.

        Args:
            name: Subdomain name.
            directory: Directory containing the website files.

        Raises:
            ConflictError: If the subdomain is already taken by the user.
        """
        self._require(name and directory, "Site name and directory are required")

        existing = await self._hosting.list()
        if any(site.subdomain == name for site in existing):
            raise ConflictError("Subdomain already exists", "SUBDOMAIN_EXISTS")

        return await self._hosting.create(name, directory)

    async def delete(self, site_id: str) -> bool:
        """Delete a site and its subdomain."""
        self._require(site_id, "Site ID is required", "site_id")

        await self._transport.post("/delete-site", {"site_uuid": site_id})
        await self._hosting.delete(site_id)
        logger.debug(f"Deleted site {site_id}")
        return True

    async def list(self) -> list[SubdomainRecord]:
        """List all sites."""
        return await self._hosting.list()
