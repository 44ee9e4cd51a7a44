"""Apps and the provisioning workflow that wires them to hosting."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from ..config import INTERFACE_APPS, SITE_DOMAIN
from ..exceptions import BackendError, ConflictError, NotFoundError, ValidationError
from ..models import AppRecord, CreatedApp, DirectoryHandle, SubdomainRecord
from ._base import Resource
from .fs import PuterFileSystem
from .hosting import PuterHosting

logger = logging.getLogger(__name__)


def _serves_app(subdomain: SubdomainRecord, app_uid: str) -> bool:
    """Check whether a subdomain's root directory lives under an app's AppData."""
    root = subdomain.root_dir
    dirname = root.get("dirname") if isinstance(root, dict) else None
    return isinstance(dirname, str) and dirname.endswith(app_uid)


class PuterApps(Resource):
    """Apps owned by the current user.

    :meth:`create` provisions an app in four dependent steps: the app record,
    a private directory, a subdomain serving that directory, and a final
    update pointing the record at the subdomain URL. The platform has no
    transaction spanning these, and nothing created before a failing step
    is removed.
    """

    def __init__(self, transport, fs: PuterFileSystem, hosting: PuterHosting) -> None:
        super().__init__(transport)
        self._fs = fs
        self._hosting = hosting

    async def get(self, name: str) -> AppRecord:
        """Get an app by name.

        Raises:
            NotFoundError: If no app has this name.
        """
        self._require(name, "App name is required", "name")

        envelope = await self._transport.call(
            INTERFACE_APPS,
            "read",
            {"id": {"name": name}},
            failure_message="Failed to get app info",
        )
        if not envelope.get("result"):
            raise NotFoundError("App", name)
        return self._safe_validate(AppRecord, envelope["result"])

    async def create(self, name: str, url: str = "", description: str = "") -> CreatedApp:
        """Create an app with its own directory and subdomain.

        Args:
            name: App name.
            url: Initial index URL; replaced by the subdomain URL in the last step.
            description: App description.

        Returns:
            The app record together with its directory and subdomain.

        Raises:
            ValidationError: If name is missing or the created record is incomplete.
            ConflictError: If an app with this name already exists.
            BackendError: If any provisioning step fails.
        """
        self._require(name, "App name is required", "name")

        app = await self._create_record(name, url, description)
        logger.debug(f"Created app record {app.uid} for {name}")

        try:
            directory = await self._create_directory(app)
            logger.debug(f"Created app directory {directory.path}")

            subdomain = await self._create_subdomain(app, directory)
            logger.debug(f"Created subdomain {subdomain.subdomain}")

            await self._link_subdomain(app, subdomain)
        except Exception:
            logger.warning(
                f"Provisioning of app {name} failed; app record {app.uid} and any "
                "directory or subdomain created for it were left in place"
            )
            raise

        return CreatedApp.model_validate(
            {**app.model_dump(), "directory": directory, "subdomain": subdomain}
        )

    async def _create_record(self, name: str, url: str, description: str) -> AppRecord:
        try:
            envelope = await self._transport.call(
                INTERFACE_APPS,
                "create",
                {
                    "object": {
                        "name": name,
                        "index_url": url,
                        "title": name,
                        "description": description,
                        "maximize_on_start": False,
                        "background": False,
                        "metadata": {"window_resizable": True},
                    },
                    "options": {"dedupe_name": True},
                },
                expect_success=True,
                failure_message="Failed to create app record",
            )
        except BackendError as e:
            if e.code == "APP_EXISTS":
                raise ConflictError("App already exists", e.code, e.details, e.status_code) from e
            raise

        if not envelope.get("result"):
            raise BackendError("Failed to create app record", "INVALID_RESPONSE", envelope)
        return self._safe_validate(AppRecord, envelope["result"])

    async def _create_directory(self, app: AppRecord) -> DirectoryHandle:
        if not app.uid or not app.owner or not app.owner.username:
            raise ValidationError("Invalid app record", details=app.model_dump())

        # Random leaf name, so deduplication is never needed
        path = f"/{app.owner.username}/AppData/{app.uid}/app-{uuid.uuid4()}"
        directory = await self._fs.mkdir(path, overwrite=True, dedupe_name=False)
        if not directory.uid:
            raise BackendError("Failed to create app directory", "INVALID_RESPONSE")
        return directory

    async def _create_subdomain(self, app: AppRecord, directory: DirectoryHandle) -> SubdomainRecord:
        name = f"{app.name}-{directory.uid.split('-')[0]}"
        return await self._hosting.create(name, directory.path)

    async def _link_subdomain(self, app: AppRecord, subdomain: SubdomainRecord) -> None:
        try:
            await self._transport.call(
                INTERFACE_APPS,
                "update",
                {
                    "id": {"name": app.name},
                    "object": {
                        "index_url": f"https://{subdomain.subdomain}.{SITE_DOMAIN}",
                        "title": app.name,
                    },
                },
                expect_success=True,
            )
        except BackendError as e:
            raise BackendError(
                "Failed to update app with subdomain URL", e.code, e.details, e.status_code
            ) from e

    async def update(
        self,
        name: str,
        title: str | None = None,
        description: str | None = None,
        index_url: str | None = None,
        directory: str | None = None,
    ) -> AppRecord:
        """Update an app.

        Args:
            name: App name.
            title: New title.
            description: New description.
            index_url: New index URL.
            directory: Not supported; local directory to publish as the app content.

        Returns:
            The app record after the update.

        Raises:
            ValidationError: If name is missing or directory is given.
            NotFoundError: If no app has this name.
        """
        self._require(name, "App name is required", "name")
        if directory is not None:
            raise ValidationError(
                "Updating app files from a directory is not supported", field="directory"
            )

        changes: dict[str, Any] = {
            key: value
            for key, value in (
                ("title", title),
                ("description", description),
                ("index_url", index_url),
            )
            if value is not None
        }
        if not changes:
            return await self.get(name)

        await self._transport.call(
            INTERFACE_APPS,
            "update",
            {"id": {"name": name}, "object": changes},
            expect_success=True,
            failure_message="Failed to update app",
        )
        return await self.get(name)

    async def delete(self, name: str) -> bool:
        """Delete an app and the subdomain serving it.

        Raises:
            NotFoundError: If no app has this name.
        """
        app = await self.get(name)

        await self._transport.call(
            INTERFACE_APPS,
            "delete",
            {"id": {"name": name}},
            expect_success=True,
            failure_message="Failed to delete app",
        )

        if app.uid:
            for subdomain in await self._hosting.list():
                if _serves_app(subdomain, app.uid):
                    await self._hosting.delete(subdomain.uid)
                    break
        return True

    async def list(self, stats_period: str = "all", icon_size: int = 64) -> list[AppRecord]:
        """List the apps the current user can edit.

        Args:
            stats_period: Period of the usage statistics included with each app.
            icon_size: Size of the returned app icons.
        """
        envelope = await self._transport.call(
            INTERFACE_APPS,
            "select",
            {
                "params": {"icon_size": icon_size},
                "predicate": ["user-can-edit"],
                "stats_period": stats_period,
            },
            failure_message="Failed to list apps",
        )
        return [self._safe_validate(AppRecord, r) for r in envelope.get("result") or []]
