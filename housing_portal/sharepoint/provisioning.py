"""
SharePoint site provisioning for a single project.

Creates the collaboration site and Microsoft 365 group through the backend,
then uploads documents and adds team members against it. The three actions
share one busy slot: while one is in flight the others are rejected without
a request.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union, BinaryIO

from housing_portal.api.client import ApiClient, GENERIC_FAILURE
from housing_portal.core.action_state import (
    ActionState, Failed, IDLE, PENDING, Succeeded,
)
from housing_portal.core.domain_models import Project
from housing_portal.core.errors import PortalError, ServerError, ValidationError


logger = logging.getLogger(__name__)

CREATE_SITE = "create_site"
UPLOAD_DOCUMENT = "upload_document"
ADD_MEMBER = "add_member"
ACTIONS = (CREATE_SITE, UPLOAD_DOCUMENT, ADD_MEMBER)

_FALLBACK_ERRORS = {
    CREATE_SITE: "Failed to create SharePoint site",
    UPLOAD_DOCUMENT: "Failed to upload document",
    ADD_MEMBER: "Failed to add team member",
}


class ProvisioningStatus(Enum):
    UNPROVISIONED = "unprovisioned"
    PROVISIONING = "provisioning"
    PROVISIONED = "provisioned"


@dataclass
class ConfigStatus:
    """Backend report on whether the SharePoint integration is usable."""
    configured: bool = False
    message: str = ""
    missing_variables: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Optional[Dict[str, Any]]) -> "ConfigStatus":
        payload = payload or {}
        return cls(
            configured=bool(payload.get("configured")),
            message=payload.get("message") or "",
            missing_variables=list(payload.get("missing_variables") or []),
        )


class SiteProvisioningWorkflow:
    """
    Usage:
        flow = SiteProvisioningWorkflow(api, project, on_project_update=view.apply_update)
        flow.check_config()
        flow.create_site("owner@example.org")
        flow.upload_document("plans.pdf", folder_path="01 - Project Planning")
        flow.add_team_member("pm@example.org")
    """

    def __init__(self, api: ApiClient, project: Project,
                 on_project_update: Optional[Callable[[Project], None]] = None):
        self.api = api
        self.project = project
        self.on_project_update = on_project_update

        self.config_status: Optional[ConfigStatus] = None
        self.config_error: Optional[PortalError] = None

        self.states: Dict[str, ActionState] = {name: IDLE for name in ACTIONS}
        self.busy_action: Optional[str] = None
        self.message: Optional[str] = None
        self.error: Optional[str] = None

    # ---------------------------------------------------------
    # STATUS
    # ---------------------------------------------------------
    @property
    def configured(self) -> bool:
        return bool(self.config_status and self.config_status.configured)

    @property
    def status(self) -> ProvisioningStatus:
        if self.project.has_sharepoint_site:
            return ProvisioningStatus.PROVISIONED
        if self.busy_action == CREATE_SITE:
            return ProvisioningStatus.PROVISIONING
        return ProvisioningStatus.UNPROVISIONED

    def can_run(self, action: str) -> bool:
        """Whether the control for an action should be enabled."""
        if self.busy_action is not None:
            return False
        if action == CREATE_SITE:
            return self.configured and not self.project.has_sharepoint_site
        return self.project.has_sharepoint_site

    def check_config(self) -> Optional[ConfigStatus]:
        """Read the backend configuration status; None if it could not be read."""
        try:
            data = self.api.get("sharepoint/config/check")
        except PortalError as e:
            logger.error(f"Failed to check SharePoint config: {e}")
            self.config_status = None
            self.config_error = e
            return None

        self.config_status = ConfigStatus.from_dict(data)
        self.config_error = None
        if not self.config_status.configured:
            missing = ", ".join(self.config_status.missing_variables)
            logger.warning(f"SharePoint not configured; missing: {missing}")
        return self.config_status

    # ---------------------------------------------------------
    # ACTIONS
    # ---------------------------------------------------------
    def create_site(self, owner_identifier: Optional[str]) -> ActionState:
        owner = (owner_identifier or "").strip()

        def validate():
            if self.project.has_sharepoint_site:
                raise ValidationError("This project already has a SharePoint site")
            if not self.configured:
                raise ValidationError("SharePoint integration is not configured")
            if not owner:
                raise ValidationError("Owner User ID is required to create SharePoint site",
                                      field="owner_user_id")

        def perform():
            data = self.api.post_json(self._path("create-site"), {"owner_user_id": owner}) or {}
            site_url = (data.get("sharepoint_site_url") or "").strip()
            if not site_url:
                raise ServerError("SharePoint site URL missing from response")

            updated = self.project.merged(
                sharepoint_site_url=site_url,
                sharepoint_email=data.get("sharepoint_email"),
                sharepoint_group_id=data.get("group_id"),
            )
            self._adopt(updated)
            return data

        return self._run(
            CREATE_SITE, validate, perform,
            lambda data: (f"SharePoint site created successfully! "
                          f"{data.get('folders_created', 0)} folders created."),
        )

    def upload_document(self, document: Union[str, Path, BinaryIO, None],
                        folder_path: str = "") -> ActionState:
        """
        Upload a file to the project's document library.

        An empty folder_path uploads to the library root.
        """
        folder = (folder_path or "").strip()

        def validate():
            self._require_site()
            if document is None:
                raise ValidationError("Please select a file to upload", field="file")
            if isinstance(document, (str, Path)) and not Path(document).is_file():
                raise ValidationError(f"File not found: {document}", field="file")

        def perform():
            if isinstance(document, (str, Path)):
                path = Path(document)
                with path.open("rb") as fh:
                    return self._post_file(path.name, fh, folder)
            name = Path(getattr(document, "name", "upload")).name
            return self._post_file(name, document, folder)

        return self._run(
            UPLOAD_DOCUMENT, validate, perform,
            lambda data: f'Document "{(data or {}).get("file_name", "")}" uploaded successfully!',
        )

    def add_team_member(self, identifier: Optional[str]) -> ActionState:
        user_id = (identifier or "").strip()

        def validate():
            self._require_site()
            if not user_id:
                raise ValidationError("Team member email/user ID is required", field="user_id")

        def perform():
            return self.api.post_json(self._path("add-member"), {"user_id": user_id})

        return self._run(ADD_MEMBER, validate, perform,
                         lambda data: "Team member added successfully!")

    # ---------------------------------------------------------
    # INTERNALS
    # ---------------------------------------------------------
    def _path(self, action: str) -> str:
        return f"sharepoint/projects/{self.project.id}/{action}"

    def _post_file(self, name: str, fh, folder: str):
        return self.api.post_multipart(
            self._path("upload-document"),
            files={"file": (name, fh)},
            data={"folder_path": folder},
        )

    def _require_site(self) -> None:
        if not self.project.has_sharepoint_site:
            raise ValidationError("Create a SharePoint site for this project first")

    def _adopt(self, updated: Project) -> None:
        self.project = updated
        if self.on_project_update:
            self.on_project_update(updated)
        logger.info(f"Project {updated.id} provisioned at {updated.sharepoint_site_url}")

    def _fail(self, action: str, error: PortalError) -> ActionState:
        self.states[action] = Failed(error)
        self.error = str(error)
        self.message = None
        return self.states[action]

    def _run(self, action: str, validate: Callable[[], None],
             perform: Callable[[], Any], describe: Callable[[Any], str]) -> ActionState:
        if self.busy_action is not None:
            # The running action owns message/error and its own state slot
            rejected = Failed(ValidationError(
                f"Another SharePoint action is in progress ({self.busy_action})"))
            if action != self.busy_action:
                self.states[action] = rejected
            return rejected

        try:
            validate()
        except ValidationError as e:
            logger.warning(f"SharePoint {action} rejected for project {self.project.id}: {e}")
            return self._fail(action, e)

        self.busy_action = action
        self.states[action] = PENDING
        self.message = None
        self.error = None

        try:
            data = perform()
        except PortalError as e:
            if isinstance(e, ServerError) and e.message == GENERIC_FAILURE:
                e = ServerError(_FALLBACK_ERRORS[action], status_code=e.status_code)
            logger.error(f"SharePoint {action} failed for project {self.project.id}: {e}")
            return self._fail(action, e)
        finally:
            self.busy_action = None

        message = describe(data)
        self.states[action] = Succeeded(data, message)
        self.message = message
        self.error = None
        logger.info(f"SharePoint {action} succeeded for project {self.project.id}")
        return self.states[action]
