"""Content draft state machine.

One draft at a time: a draft targets a single leaf category and one content
kind. It moves IDLE -> COMPOSING -> SUBMITTING and returns to IDLE when the
catalog store accepts it, or to COMPOSING with the draft intact when the
submission fails.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from catalog_admin.catalog import CatalogClient
from catalog_admin.catalog.client import ContentPayload
from catalog_admin.core.models import MAX_IMAGES, Category, ContentAttachResult, StagedFile
from catalog_admin.core.results import ActionResult
from catalog_admin.core.types import ContentKind
from catalog_admin.core.video import validate_video_url
from catalog_admin.errors import CatalogError, InvalidTargetError, ValidationError

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
MAX_PDF_FILES = 1


class DraftState(Enum):
    IDLE = "idle"
    COMPOSING = "composing"
    SUBMITTING = "submitting"


@dataclass
class ContentDraft:
    """Staged, unsaved content for one leaf category."""

    target: Category
    kind: ContentKind
    text: str = ""
    video_url: str = ""
    files: list[StagedFile] = field(default_factory=list)

    def payload(self) -> ContentPayload:
        """Return the payload to submit for the draft's kind.

        Raises:
            ValidationError: If the staged payload is empty or invalid
        """
        if self.kind is ContentKind.TEXT:
            if not self.text.strip():
                raise ValidationError("Text content must not be empty")
            return self.text
        if self.kind is ContentKind.VIDEO:
            if not self.video_url.strip():
                raise ValidationError("Video URL must not be empty")
            return validate_video_url(self.video_url)
        if not self.files:
            raise ValidationError(f"Select at least one {self.kind.value} file")
        return list(self.files)


class DraftController:
    """Owns the in-progress content draft of a console."""

    def __init__(self, gateway: CatalogClient) -> None:
        self._gateway = gateway
        self._state = DraftState.IDLE
        self._draft: ContentDraft | None = None
        self.error: str | None = None

    @property
    def state(self) -> DraftState:
        return self._state

    @property
    def draft(self) -> ContentDraft | None:
        return self._draft

    @property
    def busy(self) -> bool:
        return self._state is DraftState.SUBMITTING

    def open_draft(self, target: Category, kind: ContentKind) -> ContentDraft:
        """Start composing content of one kind for a leaf category.

        Re-opening on the same target discards whatever was staged.

        Raises:
            InvalidTargetError: If target is not a leaf category
            ValidationError: If a draft is open for another target or submitting
        """
        if not target.is_leaf:
            raise InvalidTargetError(f'"{target.name}" is not a content category')
        if self._state is DraftState.SUBMITTING:
            raise ValidationError("A submission is already in progress")
        if self._draft is not None and self._draft.target.id != target.id:
            raise ValidationError(
                f'A draft is already open for "{self._draft.target.name}"'
            )

        self._draft = ContentDraft(target=target, kind=kind)
        self._state = DraftState.COMPOSING
        self.error = None
        logger.debug(f"Opened {kind.value} draft for {target.id}")
        return self._draft

    def stage_files(self, files: Iterable[StagedFile]) -> list[StagedFile]:
        """Replace the staged files with the acceptable ones from files.

        Images keep image/* files, PDFs keep application/pdf files; other
        files are dropped.

        Returns:
            The files now staged

        Raises:
            ValidationError: If the kind takes no files or too many match
        """
        draft = self._composing(ContentKind.IMAGE, ContentKind.PDF)
        if draft.kind is ContentKind.IMAGE:
            limit = MAX_IMAGES
            accepted = [f for f in files if f.content_type.startswith("image/")]
        else:
            limit = MAX_PDF_FILES
            accepted = [f for f in files if f.content_type == PDF_MIME_TYPE]

        if len(accepted) > limit:
            raise ValidationError(
                f"At most {limit} {draft.kind.value} file(s) can be attached at once"
            )
        draft.files = accepted
        return list(accepted)

    def remove_file(self, index: int) -> None:
        """Unstage the file at index.

        Raises:
            ValidationError: If no file draft is open or index is out of range
        """
        draft = self._composing(ContentKind.IMAGE, ContentKind.PDF)
        if not 0 <= index < len(draft.files):
            raise ValidationError(f"No staged file at position {index}")
        del draft.files[index]

    def set_text(self, value: str) -> None:
        self._composing(ContentKind.TEXT).text = value

    def set_video_url(self, value: str) -> None:
        self._composing(ContentKind.VIDEO).video_url = value

    def validate_video_url(self, value: str) -> str:
        """Check a video URL without touching the draft."""
        return validate_video_url(value)

    async def submit(self) -> ActionResult[ContentAttachResult]:
        """Send the draft to the catalog store.

        Raises:
            ValidationError: If no draft is being composed or its payload is
                empty or invalid; the draft is kept for correction
        """
        draft = self._composing()
        payload = draft.payload()

        self._state = DraftState.SUBMITTING
        self.error = None
        try:
            result = await self._gateway.attach_content(draft.target.id, draft.kind, payload)
        except CatalogError as e:
            logger.warning(f"Content submission failed: {e.message}")
            self._state = DraftState.COMPOSING
            self.error = e.message
            return ActionResult.failure(e)

        self._draft = None
        self._state = DraftState.IDLE
        message = result.message or f"{draft.kind.value} content added successfully"
        return ActionResult.success(result, message)

    def cancel(self) -> None:
        """Discard the draft."""
        if self._state is DraftState.SUBMITTING:
            raise ValidationError("A submission is already in progress")
        self._draft = None
        self._state = DraftState.IDLE
        self.error = None

    def _composing(self, *kinds: ContentKind) -> ContentDraft:
        if self._state is not DraftState.COMPOSING or self._draft is None:
            raise ValidationError("No content draft is open")
        if kinds and self._draft.kind not in kinds:
            raise ValidationError(f"Not available for {self._draft.kind.value} content")
        return self._draft
