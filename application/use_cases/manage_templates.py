"""
Template Management Use Case.

Creates and updates workout templates. A template is a replaceable record:
publishing a new record under the same identifier replaces the old one, so
an update is a complete new draft with a newer timestamp.
"""
import logging
import re
import time
from typing import Callable, List, Optional, Sequence

from application.exceptions import InvalidReferenceError, TemplateOwnershipError
from application.ports.record_provider import RecordProvider
from domain.converters.domain_to_records import DEFAULT_CLIENT, template_to_draft
from domain.models.record import RecordDraft
from domain.models.reference import RecordKind
from domain.models.template import Template, TemplateExercise
from domain.services.record_validator import validate_reference

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = ("fitness",)

_NON_SLUG = re.compile(r"[^a-z0-9]")


def _unix_now() -> int:
    return int(time.time())


def _unix_millis() -> int:
    return int(time.time() * 1000)


def template_identifier(name: str, suffix: int) -> str:
    """Identifier for a new template: slugged name plus a unique suffix."""
    return f"{_NON_SLUG.sub('-', name.lower())}-{suffix}"


def _dump_exercises(
    exercises: Optional[Sequence[TemplateExercise]], original: Template
) -> List[dict]:
    chosen = original.exercises if exercises is None else exercises
    return [entry.model_dump() for entry in chosen]


class TemplateManagementUseCase:
    """
    Use case for publishing workout templates.

    Only a template's author may update it in place. Anyone may save a
    modified copy of a template, which becomes a new template under their
    own authority.
    """

    def __init__(
        self,
        provider: RecordProvider,
        clock: Callable[[], int] = _unix_now,
        id_suffix: Callable[[], int] = _unix_millis,
        client: str = DEFAULT_CLIENT,
    ):
        """
        Initialize with required dependencies.

        Args:
            provider: Record provider used to publish templates
            clock: Returns the current unix time in seconds
            id_suffix: Returns the unique suffix for new template identifiers
            client: Client name written to published records
        """
        self._provider = provider
        self._clock = clock
        self._id_suffix = id_suffix
        self._client = client

    async def create_custom_template(
        self,
        authority: str,
        name: str,
        exercises: Sequence[TemplateExercise],
        description: str = "",
        estimated_duration: Optional[int] = None,
        difficulty: Optional[str] = None,
        categories: Sequence[str] = DEFAULT_CATEGORIES,
    ) -> Template:
        """
        Publish a new template built from scratch.

        Raises:
            InvalidReferenceError: If an exercise reference is malformed.
        """
        template = Template(
            id=template_identifier(name, self._id_suffix()),
            name=name,
            description=description,
            exercises=list(exercises),
            estimated_duration=estimated_duration,
            difficulty=difficulty,
            categories=list(categories),
            author=authority,
            created_at=self._clock(),
        )
        await self.publish_template(template)
        logger.info(f"Created template {template.id} for {authority[:8]}")
        return template

    async def create_modified_template(
        self,
        original: Template,
        authority: str,
        exercises: Optional[Sequence[TemplateExercise]] = None,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Template:
        """
        Save a modified copy of ``original`` as a new template owned by ``authority``.

        The original record is left untouched, whoever its author is.
        """
        name = name or f"{original.name} (Modified)"
        template = Template.model_validate(
            {
                **original.model_dump(),
                "id": template_identifier(name, self._id_suffix()),
                "name": name,
                "description": description
                if description is not None
                else f"Modified version of {original.name}",
                "exercises": _dump_exercises(exercises, original),
                "author": authority,
                "created_at": self._clock(),
                "record_id": None,
            }
        )
        await self.publish_template(template)
        logger.info(f"Saved {original.id} as new template {template.id} for {authority[:8]}")
        return template

    async def update_existing_template(
        self,
        original: Template,
        authority: str,
        exercises: Optional[Sequence[TemplateExercise]] = None,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Template:
        """
        Replace ``original`` with an updated record under the same identifier.

        The new record is timestamped strictly after the original so it wins
        newest-record selection even when both land in the same second.

        Raises:
            TemplateOwnershipError: If ``authority`` did not author ``original``.
        """
        if original.author != authority:
            raise TemplateOwnershipError(str(original.reference), authority)

        previous = int(original.created_at.timestamp())
        updated = Template.model_validate(
            {
                **original.model_dump(),
                "name": name or original.name,
                "description": description if description is not None else original.description,
                "exercises": _dump_exercises(exercises, original),
                "created_at": max(self._clock(), previous + 1),
                "record_id": None,
            }
        )
        await self.publish_template(updated)
        logger.info(f"Updated template {updated.id} ({updated.total_sets} sets)")
        return updated

    async def publish_template(self, template: Template) -> RecordDraft:
        """
        Build a template record and publish it.

        Raises:
            InvalidReferenceError: If an exercise reference is malformed.
        """
        self._require_exercise_refs(template.exercise_refs)
        draft = template_to_draft(template, client=self._client)
        await self._provider.publish_record(draft)
        logger.debug(f"Published template {template.id} with {len(draft.tags)} tags")
        return draft

    @staticmethod
    def _require_exercise_refs(refs: List[str]) -> None:
        for ref in refs:
            result = validate_reference(ref, expected_kind=RecordKind.EXERCISE)
            if not result.is_valid:
                raise InvalidReferenceError(ref, result.errors)
