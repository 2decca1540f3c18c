"""
Resolve Reference Use Case.

Resolves ``kind:authority:identifier`` references into typed domain objects
with batched, deduplicated fetches.

Every resolve operation follows the same shape:
1. Deduplicate the input references (first seen wins).
2. Validate each; invalid ones become diagnostics, never errors.
3. Group the valid ones by (kind, authority).
4. Issue exactly one fetch per group, all groups concurrently.
5. Keep the newest record per address, parse it, and omit references the
   provider has no record for.

Template resolution adds a second round for the exercises the templates
reference, so a template-then-exercises chain always costs two rounds no
matter how many templates are involved.

Provider errors (including timeouts) propagate to the caller unchanged.
"""

import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from application.exceptions import InvalidReferenceError, ReferenceKindMismatchError
from application.ports.record_provider import RecordFilter
from application.services.cache_strategy import CacheStrategy, CacheStrategySelector
from application.services.record_parser import RecordParser
from domain.models.collection import Collection
from domain.models.exercise import Exercise
from domain.models.record import RawRecord, newest_per_address
from domain.models.reference import RecordKind, Reference
from domain.models.template import Template
from domain.services.record_validator import validate_reference

logger = logging.getLogger(__name__)

GroupKey = Tuple[int, str]


@dataclass
class ReferenceDiagnostic:
    """Why a reference produced no item."""

    reference: str
    errors: List[str] = field(default_factory=list)


@dataclass
class ExerciseResolution:
    """Result of resolving exercise references."""

    exercises: List[Exercise] = field(default_factory=list)
    diagnostics: List[ReferenceDiagnostic] = field(default_factory=list)


@dataclass
class TemplateResolution:
    """Result of resolving template references and their exercises."""

    templates: List[Template] = field(default_factory=list)
    exercises: List[Exercise] = field(default_factory=list)
    diagnostics: List[ReferenceDiagnostic] = field(default_factory=list)

    def exercise_for(self, ref: str) -> Optional[Exercise]:
        """Return the resolved exercise a template entry points at, if any."""
        for exercise in self.exercises:
            if str(exercise.reference) == ref:
                return exercise
        return None


@dataclass
class CollectionResolution:
    """Result of resolving collection references."""

    collections: List[Collection] = field(default_factory=list)
    diagnostics: List[ReferenceDiagnostic] = field(default_factory=list)


@dataclass
class CollectionContent:
    """Full content of one collection."""

    collection: Collection
    templates: List[Template] = field(default_factory=list)
    exercises: List[Exercise] = field(default_factory=list)
    diagnostics: List[ReferenceDiagnostic] = field(default_factory=list)


@dataclass
class ResolvedTemplate:
    """One template with its exercises, as loaded for a detail view."""

    template: Template
    exercises: List[Exercise] = field(default_factory=list)
    elapsed_ms: float = 0.0


def dedupe(refs: Iterable[str]) -> List[str]:
    """Drop repeated references, keeping first-seen order."""
    return list(OrderedDict.fromkeys(refs))


def group_references(refs: Sequence[Reference]) -> Dict[GroupKey, List[str]]:
    """Group references by (kind, authority), collecting identifiers in order."""
    groups: Dict[GroupKey, List[str]] = {}
    for ref in refs:
        identifiers = groups.setdefault((int(ref.kind), ref.authority), [])
        if ref.identifier not in identifiers:
            identifiers.append(ref.identifier)
    return groups


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


class ReferenceResolver:
    """
    Resolves references of one kind at a time into domain objects.

    Holds its own RecordParser (and with it its own parse cache); nothing is
    shared between resolver instances.
    """

    def __init__(
        self,
        selector: CacheStrategySelector,
        parser: Optional[RecordParser] = None,
        strategy: Optional[Union[CacheStrategy, str]] = None,
        timeout_ms: Optional[int] = None,
    ):
        """
        Initialize with required dependencies.

        Args:
            selector: Cache strategy selector used for every fetch
            parser: Memoizing parser; a fresh one is created when omitted
            strategy: Read strategy for all fetches; selector default when None
            timeout_ms: Per-fetch timeout; selector default when None
        """
        self._selector = selector
        self._parser = parser if parser is not None else RecordParser()
        self._strategy = strategy
        self._timeout_ms = timeout_ms

    @property
    def parser(self) -> RecordParser:
        return self._parser

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    async def resolve_exercises(self, refs: Sequence[str]) -> ExerciseResolution:
        """
        Resolve exercise references.

        Raises:
            ReferenceKindMismatchError: If a well-formed reference is not an exercise.
            ProviderError: If a fetch failed or timed out.
        """
        started = time.perf_counter()
        exercises, diagnostics = await self._resolve_kind(refs, RecordKind.EXERCISE, strict=True)
        logger.info(
            f"Resolved {len(exercises)} exercises from {len(refs)} references "
            f"in {_elapsed_ms(started):.1f}ms"
        )
        return ExerciseResolution(exercises=exercises, diagnostics=diagnostics)

    async def resolve_templates(self, refs: Sequence[str]) -> TemplateResolution:
        """
        Resolve template references, then every exercise they reference.

        Exactly two rounds: one for all templates, one for the union of their
        exercise references.

        Raises:
            ReferenceKindMismatchError: If a well-formed reference is not a template.
            ProviderError: If a fetch failed or timed out.
        """
        started = time.perf_counter()
        templates, diagnostics = await self._resolve_kind(refs, RecordKind.TEMPLATE, strict=True)
        exercises, nested = await self._resolve_kind(
            self._nested_exercise_refs(templates), RecordKind.EXERCISE, strict=False
        )
        logger.info(
            f"Resolved {len(templates)} templates and {len(exercises)} exercises "
            f"in {_elapsed_ms(started):.1f}ms"
        )
        return TemplateResolution(
            templates=templates,
            exercises=exercises,
            diagnostics=diagnostics + nested,
        )

    async def resolve_collections(self, refs: Sequence[str]) -> CollectionResolution:
        """
        Resolve collection references to the newest record for each address.

        Raises:
            ReferenceKindMismatchError: If a well-formed reference is not a collection.
            ProviderError: If a fetch failed or timed out.
        """
        collections, diagnostics = await self._resolve_kind(
            refs, RecordKind.COLLECTION, strict=True
        )
        return CollectionResolution(collections=collections, diagnostics=diagnostics)

    async def resolve_collection(self, ref: str) -> Optional[Collection]:
        """
        Resolve one collection reference.

        Returns:
            The newest collection for the address, or None when not found

        Raises:
            InvalidReferenceError: If the reference is malformed.
        """
        self._require_valid(ref, RecordKind.COLLECTION)
        result = await self.resolve_collections([ref])
        return result.collections[0] if result.collections else None

    async def resolve_collection_content(
        self, collection: Union[Collection, str]
    ) -> Optional[CollectionContent]:
        """
        Resolve everything a collection references.

        Template references are resolved with their nested exercises; direct
        and nested exercise references share one exercise round. Nested
        collection references are not followed.

        Args:
            collection: A parsed collection, or a collection reference to look up first

        Returns:
            The content, or None when a collection reference was not found
        """
        started = time.perf_counter()
        if isinstance(collection, str):
            found = await self.resolve_collection(collection)
            if found is None:
                logger.info(f"Collection {collection} not found")
                return None
            collection = found

        diagnostics: List[ReferenceDiagnostic] = []
        template_refs: List[str] = []
        exercise_refs: List[str] = []
        for raw in dedupe(collection.content_refs):
            result = validate_reference(raw)
            if not result.is_valid:
                logger.warning(f"Skipping invalid reference in collection {collection.id}: {result.error}")
                diagnostics.append(ReferenceDiagnostic(reference=raw, errors=result.errors))
                continue
            kind = Reference.parse(raw).kind
            if kind is RecordKind.TEMPLATE:
                template_refs.append(raw)
            elif kind is RecordKind.EXERCISE:
                exercise_refs.append(raw)
            else:
                logger.debug(f"Not following nested collection {raw}")

        templates, template_diagnostics = await self._resolve_kind(
            template_refs, RecordKind.TEMPLATE, strict=False
        )
        exercises, exercise_diagnostics = await self._resolve_kind(
            exercise_refs + self._nested_exercise_refs(templates),
            RecordKind.EXERCISE,
            strict=False,
        )
        logger.info(
            f"Resolved collection {collection.id}: {len(templates)} templates, "
            f"{len(exercises)} exercises in {_elapsed_ms(started):.1f}ms"
        )
        return CollectionContent(
            collection=collection,
            templates=templates,
            exercises=exercises,
            diagnostics=diagnostics + template_diagnostics + exercise_diagnostics,
        )

    async def resolve_single_template(self, ref: str) -> Optional[ResolvedTemplate]:
        """
        Resolve one template and its exercises.

        Returns:
            The template with its exercises and the elapsed time, or None
            when the template was not found

        Raises:
            InvalidReferenceError: If the reference is malformed.
            ReferenceKindMismatchError: If the reference is not a template.
        """
        started = time.perf_counter()
        self._require_valid(ref, RecordKind.TEMPLATE)
        resolution = await self.resolve_templates([ref])
        if not resolution.templates:
            logger.info(f"Template {ref} not found")
            return None
        return ResolvedTemplate(
            template=resolution.templates[0],
            exercises=resolution.exercises,
            elapsed_ms=_elapsed_ms(started),
        )

    # -------------------------------------------------------------------------
    # Shared pipeline
    # -------------------------------------------------------------------------

    def _require_valid(self, ref: str, kind: RecordKind) -> None:
        result = validate_reference(ref)
        if not result.is_valid:
            raise InvalidReferenceError(ref, result.errors)
        if Reference.parse(ref).kind is not kind:
            raise ReferenceKindMismatchError(ref, int(kind))

    def _validate(
        self, refs: Sequence[str], kind: RecordKind, strict: bool
    ) -> Tuple[List[Reference], List[ReferenceDiagnostic]]:
        valid: List[Reference] = []
        diagnostics: List[ReferenceDiagnostic] = []
        for raw in dedupe(refs):
            result = validate_reference(raw)
            if not result.is_valid:
                logger.warning(f"Skipping invalid reference: {result.error}")
                diagnostics.append(ReferenceDiagnostic(reference=raw, errors=result.errors))
                continue
            ref = Reference.parse(raw)
            if ref.kind is not kind:
                if strict:
                    raise ReferenceKindMismatchError(raw, int(kind))
                message = f"Expected a kind {int(kind)} reference, got kind {int(ref.kind)}"
                logger.warning(f"Skipping {raw}: {message}")
                diagnostics.append(ReferenceDiagnostic(reference=raw, errors=[message]))
                continue
            valid.append(ref)
        return valid, diagnostics

    async def _resolve_kind(
        self, refs: Sequence[str], kind: RecordKind, strict: bool
    ) -> Tuple[list, List[ReferenceDiagnostic]]:
        valid, diagnostics = self._validate(refs, kind, strict)
        if not valid:
            return [], diagnostics

        groups = group_references(valid)
        batches = await self._fetch_groups(groups)

        wanted = {ref.address for ref in valid}
        parsed = {}
        for record in newest_per_address([r for batch in batches for r in batch]):
            if record.address not in wanted:
                continue
            item = self._parser.parse_as(record, kind)
            if item is None:
                diagnostics.append(
                    ReferenceDiagnostic(
                        reference=record.reference_string(),
                        errors=[f"Record {record.id} failed validation"],
                    )
                )
                continue
            parsed[record.address] = item

        items = [parsed[ref.address] for ref in valid if ref.address in parsed]
        missing = len(valid) - len(items)
        if missing:
            logger.debug(f"{missing} kind {int(kind)} references had no usable record")
        return items, diagnostics

    async def _fetch_groups(self, groups: Dict[GroupKey, List[str]]) -> List[List[RawRecord]]:
        """Fetch every group concurrently; the first failure cancels the rest."""
        tasks = [
            asyncio.ensure_future(self._fetch_group(kind, authority, identifiers))
            for (kind, authority), identifiers in groups.items()
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            # Collect sibling outcomes so none is left unretrieved.
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _fetch_group(
        self, kind: int, authority: str, identifiers: List[str]
    ) -> List[RawRecord]:
        record_filter = RecordFilter(kinds=[kind], authors=[authority], identifiers=identifiers)
        return await self._selector.fetch(
            [record_filter], strategy=self._strategy, timeout_ms=self._timeout_ms
        )

    @staticmethod
    def _nested_exercise_refs(templates: Sequence[Template]) -> List[str]:
        return dedupe(ref for template in templates for ref in template.exercise_refs)
