"""
Library Collection Use Case.

Manages the standard per-user library collections (saved exercises, saved
workout templates, followed collections). Each one is a collection record
with a fixed identifier; every change publishes a complete new record that
replaces the previous one, never a merge.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from application.exceptions import InvalidReferenceError
from application.ports.record_provider import RecordFilter, RecordProvider
from application.services.cache_strategy import Availability, CacheStrategySelector
from application.use_cases.resolve_references import CollectionContent, ReferenceResolver
from domain.converters.domain_to_records import collection_to_draft
from domain.models.collection import Collection, LibraryCollectionType
from domain.models.reference import RecordKind, Reference
from domain.services.record_validator import validate_reference

logger = logging.getLogger(__name__)


@dataclass
class LibraryUpdateResult:
    """Outcome of adding or removing a library item."""

    collection: Optional[Collection]
    changed: bool
    item_ref: str
    message: str = ""


@dataclass
class OfflineAvailability:
    """Which library collections are readable from the local cache."""

    collections: Dict[LibraryCollectionType, Availability] = field(default_factory=dict)

    @property
    def any_available(self) -> bool:
        return any(a.available for a in self.collections.values())


def _unix_now() -> int:
    return int(time.time())


class LibraryCollectionUseCase:
    """
    Use case for reading and updating a user's library collections.
    """

    def __init__(
        self,
        provider: RecordProvider,
        resolver: ReferenceResolver,
        selector: CacheStrategySelector,
        clock: Callable[[], int] = _unix_now,
    ):
        """
        Initialize with required dependencies.

        Args:
            provider: Record provider used to publish updated collections
            resolver: Resolver used to look collections and their content up
            selector: Strategy selector used for offline checks
            clock: Returns the current unix time in seconds
        """
        self._provider = provider
        self._resolver = resolver
        self._selector = selector
        self._clock = clock

    @staticmethod
    def collection_ref(authority: str, collection_type: LibraryCollectionType) -> str:
        return str(
            Reference(
                kind=RecordKind.COLLECTION,
                authority=authority,
                identifier=collection_type.value,
            )
        )

    async def get_user_collection(
        self, authority: str, collection_type: LibraryCollectionType
    ) -> Optional[Collection]:
        """Return the newest library collection of this type, or None."""
        collection = await self._resolver.resolve_collection(
            self.collection_ref(authority, collection_type)
        )
        if collection is None:
            logger.info(f"No {collection_type.value} collection for {authority[:8]}")
        return collection

    async def create_collection(
        self,
        authority: str,
        collection_type: LibraryCollectionType,
        initial_refs: Sequence[str] = (),
    ) -> Collection:
        """Publish a new library collection holding ``initial_refs``."""
        collection = await self._publish(
            authority,
            collection_type,
            name=collection_type.display_name,
            description=collection_type.display_description,
            content_refs=list(dict.fromkeys(initial_refs)),
            previous=None,
        )
        logger.info(
            f"Created {collection_type.value} collection with {collection.item_count} items"
        )
        return collection

    async def add_to_collection(
        self, authority: str, collection_type: LibraryCollectionType, item_ref: str
    ) -> LibraryUpdateResult:
        """
        Add a reference to a library collection, creating the collection if needed.

        Adding a reference that is already present publishes nothing.

        Raises:
            InvalidReferenceError: If ``item_ref`` is malformed.
        """
        self._require_valid(item_ref)
        existing = await self.get_user_collection(authority, collection_type)

        if existing is None:
            created = await self.create_collection(authority, collection_type, [item_ref])
            return LibraryUpdateResult(
                collection=created, changed=True, item_ref=item_ref, message="Collection created"
            )

        if existing.contains(item_ref):
            logger.info(f"{item_ref} already in {collection_type.value}, skipping")
            return LibraryUpdateResult(
                collection=existing, changed=False, item_ref=item_ref, message="Already present"
            )

        updated = await self._publish(
            authority,
            collection_type,
            name=existing.name,
            description=existing.description,
            content_refs=existing.content_refs + [item_ref],
            previous=existing,
        )
        logger.info(f"Added {item_ref} to {collection_type.value} ({updated.item_count} items)")
        return LibraryUpdateResult(collection=updated, changed=True, item_ref=item_ref)

    async def remove_from_collection(
        self, authority: str, collection_type: LibraryCollectionType, item_ref: str
    ) -> LibraryUpdateResult:
        """Remove a reference from a library collection; a no-op when absent."""
        existing = await self.get_user_collection(authority, collection_type)

        if existing is None or not existing.contains(item_ref):
            return LibraryUpdateResult(
                collection=existing, changed=False, item_ref=item_ref, message="Not present"
            )

        updated = await self._publish(
            authority,
            collection_type,
            name=existing.name,
            description=existing.description,
            content_refs=[ref for ref in existing.content_refs if ref != item_ref],
            previous=existing,
        )
        logger.info(
            f"Removed {item_ref} from {collection_type.value} ({updated.item_count} remaining)"
        )
        return LibraryUpdateResult(collection=updated, changed=True, item_ref=item_ref)

    async def resolve_library_content(
        self, authority: str, collection_type: LibraryCollectionType
    ) -> Optional[CollectionContent]:
        """Resolve a library collection's templates and exercises."""
        return await self._resolver.resolve_collection_content(
            self.collection_ref(authority, collection_type)
        )

    async def offline_availability(self, authority: str) -> OfflineAvailability:
        """Check the local cache for each library collection of ``authority``."""
        result = OfflineAvailability()
        for collection_type in LibraryCollectionType:
            record_filter = RecordFilter(
                kinds=[int(RecordKind.COLLECTION)],
                authors=[authority],
                identifiers=[collection_type.value],
            )
            result.collections[collection_type] = await self._selector.check_availability(
                [record_filter]
            )
        return result

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _require_valid(item_ref: str) -> None:
        result = validate_reference(item_ref)
        if not result.is_valid:
            raise InvalidReferenceError(item_ref, result.errors)

    async def _publish(
        self,
        authority: str,
        collection_type: LibraryCollectionType,
        name: str,
        description: str,
        content_refs: List[str],
        previous: Optional[Collection],
    ) -> Collection:
        created_at = self._clock()
        if previous is not None:
            # A replacement must sort strictly after the record it replaces.
            created_at = max(created_at, int(previous.created_at.timestamp()) + 1)

        draft = collection_to_draft(
            authority=authority,
            identifier=collection_type.value,
            name=name,
            content_refs=content_refs,
            created_at=created_at,
            description=description,
        )
        await self._provider.publish_record(draft)
        return Collection(
            id=collection_type.value,
            name=name,
            description=description,
            content_refs=content_refs,
            author=authority,
            created_at=created_at,
        )
