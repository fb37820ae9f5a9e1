"""Session generator: turns stage lists into an ordered, timed pose sequence."""
from __future__ import annotations

import logging
import random
from typing import Any, Iterable, List, MutableSequence, Optional, Protocol, Sequence

from practice_engine.errors import PoolEmptyError, ValidationError, format_error_message
from practice_engine.library import ImageStore, Notifier
from practice_engine.models import ImageRef, SessionPreset, SessionStage, TimerEntry
from practice_engine.presets import quick_session_stages

_LOGGER_NAME = "DrawStack.Engine"
_ENGINE_LOGGER = logging.getLogger(_LOGGER_NAME)


class RandomSource(Protocol):
    def shuffle(self, items: MutableSequence[Any]) -> None: ...


class PoolResolver(Protocol):
    async def resolve(self, stage: SessionStage, stage_index: int) -> Sequence[ImageRef]: ...


class TagPoolResolver:
    """Resolves a stage pool from its own tag filter, the global filter, or the whole library.

    ``allowed_ids`` restricts every pool to the ordered image list the session was
    entered with; ``None`` means the entire library.
    """

    def __init__(
        self,
        image_store: ImageStore,
        *,
        global_tag_filter: Iterable[str] = (),
        allowed_ids: Optional[Iterable[str]] = None,
    ) -> None:
        self._store = image_store
        self.global_tag_filter = frozenset(global_tag_filter)
        self._allowed = None if allowed_ids is None else list(dict.fromkeys(allowed_ids))

    def effective_filter(self, stage: SessionStage) -> frozenset:
        return stage.tag_filter or self.global_tag_filter

    async def resolve(self, stage: SessionStage, stage_index: int) -> Sequence[ImageRef]:
        tags = self.effective_filter(stage)
        if tags:
            pool = await self._store.get_images_by_tags(sorted(tags))
        else:
            pool = await self._store.get_library_images()
        return self._restrict(pool)

    async def resolve_unfiltered(self) -> Sequence[ImageRef]:
        return self._restrict(await self._store.get_library_images())

    def _restrict(self, pool: Sequence[ImageRef]) -> List[ImageRef]:
        if self._allowed is None:
            return list(pool)
        by_id = {image.id: image for image in pool}
        return [by_id[image_id] for image_id in self._allowed if image_id in by_id]


class FallbackPoolResolver:
    """Classroom policy: an empty filtered pool falls back to the unfiltered library."""

    def __init__(self, inner: TagPoolResolver, notifier: Notifier) -> None:
        self._inner = inner
        self._notifier = notifier

    async def resolve(self, stage: SessionStage, stage_index: int) -> Sequence[ImageRef]:
        pool = await self._inner.resolve(stage, stage_index)
        if pool or not self._inner.effective_filter(stage):
            return pool
        warning = PoolEmptyError(stage_index, stage)
        self._notifier.warning(f"{warning.full_message}; using the whole library instead")
        return await self._inner.resolve_unfiltered()


async def generate(
    stages: Sequence[SessionStage],
    resolver: PoolResolver,
    *,
    random_source: Optional[RandomSource] = None,
) -> List[TimerEntry]:
    """Build the ordered entry list for a session.

    Raises ``ValidationError`` for an empty stage list (before any pool lookup) and
    ``PoolEmptyError`` when a stage resolves to no images. Nothing partial is returned.
    """
    if not stages:
        raise ValidationError("Add at least one stage before starting a session", field="stages")
    rng = random_source if random_source is not None else random.SystemRandom()

    entries: List[TimerEntry] = []
    pose_number = 0
    for stage_index, stage in enumerate(stages):
        pool = list(await resolver.resolve(stage, stage_index))
        if not pool:
            raise PoolEmptyError(stage_index, stage)
        rng.shuffle(pool)
        for draw in range(stage.image_count):
            pose_number += 1
            entries.append(
                TimerEntry(
                    image_id=pool[draw % len(pool)].id,
                    duration_seconds=int(stage.duration_seconds),
                    stage_index=stage_index,
                    pose_number=pose_number,
                )
            )
        _ENGINE_LOGGER.debug(
            "Stage %d resolved: pool=%d poses=%d duration=%ds",
            stage_index + 1,
            len(pool),
            stage.image_count,
            stage.duration_seconds,
        )
    _ENGINE_LOGGER.info("Generated session with %d poses across %d stages", len(entries), len(stages))
    return entries


async def generate_classroom_session(
    preset: SessionPreset,
    image_store: ImageStore,
    notifier: Notifier,
    *,
    global_tag_filter: Iterable[str] = (),
    allowed_ids: Optional[Iterable[str]] = None,
    random_source: Optional[RandomSource] = None,
) -> List[TimerEntry]:
    resolver = FallbackPoolResolver(
        TagPoolResolver(image_store, global_tag_filter=global_tag_filter, allowed_ids=allowed_ids),
        notifier,
    )
    try:
        return await generate(preset.stages, resolver, random_source=random_source)
    except (ValidationError, PoolEmptyError) as exc:
        notifier.error(format_error_message(exc))
        raise


async def generate_quick_session(
    image_count: int,
    duration_seconds: int,
    image_store: ImageStore,
    notifier: Notifier,
    *,
    tag_filter: Iterable[str] = (),
    allowed_ids: Optional[Iterable[str]] = None,
    random_source: Optional[RandomSource] = None,
) -> List[TimerEntry]:
    """Ad-hoc session: an empty pool aborts instead of falling back."""
    resolver = TagPoolResolver(image_store, allowed_ids=allowed_ids)
    try:
        stages = quick_session_stages(image_count, duration_seconds, tag_filter)
        return await generate(stages, resolver, random_source=random_source)
    except (ValidationError, PoolEmptyError) as exc:
        notifier.error(format_error_message(exc))
        raise
