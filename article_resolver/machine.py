"""Resolution state machine as a pure transition function.

``transition(state, event, config)`` returns the next state and the effects
the driver must carry out. Nothing in here touches a page or a clock, so the
whole table can be exercised with plain values.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, replace
from typing import Optional, Union

from .classifier import (
    HostClass,
    aggregator_url,
    archive_candidates,
    archive_run_url,
    classify,
    is_archive_root,
    reader_url,
)
from .config import ResolverConfig

logger = logging.getLogger(__name__)


class Stage(str, enum.Enum):
    START = "start"
    READER_PROXY = "reader_proxy"
    PAYWALL_AGGREGATOR = "paywall_aggregator"
    ARCHIVE_SNAPSHOT = "archive_snapshot"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class ResolutionState:
    original_url: str
    stage: Stage = Stage.START
    has_resolved: bool = False
    has_attempted_direct_archive: bool = False
    reader_fallback_taken: bool = False
    candidate_index: int = -1
    timeout_armed: bool = False
    current_url: str = ""
    dismissed: bool = False

    @property
    def closed(self) -> bool:
        return self.has_resolved or self.dismissed


# Events

@dataclass(frozen=True)
class Started:
    pass


@dataclass(frozen=True)
class NavigationFinished:
    url: str


@dataclass(frozen=True)
class ProbeCompleted:
    url: str
    blocked: bool


@dataclass(frozen=True)
class ArchiveLinkFound:
    url: str
    href: Optional[str]


@dataclass(frozen=True)
class TimedOut:
    pass


@dataclass(frozen=True)
class Dismissed:
    pass


Event = Union[Started, NavigationFinished, ProbeCompleted, ArchiveLinkFound, TimedOut, Dismissed]


# Effects

@dataclass(frozen=True)
class Load:
    url: str


@dataclass(frozen=True)
class RunProbe:
    url: str


@dataclass(frozen=True)
class FindArchiveLink:
    url: str


@dataclass(frozen=True)
class ArmTimeout:
    seconds: float


@dataclass(frozen=True)
class CancelTimeout:
    pass


@dataclass(frozen=True)
class Resolve:
    url: str


Effect = Union[Load, RunProbe, FindArchiveLink, ArmTimeout, CancelTimeout, Resolve]

Transition = tuple[ResolutionState, list]


def _resolve(state: ResolutionState, url: str) -> Transition:
    effects: list = [CancelTimeout()] if state.timeout_armed else []
    effects.append(Resolve(url))
    return replace(
        state,
        stage=Stage.RESOLVED,
        has_resolved=True,
        timeout_armed=False,
    ), effects


def _next_candidate(state: ResolutionState, config: ResolverConfig) -> Transition:
    """Load the archive candidate after the current one, or give up on the original URL."""
    candidates = archive_candidates(state.original_url, config)
    index = state.candidate_index + 1
    if index >= len(candidates):
        return _resolve(state, state.original_url)
    return replace(
        state,
        stage=Stage.ARCHIVE_SNAPSHOT,
        candidate_index=index,
    ), [Load(candidates[index])]


def _direct_archive(state: ResolutionState, config: ResolverConfig) -> Transition:
    """Archive landed on a page with no snapshot: retry the candidate list once."""
    if not state.has_attempted_direct_archive:
        candidates = archive_candidates(state.original_url, config)
        if config.chain_archive_candidates:
            index = min(state.candidate_index + 1, len(candidates) - 1)
        else:
            index = 0
        return replace(
            state,
            stage=Stage.ARCHIVE_SNAPSHOT,
            has_attempted_direct_archive=True,
            candidate_index=index,
        ), [Load(candidates[index])]
    if config.chain_archive_candidates:
        return _next_candidate(state, config)
    return _resolve(state, state.original_url)


def timeout_fallback(original_url: str, config: ResolverConfig) -> str:
    """URL handed out when nothing resolved in time."""
    if original_url.lower().startswith(("http://", "https://")):
        if config.reader_fallback:
            return reader_url(original_url, config)
        return archive_run_url(original_url, config)
    return original_url


def _on_started(state: ResolutionState, config: ResolverConfig) -> Transition:
    if state.stage is not Stage.START:
        return state, []
    effects: list = [ArmTimeout(config.timeout_seconds)]
    original = state.original_url
    if config.prefer_reader_mode and classify(original, config) is HostClass.NYT_ARTICLE:
        stage = Stage.READER_PROXY
        effects.append(Load(reader_url(original, config)))
    else:
        stage = Stage.PAYWALL_AGGREGATOR
        effects.append(Load(aggregator_url(original, config)))
    return replace(state, stage=stage, timeout_armed=True), effects


def _on_navigation(state: ResolutionState, url: str, config: ResolverConfig) -> Transition:
    state = replace(state, current_url=url)
    host_class = classify(url, config)

    if host_class is HostClass.AGGREGATOR:
        if state.stage is Stage.PAYWALL_AGGREGATOR:
            return state, [FindArchiveLink(url)]
        return state, []

    if host_class is HostClass.READER_PROXY:
        if state.stage is Stage.READER_PROXY:
            return state, [RunProbe(url)]
        return state, []

    if host_class is HostClass.ARCHIVE and state.stage is not Stage.START:
        state = replace(state, stage=Stage.ARCHIVE_SNAPSHOT)
        if is_archive_root(url):
            return _direct_archive(state, config)
        return state, [RunProbe(url)]

    logger.debug("Ignoring navigation to %s (%s) in stage %s", url, host_class.value, state.stage.value)
    return state, []


def _on_probe(state: ResolutionState, event: ProbeCompleted, config: ResolverConfig) -> Transition:
    if event.url != state.current_url:
        return state, []
    host_class = classify(event.url, config)

    if host_class is HostClass.READER_PROXY:
        if state.stage is not Stage.READER_PROXY:
            return state, []
        if not event.blocked:
            return _resolve(state, event.url)
        if state.has_attempted_direct_archive or state.reader_fallback_taken:
            return state, []
        candidates = archive_candidates(state.original_url, config)
        return replace(
            state,
            stage=Stage.ARCHIVE_SNAPSHOT,
            reader_fallback_taken=True,
            candidate_index=0,
        ), [Load(candidates[0])]

    if host_class is HostClass.ARCHIVE and state.stage is Stage.ARCHIVE_SNAPSHOT:
        if not event.blocked:
            return _resolve(state, event.url)
        if config.chain_archive_candidates:
            return _next_candidate(state, config)
        return _resolve(state, state.original_url)

    return state, []


def _on_archive_link(state: ResolutionState, event: ArchiveLinkFound, config: ResolverConfig) -> Transition:
    if state.stage is not Stage.PAYWALL_AGGREGATOR or event.url != state.current_url:
        return state, []
    if event.href and classify(event.href, config) is HostClass.ARCHIVE:
        target = event.href
    else:
        target = archive_run_url(state.original_url, config)
    return replace(state, stage=Stage.ARCHIVE_SNAPSHOT), [Load(target)]


def transition(state: ResolutionState, event, config: ResolverConfig) -> Transition:
    if state.closed:
        return state, []

    if isinstance(event, Started):
        return _on_started(state, config)
    if isinstance(event, NavigationFinished):
        return _on_navigation(state, event.url, config)
    if isinstance(event, ProbeCompleted):
        return _on_probe(state, event, config)
    if isinstance(event, ArchiveLinkFound):
        return _on_archive_link(state, event, config)
    if isinstance(event, TimedOut):
        if not state.timeout_armed:
            return state, []
        state = replace(state, timeout_armed=False)
        return _resolve(state, timeout_fallback(state.original_url, config))
    if isinstance(event, Dismissed):
        effects = [CancelTimeout()] if state.timeout_armed else []
        return replace(state, dismissed=True, timeout_armed=False), effects

    raise TypeError(f"unknown resolver event: {event!r}")
