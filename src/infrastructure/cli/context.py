"""Wiring of settings, adapters and services for CLI commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import typer
from rich.console import Console

from src.application.ports.preference_store import PreferenceStorePort
from src.application.ports.zotero_library import ZoteroLibraryPort
from src.application.services.annotation_extractor import AnnotationExtractor
from src.application.services.capacities_sync import CapacitiesSyncService
from src.application.services.processed_items import ProcessedItemsStore
from src.domain.errors import (
    ZoteroConnectionError,
    ZoteroDatabaseLockedError,
    ZoteroDatabaseNotFoundError,
    ZoteroProfileNotFoundError,
)
from src.domain.policy.sync_policy import SyncPolicy
from src.domain.services.markdown_formatter import MarkdownOptions
from src.infrastructure.adapters.capacities_client import CapacitiesClient
from src.infrastructure.adapters.json_preference_store import JsonPreferenceStore
from src.infrastructure.adapters.rich_progress_reporter import RichProgressReporterAdapter
from src.infrastructure.adapters.zotero_local_db import LocalZoteroDbAdapter
from src.infrastructure.adapters.zotero_web_library import ZoteroWebLibraryAdapter
from src.infrastructure.config.settings import Settings

console = Console()
logger = logging.getLogger(__name__)


@dataclass
class CliState:
    """Options shared by all commands (set by the root callback)."""

    config_path: Path | None = None
    verbose: bool = False


def get_state(ctx: typer.Context) -> CliState:
    state = ctx.find_root().obj
    if isinstance(state, CliState):
        return state
    return CliState()


def load_settings(ctx: typer.Context) -> Settings:
    try:
        return Settings.from_toml(get_state(ctx).config_path)
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(code=1)


def build_preferences(settings: Settings) -> JsonPreferenceStore:
    return JsonPreferenceStore(settings.paths.preferences_file)


def markdown_options_from_preferences(preferences: PreferenceStorePort) -> MarkdownOptions:
    return MarkdownOptions(
        include_page_numbers=preferences.get_bool("includePageNumbers", True),
        include_tags=preferences.get_bool("includeTags", True),
        use_color_emoji=preferences.get_bool("useColorEmoji", True),
    )


def build_library(settings: Settings) -> ZoteroLibraryPort:
    """
    Open the Zotero library selected by `[zotero] mode`.

    Prints the problem and exits with code 1 when the library is unavailable.
    """
    zotero_settings = settings.zotero
    try:
        if zotero_settings.mode == "web":
            library: ZoteroLibraryPort = ZoteroWebLibraryAdapter(
                library_id=zotero_settings.library_id,
                api_key=zotero_settings.web.api_key,
                library_type=zotero_settings.library_type,
            )
            logger.info("Using web Zotero API adapter")
        else:
            db_path = Path(zotero_settings.db_path) if zotero_settings.db_path else None
            library = LocalZoteroDbAdapter(db_path=db_path)
            logger.info("Using local Zotero database adapter")
    except (ZoteroProfileNotFoundError, ZoteroDatabaseNotFoundError, ZoteroDatabaseLockedError) as e:
        console.print(f"[red]Zotero database unavailable: {e}[/red]")
        raise typer.Exit(code=1)
    except ZoteroConnectionError as e:
        console.print(f"[red]Zotero connection error: {e.message}[/red]")
        if e.reason:
            console.print(f"[yellow]Reason: {e.reason}[/yellow]")
        raise typer.Exit(code=1)
    return library


def build_client(settings: Settings, preferences: JsonPreferenceStore) -> CapacitiesClient:
    return CapacitiesClient(
        credentials=preferences.credentials,
        base_url=settings.capacities.base_url,
        timeout_seconds=settings.capacities.timeout_seconds,
    )


def build_service(
    settings: Settings,
    preferences: JsonPreferenceStore,
    library: ZoteroLibraryPort,
) -> CapacitiesSyncService:
    return CapacitiesSyncService(
        extractor=AnnotationExtractor(library),
        client=build_client(settings, preferences),
        processed_items=ProcessedItemsStore(preferences),
        markdown_options=markdown_options_from_preferences(preferences),
        policy=SyncPolicy(
            pacing_delay_seconds=settings.sync.pacing_delay_seconds,
            request_timeout_seconds=settings.capacities.timeout_seconds,
        ),
    )


def build_reporter() -> RichProgressReporterAdapter:
    return RichProgressReporterAdapter(console=console if console.is_terminal else None)
