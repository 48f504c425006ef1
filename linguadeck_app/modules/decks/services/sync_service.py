# File: linguadeck_app/modules/decks/services/sync_service.py
# Mục đích: Đồng bộ các deck hội thoại toàn cục với thư viện file và materialize hàng loạt.

import datetime
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from flask import current_app, has_app_context

from linguadeck_app.models import Deck, db
from linguadeck_app.modules.dialogues.config import DialogueModuleDefaultConfig
from linguadeck_app.modules.dialogues.interface import DialogueSourceRepository, get_source_repository
from linguadeck_app.utils.db_session import safe_commit

from ..config import DecksModuleDefaultConfig
from ..exceptions import DialogueKeyUnresolvedError, DialogueSourceNotFoundError
from ..logics.target_spec import (
    TargetSpec,
    build_deck_name,
    choose_target_label,
    is_dialogue_deck,
    resolve_dialogue_key,
)
from ..schemas import ReconcileReport, SyncResultDTO
from .deck_store import DeckStore
from .normalize_service import NormalizeService

logger = logging.getLogger(__name__)


def _config_value(key: str, default):
    if has_app_context():
        return current_app.config.get(key) or default
    return default


def _recency(deck: Deck):
    return (deck.updated_at or datetime.datetime.min, deck.id)


class DialogueDeckSyncService:
    """Keeps global dialogue decks aligned with the dialogue library."""

    def __init__(self, repository: Optional[DialogueSourceRepository] = None,
                 source_language: Optional[str] = None,
                 default_target_language: Optional[str] = None):
        self.repository = repository or get_source_repository()
        self.source_language = (source_language or _config_value(
            'DIALOGUE_SOURCE_LANGUAGE', DialogueModuleDefaultConfig.SOURCE_LANGUAGE)).lower()
        self.default_target_language = (default_target_language or _config_value(
            'DIALOGUE_DEFAULT_TARGET_LANGUAGE', DialogueModuleDefaultConfig.DEFAULT_TARGET_LANGUAGE)).lower()

    # ------------------------------------------------------------------
    # Reconcile
    # ------------------------------------------------------------------
    def reconcile(self) -> ReconcileReport:
        """
        Dedupe, delete vanished, rename and create global dialogue decks.

        Idempotent. Failures are logged and recorded per dialogue key; this
        method does not raise.
        """
        report = ReconcileReport()
        try:
            self._remove_duplicates(report)
            keys = self.repository.list_dialogue_keys(self.source_language)
            decks_by_key, unmatched = self._decks_by_key(keys)

            for key, deck in sorted(decks_by_key.items()):
                if key not in keys:
                    self._guarded(report, key, self._delete_vanished, deck)
                else:
                    self._guarded(report, key, self._rename_if_needed, key, deck)
            for deck in unmatched:
                self._guarded(report, deck.name, self._delete_vanished, deck)

            for key in keys:
                if key not in decks_by_key:
                    self._guarded(report, key, self._create, key)
        except Exception as exc:
            db.session.rollback()
            logger.exception("Global dialogue deck reconcile failed")
            report.errors.append({'dialogue_key': None, 'error': str(exc)})

        if report.mutation_count or report.errors:
            logger.info("Dialogue deck reconcile: %s", report.to_dict())
        return report

    def _guarded(self, report: ReconcileReport, key: str, action, *args) -> None:
        try:
            action(report, *args)
            safe_commit(db.session)
        except Exception as exc:
            db.session.rollback()
            logger.exception("Reconcile step failed for dialogue %s", key)
            report.errors.append({'dialogue_key': key, 'error': str(exc)})

    def _remove_duplicates(self, report: ReconcileReport) -> None:
        """Keep the most recently updated deck per (dialogue key, source language)."""
        groups: Dict[tuple, List[Deck]] = defaultdict(list)
        name_keys = None
        for deck in DeckStore.list_global_decks():
            if not is_dialogue_deck(deck):
                continue
            key = deck.deck_tags.dialogue_key
            if not key:
                if name_keys is None:
                    name_keys = self.repository.list_dialogue_keys(self.source_language)
                key = resolve_dialogue_key(deck, name_keys)
            if not key:
                continue
            groups[(key, deck.source_language)].append(deck)

        for (key, _language), decks in sorted(groups.items()):
            if len(decks) <= 1:
                continue
            decks.sort(key=_recency, reverse=True)
            for duplicate in decks[1:]:
                self._guarded(report, key, self._delete_duplicate, duplicate)

    @staticmethod
    def _delete_duplicate(report: ReconcileReport, deck: Deck) -> None:
        deck_id = deck.id
        DeckStore.delete_deck(deck)
        report.duplicates_removed.append(deck_id)
        logger.info("Removed duplicate dialogue deck %s", deck_id)

    def _decks_by_key(self, keys: List[str]) -> Tuple[Dict[str, Deck], List[Deck]]:
        """Map global dialogue decks to their key; untagged decks are matched by name.

        The second list holds untagged dialogue decks whose name matches no
        current key.
        """
        result = {}
        unmatched = []
        for deck in DeckStore.list_global_decks():
            if not is_dialogue_deck(deck) or deck.source_language != self.source_language:
                continue
            key = resolve_dialogue_key(deck, keys)
            if key:
                result[key] = deck
            else:
                unmatched.append(deck)
        return result, unmatched

    @staticmethod
    def _delete_vanished(report: ReconcileReport, deck: Deck) -> None:
        deck_id = deck.id
        DeckStore.delete_deck(deck)
        report.deleted.append(deck_id)

    def _desired_name(self, key: str) -> str:
        available = self.repository.translation_availability(key, self.source_language)
        target_label = choose_target_label(available, self.default_target_language)
        return build_deck_name(key, self.source_language, target_label)

    def _rename_if_needed(self, report: ReconcileReport, key: str, deck: Deck) -> None:
        if deck.deck_tags.dialogue_key != key:
            DeckStore.retag_dialogue_deck(deck, key)
            report.retagged.append(deck.id)
        desired = self._desired_name(key)
        if deck.name != desired:
            report.renamed.append({'deck_id': deck.id, 'old': deck.name, 'new': desired})
            DeckStore.rename_deck(deck, desired)

    def _create(self, report: ReconcileReport, key: str) -> None:
        DeckStore.create_dialogue_deck(
            name=self._desired_name(key),
            dialogue_key=key,
            source_language=self.source_language,
            description=DecksModuleDefaultConfig.GLOBAL_DECK_DESCRIPTION.format(key=key),
        )
        report.created.append(key)

    # ------------------------------------------------------------------
    # SyncAll
    # ------------------------------------------------------------------
    def sync_all(self, owner_id: int, override: Optional[TargetSpec] = None) -> List[SyncResultDTO]:
        """Reconcile, then materialize every dialogue deck visible to ``owner_id``."""
        self.reconcile()
        normalizer = NormalizeService(self.repository)
        results = []
        for deck in DeckStore.list_visible_decks(owner_id):
            if not is_dialogue_deck(deck):
                continue
            deck_id = deck.id
            try:
                outcome = normalizer.normalize(deck, override)
                results.append(SyncResultDTO(deck_id, DecksModuleDefaultConfig.STATUS_OK, {
                    'cards_rebuilt': outcome.cards_rebuilt,
                    'target': outcome.target,
                }))
            except DialogueKeyUnresolvedError as exc:
                results.append(SyncResultDTO(deck_id, DecksModuleDefaultConfig.STATUS_SKIPPED, exc.reason))
            except DialogueSourceNotFoundError as exc:
                results.append(SyncResultDTO(deck_id, DecksModuleDefaultConfig.STATUS_ERROR, exc.reason))
            except Exception as exc:
                db.session.rollback()
                logger.exception("SyncAll failed for deck %s", deck_id)
                results.append(SyncResultDTO(deck_id, DecksModuleDefaultConfig.STATUS_ERROR, str(exc)))
        return results


def reconcile_global_decks(source_language: Optional[str] = None,
                           default_target_language: Optional[str] = None,
                           repository: Optional[DialogueSourceRepository] = None) -> ReconcileReport:
    return DialogueDeckSyncService(repository, source_language, default_target_language).reconcile()


def sync_all(owner_id: int, override: Optional[TargetSpec] = None,
             repository: Optional[DialogueSourceRepository] = None) -> List[SyncResultDTO]:
    return DialogueDeckSyncService(repository).sync_all(owner_id, override)
