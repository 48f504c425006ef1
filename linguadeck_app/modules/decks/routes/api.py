# File: linguadeck_app/modules/decks/routes/api.py
# API JSON cho deck hội thoại: danh sách, thẻ, normalize, sync-all, nhập hội thoại, xoá deck và dọn media.

import logging
from typing import Optional

from flask import jsonify, request
from flask_login import current_user, login_required

from linguadeck_app.core.error_handlers import success_response
from linguadeck_app.extensions import csrf_protect
from linguadeck_app.models import db
from linguadeck_app.modules.media.interface import MediaInterface
from linguadeck_app.utils.db_session import safe_commit

from . import decks_bp
from ..config import DecksModuleDefaultConfig
from ..logics.target_spec import TargetSpec, display_name
from ..services.compositor import CardViewCompositor
from ..services.deck_store import DeckStore
from ..services.import_service import DialogueImportService
from ..services.normalize_service import NormalizeService
from ..services.sync_service import reconcile_global_decks, sync_all

logger = logging.getLogger(__name__)


def _target_override() -> Optional[TargetSpec]:
    """``X-Target-Lang`` header, else ``?targetLang=``."""
    raw = (request.headers.get(DecksModuleDefaultConfig.TARGET_HEADER)
           or request.args.get(DecksModuleDefaultConfig.TARGET_QUERY_PARAM)
           or '')
    return TargetSpec.parse_override(raw)


def _request_host() -> str:
    return request.host_url.rstrip('/')


@decks_bp.route('/decks', methods=['GET'])
@login_required
def list_decks():
    """Reconcile global dialogue decks, then list the user's and the global decks."""
    reconcile_global_decks()
    override = _target_override()
    decks = []
    for deck in DeckStore.list_visible_decks(current_user.user_id):
        data = deck.to_dict()
        data['display_name'] = display_name(deck, override)
        decks.append(data)
    return jsonify(success_response(decks=decks))


@decks_bp.route('/decks/<int:deck_id>/cards', methods=['GET'])
@login_required
def get_deck_cards(deck_id):
    deck = DeckStore.get_accessible_deck(deck_id, current_user.user_id)
    cards = CardViewCompositor().get_cards(
        deck,
        override=_target_override(),
        request_host=_request_host(),
        owner_id=current_user.user_id,
    )
    return jsonify(success_response(cards=[card.to_dict() for card in cards]))


@decks_bp.route('/decks/<int:deck_id>/normalize', methods=['POST'])
@csrf_protect.exempt
@login_required
def normalize_deck(deck_id):
    deck = DeckStore.get_accessible_deck(deck_id, current_user.user_id)
    result = NormalizeService().normalize(deck, _target_override())
    return jsonify(success_response(**result.to_dict()))


@decks_bp.route('/decks/sync-all', methods=['POST'])
@csrf_protect.exempt
@login_required
def sync_all_decks():
    results = sync_all(current_user.user_id, _target_override())
    return jsonify(success_response(
        synced=len(results),
        results=[result.to_dict() for result in results],
    ))


@decks_bp.route('/decks/<int:deck_id>', methods=['DELETE'])
@csrf_protect.exempt
@login_required
def delete_deck(deck_id):
    """Delete an owned deck; media packages referenced only by it are removed first."""
    deck = DeckStore.get_owned_deck(deck_id, current_user.user_id)
    removed = MediaInterface.cleanup_deck_media(current_user.user_id, deck)
    DeckStore.delete_deck(deck)
    safe_commit(db.session)
    logger.info("User %s deleted deck %s", current_user.user_id, deck_id)
    return jsonify(success_response(message='Deck deleted', deck_id=deck_id, removed_media=removed))


@decks_bp.route('/uploads/apkg/cleanup', methods=['POST'])
@csrf_protect.exempt
@login_required
def cleanup_apkg_uploads():
    report = MediaInterface.cleanup_orphan_packages(current_user.user_id)
    return jsonify(success_response(message='APKG cleanup finished', **report.to_dict()))


@decks_bp.route('/import/dialogue', methods=['POST'])
@csrf_protect.exempt
@login_required
def import_dialogue():
    """Body: ``dialogueKey``, ``sourceLang``, ``targetLang``, ``includeAllTranslations``."""
    payload = request.get_json(silent=True) or {}
    result = DialogueImportService().import_dialogue(
        current_user.user_id,
        payload.get('dialogueKey'),
        source_language=payload.get('sourceLang'),
        target_language=payload.get('targetLang'),
        include_all=bool(payload.get('includeAllTranslations')),
    )
    return jsonify(success_response(
        message='Deck imported',
        deck={'id': result.deck_id, 'name': result.name},
        created_cards=result.created_cards,
        reused=result.reused,
    )), 201


@decks_bp.route('/import/all', methods=['POST'])
@csrf_protect.exempt
@login_required
def import_all_dialogues():
    payload = request.get_json(silent=True) or {}
    results = DialogueImportService().import_all(
        current_user.user_id,
        source_language=payload.get('sourceLang'),
        target_language=payload.get('targetLang'),
        include_all=bool(payload.get('includeAllTranslations')),
    )
    return jsonify(success_response(
        message='Dialogues imported',
        decks=[result.to_dict() for result in results],
    )), 201
