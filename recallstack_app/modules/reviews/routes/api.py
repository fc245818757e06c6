from typing import Type, TypeVar

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from recallstack_app.core.error_handlers import NotFoundError, ValidationError
from recallstack_app.core.extensions import db

from ..schemas import AnswerRequest, DeckRequest, QueueQuery
from ..services import ReviewScheduler, ReviewStore

reviews_api_bp = Blueprint('reviews_api', __name__)

RequestModel = TypeVar('RequestModel', bound=BaseModel)


def _parse(model: Type[RequestModel], payload) -> RequestModel:
    try:
        return model.model_validate(payload or {})
    except PydanticValidationError as exc:
        raise ValidationError(
            'Invalid request',
            errors=exc.errors(include_url=False, include_context=False),
        ) from exc


def _scheduler() -> ReviewScheduler:
    return ReviewScheduler.from_config(ReviewStore(db.session), current_app.config)


@reviews_api_bp.route('/queue', methods=['GET'])
@login_required
def get_queue():
    """
    Due cards of the current user.
    Query: ?limit=<1-50>&deckId=<optional>
    """
    query = _parse(QueueQuery, request.args.to_dict())
    items = _scheduler().due_queue(
        current_user.user_id,
        deck_id=query.deck_id,
        limit=query.limit,
    )
    return jsonify({'count': len(items), 'items': [item.to_dict() for item in items]}), 200


@reviews_api_bp.route('/answer', methods=['POST'])
@login_required
def answer_review():
    """
    Record one answer.
    Input: {"cardId": int, "quality": int 0-5 | "again" | "hard" | "good" | "easy"}
    """
    body = _parse(AnswerRequest, request.get_json(silent=True))
    scheduler = _scheduler()
    if not scheduler.store.owns_card(current_user.user_id, body.card_id):
        raise NotFoundError('Card not found', resource='card')

    outcome = scheduler.answer(current_user.user_id, body.card_id, body.quality)
    return jsonify({
        'updated': True,
        'cardId': outcome.card_id,
        'quality': outcome.quality,
        'state': outcome.state.to_dict(),
    }), 200


@reviews_api_bp.route('/reset-deck', methods=['POST'])
@login_required
def reset_deck():
    """
    Make every card of a deck due again immediately.
    Input: {"deckId": int}
    """
    body = _parse(DeckRequest, request.get_json(silent=True))
    scheduler = _scheduler()
    if not scheduler.store.owns_deck(current_user.user_id, body.deck_id):
        raise NotFoundError('Deck not found', resource='deck')

    result = scheduler.reset_deck(current_user.user_id, body.deck_id)
    return jsonify({
        'reset': True,
        'matched': result.matched_count,
        'modified': result.modified_count,
    }), 200


@reviews_api_bp.route('/seed', methods=['POST'])
@login_required
def seed_deck():
    """
    Create review states for deck cards that have none yet.
    Input: {"deckId": int}
    """
    body = _parse(DeckRequest, request.get_json(silent=True))
    scheduler = _scheduler()
    if not scheduler.store.owns_deck(current_user.user_id, body.deck_id):
        raise NotFoundError('Deck not found', resource='deck')

    created = scheduler.seed_deck(current_user.user_id, body.deck_id)
    return jsonify({'seeded': created}), 200
