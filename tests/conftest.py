import os
import tempfile
from datetime import datetime, timezone

import pytest
from flask import g
from flask_login import FlaskLoginClient

from recallstack_app import create_app, db
from recallstack_app.core.config import Config
from recallstack_app.models import Card, Deck, User


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'connect_args': {'check_same_thread': False}
    }
    WTF_CSRF_ENABLED = False
    LOG_LEVEL = 'WARNING'
    LOG_DIR = os.path.join(tempfile.gettempdir(), 'recallstack-test-logs')


NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def app():
    app = create_app(TestConfig)
    app.test_client_class = FlaskLoginClient

    @app.before_request
    def _forget_cached_user():
        # requests share the fixture's app context, so flask-login would
        # keep serving the first client's user from g
        g.pop('_login_user', None)

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def user(app):
    user = User(username='reviewer', email='reviewer@example.com')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def other_user(app):
    user = User(username='someone_else', email='else@example.com')
    db.session.add(user)
    db.session.commit()
    return user


def _make_deck(owner, title, fronts):
    """Create a deck owned by ``owner`` with one card per front text."""
    deck = Deck(owner_user_id=owner.user_id, title=title)
    db.session.add(deck)
    db.session.flush()
    cards = [
        Card(deck_id=deck.deck_id, owner_user_id=owner.user_id, front=front, back=f'answer to {front}')
        for front in fronts
    ]
    db.session.add_all(cards)
    db.session.commit()
    return deck, cards


@pytest.fixture
def deck_with_cards(user):
    return _make_deck(user, 'Algorithms', ['Big-O of binary search?', 'Stable sorts?', 'Heap height?'])


@pytest.fixture
def client(app, user):
    return app.test_client(user=user)


@pytest.fixture
def deck_factory(app):
    return _make_deck


@pytest.fixture
def store(app):
    from recallstack_app.modules.reviews.services import ReviewStore

    return ReviewStore(db.session)


@pytest.fixture
def scheduler(store):
    from recallstack_app.modules.reviews.services import ReviewScheduler

    return ReviewScheduler(store, max_retries=2)
