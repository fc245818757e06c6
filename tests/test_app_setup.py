"""
Tests for application wiring: logging setup and JSON error responses.
"""

import json
import logging
import sys

import pytest

from recallstack_app.core.logging_config import JsonLineFormatter, setup_logging

LOGGER_NAME = 'recallstack_logging_test'


@pytest.fixture
def scratch_logger():
    yield LOGGER_NAME
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


class TestSetupLogging:

    def test_json_lines_escape_quotes(self, tmp_path, scratch_logger):
        logger = setup_logging('INFO', str(tmp_path), json_format=True, name=scratch_logger)
        logger.info('card %s said "hi"', 7)
        for handler in logger.handlers:
            handler.flush()

        lines = (tmp_path / 'recallstack.log').read_text(encoding='utf-8').splitlines()
        records = [json.loads(line) for line in lines]
        assert records[-1]['message'] == 'card 7 said "hi"'
        assert records[-1]['level'] == 'INFO'
        assert records[-1]['logger'] == scratch_logger

    def test_repeated_setup_replaces_handlers(self, tmp_path, scratch_logger):
        setup_logging('INFO', str(tmp_path), name=scratch_logger)
        logger = setup_logging('DEBUG', str(tmp_path), name=scratch_logger)
        assert len(logger.handlers) == 2
        assert logger.level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self, tmp_path, scratch_logger):
        logger = setup_logging('chatty', str(tmp_path), name=scratch_logger)
        assert logger.level == logging.INFO

    def test_werkzeug_is_quieted(self, tmp_path, scratch_logger):
        setup_logging('DEBUG', str(tmp_path), name=scratch_logger)
        assert logging.getLogger('werkzeug').level == logging.WARNING

    def test_formatter_includes_exception(self):
        try:
            raise RuntimeError('boom')
        except RuntimeError:
            record = logging.getLogger(LOGGER_NAME).makeRecord(
                LOGGER_NAME, logging.ERROR, __file__, 1, 'failed', (), sys.exc_info()
            )
        payload = json.loads(JsonLineFormatter().format(record))
        assert 'RuntimeError: boom' in payload['exc_info']


class TestApiErrors:

    def test_wrong_method_is_json(self, client):
        response = client.get('/api/reviews/answer')
        assert response.status_code == 405
        body = response.get_json()
        assert body['success'] is False
        assert body['code'] == 'METHOD_NOT_ALLOWED'

    def test_unknown_endpoint_message(self, client):
        body = client.get('/api/nothing-here').get_json()
        assert body['message'] == 'Endpoint not found'

    def test_non_api_paths_keep_html_errors(self, client):
        response = client.get('/not-an-api')
        assert response.status_code == 404
        assert response.get_json(silent=True) is None


class TestSchema:

    def test_content_tables_carry_only_what_reviews_read(self):
        from recallstack_app.models import Card, Deck, User

        assert set(User.__table__.columns.keys()) == {'user_id', 'username', 'email', 'created_at'}
        assert set(Deck.__table__.columns.keys()) == {
            'deck_id', 'owner_user_id', 'title', 'created_at', 'updated_at',
        }
        assert set(Card.__table__.columns.keys()) == {
            'card_id', 'deck_id', 'owner_user_id', 'front', 'back', 'created_at', 'updated_at',
        }
