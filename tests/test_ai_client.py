"""Tests for the Gemini client and the /api/ai routes (network is faked)."""

import pytest
import requests

from tradebook.ai_modules import ai_client as ai_module
from tradebook.ai_modules.ai_client import AIClient


class FakeResponse:

    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON")
        return self._payload


def text_reply(text):
    return {'candidates': [{'content': {'parts': [{'text': text}]}}]}


@pytest.fixture
def calls(monkeypatch):
    """Record requests.post calls; tests set `calls.reply` to control the result."""
    class Recorder(list):
        reply = FakeResponse(200, text_reply('ok'))

    recorder = Recorder()

    def fake_post(url, **kwargs):
        recorder.append((url, kwargs))
        if isinstance(recorder.reply, Exception):
            raise recorder.reply
        return recorder.reply

    monkeypatch.setattr(ai_module.requests, 'post', fake_post)
    return recorder


@pytest.fixture
def client_ai():
    return AIClient(api_key='secret', timeout=7)


class TestSummarize:

    def test_returns_text(self, client_ai, calls):
        calls.reply = FakeResponse(200, text_reply('- Price: 80 EGP\n- Trend: up'))
        assert client_ai.summarize('COMI') == '- Price: 80 EGP\n- Trend: up'

        url, kwargs = calls[0]
        assert url.endswith('/models/gemini-2.5-flash:generateContent')
        assert kwargs['params'] == {'key': 'secret'}
        assert kwargs['timeout'] == 7
        assert 'COMI' in kwargs['json']['contents'][0]['parts'][0]['text']
        assert kwargs['json']['tools'] == [{'google_search': {}}]

    def test_network_error_falls_back(self, client_ai, calls):
        calls.reply = requests.Timeout('too slow')
        assert client_ai.summarize('COMI') == AIClient.FALLBACK_SUMMARY

    def test_http_error_falls_back(self, client_ai, calls):
        calls.reply = FakeResponse(429, {'error': {'message': 'quota exceeded'}})
        assert client_ai.summarize('COMI') == AIClient.FALLBACK_SUMMARY

    def test_malformed_body_falls_back(self, client_ai, calls):
        calls.reply = FakeResponse(200, None)
        assert client_ai.summarize('COMI') == AIClient.FALLBACK_SUMMARY

        calls.reply = FakeResponse(200, {'candidates': []})
        assert client_ai.summarize('COMI') == AIClient.FALLBACK_SUMMARY

        calls.reply = FakeResponse(200, ['not', 'a', 'dict'])
        assert client_ai.summarize('COMI') == AIClient.FALLBACK_SUMMARY

    @pytest.mark.parametrize('payload', [
        {'candidates': [{'content': {'parts': [{'text': None}]}}]},
        {'candidates': [{'content': 'blocked'}]},
        {'candidates': [{'content': {'parts': 'text'}}]},
        {'candidates': 'none'},
        {'candidates': [{'content': {'parts': [{'text': ['a', 'b']}, 'junk']}}]},
    ])
    def test_odd_response_shapes_fall_back(self, client_ai, calls, payload):
        calls.reply = FakeResponse(200, payload)
        assert client_ai.summarize('COMI') == AIClient.FALLBACK_SUMMARY

    def test_text_parts_mixed_with_junk(self, client_ai, calls):
        calls.reply = FakeResponse(200, {'candidates': [{'content': {'parts': [
            {'text': None}, {'text': '- Trend: up'}, 'junk',
        ]}}]})
        assert client_ai.summarize('COMI') == '- Trend: up'

    def test_missing_key_skips_network(self, calls):
        assert AIClient(api_key='').summarize('COMI') == AIClient.FALLBACK_SUMMARY
        assert calls == []


class TestEditImage:

    def test_returns_data_url(self, client_ai, calls):
        calls.reply = FakeResponse(200, {'candidates': [{'content': {'parts': [
            {'text': 'Here you go'},
            {'inlineData': {'mimeType': 'image/jpeg', 'data': 'NEWDATA'}},
        ]}}]})

        result = client_ai.edit_image('data:image/webp;base64,OLDDATA', 'mark support levels')
        assert result == 'data:image/jpeg;base64,NEWDATA'

        url, kwargs = calls[0]
        assert url.endswith('/models/gemini-2.5-flash-image:generateContent')
        parts = kwargs['json']['contents'][0]['parts']
        assert parts[0] == {'inline_data': {'mime_type': 'image/webp', 'data': 'OLDDATA'}}
        assert parts[1] == {'text': 'mark support levels'}

    def test_no_image_in_reply(self, client_ai, calls):
        calls.reply = FakeResponse(200, text_reply('I cannot edit this image'))
        assert client_ai.edit_image('data:image/png;base64,AAAA', 'retro filter') is None

    def test_failure_returns_none(self, client_ai, calls):
        calls.reply = requests.ConnectionError('offline')
        assert client_ai.edit_image('data:image/png;base64,AAAA', 'retro filter') is None

    @pytest.mark.parametrize('payload', [
        {'candidates': [{'content': {'parts': [{'inlineData': 'x'}]}}]},
        {'candidates': [{'content': {'parts': [{'inlineData': {'data': None}}]}}]},
        {'candidates': [{'content': {'parts': [{'inline_data': ['x']}]}}]},
        {'candidates': [{'content': 'blocked'}]},
    ])
    def test_odd_response_shapes_return_none(self, client_ai, calls, payload):
        calls.reply = FakeResponse(200, payload)
        assert client_ai.edit_image('data:image/png;base64,AAAA', 'retro filter') is None

    def test_non_string_mime_defaults_to_png(self, client_ai, calls):
        calls.reply = FakeResponse(200, {'candidates': [{'content': {'parts': [
            {'inlineData': 'x'},
            {'inlineData': {'mimeType': 7, 'data': 'NEW'}},
        ]}}]})
        assert client_ai.edit_image('AAAA', 'retro filter') == 'data:image/png;base64,NEW'

    def test_bare_base64_assumed_png(self):
        assert AIClient.split_data_url('AAAA') == ('image/png', 'AAAA')


class TestHealthCheck:

    def test_unconfigured(self):
        assert AIClient(api_key=None).health_check()['status'] == 'unconfigured'

    def test_error(self, client_ai, calls):
        calls.reply = FakeResponse(500, {'error': {'message': 'boom'}})
        health = client_ai.health_check()
        assert health['status'] == 'error'
        assert 'boom' in health['error']
        assert 'secret' not in str(health)

    def test_ok(self, client_ai, calls):
        calls.reply = FakeResponse(200, text_reply('OK'))
        assert client_ai.health_check() == {
            'provider': 'gemini', 'status': 'ok', 'model': 'gemini-2.5-flash', 'test_reply': 'OK',
        }


class TestAIRoutes:

    def test_stock_info(self, client, calls):
        calls.reply = FakeResponse(200, text_reply('- Trend: **up**'))
        body = client.post('/api/ai/stock-info', json={'stockName': 'COMI'}).get_json()
        assert body['text'] == '- Trend: **up**'
        assert '<strong>up</strong>' in body['html']
        assert calls[0][1]['timeout'] == 5

    def test_stock_info_failure_is_not_an_error(self, client, calls):
        calls.reply = requests.Timeout('slow')
        response = client.post('/api/ai/stock-info', json={'stockName': 'COMI'})
        assert response.status_code == 200
        assert response.get_json()['text'] == AIClient.FALLBACK_SUMMARY

    def test_stock_info_requires_name(self, client, calls):
        response = client.post('/api/ai/stock-info', json={'stockName': ''})
        assert response.status_code == 400
        assert calls == []

    def test_edit_image(self, client, calls):
        calls.reply = FakeResponse(200, {'candidates': [{'content': {'parts': [
            {'inlineData': {'mimeType': 'image/png', 'data': 'EDITED'}},
        ]}}]})
        body = client.post('/api/ai/edit-image', json={
            'image': 'data:image/png;base64,AAAA', 'instruction': 'add a retro filter',
        }).get_json()
        assert body == {'image': 'data:image/png;base64,EDITED'}

    def test_edit_image_failure_returns_null(self, client, calls):
        calls.reply = FakeResponse(503, None)
        body = client.post('/api/ai/edit-image', json={
            'image': 'data:image/png;base64,AAAA', 'instruction': 'add a retro filter',
        }).get_json()
        assert body == {'image': None}

    def test_odd_responses_never_fail_the_request(self, client, calls):
        calls.reply = FakeResponse(200, {'candidates': [{'content': {'parts': [{'inlineData': 'x'}]}}]})
        response = client.post('/api/ai/edit-image', json={
            'image': 'data:image/png;base64,AAAA', 'instruction': 'add a retro filter',
        })
        assert response.status_code == 200
        assert response.get_json() == {'image': None}

        calls.reply = FakeResponse(200, {'candidates': [{'content': {'parts': [{'text': None}]}}]})
        response = client.post('/api/ai/stock-info', json={'stockName': 'COMI'})
        assert response.status_code == 200
        assert response.get_json()['text'] == AIClient.FALLBACK_SUMMARY

    def test_edit_image_validation(self, client, calls):
        assert client.post('/api/ai/edit-image', json={'instruction': 'x'}).status_code == 400
        assert client.post('/api/ai/edit-image', json={'image': 'AAAA'}).status_code == 400

    def test_ai_failure_leaves_trades_alone(self, client, calls):
        from conftest import trade_payload

        trade_id = client.post('/api/trades', json=trade_payload()).get_json()['id']
        calls.reply = requests.Timeout('slow')
        client.post('/api/ai/stock-info', json={'stockName': 'COMI'})
        assert client.get(f'/api/trades/{trade_id}').get_json()['net_profit'] == 190
