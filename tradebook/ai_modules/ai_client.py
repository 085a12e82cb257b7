import logging
import re
from typing import Optional

import requests

from ..errors import UpstreamAIError

logger = logging.getLogger(__name__)

DATA_URL_RE = re.compile(r'^data:(?P<mime>[\w/+.-]+);base64,(?P<data>.*)$', re.DOTALL)


class AIClient:
    """
    Thin client for the Gemini generateContent endpoint.

    Both public helpers are best effort: failures are logged and turned into
    a fallback value, they never raise to the caller and never touch stored
    trades.
    """

    FALLBACK_SUMMARY = "Unable to fetch stock information right now."

    def __init__(self, api_key: str = None, text_model: str = 'gemini-2.5-flash',
                 image_model: str = 'gemini-2.5-flash-image',
                 base_url: str = 'https://generativelanguage.googleapis.com/v1beta',
                 timeout: float = 30, market: str = 'the Egyptian Exchange (EGX)'):
        self.api_key = api_key
        self.text_model = text_model
        self.image_model = image_model
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.market = market

    @classmethod
    def from_config(cls, config):
        return cls(
            api_key=config.get('GEMINI_API_KEY'),
            text_model=config.get('GEMINI_TEXT_MODEL', 'gemini-2.5-flash'),
            image_model=config.get('GEMINI_IMAGE_MODEL', 'gemini-2.5-flash-image'),
            base_url=config.get('GEMINI_BASE_URL', 'https://generativelanguage.googleapis.com/v1beta'),
            timeout=config.get('AI_TIMEOUT', 30),
            market=config.get('AI_MARKET', 'the Egyptian Exchange (EGX)'),
        )

    def set_api_key(self, api_key: str):
        self.api_key = api_key

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _generate(self, model: str, payload: dict) -> dict:
        """POST to generateContent and return the decoded JSON body."""
        if not self.api_key:
            raise UpstreamAIError("GEMINI_API_KEY is not configured")

        try:
            response = requests.post(
                f"{self.base_url}/models/{model}:generateContent",
                params={'key': self.api_key},
                json=payload,
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise UpstreamAIError(f"AI request failed: {e.__class__.__name__}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code != 200:
            error_msg = 'Unknown error'
            if isinstance(body, dict) and isinstance(body.get('error'), dict):
                error_msg = body['error'].get('message', error_msg)
            raise UpstreamAIError(f"API Error {response.status_code}: {error_msg}")

        if not isinstance(body, dict):
            raise UpstreamAIError("AI response is not a JSON object")
        return body

    @staticmethod
    def _parts(data: dict) -> list:
        candidates = data.get('candidates')
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            return []
        content = candidates[0].get('content')
        if not isinstance(content, dict):
            return []
        parts = content.get('parts')
        if not isinstance(parts, list):
            return []
        return [part for part in parts if isinstance(part, dict)]

    @classmethod
    def _text(cls, data: dict) -> str:
        return ''.join(part['text'] for part in cls._parts(data)
                       if isinstance(part.get('text'), str)).strip()

    @classmethod
    def _first_image(cls, data: dict) -> Optional[str]:
        for part in cls._parts(data):
            inline = part.get('inlineData') or part.get('inline_data')
            if not isinstance(inline, dict):
                continue
            b64_data = inline.get('data')
            if isinstance(b64_data, str) and b64_data:
                out_mime = inline.get('mimeType') or inline.get('mime_type')
                if not isinstance(out_mime, str) or not out_mime:
                    out_mime = 'image/png'
                return f"data:{out_mime};base64,{b64_data}"
        return None

    def _summary_prompt(self, stock_name: str) -> str:
        return (
            f"Give me a very short summary of the stock {stock_name} on {self.market} "
            "as bullet points, one per line:\n"
            "- Approximate current price.\n"
            "- General trend (up/down/sideways).\n"
            "- The most important news item or a quick tip.\n"
            "Keep the answer very brief and clear."
        )

    def summarize(self, stock_name: str) -> str:
        try:
            data = self._generate(self.text_model, {
                'contents': [{'parts': [{'text': self._summary_prompt(stock_name)}]}],
                'tools': [{'google_search': {}}],
            })
            text = self._text(data)
            if not text:
                raise UpstreamAIError("AI returned an empty summary")
            return text
        except UpstreamAIError as e:
            logger.warning(f"[AI] Stock summary for {stock_name!r} failed: {e.message}")
        except Exception as e:
            logger.error(f"[AI] Unexpected stock summary response for {stock_name!r}: {e}", exc_info=True)
        return self.FALLBACK_SUMMARY

    @staticmethod
    def split_data_url(image: str):
        """Return (mime_type, base64_data); bare base64 is assumed to be PNG."""
        match = DATA_URL_RE.match(image.strip())
        if match:
            return match.group('mime'), match.group('data')
        return 'image/png', image.strip()

    def edit_image(self, image: str, instruction: str) -> Optional[str]:
        """Send a chart image plus an instruction; returns a data URL or None."""
        try:
            mime_type, b64_data = self.split_data_url(image)
            data = self._generate(self.image_model, {
                'contents': [{'parts': [
                    {'inline_data': {'mime_type': mime_type, 'data': b64_data}},
                    {'text': instruction},
                ]}],
            })
            result = self._first_image(data)
        except UpstreamAIError as e:
            logger.warning(f"[AI] Image edit failed: {e.message}")
            return None
        except Exception as e:
            logger.error(f"[AI] Unexpected image edit response: {e}", exc_info=True)
            return None

        if result is None:
            logger.info("[AI] Image edit returned no image")
        return result

    def health_check(self) -> dict:
        if not self.configured:
            return {'provider': 'gemini', 'status': 'unconfigured',
                    'message': "Set GEMINI_API_KEY in .env and restart."}
        try:
            data = self._generate(self.text_model, {
                'contents': [{'parts': [{'text': 'Reply with exactly: OK'}]}],
            })
            return {'provider': 'gemini', 'status': 'ok', 'model': self.text_model, 'test_reply': self._text(data)}
        except UpstreamAIError as e:
            return {'provider': 'gemini', 'status': 'error', 'model': self.text_model, 'error': e.message}
