import logging

from flask import Blueprint, request, jsonify, current_app
import markdown2

from ..ai_modules.ai_client import AIClient
from ..errors import ValidationError

logger = logging.getLogger(__name__)

ai_bp = Blueprint("ai", __name__, url_prefix="/api/ai")

ai_client = None
last_settings = None

AI_SETTINGS = ('GEMINI_API_KEY', 'GEMINI_TEXT_MODEL', 'GEMINI_IMAGE_MODEL',
               'GEMINI_BASE_URL', 'AI_TIMEOUT', 'AI_MARKET')


def get_ai_client():
    """Process-wide client, rebuilt when the AI settings (e.g. the key) change."""
    global ai_client, last_settings

    settings = tuple(current_app.config.get(key) for key in AI_SETTINGS)
    if ai_client is None or settings != last_settings:
        logger.info("Creating AI client")
        ai_client = AIClient.from_config(current_app.config)
        last_settings = settings
    return ai_client


def render_markdown_safe(text: str) -> str:
    return markdown2.markdown(
        text,
        safe_mode="escape",
        extras=["fenced-code-blocks", "break-on-newline", "tables"]
    )


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


@ai_bp.route("/stock-info", methods=["POST"])
def stock_info():
    stock_name = str(_json_body().get("stockName") or "").strip()
    if not stock_name:
        raise ValidationError("stockName is required")

    text = get_ai_client().summarize(stock_name)
    return jsonify({"text": text, "html": render_markdown_safe(text)})


@ai_bp.route("/edit-image", methods=["POST"])
def edit_image():
    data = _json_body()
    image = data.get("image")
    instruction = str(data.get("instruction") or "").strip()

    if not isinstance(image, str) or not image.strip():
        raise ValidationError("image is required")
    if not instruction:
        raise ValidationError("instruction is required")

    return jsonify({"image": get_ai_client().edit_image(image, instruction)})


@ai_bp.route("/health", methods=["GET"])
def ai_health():
    return jsonify(get_ai_client().health_check())
