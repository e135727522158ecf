import logging

from openai import AsyncOpenAI
from app.core.config import settings
from app.utils.json_utils import safe_json_loads

logger = logging.getLogger(__name__)

# Initialize the OpenAI client
openai_client: AsyncOpenAI | None = None
if settings.OPENAI_API_KEY:
    try:
        openai_client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
        logger.info("✅ OpenAI client configured.")
    except Exception as e:
        openai_client = None
        logger.error(f"❌ Could not configure the OpenAI client: {e}")


def is_configured() -> bool:
    return openai_client is not None


async def generate_json_with_gpt(
    prompt: str,
    system_prompt: str = "You are an instructional design assistant. You only answer with valid JSON.",
    model: str | None = None,
) -> dict | None:
    """
    Ask an OpenAI chat model for a JSON object.

    Args:
        prompt: The user prompt.
        system_prompt: Role instructions for the model.
        model: Model override; defaults to ``settings.OPENAI_MODEL``.

    Returns:
        The decoded JSON object, or None when the client is missing, the call
        fails or the answer is not valid JSON.
    """
    if not openai_client:
        logger.warning("OpenAI client is not initialised; skipping JSON generation.")
        return None

    model = model or settings.OPENAI_MODEL
    logger.info("Requesting JSON completion from OpenAI model %s", model)
    response_text = None
    try:
        response = await openai_client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
        )
        response_text = response.choices[0].message.content
        return safe_json_loads(response_text)

    except ValueError as e:
        logger.error(f"Could not parse the OpenAI JSON answer: {e}\nReceived:\n{response_text}")
        return None
    except Exception as e:
        logger.error(f"Unexpected error while calling the OpenAI API: {e}", exc_info=True)
        return None


async def generate_text_with_gpt(prompt: str, system_prompt: str, model: str | None = None) -> str | None:
    if not openai_client:
        return None

    try:
        response = await openai_client.chat.completions.create(
            model=model or settings.OPENAI_MODEL,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
        )
        return (response.choices[0].message.content or "").strip()
    except Exception as e:
        logger.error(f"Unexpected error while calling the OpenAI API: {e}", exc_info=True)
        return None
