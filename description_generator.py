"""
AI-written song descriptions and summaries via an OpenAI-compatible
chat-completions gateway.
"""

import logging
from typing import Dict, Optional, Tuple

import httpx

import config
from http_client import open_client

logger = logging.getLogger(__name__)

DESCRIPTION_SYSTEM_PROMPT = (
    'You are a music curator who writes short, catchy descriptions for songs. '
    'Keep descriptions under 50 words. Do not use quotes around the description. '
    'Be direct and engaging.'
)

SUMMARY_SYSTEM_PROMPT = (
    'You are a music journalist and critic who writes insightful song analyses. '
    'Write in a conversational, engaging tone. Format your response with clear '
    'sections using line breaks. Do not use markdown headers or bullet points.'
)

SUMMARY_SECTIONS = """1. MOOD & ATMOSPHERE: Describe the emotional tone and vibe of the song (2-3 sentences)

2. MUSICAL STYLE: Discuss the genre, instrumentation, and production style (2-3 sentences)

3. THEMES: What themes or messages might this song explore based on the title and artist's style (2-3 sentences)

4. WHO WILL LOVE IT: Describe the ideal listener for this track (1-2 sentences)

Keep the total length around 150-200 words. Be specific and evocative."""


class DescriptionError(Exception):
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def build_prompts(title: str, artist: Optional[str], kind: str) -> Tuple[str, str]:
    """Return (system_prompt, user_prompt) for a 'description' or 'summary'."""
    song = f'"{title}" by {artist}' if artist else f'"{title}"'

    if kind == 'summary':
        if artist:
            user = f"Write a detailed song analysis for {song}. Include:\n\n{SUMMARY_SECTIONS}"
        else:
            user = (f"Write a detailed song analysis for {song}. Include mood, musical style, "
                    f"potential themes, and who might enjoy it. Keep it around 150 words.")
        return SUMMARY_SYSTEM_PROMPT, user

    user = (f"Write a short, engaging description (2-3 sentences max) for a song titled {song}. "
            f"Focus on the mood, genre appeal, and what makes it worth listening to. "
            f"Be concise and catchy.")
    return DESCRIPTION_SYSTEM_PROMPT, user


def clean_generated_text(text: str) -> str:
    """Trim whitespace and any quotes the model wrapped around its answer."""
    text = (text or '').strip()
    while len(text) >= 2 and text[0] == text[-1] and text[0] in '"\'“”':
        text = text[1:-1].strip()
    if len(text) >= 2 and text[0] == '“' and text[-1] == '”':
        text = text[1:-1].strip()
    return text


class DescriptionGenerator:
    def __init__(self, db=None, client: httpx.AsyncClient = None,
                 api_key: str = None, gateway_url: str = None, model: str = None):
        self.db = db
        self.client = client
        self.api_key = api_key
        self.gateway_url = gateway_url or config.AI_GATEWAY_URL
        self.model = model or config.AI_MODEL

    def _get_api_key(self) -> str:
        if self.api_key:
            return self.api_key
        if self.db is not None:
            stored = self.db.get_setting('ai_api_key')
            if stored:
                return stored
        return config.AI_API_KEY

    async def generate(self, title: str, artist: Optional[str] = None,
                       kind: str = 'description') -> Dict[str, str]:
        """
        Generate a short description or a longer summary for a song.

        Returns:
            {'description': text} or {'summary': text}

        Raises:
            DescriptionError with status 400/402/429/500
        """
        title = (title or '').strip()
        if not title:
            raise DescriptionError('Title is required', 400)
        if kind not in ('description', 'summary'):
            raise DescriptionError(f"Invalid type '{kind}'. Must be 'description' or 'summary'", 400)

        api_key = self._get_api_key()
        if not api_key:
            raise DescriptionError('AI API key is not configured', 500)

        system_prompt, user_prompt = build_prompts(title, (artist or '').strip() or None, kind)
        payload = {
            'model': self.model,
            'messages': [
                {'role': 'system', 'content': system_prompt},
                {'role': 'user', 'content': user_prompt},
            ],
        }

        logger.info(f"🤖 [DESCRIBE] Generating {kind} for '{title}'")

        async with open_client(self.client, timeout=60) as client:
            try:
                response = await client.post(
                    self.gateway_url,
                    json=payload,
                    headers={'Authorization': f'Bearer {api_key}', 'Content-Type': 'application/json'},
                )
            except httpx.HTTPError as e:
                logger.error(f"❌ [DESCRIBE] Gateway request failed: {e}")
                raise DescriptionError('Failed to generate content', 500)

        if response.status_code == 429:
            raise DescriptionError('Rate limit exceeded, please try again later', 429)
        if response.status_code == 402:
            raise DescriptionError('Payment required', 402)
        if not response.is_success:
            logger.error(f"❌ [DESCRIBE] AI gateway error: {response.status_code} {response.text[:500]}")
            raise DescriptionError('Failed to generate content', 500)

        try:
            data = response.json()
            content = data['choices'][0]['message']['content'] or ''
        except (ValueError, KeyError, IndexError, TypeError):
            logger.debug(f"Unexpected gateway payload: {response.text[:500]}")
            content = ''

        return {kind: clean_generated_text(content)}
