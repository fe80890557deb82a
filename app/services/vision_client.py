"""
OpenAI vision client for smart scan.

Asks the model to identify and count inventory items in a photo and hands
the raw answer to the normalizer.
"""

from __future__ import annotations

import logging

from openai import AsyncOpenAI

from app.schemas.scan import DetectedItem
from app.services.vision_normalizer import normalize_vision_response

logger = logging.getLogger(__name__)

DETECTION_PROMPT = """
You are an inventory assistant.
Analyze the image and return a JSON array of objects with:
- label: short noun phrase (singular), like "t-shirt", "toy car"
- count: integer >= 1
- confidence: number 0..1 (optional but preferred)

Rules:
- Group identical items under the same label.
- If unsure, still guess with lower confidence.
- Do not include extra keys. Output JSON only.
"""


class VisionClient:
    """Counts items in an image through the OpenAI Responses API."""

    def __init__(self, client: AsyncOpenAI, model: str) -> None:
        self.client = client
        self.model = model

    async def detect_items(self, image_url: str) -> list[DetectedItem]:
        """
        Detect and count items in the image at image_url.

        Raises:
            VisionResponseError: If the model answer holds no JSON array.
            openai.OpenAIError: If the API call itself fails.
        """
        logger.info("Requesting item detection: model=%s image_url=%s", self.model, image_url)

        response = await self.client.responses.create(
            model=self.model,
            input=[
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": DETECTION_PROMPT},
                        {"type": "input_image", "image_url": image_url},
                    ],
                }
            ],
        )

        text = (response.output_text or "").strip()
        items = normalize_vision_response(text)

        logger.info("Detection finished: labels=%s", len(items))
        return items
