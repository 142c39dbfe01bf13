import json

import pytest

from aitrans.translation_services import TranslationService


class FakeTranslationService(TranslationService):
    """Returns queued replies, or upper-cases the batch embedded in the prompt."""

    service_name = "Fake"

    def __init__(self, replies=None, api_key="test-key", **kwargs):
        kwargs.setdefault("debug", False)
        super().__init__(api_key=api_key, **kwargs)
        self.replies = list(replies or [])
        self.prompts = []

    async def generate(self, prompt):
        self.prompts.append(prompt)
        if self.replies:
            return self.replies.pop(0)
        texts = json.loads(prompt.split("Input: ", 1)[1])
        return json.dumps([text.upper() for text in texts], ensure_ascii=False)


@pytest.fixture
def fake_service():
    return FakeTranslationService()
