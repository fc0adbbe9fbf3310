"""
LLM-backed topic extraction and question categorization.

The model is asked for a JSON object; topics come back under ``topics`` and
questions under ``questions``. Items that do not validate are dropped.
"""
import json
import logging

from openai import AsyncOpenAI
from pydantic import ValidationError

from questionbank.config import settings
from questionbank.schemas.categorization import ExtractedQuestion, ExtractedTopic

logger = logging.getLogger(__name__)


class CategorizationError(Exception):
    pass


class CategorizationService:
    def __init__(self):
        self._client: AsyncOpenAI | None = None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not settings.openai_api_key:
                raise CategorizationError("OPENAI_API_KEY not set. Export it in the environment.")
            self._client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                base_url=settings.openai_base_url,
            )
        return self._client

    async def _complete_json(self, system_prompt: str, user_prompt: str) -> dict:
        response = await self.client.chat.completions.create(
            model=settings.openai_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            response_format={"type": "json_object"},
        )
        return json.loads(response.choices[0].message.content or "{}")

    async def extract_topics(self, syllabus_content: str, subject: str) -> list[ExtractedTopic]:
        system_prompt = (
            f"You are an expert in O-Level {subject} curriculum analysis. Extract main topics "
            "and subtopics from the provided syllabus content. Return a JSON object with a "
            '"topics" array of objects with mainTopic, subtopics (array) and description fields.'
        )
        user_prompt = (
            f"Extract all main topics and their subtopics from this O-Level {subject} syllabus:\n\n"
            f"{syllabus_content}\n\n"
            'Return JSON with format: {"topics": [{"mainTopic": "string", '
            '"subtopics": ["string"], "description": "string"}]}'
        )
        try:
            result = await self._complete_json(system_prompt, user_prompt)
        except CategorizationError:
            raise
        except Exception as exc:
            raise CategorizationError(f"Failed to extract topics from syllabus: {exc}") from exc

        return _validate_items(result.get("topics"), ExtractedTopic)

    async def categorize_questions(
        self,
        question_content: str,
        available_topics: list[ExtractedTopic],
        subject: str,
    ) -> list[ExtractedQuestion]:
        topics_context = "\n".join(
            f"{t.main_topic}: {', '.join(t.subtopics)}" for t in available_topics
        )
        system_prompt = (
            f"You are an expert in O-Level {subject} question analysis. Categorize questions "
            "from past papers according to the provided topics. For each question, determine "
            "the topic match, difficulty level, and whether it contains vector diagrams."
        )
        user_prompt = (
            f"Analyze these O-Level {subject} questions and categorize them according to these topics:\n\n"
            f"{topics_context}\n\n"
            f"Questions to analyze:\n{question_content}\n\n"
            'Return JSON with format: {"questions": [{"questionText": "string", '
            '"questionNumber": "string", "topicMatch": "string", "subtopicMatch": "string", '
            '"difficulty": "easy|medium|hard", "marks": number, "hasVectorDiagram": boolean}]}'
        )
        try:
            result = await self._complete_json(system_prompt, user_prompt)
        except CategorizationError:
            raise
        except Exception as exc:
            raise CategorizationError(f"Failed to categorize questions: {exc}") from exc

        return _validate_items(result.get("questions"), ExtractedQuestion)


def _validate_items(items, model):
    if not isinstance(items, list):
        return []
    validated = []
    for item in items:
        try:
            validated.append(model.model_validate(item))
        except ValidationError as exc:
            logger.warning("Dropping malformed %s from model output: %s", model.__name__, exc)
    return validated


categorization_service = CategorizationService()
