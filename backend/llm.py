# llm.py
import json
import subprocess
from dataclasses import dataclass
from typing import Iterable, List, Optional

from groq import AsyncGroq
from langchain_core.prompts import ChatPromptTemplate
from langchain_ollama import OllamaLLM

from backend.errors import AssistantError, ConfigurationError
from backend.log import get_logger
from models.appointment import Appointment

logger = get_logger(__name__)

PROVIDERS = ("ollama", "groq")
DEFAULT_MODEL = "llama3.2:1b"

SUMMARY_PROMPT = ChatPromptTemplate.from_messages([
    (
        "system",
        "You are a scheduling analyst for a small service shop. "
        "Always answer in {language}."
    ),
    (
        "human",
        """Analyze this appointment schedule and provide insights.
Appointments: {appointments}
Please identify:
1. Busy days/times.
2. Any scheduling conflicts.
3. Suggestions for staffing or resource allocation based on service types.
Keep it concise and professional."""
    ),
])

ANSWER_PROMPT = ChatPromptTemplate.from_messages([
    (
        "system",
        "You are an AI assistant for a service shop. Answer the user's query "
        "about their schedule using the appointments in the context. "
        "Answer politely in {language}."
    ),
    ("human", "Context: {appointments}\nUser query: {query}"),
])


@dataclass(frozen=True)
class AssistantResult:
    """Resultado de una llamada al LLM: texto si ok, motivo del fallo si no."""
    ok: bool
    text: str = ""
    error: Optional[str] = None

    @classmethod
    def success(cls, text: Optional[str]) -> "AssistantResult":
        return cls(ok=True, text=text or "")

    @classmethod
    def failure(cls, error: str) -> "AssistantResult":
        return cls(ok=False, error=error)


def appointments_context(appointments: Iterable[Appointment]) -> str:
    return json.dumps([a.to_dict() for a in appointments], ensure_ascii=False)


def list_local_models() -> List[str]:
    """Modelos instalados en Ollama (`ollama list`), vacío si no hay Ollama."""
    try:
        result = subprocess.run(["ollama", "list"], capture_output=True, text=True, check=True)
    except (OSError, subprocess.CalledProcessError) as e:
        logger.warning("ollama_list_failed", error=str(e))
        return []

    lines = result.stdout.strip().split("\n")[1:]  # saltar cabecera
    return [line.split()[0] for line in lines if line.strip()]


class ScheduleAssistant:
    """
    Consultas en lenguaje natural sobre las citas cargadas:
    - summarize: análisis de horas punta, conflictos y personal
    - answer: pregunta libre del usuario
    Siempre se envía el listado completo de citas como contexto.
    """

    def __init__(self, provider: str = "ollama", model_name: Optional[str] = None,
                 api_key: Optional[str] = None, language: str = "English"):
        self.provider = (provider or "").lower()
        self.model_name = model_name or DEFAULT_MODEL
        self.language = language
        self.llm = None
        self.api_key = api_key

        if self.provider == "ollama":
            self.llm = OllamaLLM(
                model=self.model_name,
                temperature=0.2,
                top_p=0.9
            )
        elif self.provider == "groq":
            if not api_key:
                raise ConfigurationError("Missing GROQ_API_KEY to use Groq")
        else:
            raise ConfigurationError(f"Invalid LLM provider {provider!r}. Use 'ollama' or 'groq'.")

    async def _complete(self, prompt) -> str:
        try:
            if self.provider == "ollama":
                resp = await self.llm.ainvoke(prompt)
                return resp.content if hasattr(resp, "content") else str(resp)

            messages = []
            for msg in prompt.to_messages():
                role = {"system": "system", "ai": "assistant"}.get(msg.type, "user")
                messages.append({"role": role, "content": msg.content})

            # Un cliente por llamada, cerrado al salir del bloque
            async with AsyncGroq(api_key=self.api_key) as client:
                completion = await client.chat.completions.create(
                    model=self.model_name,
                    messages=messages,
                    temperature=0.3,
                    max_tokens=1024,
                )
            content = completion.choices[0].message.content
        except Exception as e:
            raise AssistantError(f"Error invoking {self.provider}: {e}") from e

        if content is None:
            raise AssistantError(f"{self.provider} returned no content")
        return content

    async def _run(self, operation: str, prompt) -> AssistantResult:
        logger.info("assistant_request", operation=operation, provider=self.provider, model=self.model_name)
        try:
            text = await self._complete(prompt)
        except AssistantError as e:
            logger.error("assistant_failed", operation=operation, error=str(e))
            return AssistantResult.failure(str(e))
        return AssistantResult.success(text)

    async def summarize(self, appointments: List[Appointment]) -> AssistantResult:
        prompt = SUMMARY_PROMPT.format_prompt(
            appointments=appointments_context(appointments),
            language=self.language,
        )
        return await self._run("summarize", prompt)

    async def answer(self, query: str, appointments: List[Appointment]) -> AssistantResult:
        prompt = ANSWER_PROMPT.format_prompt(
            appointments=appointments_context(appointments),
            query=query,
            language=self.language,
        )
        return await self._run("answer", prompt)
