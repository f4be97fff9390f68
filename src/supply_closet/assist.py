"""Client and helpers for the generative assist features.

Two requests are supported: turning a free-text description into structured
item fields, and producing a utilization plan for the stock on hand.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Literal, Optional
import asyncio
import json
import logging

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from .config import Settings
from .exceptions import AssistError
from .models import DEFAULT_TARGET_QUANTITY, InventoryItem, ItemCategory, ItemDraft, UnitType

logger = logging.getLogger(__name__)

UtilizationMode = Literal["recipe", "audit"]

MAX_SHELF_LIFE_DAYS = 3650
PLAN_ERROR_MESSAGE = "Error generating content. Please try again."


class ItemAnalysis(BaseModel):
    """Structured fields suggested for a free-text item description."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    category: ItemCategory
    suggested_unit: UnitType = Field(alias="suggestedUnit")
    estimated_shelf_life_days: Optional[float] = Field(default=None, alias="estimatedShelfLifeDays")


_ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "name": {"type": "STRING", "description": "Clean, standardized item name."},
        "category": {"type": "STRING", "enum": [category.value for category in ItemCategory]},
        "suggestedUnit": {"type": "STRING", "enum": [unit.value for unit in UnitType]},
        "estimatedShelfLifeDays": {
            "type": "NUMBER",
            "description": "Typical shelf life in days; omit for non-perishables.",
        },
    },
    "required": ["name", "category", "suggestedUnit"],
}

_MODE_INSTRUCTIONS = {
    "recipe": (
        "Suggest simple meals or meal kits that volunteers could prepare and hand out "
        "using only the stock listed below. Prefer items that expire soonest."
    ),
    "audit": (
        "Review the stock listed below for a relief distribution center. Point out "
        "shortages against target quantities, items close to expiry and gaps in "
        "category coverage, then give short prioritized restocking advice."
    ),
}


def _analysis_prompt(free_text: str) -> str:
    return (
        "Categorize this donated inventory item for a charity distribution center "
        f'and normalize its name: "{free_text}"'
    )


def _plan_prompt(items: List[InventoryItem], mode: UtilizationMode) -> str:
    lines = []
    for item in items:
        line = f"- {item.name} ({item.category.value}): {item.quantity:g} {item.unit.value}"
        if item.expiration_date is not None:
            line += f", expires {item.expiration_date.isoformat()}"
        lines.append(line)
    return f"{_MODE_INSTRUCTIONS[mode]}\n\nInventory:\n" + "\n".join(lines)


def _candidate_text(payload: Any) -> str:
    try:
        parts = payload["candidates"][0]["content"]["parts"]
        text = "".join(part.get("text", "") for part in parts)
    except (KeyError, IndexError, TypeError, AttributeError) as exc:
        raise AssistError("Assist response did not contain a candidate") from exc
    if not text.strip():
        raise AssistError("Assist response was empty")
    return text


class AssistClient:
    """Async client for the Gemini ``generateContent`` REST endpoint.

    Each call is a single attempt bounded by a timeout; any transport,
    status or decoding failure surfaces as :class:`AssistError`.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not api_key:
            raise AssistError("An assist API key is required")
        self._api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = http_client or httpx.AsyncClient()
        self._owns_http = http_client is None

    @classmethod
    def from_settings(
        cls, settings: Settings, *, http_client: Optional[httpx.AsyncClient] = None
    ) -> "AssistClient":
        return cls(
            settings.assist_api_key or "",
            model=settings.assist_model,
            base_url=settings.assist_base_url,
            timeout=settings.assist_timeout_seconds,
            http_client=http_client,
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "AssistClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def analyze_item_input(
        self, free_text: str, *, timeout: Optional[float] = None
    ) -> ItemAnalysis:
        """Ask the model to categorize a free-text item description."""

        if not free_text or not free_text.strip():
            raise AssistError("Nothing to analyze")
        text = await self._generate(
            _analysis_prompt(free_text.strip()),
            timeout=timeout,
            generation_config={
                "responseMimeType": "application/json",
                "responseSchema": _ANALYSIS_SCHEMA,
            },
        )
        try:
            return ItemAnalysis.model_validate(json.loads(text))
        except (json.JSONDecodeError, PydanticValidationError) as exc:
            logger.warning("Malformed item analysis from assist service")
            raise AssistError("Assist service returned a malformed item analysis") from exc

    async def generate_utilization_plan(
        self,
        items: Iterable[InventoryItem],
        mode: UtilizationMode,
        *,
        timeout: Optional[float] = None,
    ) -> str:
        """Return a plan for the items currently in stock.

        Items with no quantity on hand are left out of the request.
        """

        if mode not in _MODE_INSTRUCTIONS:
            raise AssistError(f"Unknown utilization mode {mode!r}")
        available = [item for item in items if item.quantity > 0]
        return await self._generate(_plan_prompt(available, mode), timeout=timeout)

    async def _generate(
        self,
        prompt: str,
        *,
        timeout: Optional[float],
        generation_config: Optional[Dict[str, Any]] = None,
    ) -> str:
        body: Dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if generation_config:
            body["generationConfig"] = generation_config
        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            response = await self._http.post(
                url,
                json=body,
                headers={"x-goog-api-key": self._api_key},
                timeout=self.timeout if timeout is None else timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as exc:
            logger.warning("Assist request to %s timed out", self.model)
            raise AssistError("Assist request timed out") from exc
        except httpx.HTTPStatusError as exc:
            logger.warning("Assist request failed with status %s", exc.response.status_code)
            raise AssistError(
                f"Assist service returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Assist request failed: %s", exc.__class__.__name__)
            raise AssistError(f"Assist request failed: {exc}") from exc
        except ValueError as exc:
            raise AssistError("Assist service returned invalid JSON") from exc
        return _candidate_text(payload)


def expiration_from_shelf_life(days: Optional[float], today: date) -> Optional[date]:
    """``today + days`` for a plausible shelf life, otherwise ``None``.

    Non-positive values and anything of ten years or more are treated as
    non-perishable.
    """

    if days is None or days <= 0 or days >= MAX_SHELF_LIFE_DAYS:
        return None
    return today + timedelta(days=int(days))


def apply_analysis(
    draft: ItemDraft, analysis: ItemAnalysis, raw_input: str, today: date
) -> ItemDraft:
    return replace(
        draft,
        name=analysis.name,
        category=analysis.category,
        unit=analysis.suggested_unit,
        expiration_date=expiration_from_shelf_life(analysis.estimated_shelf_life_days, today),
        target_quantity=draft.target_quantity or DEFAULT_TARGET_QUANTITY,
        notes=f'Auto-categorized from: "{raw_input}"',
    )


async def plan_or_error(
    client: AssistClient, items: Iterable[InventoryItem], mode: UtilizationMode
) -> str:
    """Plan text for display, or the standard inline error message."""

    try:
        return await client.generate_utilization_plan(items, mode)
    except AssistError:
        return PLAN_ERROR_MESSAGE


class AssistSession:
    """Runs one assist request at a time, cancelling whatever was in flight."""

    def __init__(self, client: AssistClient) -> None:
        self.client = client
        self._task: Optional[asyncio.Task] = None

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    def cancel(self) -> None:
        if self.busy:
            logger.debug("Cancelling in-flight assist request")
            self._task.cancel()

    async def _run(self, coro) -> Any:
        self.cancel()
        task = asyncio.ensure_future(coro)
        self._task = task
        try:
            return await task
        finally:
            if self._task is task:
                self._task = None

    async def analyze(self, free_text: str) -> ItemAnalysis:
        return await self._run(self.client.analyze_item_input(free_text))

    async def plan(self, items: Iterable[InventoryItem], mode: UtilizationMode) -> str:
        return await self._run(plan_or_error(self.client, items, mode))


__all__ = [
    "AssistClient",
    "AssistSession",
    "ItemAnalysis",
    "MAX_SHELF_LIFE_DAYS",
    "PLAN_ERROR_MESSAGE",
    "UtilizationMode",
    "apply_analysis",
    "expiration_from_shelf_life",
    "plan_or_error",
]
