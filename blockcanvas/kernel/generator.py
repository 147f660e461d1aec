"""
blockcanvas Kernel — Initial Structure Generator boundary

A generator turns (prompt, preset) into an ordered list of StarterBlocks.
The kernel owns everything after that: ids, "auto" positions, defaults.

  StaticStructureGenerator — fixed starter list (offline, tests)
  HttpStructureGenerator   — POSTs to a remote generator service

ingest_starters() appends a starter list to a store. generate_into() runs a
generator under a timeout, then ingests.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from blockcanvas.kernel.registry import ComponentRegistry
from blockcanvas.kernel.store import InstanceStore
from blockcanvas.kernel.types import GeneratorError, Position, StarterBlock

logger = logging.getLogger(__name__)

DEFAULT_GENERATOR_TIMEOUT_SECONDS = 30.0


# ---------------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------------


class StructureGenerator:
    """Abstract generator interface."""

    async def generate(self, prompt: str, preset: str) -> list[StarterBlock]:
        raise NotImplementedError


DEFAULT_STARTERS: list[StarterBlock] = [
    StarterBlock(type="header"),
    StarterBlock(type="hero"),
    StarterBlock(type="text"),
    StarterBlock(type="cta"),
    StarterBlock(type="footer"),
]


class StaticStructureGenerator(StructureGenerator):
    """Returns the same starter list for every prompt."""

    def __init__(self, starters: list[StarterBlock | dict[str, Any]] | None = None):
        if starters is None:
            starters = list(DEFAULT_STARTERS)
        self._starters = [s if isinstance(s, StarterBlock) else StarterBlock.from_dict(s) for s in starters]
        self.calls: list[tuple[str, str]] = []

    async def generate(self, prompt: str, preset: str) -> list[StarterBlock]:
        self.calls.append((prompt, preset))
        return [StarterBlock(type=s.type, properties=dict(s.properties)) for s in self._starters]


class HttpStructureGenerator(StructureGenerator):
    """
    HTTP client for a remote structure generator.

    Request:  POST {url}  {"prompt": ..., "preset": ...}
    Response: {"blocks": [{"type": ..., "properties": {...}}, ...]}
    """

    def __init__(
        self,
        url: str,
        *,
        api_key: str = "",
        timeout: float = DEFAULT_GENERATOR_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = url
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    async def generate(self, prompt: str, preset: str) -> list[StarterBlock]:
        """
        Raises:
            GeneratorError: the service is unreachable, errors, or returns a malformed body
        """
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    self._url,
                    json={"prompt": prompt, "preset": preset},
                    headers=headers,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.error("generator: request to %s failed: %s", self._url, e)
            raise GeneratorError(f"Generator request failed: {e}") from e
        except ValueError as e:
            raise GeneratorError(f"Generator returned invalid JSON: {e}") from e

        blocks = data.get("blocks") if isinstance(data, dict) else None
        if not isinstance(blocks, list):
            raise GeneratorError("Generator response has no 'blocks' list")
        try:
            return [StarterBlock.from_dict(b) for b in blocks]
        except (KeyError, TypeError) as e:
            raise GeneratorError(f"Malformed starter block: {e}") from e


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


@dataclass
class IngestResult:
    added: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"added": list(self.added), "skipped": list(self.skipped)}


def ingest_starters(
    store: InstanceStore,
    registry: ComponentRegistry,
    starters: list[StarterBlock],
) -> IngestResult:
    """
    Append starters in order. Each gets a fresh id, an all-auto position, and
    its properties merged over the schema defaults. Unknown types are skipped.
    """
    result = IngestResult()
    for starter in starters:
        block_type = registry.find(starter.type)
        if block_type is None:
            logger.warning("generator: skipping starter with unknown type %r", starter.type)
            result.skipped.append(starter.type)
            continue
        properties = block_type.defaults()
        properties.update(starter.properties)
        instance = store.add(block_type.type, properties, Position())
        result.added.append(instance.id)
    return result


async def generate_into(
    generator: StructureGenerator,
    store: InstanceStore,
    registry: ComponentRegistry,
    prompt: str,
    preset: str = "light",
    *,
    timeout: float = DEFAULT_GENERATOR_TIMEOUT_SECONDS,
) -> IngestResult:
    """
    Run the generator under `timeout`, then ingest. The store is untouched
    unless the generator succeeds.
    """
    try:
        starters = await asyncio.wait_for(generator.generate(prompt, preset), timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.warning("generator: timed out after %ss", timeout)
        raise GeneratorError(f"Generator timed out after {timeout}s") from e
    return ingest_starters(store, registry, starters)
