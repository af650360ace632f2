"""Tool catalogs: remote tool descriptors merged into an agent's tool map."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from ..config import CatalogConfig, ToolFilter
from . import Tool, ToolOptions
from .schema import DictSchema

logger = logging.getLogger(__name__)


@dataclass
class CatalogToolInfo:
    name: str
    description: str = ""
    input_schema: dict[str, Any] | None = None


@runtime_checkable
class ToolCatalogProvider(Protocol):
    """A remote tool server: lists descriptors and invokes tools by name."""

    name: str

    async def list_tools(self) -> list[CatalogToolInfo]: ...

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any: ...


def _matches(name: str, pattern: ToolFilter) -> bool:
    if isinstance(pattern, re.Pattern):
        return pattern.search(name) is not None
    return name == pattern


def is_allowed(name: str, config: CatalogConfig | None) -> bool:
    if config is None:
        return True
    if config.include_tools and not any(_matches(name, p) for p in config.include_tools):
        return False
    return not any(_matches(name, p) for p in config.exclude_tools)


def catalog_tools(
    provider: ToolCatalogProvider,
    infos: list[CatalogToolInfo],
    config: CatalogConfig | None = None,
) -> list[Tool]:
    """Wrap descriptors as Tools named ``"{provider}-{tool}"``.

    Filters match the bare remote tool name.
    """
    tools: list[Tool] = []
    for info in infos:
        if not is_allowed(info.name, config):
            logger.debug("Skipping catalog tool %s from %s", info.name, provider.name)
            continue
        full_name = f"{provider.name}-{info.name}"

        async def _exec(inp: Any, options: ToolOptions, _p=provider, _n=info.name, _id=full_name) -> Any:
            args = inp if isinstance(inp, dict) else {}
            if options.step is not None:
                return await options.step.run(_id, _p.call_tool, _n, args)
            return await _p.call_tool(_n, args)

        tools.append(Tool(
            name=full_name,
            handler=_exec,
            description=info.description,
            parameters=DictSchema(info.input_schema),
            provider=provider.name,
        ))
    return tools


async def load_catalogs(
    providers: list[ToolCatalogProvider],
    config: CatalogConfig | None = None,
) -> list[Tool]:
    tools: list[Tool] = []
    for provider in providers:
        try:
            infos = await provider.list_tools()
        except Exception:
            logger.warning("Failed to list tools from catalog %s", provider.name, exc_info=True)
            continue
        tools.extend(catalog_tools(provider, infos, config))
    return tools
