from __future__ import annotations

from src.geoprocessing.application.handler import GeoprocessingHandler


class HandlerRegistry:
    """Registry mapping service names to their geoprocessing handlers."""

    def __init__(self) -> None:
        self._handlers: dict[str, GeoprocessingHandler] = {}

    def register(self, handler: GeoprocessingHandler) -> GeoprocessingHandler:
        name = handler.service_name
        existing = self._handlers.get(name)
        if existing is not None and existing is not handler:
            raise ValueError(f"A handler is already registered for service {name!r}")
        self._handlers[name] = handler
        return handler

    def handler_for(self, service: str) -> GeoprocessingHandler:
        try:
            return self._handlers[service]
        except KeyError as exc:
            raise ValueError(f"No handler registered for service {service!r}") from exc

    def services(self) -> list[str]:
        return sorted(self._handlers)

    def clear(self) -> None:
        self._handlers.clear()


registry = HandlerRegistry()
