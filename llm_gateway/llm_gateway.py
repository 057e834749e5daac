from __future__ import annotations  # LLM request gateway module

import json
import logging
import os
import threading
from typing import Any, Dict, Optional, Protocol, Sequence, Type, TypeVar

import httpx
from langchain_core.messages import BaseMessage
from langchain_core.runnables import RunnableLambda
from pydantic import BaseModel, ValidationError

from config import LlmRoute


logger = logging.getLogger(__name__)  # Module logger setup


_ROUTE_LOCKS: Dict[str, threading.Lock] = {}
_ROUTE_LOCKS_GUARD = threading.Lock()


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class LlmGatewayError(RuntimeError):  # Base gateway error
    pass


class LlmTimeoutError(LlmGatewayError):  # Route timeout elapsed before a reply arrived
    pass


class LlmOutputError(LlmGatewayError):  # Reply never validated against the schema
    pass


T = TypeVar("T", bound=BaseModel)


def _lock_for(cfg: LlmRoute) -> threading.Lock:
    key = cfg.name or f"{cfg.base_url}{cfg.endpoint}"
    with _ROUTE_LOCKS_GUARD:
        lock = _ROUTE_LOCKS.get(key)
        if lock is None:
            lock = threading.Lock()
            _ROUTE_LOCKS[key] = lock
    return lock


def call(
    task: str,
    schema: Type[T],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> T:  # Invoke configured LLM route with a single user task
    return chat(
        [{"role": "user", "content": task}],
        schema,
        cfg=cfg,
        client=client,
        options=options,
    )


def chat(
    messages: Sequence[Dict[str, str]],
    schema: Type[T],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> T:  # Send chat messages and validate the reply against ``schema``
    if cfg.sequential:
        with _lock_for(cfg):
            return _execute(messages, schema, cfg, client, options)
    return _execute(messages, schema, cfg, client, options)


def runnable(route: LlmRoute, schema: Type[T], *, client: Optional[HttpClient] = None) -> RunnableLambda:  # Runnable for prompt | llm chains
    def _invoke(payload: Any) -> T:
        messages = _coerce_messages(payload)
        return chat(messages, schema, cfg=route, client=client)

    return RunnableLambda(_invoke)


def _execute(
    messages: Sequence[Dict[str, str]],
    schema: Type[T],
    cfg: LlmRoute,
    client: Optional[HttpClient],
    options: Optional[Dict[str, Any]],
) -> T:
    base_messages: list[Dict[str, str]] = []
    if cfg.enforce_json:
        schema_json = json.dumps(schema.model_json_schema(), indent=2)
        base_messages.append(
            {"role": "system", "content": "Reply with a single JSON object matching this schema:\n" + schema_json}
        )
    base_messages.extend(_normalize_messages(messages))
    attempts = cfg.max_retries + 1
    preview = _preview(base_messages)
    logger.info("LLM request start route=%s model=%s attempts=%d preview=%s", cfg.name, cfg.model, attempts, preview)

    last_error: Optional[Exception] = None
    for attempt in range(attempts):
        attempt_messages = list(base_messages)
        if last_error is not None:
            attempt_messages.append({"role": "system", "content": _retry_hint(str(last_error), cfg.enforce_json)})
        content = _send(cfg, _payload(cfg, attempt_messages, options), client)
        try:
            parsed = _validate(schema, content)
        except ValueError as exc:  # JSONDecodeError and ValidationError included
            logger.warning("LLM output validation failed route=%s attempt=%d: %s", cfg.name, attempt + 1, exc)
            last_error = exc
            continue
        logger.info("LLM request done route=%s model=%s attempt=%d", cfg.name, cfg.model, attempt + 1)
        return parsed
    raise LlmOutputError("LLM output validation failed") from last_error


def _payload(cfg: LlmRoute, messages: list[Dict[str, str]], options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"model": cfg.model, "messages": messages}
    if options:
        payload.update(options)
    if cfg.response_format:
        payload["response_format"] = {"type": cfg.response_format}
    return payload


def _headers(cfg: LlmRoute) -> Dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if cfg.api_key_env:
        api_key = os.getenv(cfg.api_key_env)
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
    headers.update(cfg.extra_headers)
    return headers


def _send(cfg: LlmRoute, payload: Dict[str, Any], client: Optional[HttpClient]) -> str:  # POST payload and return message content
    url = f"{cfg.base_url}{cfg.endpoint}"
    try:
        if client is not None:
            response = client.post(url, json=payload, headers=_headers(cfg), timeout=cfg.timeout_s)
        else:
            with httpx.Client(timeout=cfg.timeout_s) as http_client:
                response = http_client.post(url, json=payload, headers=_headers(cfg))
    except httpx.TimeoutException as exc:
        logger.error("LLM timeout after %.1fs route=%s", cfg.timeout_s, cfg.name)
        raise LlmTimeoutError(f"LLM timed out after {cfg.timeout_s}s") from exc
    except Exception as exc:  # noqa: BLE001
        logger.error("LLM transport failure route=%s: %s", cfg.name, exc)
        raise LlmGatewayError("LLM transport failed") from exc
    if response.status_code >= 400:
        logger.error("LLM error status route=%s status=%s", cfg.name, response.status_code)
        raise LlmGatewayError(f"LLM returned status {response.status_code}")
    try:
        data = response.json()
    except Exception as exc:  # noqa: BLE001
        logger.error("Invalid JSON payload from LLM route=%s: %s", cfg.name, exc)
        raise LlmGatewayError("LLM payload was not JSON") from exc
    return _extract_content(data)


def _normalize_messages(messages: Sequence[Dict[str, str]]) -> list[Dict[str, str]]:  # Ensure message payload shape
    normalized: list[Dict[str, str]] = []
    for item in messages:
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict with role/content")
        role = str(item.get("role", "")).strip()
        if not role:
            raise ValueError("Chat message missing role")
        normalized.append({"role": role, "content": str(item.get("content", ""))})
    return normalized


def _preview(messages: Sequence[Dict[str, str]], limit: int = 120) -> str:  # First non-empty line for logging
    for message in messages:
        text = message.get("content", "").strip()
        if text:
            line = text.splitlines()[0]
            return line if len(line) <= limit else line[: limit - 3] + "..."
    return ""


def _extract_content(data: Any) -> str:  # Extract message content from an OpenAI-style reply
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
        if isinstance(data.get("content"), str):
            return data["content"]
    raise LlmOutputError("LLM response missing content")


def _validate(schema: Type[T], content: str) -> T:  # Parse JSON content, falling back to the schema's raw adapter
    cleaned = strip_code_fences(content)
    try:
        return schema.model_validate_json(cleaned)
    except (json.JSONDecodeError, ValidationError):
        adapter = getattr(schema, "from_raw_content", None)
        if not callable(adapter):
            raise
        return adapter(cleaned)  # type: ignore[return-value]


def strip_code_fences(content: str) -> str:  # Remove markdown fences wrapping LLM output
    text = content.strip()
    if not text.startswith("```"):
        return text
    lines = text.splitlines()[1:]
    while lines and not lines[0].strip():
        lines = lines[1:]
    while lines and not lines[-1].strip():
        lines = lines[:-1]
    if lines and lines[-1].strip() == "```":
        lines = lines[:-1]
    return "\n".join(lines).strip()


def _retry_hint(error_text: str, enforce_json: bool) -> str:  # Compose retry instructions including last error
    base = "The previous reply failed validation."
    reason = error_text.splitlines()[0].strip() if error_text else ""
    if reason:
        base += f" Reason: {reason[:197] + '...' if len(reason) > 200 else reason}."
    if enforce_json:
        return base + " Return a single JSON object that matches the schema."
    return base + " Follow the requested format precisely."


def _coerce_messages(payload: Any) -> Sequence[Dict[str, str]]:  # Convert LangChain payloads into dict messages
    if hasattr(payload, "to_messages"):
        payload = payload.to_messages()
    if isinstance(payload, dict):
        return [payload]
    if isinstance(payload, BaseMessage):
        return [_message_dict(payload)]
    if isinstance(payload, (list, tuple)):
        if all(isinstance(item, dict) for item in payload):
            return list(payload)  # type: ignore[return-value]
        if all(isinstance(item, BaseMessage) for item in payload):
            return [_message_dict(item) for item in payload]
    raise TypeError("Unsupported message payload for LLM runnable")


def _message_dict(message: BaseMessage) -> Dict[str, str]:  # Map LangChain BaseMessage to role/content dict
    role = {"human": "user", "ai": "assistant"}.get(message.type, message.type)
    content = message.content
    if not isinstance(content, str):
        content = json.dumps(content)
    return {"role": role, "content": content}
