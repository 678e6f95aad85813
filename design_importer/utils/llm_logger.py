"""
Debug logger for vision model calls.

Supports configurable log levels (NONE, INFO, DEBUG, TRACE) and dual output:
- Console: human-readable lines
- File: JSON Lines at <LLM_LOG_DIR>/<request_id>/logs/llm_calls.jsonl

Base64 image payloads are never written out; they are replaced by size
placeholders.
"""

import json
import os
import time
import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv


class LogLevel(Enum):
    """Logging levels for LLM debug output."""

    NONE = 0
    INFO = 1
    DEBUG = 2
    TRACE = 3


def _image_placeholder(data: str) -> str:
    media_type = "png"
    if data.startswith("data:image/") and "base64," in data:
        header, data = data.split("base64,", 1)
        media_type = header[len("data:image/"):].rstrip(";")
    return f"[IMAGE_DATA: {media_type}, base64 encoded, {len(data):,} bytes]"


def redact_images(content: Any) -> Any:
    """Copy of message content with base64 image blocks replaced by placeholders."""
    if isinstance(content, str):
        if content.startswith("data:image/") and "base64," in content:
            return _image_placeholder(content)
        return content

    if isinstance(content, list):
        redacted = []
        for item in content:
            if not isinstance(item, dict):
                redacted.append(item)
            elif item.get("type") == "image_url":
                url = item.get("image_url", {})
                url = url.get("url", "") if isinstance(url, dict) else str(url)
                if "base64," in url:
                    redacted.append({"type": "text", "text": _image_placeholder(url)})
                else:
                    redacted.append({"type": "text", "text": f"[IMAGE_URL: {url[:100]}]"})
            elif item.get("type") == "image":
                source = item.get("source", {})
                redacted.append({"type": "text", "text": _image_placeholder(source.get("data", ""))})
            else:
                redacted.append(item)
        return redacted

    return content


def _as_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    return json.dumps(content, indent=2, ensure_ascii=False, default=str)


def _preview(text: str, max_len: int = 200) -> str:
    if len(text) <= max_len:
        return text
    return text[:max_len] + "... [truncated]"


def _token_usage(response: Any) -> Dict[str, Optional[int]]:
    usage = getattr(response, "usage_metadata", None)
    if usage:
        return {
            "prompt_tokens": usage.get("input_tokens"),
            "completion_tokens": usage.get("output_tokens"),
            "total_tokens": usage.get("total_tokens"),
        }
    metadata = getattr(response, "response_metadata", None) or {}
    usage = metadata.get("usage") or metadata.get("token_usage") or {}
    return {
        "prompt_tokens": usage.get("prompt_tokens") or usage.get("input_tokens"),
        "completion_tokens": usage.get("completion_tokens") or usage.get("output_tokens"),
        "total_tokens": usage.get("total_tokens"),
    }


class LLMLogger:
    """Centralized logger for LLM API calls with configurable levels."""

    _instance: Optional["LLMLogger"] = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        load_dotenv()

        level_str = os.getenv("LLM_DEBUG_LEVEL", "NONE").upper()
        try:
            self.level = LogLevel[level_str]
        except KeyError:
            self.level = LogLevel.NONE

        self.log_to_file = os.getenv("LLM_LOG_TO_FILE", "true").lower() == "true"
        self.log_dir = Path(os.getenv("LLM_LOG_DIR", "outputs"))

        self._initialized = True

    def should_log(self, min_level: LogLevel) -> bool:
        return self.level.value >= min_level.value

    def _serialize_messages(self, messages: List[Any]) -> List[Dict[str, Any]]:
        return [
            {
                "type": msg.__class__.__name__,
                "content": redact_images(getattr(msg, "content", str(msg))),
            }
            for msg in messages
        ]

    def _write_to_file(self, request_id: Optional[str], log_entry: Dict[str, Any]):
        """Append one entry to the request's JSON Lines file."""
        if not self.log_to_file or not request_id:
            return

        log_file = self.log_dir / request_id / "logs" / "llm_calls.jsonl"
        log_file.parent.mkdir(parents=True, exist_ok=True)

        with open(log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(log_entry, ensure_ascii=False, default=str) + "\n")

    def log_invocation(
        self,
        component: str,
        provider: str,
        model: str,
        messages: List[Any],
        request_id: Optional[str] = None
    ) -> str:
        """
        Log the start of a call.

        Returns:
            Invocation ID, or "" when logging is disabled.
        """
        if not self.should_log(LogLevel.INFO):
            return ""

        invocation_id = str(uuid.uuid4())
        line = f"[{datetime.now().isoformat()}] LLM Call: [{component}] {provider}/{model}"
        if request_id:
            line += f" | request_id: {request_id}"
        print(line)

        if self.should_log(LogLevel.DEBUG):
            print(f"  Messages: {len(messages)}")
            for i, msg in enumerate(self._serialize_messages(messages)[:3]):
                print(f"    {i + 1}. [{msg['type']}] {_preview(_as_text(msg['content']), 150)}")

        return invocation_id

    def log_response(
        self,
        invocation_id: str,
        component: str,
        provider: str,
        model: str,
        request_messages: List[Any],
        response: Any,
        start_time: float,
        end_time: float,
        request_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ):
        """Log a completed call with timing and token usage."""
        if not self.should_log(LogLevel.INFO):
            return

        latency_ms = (end_time - start_time) * 1000
        usage = _token_usage(response)
        content = _as_text(redact_images(getattr(response, "content", str(response))))

        parts = [f"[{component}]", f"{provider}/{model}", f"{latency_ms:.1f}ms"]
        if usage.get("total_tokens") is not None:
            parts.append(f"{usage['total_tokens']} tokens")
        print(f"[{datetime.now().isoformat()}] LLM Response: " + " | ".join(parts))

        if self.should_log(LogLevel.TRACE):
            print("  RESPONSE:")
            for line in content.split("\n"):
                print(f"    {line}")
        elif self.should_log(LogLevel.DEBUG):
            print(f"  Response: {_preview(content)}")

        trace = self.level == LogLevel.TRACE
        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "level": self.level.name,
            "component": component,
            "invocation_id": invocation_id,
            "provider": provider,
            "model": model,
            "request_id": request_id,
            "request": {
                "messages": self._serialize_messages(request_messages) if trace else [],
                "message_count": len(request_messages),
            },
            "response": {
                "content": content if trace else None,
                "content_preview": _preview(content) if self.should_log(LogLevel.DEBUG) else None,
                "content_length": len(content),
            },
            "timing": {
                "latency_ms": latency_ms,
                "start_time": datetime.fromtimestamp(start_time).isoformat(),
                "end_time": datetime.fromtimestamp(end_time).isoformat(),
            },
            "usage": usage,
            "metadata": metadata or {},
        }
        self._write_to_file(request_id, log_entry)

    def log_error(self, component: str, error: Exception):
        if self.should_log(LogLevel.INFO):
            print(f"[{datetime.now().isoformat()}] LLM Error: [{component}] {type(error).__name__}: {error}")


def get_logger() -> LLMLogger:
    """Get the singleton logger instance."""
    return LLMLogger()


class LoggedLLM:
    """
    Wrapper around LangChain chat models to add debug logging.

    Intercepts invoke() calls and logs requests, responses, timing, and metadata.
    """

    def __init__(
        self,
        llm_instance: Any,
        component: str,
        provider: str,
        model: str,
        request_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize LoggedLLM wrapper.

        Args:
            llm_instance: The actual chat model (ChatAnthropic or ChatOpenAI)
            component: Component name (e.g., "generator", "refiner")
            provider: Provider name ("anthropic" or "openai")
            model: Model name
            request_id: Optional request ID used to group logs
            metadata: Optional additional metadata to include in logs
        """
        self.llm = llm_instance
        self.component = component
        self.provider = provider
        self.model = model
        self.request_id = request_id
        self.metadata = metadata or {}
        self.logger = get_logger()

    def __getattr__(self, name: str):
        """Delegate all other attributes to wrapped LLM instance."""
        return getattr(self.llm, name)

    def invoke(self, messages: List[Any], **kwargs) -> Any:
        invocation_id = self.logger.log_invocation(
            component=self.component,
            provider=self.provider,
            model=self.model,
            messages=messages,
            request_id=self.request_id,
        )

        if not invocation_id:
            return self.llm.invoke(messages, **kwargs)

        start_time = time.time()
        try:
            response = self.llm.invoke(messages, **kwargs)
        except Exception as e:
            self.logger.log_error(self.component, e)
            raise
        end_time = time.time()

        self.logger.log_response(
            invocation_id=invocation_id,
            component=self.component,
            provider=self.provider,
            model=self.model,
            request_messages=messages,
            response=response,
            start_time=start_time,
            end_time=end_time,
            request_id=self.request_id,
            metadata=self.metadata,
        )

        return response
