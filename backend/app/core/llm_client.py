import asyncio
import json
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from openai import OpenAI

from app.core import config
from app.core.config import settings
from app.core.errors import Unauthenticated
from app.core.logging import get_logger, get_session_dir

logger = get_logger("llm_client")


class InferenceCallLogger:
    _instance: Optional["InferenceCallLogger"] = None
    _llm_log_file = None
    _error_log_file = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._initialized = True
        self.enabled = settings.enable_llm_call_log
        if self.enabled:
            self._setup_session()

    def _setup_session(self):
        if InferenceCallLogger._llm_log_file is not None:
            return

        session_dir = get_session_dir()

        InferenceCallLogger._llm_log_file = open(session_dir / "llm_calls.log", "a")
        InferenceCallLogger._error_log_file = open(session_dir / "api_errors.log", "a")

    def close(self):
        if InferenceCallLogger._llm_log_file:
            InferenceCallLogger._llm_log_file.close()
            InferenceCallLogger._llm_log_file = None
        if InferenceCallLogger._error_log_file:
            InferenceCallLogger._error_log_file.close()
            InferenceCallLogger._error_log_file = None

    def log_call(
        self,
        request_id: str,
        service_name: str,
        model: str,
        duration_ms: int,
        success: bool,
        error_type: Optional[str] = None,
        error_message: Optional[str] = None,
        finish_reason: Optional[str] = None,
    ):
        if not self.enabled or InferenceCallLogger._llm_log_file is None:
            return

        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "request_id": request_id,
            "service": service_name,
            "model": model,
            "duration_ms": duration_ms,
            "success": success,
        }

        if success:
            log_entry["finish_reason"] = finish_reason
        else:
            log_entry["error_type"] = error_type
            log_entry["error_message"] = error_message

        InferenceCallLogger._llm_log_file.write(json.dumps(log_entry) + "\n")
        InferenceCallLogger._llm_log_file.flush()

        if not success:
            error_entry = {
                "timestamp": log_entry["timestamp"],
                "request_id": request_id,
                "service": service_name,
                "model": model,
                "error_type": error_type,
                "error_message": error_message,
            }
            InferenceCallLogger._error_log_file.write(json.dumps(error_entry) + "\n")
            InferenceCallLogger._error_log_file.flush()


class InferenceClient:
    """Chat-completion access to the inference router.

    The SDK call is blocking, so ``chat`` runs it in a worker thread. Errors
    from the SDK are logged and re-raised untouched; callers classify them.
    """

    def __init__(self, sdk_client: OpenAI):
        self._client = sdk_client
        self._logger = InferenceCallLogger()

    async def chat(
        self,
        service_name: str,
        messages: List[Dict[str, str]],
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        request_id = str(uuid.uuid4())[:8]
        start_time = time.monotonic()

        try:
            response = await asyncio.to_thread(
                self._client.chat.completions.create,
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            duration_ms = int((time.monotonic() - start_time) * 1000)
            self._logger.log_call(
                request_id=request_id,
                service_name=service_name,
                model=model,
                duration_ms=duration_ms,
                success=False,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            logger.error("%s call %s failed: %s", service_name, request_id, e)
            raise

        duration_ms = int((time.monotonic() - start_time) * 1000)
        choice = response.choices[0] if response.choices else None
        self._logger.log_call(
            request_id=request_id,
            service_name=service_name,
            model=model,
            duration_ms=duration_ms,
            success=True,
            finish_reason=choice.finish_reason if choice else "unknown",
        )
        logger.info("%s call %s finished in %dms", service_name, request_id, duration_ms)

        if choice is None or choice.message is None:
            return ""
        return choice.message.content or ""


_inference_clients: Dict[str, InferenceClient] = {}


def get_inference_client() -> InferenceClient:
    """FastAPI dependency: the client bound to the current credential.

    One client is built per token and reused. Raises ``Unauthenticated``
    before any network activity when HF_TOKEN is missing.
    """
    token = config.get_inference_token()
    if token is None:
        raise Unauthenticated()

    client = _inference_clients.get(token)
    if client is None:
        sdk_client = config.create_inference_sdk_client(logger)
        if sdk_client is None:
            raise Unauthenticated()
        client = InferenceClient(sdk_client)
        _inference_clients[token] = client
    return client
