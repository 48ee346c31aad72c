# agent_gateway.py - ADK api_server connector (Cloud Run–safe, no proxy inheritance)
import json
import logging
import uuid
from typing import List, Optional

import requests

from . import config
from .errors import ModelError

logger = logging.getLogger(__name__)

_TRANSIENT_STATUS = {502, 503, 504}

SESSION_TIMEOUT = 10


def _new_session() -> requests.Session:
    s = requests.Session()
    s.trust_env = False
    s.proxies = {"http": None, "https": None}
    s.headers.update({"Content-Type": "application/json", "Accept": "application/json"})
    return s


def _normalize_events(events: List[dict]) -> dict:
    messages, tool_calls, errors = [], [], []
    tokens_in = tokens_out = 0

    for e in events:
        if not isinstance(e, dict):
            continue
        um = e.get("usageMetadata") or {}
        tokens_in  += int(um.get("promptTokenCount", 0) or um.get("inputTokenCount", 0) or 0)
        tokens_out += int(um.get("candidatesTokenCount", 0) or um.get("outputTokenCount", 0) or 0)

        if ("errorMessage" in e) or ("errorCode" in e):
            errors.append({"code": e.get("errorCode"), "message": e.get("errorMessage") or e.get("errorCode")})

        content = e.get("content"); author = e.get("author")
        if isinstance(content, dict):
            for p in content.get("parts") or []:
                if not isinstance(p, dict):
                    continue
                if p.get("text") and not p.get("thought"):
                    messages.append({"author": author, "text": p["text"]})
                fc = p.get("functionCall")
                if fc:
                    tool_calls.append({"name": fc.get("name"), "args": fc.get("args", {}), "author": author})

    return {
        "messages": messages,
        "tool_calls": tool_calls,
        "errors": errors,
        "metrics": {
            "tokens_in": tokens_in,
            "tokens_out": tokens_out,
            "total_tokens": tokens_in + tokens_out,
            "tool_calls": len(tool_calls),
        },
    }


def _final_text(norm: dict) -> str:
    # the agent's last model message is its answer
    for m in reversed(norm.get("messages", [])):
        if m.get("author") != "user" and (m.get("text") or "").strip():
            return m["text"]
    return ""


class AgentGateway:
    """
    Talks to `adk api_server agrobase/agent`. Each call opens its own session,
    makes one POST /run and deletes the session again. The only automatic
    repeat is on transient transport failures.
    """

    def __init__(
        self,
        base_url: str = config.ADK_SERVER_URL,
        user_id: str = config.ADK_USER_ID,
        timeout: float = config.MODEL_TIMEOUT,
        retries: int = config.MODEL_RETRIES,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_id = user_id
        self.timeout = timeout
        self.retries = max(0, int(retries))
        self.http = session or _new_session()

    def _session_url(self, app_name: str, session_id: str) -> str:
        return f"{self.base_url}/apps/{app_name}/users/{self.user_id}/sessions/{session_id}"

    def open_session(self, app_name: str) -> str:
        """Create a fresh ADK session for a single run and return its id."""
        session_id = f"s_{uuid.uuid4().hex}"
        try:
            r = self.http.post(self._session_url(app_name, session_id), json={"state": {}}, timeout=SESSION_TIMEOUT)
            r.raise_for_status()
        except requests.RequestException as e:
            raise ModelError(f"Could not open an ADK session for {app_name}: {e}") from e
        logger.debug("ADK session opened app=%s session=%s", app_name, session_id)
        return session_id

    def close_session(self, app_name: str, session_id: str) -> None:
        try:
            r = self.http.delete(self._session_url(app_name, session_id), timeout=SESSION_TIMEOUT)
            if r.status_code != 404:
                r.raise_for_status()
        except requests.RequestException as e:
            # never raised over the outcome of the run itself
            logger.warning("close_session failed for %s/%s: %s", app_name, session_id, e)

    def _message(self, query: str, image=None) -> dict:
        parts: List[dict] = [{"text": query or ""}]
        if image is not None:
            parts.append(image.inline_part())
        return {"role": "user", "parts": parts}

    def _post_run(self, payload: dict) -> List[dict]:
        attempts = self.retries + 1
        last: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            try:
                r = self.http.post(f"{self.base_url}/run", json=payload, timeout=self.timeout)
            except requests.Timeout as e:
                last = ModelError(f"Model call timed out after {self.timeout:g}s")
                last.__cause__ = e
            except requests.ConnectionError as e:
                last = ModelError(f"Model endpoint unreachable: {e}")
                last.__cause__ = e
            except requests.RequestException as e:
                raise ModelError(f"Model request failed: {e}") from e
            else:
                if r.status_code in _TRANSIENT_STATUS:
                    last = ModelError(f"Model endpoint returned HTTP {r.status_code}")
                elif not r.ok:
                    raise ModelError(f"Model endpoint returned HTTP {r.status_code}: {(r.text or '')[:200]}")
                else:
                    try:
                        data = r.json() if r.headers.get("content-type", "").startswith("application/json") \
                            else json.loads(r.text or "[]")
                    except ValueError as e:
                        raise ModelError(f"Model endpoint returned non-JSON body: {e}") from e
                    return data if isinstance(data, list) else [data]
            logger.warning("model call attempt %d/%d failed: %s", attempt, attempts, last)
        raise last

    def run_agent_once(self, app_name: str, query: str, image=None) -> str:
        """Run one turn of `app_name` in its own session and return the agent's final text."""
        session_id = self.open_session(app_name)
        payload = {
            "app_name": app_name,
            "user_id": self.user_id,
            "session_id": session_id,
            "new_message": self._message(query, image),
            "streaming": False,
        }
        try:
            norm = _normalize_events(self._post_run(payload))
        finally:
            self.close_session(app_name, session_id)
        logger.debug("agent %s metrics: %s", app_name, norm["metrics"])

        if norm["errors"]:
            err = norm["errors"][0]
            raise ModelError(f"Agent {app_name} reported an error: {err.get('message') or err.get('code')}")
        text = _final_text(norm)
        if not text:
            raise ModelError(f"Agent {app_name} returned no output.")
        return text


_default: Optional[AgentGateway] = None


def default_gateway() -> AgentGateway:
    global _default
    if _default is None:
        _default = AgentGateway()
    return _default


__all__ = ["AgentGateway", "default_gateway"]
