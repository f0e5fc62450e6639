"""HTTP guard proxy that screens chat traffic and uploads against rules."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

import requests
from flask import Flask, Response, request

from .multimodal import ocr_image, parse_file

log = logging.getLogger(__name__)

FILE_URL_BASE = "http://127.0.0.1:8888/tmp/"
_METHODS = ["GET", "POST", "DELETE"]


def is_image(filename: str) -> bool:
    """Whether *filename* names a JPEG or PNG image."""
    return filename.lower().endswith((".jpg", ".jpeg", ".png"))


def is_doc(filename: str) -> bool:
    """Whether *filename* names a PDF, DOCX, TXT or MD document."""
    return filename.lower().endswith((".pdf", ".docx", ".txt", ".md"))


def _json(payload) -> Response:
    body = json.dumps(payload, ensure_ascii=False, sort_keys=True) + "\n"
    return Response(body, mimetype="application/json")


def _error(message: str, status: int) -> Response:
    return Response(message + "\n", status=status, content_type="text/plain; charset=utf-8")


def _items(data, key: str) -> list:
    value = data.get(key) if isinstance(data, dict) else None
    return [v for v in value if isinstance(v, dict)] if isinstance(value, list) else []


def _user_contents(body: bytes) -> list[str]:
    try:
        data = json.loads(body)
    except ValueError:
        return []
    return [m["content"] for m in _items(data, "messages")
            if m.get("role") == "user" and isinstance(m.get("content"), str)]


def _response_text(raw: bytes) -> str:
    text = raw.decode("utf-8", errors="replace")
    if text.startswith("data:"):
        text = text[len("data:"):].strip()
    try:
        data = json.loads(text)
    except ValueError as exc:
        log.error("cannot decode model response: %s", exc)
        return ""
    messages = [c.get("message") for c in _items(data, "choices")]
    return "".join(m["content"] for m in messages
                   if isinstance(m, dict) and isinstance(m.get("content"), str))


def _post_model(config, payload: bytes) -> bytes:
    headers = {"Content-Type": "application/json"}
    if config.api_key:
        headers["Authorization"] = f"Bearer {config.api_key}"
    return requests.post(config.model_url, data=payload, headers=headers).content


def create_app(config, rules, log_store) -> Flask:
    """Build the proxy application with its chat, upload and log routes."""
    app = Flask(__name__, static_folder=None)

    def screen(text: str, rule_type: str):
        hits = rules.match_sliding_window(text, rule_type, 5, 1)
        if not hits:
            return None
        return ", ".join(r.keyword for r in hits), ", ".join(r.description for r in hits)

    def forward(payload: bytes, failure: str):
        try:
            return _post_model(config, payload)
        except requests.RequestException as exc:
            log.error("model request failed: %s", exc)
            return _error(failure, 500)

    @app.route("/v1/chat/completions", methods=_METHODS)
    def chat_completions() -> Response:
        body = request.get_data()
        for content in _user_contents(body):
            if found := screen(content, "input"):
                log_store.add("input", content, *found)
                log.info("blocked input from %s: %s", request.remote_addr, found[0])
                return _json({"error": f"您提出的问题违规：关键词为：{found[0]}；类型为：{found[1]}"})

        log.info("forwarding request from %s to %s", request.remote_addr, config.model_url)
        output = forward(body, "模型接口异常")
        if isinstance(output, Response):
            return output
        output_text = _response_text(output)
        if found := screen(output_text, "output"):
            log_store.add("output", output_text, *found)
            log.info("blocked output: %s", found[0])
            return _json({"error": f"模型输出违规：关键词为：{found[0]}；类型为：{found[1]}"})
        return Response(output, mimetype="application/json")

    @app.route("/v1/upload", methods=_METHODS)
    def upload() -> Response:
        storage = request.files.get("file")
        filename = os.path.basename(storage.filename or "") if storage else ""
        if not filename:
            return _error("文件上传失败", 400)

        keyword = rules.match(filename, "filename")
        if keyword is not None:
            log_store.add("filename", filename, keyword, rules.get_description("filename", keyword))
            return _error("文件名违规：" + keyword, 403)

        tmp_path = Path(tempfile.gettempdir()) / filename
        storage.save(tmp_path)
        text = ""
        try:
            if is_image(filename):
                text = ocr_image(str(tmp_path))
            elif is_doc(filename):
                text = parse_file(tmp_path)
        except (ValueError, OSError) as exc:
            log.warning("cannot extract text from %s: %s", filename, exc)

        if found := screen(text, "input"):
            tmp_path.unlink(missing_ok=True)
            log_store.add("input", f"[文件:{filename}] {text}", *found)
            return _error(f"文件内容违规：关键词为：{found[0]}；类型为：{found[1]}", 403)

        file_part = {"type": "file_url", "file_url": {"url": FILE_URL_BASE + filename}}
        payload = {"model": config.model_name,
                   "messages": [{"role": "user", "content": [file_part]}]}
        output = forward(json.dumps(payload, ensure_ascii=False).encode("utf-8"), "大模型接口异常")
        if isinstance(output, Response):
            return output
        return Response(output, mimetype="application/json")

    @app.route("/api/logs", methods=_METHODS)
    def logs_api() -> Response:
        return _json(log_store.entries())

    @app.route("/api/delete_logs", methods=_METHODS)
    def delete_logs_api() -> Response:
        data = request.get_json(force=True, silent=True)
        log_store.delete([d for d in data if isinstance(d, dict)] if isinstance(data, list) else [])
        return Response(status=200)

    return app