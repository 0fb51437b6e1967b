"""Lightweight local HTTP API for resolver diagnostics: /health, /resolve, /last and /cache."""

import logging
import threading
from typing import Any, Dict, Optional

from flask import Flask, jsonify

from .cache import get_cache_store
from .exceptions import WindowInspectionError
from .resolver import FocusedProjectResolver, ResolvedContext

logger = logging.getLogger(__name__)

# Thread-safe store for the most recent resolution
_last_context: Optional[ResolvedContext] = None
_last_context_lock = threading.Lock()


def record_context(context: ResolvedContext) -> None:
	"""Remember a resolution so /last can report it (also called by the hotkey loop)."""
	global _last_context
	with _last_context_lock:
		_last_context = context


def last_context() -> Optional[ResolvedContext]:
	with _last_context_lock:
		return _last_context


def _cache_summary() -> Dict[str, Any]:
	store = get_cache_store()
	if store is None:
		return {"enabled": False, "entries": 0, "path": None}
	return {"enabled": True, "entries": store.entry_count, "path": store.cache_path}


def create_app(resolver: FocusedProjectResolver) -> Flask:
	app = Flask("shellporter_api")

	@app.get("/health")
	def health():
		return jsonify({"status": "ok"})

	# Basic CORS for local tooling
	@app.after_request
	def add_cors_headers(response):
		response.headers["Access-Control-Allow-Origin"] = "*"
		response.headers["Access-Control-Allow-Methods"] = "GET, OPTIONS"
		response.headers["Access-Control-Allow-Headers"] = "Content-Type"
		return response

	@app.get("/resolve")
	def resolve():
		try:
			context = resolver.resolve_frontmost()
		except WindowInspectionError as e:
			return jsonify({'status': 'error', 'message': str(e)}), 503
		record_context(context)
		return jsonify({'status': 'ok', 'context': context.to_dict()})

	@app.get("/last")
	def last():
		context = last_context()
		return jsonify({'context': context.to_dict() if context else None})

	@app.get("/cache")
	def cache():
		return jsonify(_cache_summary())

	return app


def serve_forever(resolver: FocusedProjectResolver, port: int = 8771) -> None:
	"""Run the API server on the calling thread."""
	app = create_app(resolver)
	logger.info("Diagnostics API listening on http://127.0.0.1:%s", port)
	app.run(host="127.0.0.1", port=port, debug=False, use_reloader=False)
