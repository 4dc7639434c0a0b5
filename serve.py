"""Flask server for the import listing search.

Run with:
    python serve.py
    # or
    FLASK_PORT=8080 python serve.py

Endpoints:
    GET /            - HTML search page with photo tiles
    GET /api/search  - JSON listing search (q, eligible, soonMonths, limit)
    GET /api/health  - Health check
"""
from __future__ import annotations

import os
from typing import Any

try:
    from flask import Flask, jsonify, render_template_string, request
except ImportError:
    raise SystemExit(
        "Flask is required for the search server.\n"
        "Install it with: pip install flask"
    )

from importscout import get_logger
from importscout.config import API_KEY_ENV, ConfigurationError, SearchSettings
from importscout.eligibility import FILTER_MODES
from importscout.env import load_dotenv
from importscout.models import RequestValidationError, SearchRequest
from importscout.pipeline import ListingSearchPipeline
from importscout.safety import safe_external_url
from importscout.search_provider import UpstreamError

LOGGER = get_logger()

app = Flask(__name__)

SEARCH_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8"/>
<meta name="viewport" content="width=device-width, initial-scale=1"/>
<title>Import Listing Search</title>
<style>
  * { box-sizing: border-box; margin: 0; padding: 0; }
  body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
         background: #0f172a; color: #e2e8f0; padding: 1.5rem; }
  h1 { font-size: 1.8rem; margin-bottom: 0.3rem; }
  .subtitle { color: #94a3b8; font-size: 0.9rem; margin-bottom: 1.5rem; }
  form { display: flex; gap: 0.6rem; flex-wrap: wrap; margin-bottom: 1.5rem; }
  select, input { background: #1e293b; color: #e2e8f0; border: 1px solid #475569;
                  padding: 0.4rem 0.8rem; border-radius: 6px; font-size: 0.9rem; }
  .btn { background: #3b82f6; color: white; border: none; padding: 0.5rem 1rem;
         border-radius: 6px; cursor: pointer; font-size: 0.85rem; }
  .error { color: #f87171; margin-bottom: 1rem; }
  .tiles { display: grid; grid-template-columns: repeat(auto-fill, minmax(240px, 1fr)); gap: 1rem; }
  .tile { background: #1e293b; border: 1px solid #475569; border-radius: 12px; overflow: hidden; }
  .tile img { width: 100%; height: 160px; object-fit: cover; background: #334155; display: block; }
  .tile .body { padding: 0.8rem; }
  .tile a { color: #93c5fd; text-decoration: none; }
  .badge { display: inline-block; padding: 0.15rem 0.5rem; border-radius: 4px; font-size: 0.75rem;
           font-weight: 600; margin-top: 0.4rem; }
  .eligible_now { background: #166534; color: #bbf7d0; }
  .eligible_soon { background: #854d0e; color: #fef08a; }
  .uncertain { background: #334155; color: #cbd5e1; }
  .meta { color: #94a3b8; font-size: 0.8rem; margin-top: 0.3rem; }
</style>
</head>
<body>
<h1>Import Listing Search</h1>
<p class="subtitle">European listings checked against the 25-year import rule.</p>
<form method="get" action="/">
  <input type="text" name="q" value="{{ q }}" placeholder="e.g. BMW E36" required/>
  <select name="eligible">
    {% for mode in modes %}
    <option value="{{ mode }}" {% if mode == eligible %}selected{% endif %}>{{ mode }}</option>
    {% endfor %}
  </select>
  <button class="btn" type="submit">Search</button>
</form>
{% if error %}<p class="error">{{ error }}</p>{% endif %}
<div class="tiles">
{% for item in items %}
  <div class="tile">
    {% if item.image_url %}<img src="{{ item.image_url }}" alt="" loading="lazy"/>{% endif %}
    <div class="body">
      {% if item.safe_url %}<a href="{{ item.safe_url }}" target="_blank" rel="noopener">{{ item.title_normalized }}</a>
      {% else %}{{ item.title_normalized }}{% endif %}
      <div class="meta">{{ item.source_domain }}{% if item.price_value %} &middot; &euro;{{ "{:,}".format(item.price_value) }}{% endif %}</div>
      <span class="badge {{ item.eligibility_status }}">{{ item.eligibility_status }}</span>
      <div class="meta">{{ item.eligibility_reason }}</div>
    </div>
  </div>
{% endfor %}
</div>
</body>
</html>
"""


def build_pipeline(settings: SearchSettings) -> ListingSearchPipeline:
    return ListingSearchPipeline(settings)


def _missing_key_message() -> str:
    return f"Missing {API_KEY_ENV} in environment."


def _to_render_items(results: list[dict[str, Any]]) -> list[dict[str, Any]]:
    rendered: list[dict[str, Any]] = []
    for item in results:
        row = dict(item)
        row["safe_url"] = safe_external_url(item.get("source_url"))
        row["image_url"] = safe_external_url(item.get("image_url"))
        rendered.append(row)
    return rendered


@app.route("/")
def search_page():
    q = request.args.get("q", "").strip()
    eligible = request.args.get("eligible", "now")
    items: list[dict[str, Any]] = []
    error = None
    if q:
        settings = SearchSettings.from_env()
        try:
            search_request = SearchRequest.from_params(request.args)
            payload = build_pipeline(settings).run(search_request).to_dict()
            items = _to_render_items(payload["results"])
        except ConfigurationError:
            error = "Search is not configured."
        except UpstreamError as exc:
            error = f"Search provider error ({exc.status})."
        except Exception:
            LOGGER.exception("Search page request failed.")
            error = "Search failed."
    return render_template_string(
        SEARCH_HTML,
        q=q,
        eligible=eligible,
        modes=FILTER_MODES,
        items=items,
        error=error,
    )


@app.route("/api/search")
def api_search():
    settings = SearchSettings.from_env()
    if not settings.search_configured:
        return jsonify({"error": _missing_key_message()}), 500
    try:
        search_request = SearchRequest.from_params(request.args)
    except RequestValidationError as exc:
        return jsonify({"error": str(exc)}), 400
    try:
        response = build_pipeline(settings).run(search_request)
    except ConfigurationError:
        return jsonify({"error": _missing_key_message()}), 500
    except UpstreamError as exc:
        return jsonify({"error": "Brave API error", "status": exc.status, "details": exc.details}), 502
    except Exception:
        LOGGER.exception("Search request failed.")
        return jsonify({"error": "Server error"}), 500
    return jsonify(response.to_dict())


@app.route("/api/health")
def api_health():
    settings = SearchSettings.from_env()
    return jsonify({
        "status": "ok",
        "search_configured": settings.search_configured,
    })


if __name__ == "__main__":
    load_dotenv()
    host = os.getenv("FLASK_HOST", "127.0.0.1").strip() or "127.0.0.1"
    port = int(os.getenv("FLASK_PORT", "5000"))
    debug = os.getenv("FLASK_DEBUG", "").lower() in ("1", "true")
    print(f"Import search server running on http://{host}:{port}")
    print("Endpoints: / (search page), /api/search, /api/health")
    app.run(host=host, port=port, debug=debug)
