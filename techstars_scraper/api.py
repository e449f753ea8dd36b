"""
HTTP trigger for the scraper

POST /api/scrape?function=<labor function>  -> {"saved": <count>}
GET  /api/jobs                              -> all stored jobs
"""

import logging
from typing import Callable, Optional

from flask import Flask, jsonify, request

from .techstars_scraper import scrape_by_function
from .upload_to_sheets import GoogleSheetsUploader
from .upload_to_supabase import JobStore

logger = logging.getLogger(__name__)


def create_app(
    store: JobStore,
    sink: Optional[GoogleSheetsUploader] = None,
    scrape: Callable[..., list] = scrape_by_function,
) -> Flask:
    app = Flask(__name__)

    @app.post("/api/scrape")
    def scrape_jobs():
        job_function = request.args.get("function", "")
        try:
            saved = scrape(job_function, store, sink=sink)
        except Exception as e:
            logger.error(f"Error during scraping or saving to Sheets: {e}", exc_info=True)
            return jsonify({"error": str(e)}), 500
        return jsonify({"saved": len(saved)})

    @app.get("/api/jobs")
    def list_jobs():
        return jsonify([job.to_dict() for job in store.find_all()])

    return app
