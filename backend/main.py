"""
main.py

Development server for the BurnBox API.

Dependencies:
  - Python packages: Flask, flask-restx, flask-cors, redis, celery, google-cloud-storage
  - Infrastructure: Redis server (record store and Celery broker)

Notes:
  - API v1 endpoints available at /api/v1/ with Swagger docs at /api/v1/docs
  - Expired burns nobody downloads are removed by the reaper, see celery_app.py
"""

import os

from app_factory import create_app

app = create_app()

if __name__ == "__main__":
    app.run(
        host=os.getenv("FLASK_HOST", "0.0.0.0"),
        port=int(os.getenv("FLASK_PORT", 8000)),
        debug=os.getenv("FLASK_DEBUG", "false").lower() == "true",
    )
