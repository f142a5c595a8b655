from flask import Blueprint

functions_bp = Blueprint("functions", __name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}

from storefront.blueprints.functions import views  # noqa: F401, E402
