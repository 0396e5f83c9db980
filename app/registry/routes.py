from flask import Blueprint, current_app

from app.registry.utils import api_ok, utcnow

bp = Blueprint("routes", __name__)
api_bp = Blueprint("api", __name__)


@bp.get("/health")
def health():
    """Health check endpoint. Returns JSON."""
    return {"ok": True}


@bp.get("/healthz")
def healthz():
    """
    Fast health check for container probes. No DB access, minimal overhead.
    """
    return "ok", 200


@api_bp.get("/health")
def api_health():
    return api_ok(
        {"timestamp": utcnow().isoformat() + "Z", "version": current_app.config["APP_VERSION"]},
        message="API funcionando corretamente",
    )


@api_bp.get("/")
def api_index():
    prefix = current_app.config["API_PREFIX"]
    return api_ok(
        {
            "version": current_app.config["APP_VERSION"],
            "endpoints": {
                "health": f"GET {prefix}/health",
                "clientes": {
                    "listar": f"GET {prefix}/clientes",
                    "buscar": f"GET {prefix}/clientes/:id",
                    "criar": f"POST {prefix}/clientes",
                    "atualizar": f"PUT {prefix}/clientes/:id",
                    "excluir": f"DELETE {prefix}/clientes/:id",
                    "restaurar": f"PATCH {prefix}/clientes/:id/restaurar",
                    "estatisticas": f"GET {prefix}/clientes/estatisticas",
                },
            },
        },
        message="API de Cadastro de Clientes",
    )
