import os
from dotenv import load_dotenv, find_dotenv


def mask(v: str | None, keep: int = 4) -> str:
    if not v:
        return "<EMPTY>"
    if len(v) <= keep * 2:
        return v[0:keep] + "…"
    return v[0:keep] + "…" + v[-keep:]


# (variable, es_secreta)
VARIABLES = [
    ("DATABASE_URL", True),
    ("SQLALCHEMY_DATABASE_URI", True),
    ("SECRET_KEY", True),
    ("PEDIDOS_PREFIJO_CLAVE", False),
    ("CLAVE_USUARIO_SESION", False),
    ("LOG_LEVEL", False),
    ("CORS_ORIGINS", False),
]


def main() -> None:
    try:
        load_dotenv(find_dotenv())
    except Exception:
        pass
    print("Loaded environment summary:")
    for k, secreta in VARIABLES:
        v = os.getenv(k)
        mostrado = mask(v) if secreta else v
        print(f"- {k}: {'SET' if v else 'MISSING (default)'} ({mostrado if v else ''})")


if __name__ == "__main__":
    main()
