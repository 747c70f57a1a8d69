from __future__ import annotations

import sys
from pathlib import Path

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from tuition_center.database.bootstrap import ensure_database, init_schema
from tuition_center.main import create_app


def main() -> None:
    app = create_app(overrides={"AUTO_INIT_DB": False, "AUTO_SEED_DB": False})
    uri = app.config["SQLALCHEMY_DATABASE_URI"]

    ensure_database(uri)
    with app.app_context():
        tables = init_schema()
    print(f"OK: schema ready -> {app.config.get('DB_HOST')}/{app.config.get('DB_NAME')} (tables={len(tables)})")


if __name__ == "__main__":
    main()
