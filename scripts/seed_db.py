from __future__ import annotations

import sys
from pathlib import Path

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from tuition_center.database.bootstrap import init_schema, seed_admin
from tuition_center.main import create_app


def main() -> None:
    app = create_app(overrides={"AUTO_INIT_DB": False, "AUTO_SEED_DB": False})

    with app.app_context():
        init_schema()
        user, created = seed_admin(
            username=app.config["DEFAULT_ADMIN_USERNAME"],
            password=app.config["DEFAULT_ADMIN_PASSWORD"],
        )
    state = "created" if created else "already present"
    print(f"OK: admin account {user.username!r} {state}")


if __name__ == "__main__":
    main()
