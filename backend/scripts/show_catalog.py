from __future__ import annotations

import argparse
import json
import os
import sys

# Allow running from the backend directory without installing the package.
sys.path.append(os.getcwd())

from privlearn.core.config import settings
from privlearn.services.catalog import ModuleCatalog


def main() -> None:
    parser = argparse.ArgumentParser(description="Print the module catalog a fresh ledger starts with")
    parser.add_argument("--json", action="store_true", help="Emit the catalog as JSON")
    args = parser.parse_args()

    catalog = ModuleCatalog(max_modules=settings.ledger_max_modules)
    modules = [m.to_dict(module_id) for module_id, m in enumerate(catalog.list())]

    if args.json:
        print(json.dumps({"total_modules": len(modules), "modules": modules}, indent=2, ensure_ascii=False))
        return

    print(f"Total modules: {len(modules)} (ceiling {catalog.max_modules})")
    for m in modules:
        print(f"Module {m['id']}: {m['name']} ({m['lesson_count']} lessons, active: {m['active']})")


if __name__ == "__main__":
    main()
