#!/usr/bin/env python3
"""
Validate a nekos dataset file against docs/catalog.schema.json (Draft 2020-12),
then check that every record's url lives under its own category.
Usage:
  python tools/validate_catalog.py [nekos/data/catalog.json] [docs/catalog.schema.json]
"""
import sys
import json
from jsonschema import validate, Draft202012Validator

DEFAULT_CATALOG = "nekos/data/catalog.json"
DEFAULT_SCHEMA = "docs/catalog.schema.json"


def misplaced_urls(data: dict) -> list:
    out = []
    for category, items in data.items():
        for it in items:
            if not it["url"].startswith(f"/{category}/"):
                out.append(f"{category}: {it['url']}")
    return out


def main(cat_path: str, schema_path: str) -> int:
    with open(schema_path, encoding="utf-8") as f:
        schema = json.load(f)
    with open(cat_path, encoding="utf-8") as f:
        data = json.load(f)
    # Validate the schema itself, then the data
    Draft202012Validator.check_schema(schema)
    validate(instance=data, schema=schema)
    bad = misplaced_urls(data)
    if bad:
        print("[catalog.urls] records outside their category:\n  " + "\n  ".join(bad), file=sys.stderr)
        return 1
    total = sum(len(v) for v in data.values())
    print(f"[catalog.schema] OK ({total} records, {len(data)} categories)")
    return 0


if __name__ == "__main__":
    if len(sys.argv) > 3:
        print("usage: validate_catalog.py [catalog.json] [schema.json]", file=sys.stderr)
        sys.exit(2)
    args = sys.argv[1:] + [DEFAULT_CATALOG, DEFAULT_SCHEMA][len(sys.argv) - 1:]
    sys.exit(main(args[0], args[1]))
